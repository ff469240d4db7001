from timetabler.services.conflict_model import ConflictMatrix  # noqa: F401
from timetabler.services.context import SearchContext  # noqa: F401
from timetabler.services.evolution_engine import EvolutionEngine, run  # noqa: F401
from timetabler.services.fitness import (  # noqa: F401
    FitnessEvaluator,
    ProximityPenaltyEvaluator,
    TimeslotCountEvaluator,
    build_evaluator,
)
from timetabler.services.genotype import Genotype, feasible_genotype, random_genotype  # noqa: F401
from timetabler.services.local_search import HillClimber  # noqa: F401
from timetabler.services.mutation import MutationOperator  # noqa: F401
from timetabler.services.selection import (  # noqa: F401
    SelectionPolicy,
    TournamentSelection,
    TruncationSelection,
    build_selection,
)
