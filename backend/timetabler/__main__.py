from timetabler.cli import main

raise SystemExit(main())
