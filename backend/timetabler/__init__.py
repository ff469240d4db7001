"""Exam timetabling by evolutionary search with hill climbing."""

__version__ = "0.1.0"
