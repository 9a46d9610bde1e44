"""
Shift Grid

Interaction engine for assigning employee shifts on a time grid: cell
selection, interval merging, conflict checks, drag-to-move, and weekly and
night hour aggregates, with a thin desktop front end.
"""

__version__ = "1.0.0"
__author__ = "Shift Grid Team"
