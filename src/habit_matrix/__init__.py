"""Eisenhower matrix and habit tracking over annotated markdown checklists."""

__version__ = "0.3.0"
