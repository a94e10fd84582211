"""
Video label & retention lifecycle engine.

Classifies recorded videos into organization labels, derives their
retention from those labels, and deletes expired videos on a schedule.
"""

__version__ = "0.1.0"
