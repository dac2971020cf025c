"""countscooper - find duplicate tracks with diverging play counts."""

__version__ = "0.3.0"
