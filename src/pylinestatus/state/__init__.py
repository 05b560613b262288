"""State/store layer.

This package is the single source of truth for how observation snapshots
from either upstream source are folded into per-line time accounting.
"""
