"""
Grid Expander
=============

Responsibility:
- Normalizing hyperparameter grids (scalars become size-1 value sets).
- Deterministic Cartesian product expansion of one model entry's grid.
"""

from .grid_expander import expand_grid, grid_size, normalize_grid

__all__ = ['expand_grid', 'grid_size', 'normalize_grid']
