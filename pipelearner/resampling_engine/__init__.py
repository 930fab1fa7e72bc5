"""
Resampling Engine
=================

Responsibility:
- Train/test pair generation (holdout, k-fold, bootstrap).
- Optional stratification with a logged fallback to random splitting.
- Learning-curve subsets of each training partition.
- Lazy resample handles that can be coerced back into DataFrames.
"""

from .resampling_engine import Resample, ResampleSplit, ResamplingEngine

__all__ = ['Resample', 'ResampleSplit', 'ResamplingEngine']
