"""
Formula
=======

Responsibility:
- Parsing "target ~ predictors" model specifications.
- Resolving predictors against a dataset's columns.
- Building aligned design matrices for fitting and prediction.
"""

from .formula import Formula

__all__ = ['Formula']
