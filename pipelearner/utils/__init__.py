"""
Utility package setup.

Enables pandas Copy-on-Write globally so resample views and scoring frames
never mutate the caller's dataset.
"""

import pandas as pd

pd.options.mode.copy_on_write = True
