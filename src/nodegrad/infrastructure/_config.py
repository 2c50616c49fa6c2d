"""
Library-wide defaults.

Values here are defaults only; every consumer accepts an explicit keyword
argument that overrides them (e.g., `Graph(dtype=np.float32)`).
"""

import numpy as np

# Element dtype of tensors created from raw Python values
DEFAULT_DTYPE = np.float64
