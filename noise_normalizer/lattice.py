# noise_normalizer/lattice.py

"""
================================================================================
LATTICE GEOMETRY
================================================================================
Builds the fixed set of kernel centers (lattice points) that contribute to
the noise value at an evaluation point inside the central cell.

Data Contract:
---------------
- Inputs: dimensionality N, and for the simplex cluster the unskew constant G.
- Outputs: an (M, N) float64 array of lattice points in evaluation space.
    - Perlin (cube): M = 2^N, the vertices of {0,1}^N.
    - Simplex (cluster): M = 2^(N+1) - 1, the corners {-1,0}^N followed by
      {0,1}^N without the origin, each offset by G * (sum of coordinates).
- Side Effects: None.
- Invariants: Point k has bit i of its index encoding axis i, so the order
  is deterministic and the reported gradient indices line up with it.
================================================================================
"""

import numpy as np

from . import config as DEFAULTS


def _corner_bits(n: int, count: int) -> np.ndarray:
    """Bit i of row k, for k in [0, count)."""
    k = np.arange(count)[:, np.newaxis]
    return (k >> np.arange(n)) & 1


def cube_vertices(n: int) -> np.ndarray:
    """Vertices of the unit hypercube, (0, 0, ..., 0) to (1, 1, ..., 1)."""
    return _corner_bits(n, 1 << n).astype(np.float64)


def simplex_cluster_cubespace(n: int) -> np.ndarray:
    """
    Integer lattice coordinates of the simplex cluster, before skewing.
    Lists no point twice: the origin appears only in the negative half.
    """
    negative = _corner_bits(n, 1 << n) - 1
    positive = 1 - _corner_bits(n, (1 << n) - 1)
    return np.vstack([negative, positive])


def simplex_cluster(n: int, unskew_constant: float) -> np.ndarray:
    """Simplex cluster lattice points, unskewed into evaluation space."""
    cubespace = simplex_cluster_cubespace(n)
    skew = unskew_constant * cubespace.sum(axis=1, keepdims=True)
    return cubespace + skew


def build_lattice(kernel_kind: int, n: int, unskew_constant: float = 0.0) -> np.ndarray:
    """Lattice points for the given kernel kind, as a C-contiguous float64 array."""
    if kernel_kind == DEFAULTS.KERNEL_RADIAL:
        points = simplex_cluster(n, unskew_constant)
    else:
        points = cube_vertices(n)
    return np.ascontiguousarray(points, dtype=np.float64)
