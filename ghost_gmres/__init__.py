# =============================================================================
# Hukuki Başlık (AGPLv3) - Zorunlu Kısım
# =============================================================================

# Copyright (C) 2025 [Adınız Soyadınız]

# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU Affero General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE. See the
# GNU Affero General Public License for more details.
#
# You should have received a copy of the GNU Affero General Public License
# along with this program. If not, see <http://www.gnu.org/licenses/>.

# =============================================================================
# Modül Açıklaması (Mühendislik İçin)
# =============================================================================

"""
GHOST-GMRES: restarted GMRES for sparse non-symmetric systems on CUDA GPUs.

Numba CUDA kernels (SpMV, modified Gram-Schmidt, atomic reductions) driven
from a single host thread, with a Givens least-squares solve on the host.

Licensed under the AGPLv3.

Usage
-----
>>> import numpy as np
>>> from ghost_gmres import CSRMatrix, solve_gmres_gpu
>>> A = CSRMatrix.from_dense([[4.0, 1.0], [2.0, 5.0]])
>>> X, iters, res, info = solve_gmres_gpu(A, np.array([1.0, 2.0]), verbose=False)
"""

__version__ = "3.0.0"

from .csr import CSRMatrix, DeviceCSRMatrix, as_csr_matrix
from .errors import (
    DeviceAllocationError,
    DeviceError,
    GhostSolverError,
    KernelLaunchError,
    MatrixFileError,
    MatrixFormatError,
)
from .launcher import KernelLauncher
from .least_squares import GivensLeastSquares
from .arnoldi import ArnoldiStep, KrylovWorkspace, arnoldi_step, seed_basis
from .solver import (
    GMRESStatus,
    check_diagonal_dominance,
    compute_residual,
    solve_gmres_gpu,
)
from .mtx import load_mtx_matrix, load_mtx_vector, write_mtx_matrix, write_mtx_vector
from .diagnostics import describe_devices, dump_device_prefix, print_device_report
