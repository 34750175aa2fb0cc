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

import os

# GPU olmadan da çalışsın: numba import edilmeden önce CUDA simülatörü
os.environ.setdefault("NUMBA_ENABLE_CUDASIM", "1")

import numpy as np
import pytest

from ghost_gmres import CSRMatrix, KernelLauncher


@pytest.fixture
def launcher():
    # Simülatörde her thread bir Python thread'i: küçük bloklar yeterli
    return KernelLauncher(threads_per_block=32)


@pytest.fixture
def dd_matrix():
    """Rastgele seyrek, simetrik olmayan, diagonal-dominant matris üretici."""
    def make(n, density=0.15, seed=42):
        rng = np.random.default_rng(seed)
        A = rng.standard_normal((n, n)) * (rng.random((n, n)) < density)
        A[np.diag_indices(n)] = np.abs(A).sum(axis=1) + 1.0
        return CSRMatrix.from_dense(A), A
    return make
