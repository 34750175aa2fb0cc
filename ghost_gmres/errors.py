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
GHOST-GMRES exception types.

Device level failures are raised immediately. Numerical outcomes
(breakdown, non-convergence) are never raised; the solver reports them
through its ``info`` dictionary.
"""


class GhostSolverError(Exception):
    """Tüm GHOST-GMRES hatalarının temel sınıfı."""


class DeviceError(GhostSolverError, RuntimeError):
    """GPU sürücüsü / çalışma zamanı seviyesinde hata."""


class DeviceAllocationError(DeviceError):
    """GPU hafızası ayrılamadı (out of memory). Çözüm iptal edilir."""


class KernelLaunchError(DeviceError):
    """Bir CUDA çekirdeği başlatılamadı ya da senkronizasyonda hata verdi."""


class MatrixFormatError(GhostSolverError, ValueError):
    """Bozuk dosya içeriği veya geçersiz CSR dizileri."""


class MatrixFileError(GhostSolverError, OSError):
    """Dosya açılamadı / okunamadı."""
