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
Host-side kernel dispatch for GHOST-GMRES.

KernelLauncher owns the launch configuration, issues a device-wide
barrier after every kernel and turns CUDA driver failures into
GHOST-GMRES exceptions. It also performs every device allocation of a
solve so out-of-memory conditions abort immediately.
"""

import numpy as np
from numba import cuda
from numba.cuda.cudadrv.driver import CudaAPIError
from numba.cuda.cudadrv.error import CudaSupportError

from . import kernels
from .errors import DeviceAllocationError, DeviceError, KernelLaunchError


DEFAULT_THREADS_PER_BLOCK = 256
MAX_THREADS_PER_BLOCK = 1024

# İndirgemede her thread'in gerçek bir kısmi toplam biriktirmesi için blok üst sınırı
MAX_REDUCTION_BLOCKS = 1024

_DRIVER_ERRORS = (CudaAPIError, CudaSupportError)


class KernelLauncher:
    """
    CUDA çekirdeklerini sırayla başlatan ve her birinden sonra
    cuda.synchronize() ile bekleyen yardımcı sınıf.

    Parametreler:
    -----------
    threads_per_block : int
        Blok başına thread sayısı, [1, 1024] (default: 256)

    Notlar:
    ------
    - Her başlatmadan sonra tam cihaz senkronizasyonu yapılır: bir
      indirgemenin yazdığı skaler hücre, onu okuyan çekirdek başlamadan
      önce kesinleşmiş olur.
    - Sürücü hataları anında KernelLaunchError / DeviceAllocationError
      olarak yükseltilir.
    """

    def __init__(self, threads_per_block: int = DEFAULT_THREADS_PER_BLOCK):
        if not 1 <= threads_per_block <= MAX_THREADS_PER_BLOCK:
            raise ValueError(
                f"threads_per_block [1, {MAX_THREADS_PER_BLOCK}] aralığında olmalı, "
                f"verilen: {threads_per_block}"
            )
        self.threads_per_block = threads_per_block
        self.allocated_bytes = 0
        self.launch_count = 0

    # ─────────────────────────────────────────────────────────────────
    # Grid konfigürasyonu
    # ─────────────────────────────────────────────────────────────────

    def blocks_for(self, n: int) -> int:
        return (n + self.threads_per_block - 1) // self.threads_per_block

    def reduction_blocks_for(self, n: int) -> int:
        return min(self.blocks_for(n), MAX_REDUCTION_BLOCKS)

    # ─────────────────────────────────────────────────────────────────
    # Hafıza
    # ─────────────────────────────────────────────────────────────────

    def device_array(self, shape):
        """Başlatılmamış float64 GPU dizisi ayır."""
        try:
            arr = cuda.device_array(shape, dtype=np.float64)
        except _DRIVER_ERRORS as exc:
            raise DeviceAllocationError(
                f"GPU hafızası ayrılamadı (shape={shape}): {exc}"
            ) from exc
        self.allocated_bytes += arr.nbytes
        return arr

    def to_device(self, host_array):
        """Host dizisini GPU'ya kopyala."""
        try:
            arr = cuda.to_device(np.ascontiguousarray(host_array))
        except _DRIVER_ERRORS as exc:
            raise DeviceAllocationError(
                f"GPU'ya transfer başarısız ({host_array.nbytes} byte): {exc}"
            ) from exc
        self.allocated_bytes += arr.nbytes
        return arr

    def copy_to_device(self, dst, host_array):
        """Önceden ayrılmış GPU dizisinin üzerine host verisini yaz."""
        try:
            dst.copy_to_device(np.ascontiguousarray(host_array, dtype=np.float64))
        except _DRIVER_ERRORS as exc:
            raise DeviceError(f"Host → GPU kopyalama başarısız: {exc}") from exc

    def copy_device(self, dst, src):
        """GPU → GPU kopyalama (aynı boyutlu diziler)."""
        try:
            dst.copy_to_device(src)
        except _DRIVER_ERRORS as exc:
            raise DeviceError(f"GPU → GPU kopyalama başarısız: {exc}") from exc

    def copy_to_host(self, src) -> np.ndarray:
        """GPU dizisini host'a kopyala."""
        try:
            return src.copy_to_host()
        except _DRIVER_ERRORS as exc:
            raise DeviceError(f"GPU → host kopyalama başarısız: {exc}") from exc

    def scalar_cell(self):
        """Tek elemanlı skaler hücre (sıfırlanmış)."""
        cell = self.device_array(1)
        self.fill(cell, 0.0)
        return cell

    def read_scalar(self, cell) -> float:
        """Hücreyi host'a kopyala (senkronizasyon noktası)."""
        return float(self.copy_to_host(cell)[0])

    # ─────────────────────────────────────────────────────────────────
    # Çekirdek başlatma
    # ─────────────────────────────────────────────────────────────────

    def _launch(self, name, kernel, blocks, *args):
        if blocks <= 0:
            return
        try:
            kernel[blocks, self.threads_per_block](*args)
            cuda.synchronize()
        except _DRIVER_ERRORS as exc:
            raise KernelLaunchError(f"{name} çekirdeği başarısız: {exc}") from exc
        self.launch_count += 1

    def fill(self, dst, value: float):
        n = dst.shape[0]
        self._launch("fill", kernels.fill_kernel, self.blocks_for(n), dst, float(value), n)

    def sqrt(self, dst, src):
        n = dst.shape[0]
        self._launch("sqrt", kernels.sqrt_kernel, self.blocks_for(n), dst, src, n)

    def divide_by_scalar(self, dst, src, cell):
        n = dst.shape[0]
        self._launch(
            "divide_by_scalar", kernels.divide_by_scalar_kernel,
            self.blocks_for(n), dst, src, cell, n,
        )

    def subtract_scaled(self, w, v, cell):
        n = w.shape[0]
        self._launch(
            "subtract_scaled", kernels.subtract_scaled_kernel,
            self.blocks_for(n), w, v, cell, n,
        )

    def subtract(self, dst, src):
        n = dst.shape[0]
        self._launch("subtract", kernels.subtract_kernel, self.blocks_for(n), dst, src, n)

    def combine_linear(self, x, basis, coeffs, k: int):
        n = x.shape[0]
        self._launch(
            "combine_linear", kernels.combine_linear_kernel,
            self.blocks_for(n), x, basis, coeffs, k, n,
        )

    def dot(self, v1, v2, cell):
        """cell[0] += <v1, v2>. cell önceden sıfırlanmış olmalı."""
        n = v1.shape[0]
        self._launch("dot", kernels.dot_kernel, self.reduction_blocks_for(n), cell, v1, v2, n)

    def norm(self, v, scratch, out):
        """out[0] = ||v||_2  (scratch: kareler toplamı için ara hücre)"""
        self.fill(scratch, 0.0)
        self.dot(v, v, scratch)
        self.sqrt(out, scratch)

    def spmv(self, A, x, w):
        """w = A · x  (A: DeviceCSRMatrix)"""
        if x.shape[0] != A.ncols or w.shape[0] != A.nrows:
            raise ValueError(
                f"SpMV boyut uyuşmazlığı: A {A.nrows}x{A.ncols}, "
                f"x {x.shape[0]}, w {w.shape[0]}"
            )
        self._launch(
            "spmv_csr", kernels.spmv_csr_kernel, self.blocks_for(A.nrows),
            w, A.indptr, A.indices, A.data, x, A.nrows,
        )
