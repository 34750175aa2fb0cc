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
Arnoldi process with modified Gram-Schmidt on the GPU.

The Krylov basis V and the Hessenberg matrix H live in device memory.
Each Hessenberg entry is produced by a dot-product reduction directly
into its own H cell and consumed from there by the projection-removal
kernel, so no scalar makes a round trip to the host except the finished
column, which the host needs for the breakdown test and the Givens
least-squares update.
"""

from collections import namedtuple

import numpy as np

# H[j+1, j] <= BREAKDOWN_RTOL * max(||A||, ||H[:j+2, j]||) ise Krylov uzayı büyüyemez
BREAKDOWN_RTOL = 1e-12

ArnoldiStep = namedtuple("ArnoldiStep", ["column", "breakdown"])


class KrylovWorkspace:
    """
    Bir çözüm boyunca kullanılan GPU tamponları.

    Parametreler:
    -----------
    launcher : KernelLauncher
        Ayırma, çekirdek başlatma ve host kopyaları için
    n : int
        Sistem boyutu
    restart : int
        Restart boyutu m

    Yerleşim:
    --------
    V : (m+1, n)  - satır k, k'ıncı ortonormal taban vektörü
    H : m·(m+1)   - (m+1)×m Hessenberg, sabit adım m+1 ile:
                    H[i, j] → H[j·(m+1) + i]  (her sütun bitişik)
    w : (n,)      - çalışma vektörü
    scratch : (1,) - kareler toplamı için ara hücre
    """

    def __init__(self, launcher, n: int, restart: int):
        self.launcher = launcher
        self.n = n
        self.restart = restart
        self.stride = restart + 1

        self.V = launcher.device_array((restart + 1, n))
        self.H = launcher.device_array(restart * self.stride)
        self.w = launcher.device_array(n)
        self.scratch = launcher.scalar_cell()

    def reset(self, launcher):
        """Her restart başında H sıfırlanır; alt köşegen altı sıfır kalır."""
        launcher.fill(self.H, 0.0)

    def h_cell(self, i: int, j: int):
        k = j * self.stride + i
        return self.H[k:k + 1]

    def h_column_cells(self, j: int, rows: int):
        start = j * self.stride
        return self.H[start:start + rows]

    def h_column(self, j: int, rows: int) -> np.ndarray:
        return self.launcher.copy_to_host(self.h_column_cells(j, rows))

    def hessenberg(self, k: int) -> np.ndarray:
        """İlk k sütunun host kopyası, (k+1)×k yoğun dizi."""
        flat = self.launcher.copy_to_host(self.H[:k * self.stride])
        return flat.reshape(k, self.stride).T[:k + 1, :].copy()

    def basis(self, k: int) -> np.ndarray:
        """İlk k taban vektörünün host kopyası, (k, n)."""
        return self.launcher.copy_to_host(self.V)[:k]


def seed_basis(launcher, ws: KrylovWorkspace, r, beta_cell):
    """V[0] = r / beta  (beta != 0 kontrolü çağıranda)"""
    launcher.divide_by_scalar(ws.V[0], r, beta_cell)


def arnoldi_step(launcher, A, ws: KrylovWorkspace, j: int, anorm: float = 0.0) -> ArnoldiStep:
    """
    Arnoldi adımı j: V[j]'den yeni ortonormal V[j+1] vektörünü üret.

    Parametreler:
    -----------
    launcher : KernelLauncher
    A : DeviceCSRMatrix
    ws : KrylovWorkspace
        H bu restart için sıfırlanmış, V[0..j] hazır olmalı
    j : int
        İç iterasyon indeksi, 0 <= j < m
    anorm : float
        Matrisin sabit ölçeği (ör. Frobenius normu); 0 ise sadece
        sütunun kendi normuna göre karar verilir

    Dönüş:
    -----
    ArnoldiStep
        - column : H[0:j+2, j] host kopyası
        - breakdown : True ise V[j+1] yazılmadı, H[j+1, j] = 0

    Notlar:
    ------
    - Gram-Schmidt sırası i = 0, 1, ..., j kesin olarak artan; her adım
      güncellenmiş w'yi yeniden okur (modified Gram-Schmidt).
    - dot → subtract_scaled arası launcher'ın cihaz senkronizasyonu,
      H hücresinin son değerini garanti eder.
    - A·V[j] sayısal olarak sıfırsa (V[j], A'nın sıfır uzayında) tüm sütun
      yuvarlama gürültüsüdür: sütun sıfırlanır, gürültü tabana girmez.
    """
    V, w = ws.V, ws.w

    # 1. w = A · V[j]
    launcher.spmv(A, V[j], w)

    # 2. Modified Gram-Schmidt: H[i, j] = <w, V[i]>, w -= H[i, j] · V[i]
    for i in range(j + 1):
        cell = ws.h_cell(i, j)
        launcher.dot(w, V[i], cell)
        launcher.subtract_scaled(w, V[i], cell)

    # 3. H[j+1, j] = ||w||
    next_cell = ws.h_cell(j + 1, j)
    launcher.norm(w, ws.scratch, next_cell)

    # 4. Breakdown kontrolü (bölmeden ÖNCE, host tarafında)
    column = ws.h_column(j, j + 2)
    column_norm = np.linalg.norm(column)
    threshold = BREAKDOWN_RTOL * max(anorm, column_norm)

    if column_norm <= BREAKDOWN_RTOL * anorm:
        column[:] = 0.0
        launcher.fill(ws.h_column_cells(j, j + 2), 0.0)
        return ArnoldiStep(column, True)

    if column[j + 1] <= threshold:
        column[j + 1] = 0.0
        launcher.fill(next_cell, 0.0)
        return ArnoldiStep(column, True)

    launcher.divide_by_scalar(V[j + 1], w, next_cell)
    return ArnoldiStep(column, False)
