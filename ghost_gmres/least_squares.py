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
Hessenberg least-squares solve for GMRES.

min_y || beta·e1 - H·y ||_2 is solved by an incremental QR factorization:
each new Hessenberg column is rotated by all previous Givens rotations and
then by one new rotation that annihilates its subdiagonal entry. The matrix
is at most (m+1)×m, so this runs on the host with numpy/scipy.
"""

import math

import numpy as np
from scipy.linalg import lstsq, solve_triangular

# |R[i, i]| <= RANK_RTOL · max(||A||, max|R[i, i]|) ise R sayısal olarak tekil kabul edilir
RANK_RTOL = 1e-13


def givens_rotation(a: float, b: float):
    """
    [c s; -s c] · [a; b] = [r; 0] olacak şekilde (c, s, r) döndür.

    a = b = 0 (sıfır sütun) ise residual tahmini değişmeden kalmalı: c = 0, s = 1.
    """
    if a == 0.0 and b == 0.0:
        return 0.0, 1.0, 0.0
    if b == 0.0:
        return 1.0, 0.0, a
    r = math.hypot(a, b)
    return a / r, b / r, r


class GivensLeastSquares:
    """
    Artımlı Givens QR ile Hessenberg en küçük kareler çözücüsü.

    Parametreler:
    -----------
    restart : int
        En fazla sütun sayısı m
    beta : float
        Başlangıç residual normu (sağ taraf beta·e1)
    scale : float
        Hessenberg girdilerinin mutlak ölçeği, genelde ||A||_F
        (default: 0, sadece göreli tekillik testi)

    Kullanım:
    --------
    >>> ls = GivensLeastSquares(restart=2, beta=4.0)
    >>> ls.append_column(np.array([2.0, 0.0]))   # residual tahmini döner
    0.0
    >>> ls.solve()
    array([2.])
    """

    def __init__(self, restart: int, beta: float, scale: float = 0.0):
        self.restart = restart
        self.beta = float(beta)
        self.scale = float(scale)
        self.k = 0

        self.H = np.zeros((restart + 1, restart))  # ham Hessenberg (yedek çözüm için)
        self.R = np.zeros((restart + 1, restart))  # döndürülmüş üst üçgen faktör
        self.g = np.zeros(restart + 1)
        self.g[0] = self.beta
        self.cs = np.zeros(restart)
        self.sn = np.zeros(restart)

    @property
    def residual_estimate(self) -> float:
        """|g[k]| = min_y ||beta·e1 - H·y|| (mevcut k sütun için)"""
        return abs(self.g[self.k])

    def append_column(self, column) -> float:
        """
        Hessenberg sütunu j = k ekle.

        Parametreler:
        -----------
        column : ndarray (j+2,)
            H[0:j+2, j]

        Dönüş:
        -----
        float
            Güncel residual tahmini (artmayan dizi)
        """
        j = self.k
        if j >= self.restart:
            raise ValueError(f"En fazla {self.restart} sütun eklenebilir")

        column = np.asarray(column, dtype=np.float64)
        if column.shape[0] != j + 2:
            raise ValueError(f"Sütun {j} uzunluğu {j + 2} olmalı, verilen: {column.shape[0]}")

        self.H[:j + 2, j] = column
        h = np.zeros(self.restart + 1)
        h[:j + 2] = column

        # Önceki dönüşümleri uygula
        for i in range(j):
            c, s = self.cs[i], self.sn[i]
            h[i], h[i + 1] = c * h[i] + s * h[i + 1], -s * h[i] + c * h[i + 1]

        # Yeni dönüşüm: h[j+1] → 0
        c, s, r = givens_rotation(h[j], h[j + 1])
        h[j], h[j + 1] = r, 0.0
        self.cs[j], self.sn[j] = c, s

        self.g[j + 1] = -s * self.g[j]
        self.g[j] = c * self.g[j]

        self.R[:, j] = h
        self.k = j + 1
        return self.residual_estimate

    def hessenberg(self) -> np.ndarray:
        return self.H[:self.k + 1, :self.k].copy()

    def solve(self) -> np.ndarray:
        """
        y = argmin ||beta·e1 - H·y|| (k sütun)

        R tekil ya da tekile yakınsa (ör. breakdown sonrası sıfır köşegen),
        ham (k+1)×k sistemin minimum-norm çözümüne düşer. Tekillik eşiği
        RANK_RTOL · max(scale, max|R[i, i]|): mutlak ölçek, gürültü
        mertebesindeki köşegenlerin tersinin alınmasını engeller.
        """
        k = self.k
        if k == 0:
            return np.zeros(0)

        R = self.R[:k, :k]
        diag = np.abs(np.diag(R))
        rank_tol = RANK_RTOL * max(self.scale, diag.max())
        if diag.min() > rank_tol:
            return solve_triangular(R, self.g[:k], lower=False)

        H = self.hessenberg()
        h_norm = np.linalg.norm(H, 2)
        if h_norm <= rank_tol:
            # Bütün sütunlar gürültü: x değişmez
            return np.zeros(k)

        rhs = np.zeros(k + 1)
        rhs[0] = self.beta
        # lstsq'nun cond'u en büyük tekil değere görelidir
        y, _, _, _ = lstsq(H, rhs, cond=rank_tol / h_norm)
        return y
