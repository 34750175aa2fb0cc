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
Read-only compressed-row (CSR) matrix view used by the GMRES engine.

The solver only borrows the matrix: the host arrays are copied once at
construction, frozen, and uploaded to the GPU as a ``DeviceCSRMatrix``.
"""

from collections import namedtuple
from typing import Tuple

import numpy as np
import scipy.sparse as sp

from .errors import MatrixFormatError


# GPU tarafındaki CSR: int32 indeksler + float64 değerler
DeviceCSRMatrix = namedtuple(
    "DeviceCSRMatrix", ["indptr", "indices", "data", "nrows", "ncols", "nnz"]
)

INDEX_DTYPE = np.int32
VALUE_DTYPE = np.float64
_INDEX_MAX = np.iinfo(INDEX_DTYPE).max


class CSRMatrix:
    """
    CSR formatında seyrek matris (salt okunur).

    Parametreler:
    -----------
    indptr : array_like (nrows + 1,)
        Satır başlangıç ofsetleri, indptr[0] = 0, indptr[nrows] = nnz
    indices : array_like (nnz,)
        Sütun indeksleri, her biri [0, ncols) aralığında
    data : array_like (nnz,)
        Sıfırdan farklı değerler
    shape : Tuple[int, int]
        (nrows, ncols)
    check : bool
        True ise dizileri doğrula (default: True)

    Hatalar:
    -------
    MatrixFormatError
        Diziler geçerli bir CSR yapısı oluşturmuyorsa
    """

    def __init__(self, indptr, indices, data, shape: Tuple[int, int], check: bool = True):
        indptr = np.array(indptr, dtype=np.int64).ravel()
        indices = np.array(indices, dtype=np.int64).ravel()
        data = np.array(data, dtype=VALUE_DTYPE).ravel()

        if len(shape) != 2:
            raise MatrixFormatError(f"shape 2 boyutlu olmalı, verilen: {shape}")
        self.shape = (int(shape[0]), int(shape[1]))

        if check:
            _validate_csr(indptr, indices, data, self.shape)

        self.indptr = indptr.astype(INDEX_DTYPE)
        self.indices = indices.astype(INDEX_DTYPE)
        self.data = data

        for arr in (self.indptr, self.indices, self.data):
            arr.setflags(write=False)

    # ─────────────────────────────────────────────────────────────────
    # Oluşturucular
    # ─────────────────────────────────────────────────────────────────

    @classmethod
    def from_scipy(cls, mat) -> "CSRMatrix":
        """scipy.sparse matrisinden (herhangi bir format) kopya oluştur."""
        csr = sp.csr_matrix(mat, dtype=VALUE_DTYPE, copy=True)
        csr.sum_duplicates()
        return cls(csr.indptr, csr.indices, csr.data, csr.shape)

    @classmethod
    def from_dense(cls, array) -> "CSRMatrix":
        """Yoğun 2D diziden sadece sıfırdan farklı elemanları al."""
        array = np.asarray(array, dtype=VALUE_DTYPE)
        if array.ndim != 2:
            raise MatrixFormatError(f"Yoğun matris 2D olmalı, ndim={array.ndim}")
        return cls.from_scipy(sp.csr_matrix(array))

    # ─────────────────────────────────────────────────────────────────
    # Özellikler
    # ─────────────────────────────────────────────────────────────────

    @property
    def nrows(self) -> int:
        return self.shape[0]

    @property
    def ncols(self) -> int:
        return self.shape[1]

    @property
    def nnz(self) -> int:
        return int(self.data.shape[0])

    @property
    def nbytes(self) -> int:
        return self.indptr.nbytes + self.indices.nbytes + self.data.nbytes

    def diagonal(self) -> np.ndarray:
        return self.to_scipy().diagonal()

    def to_scipy(self) -> sp.csr_matrix:
        return sp.csr_matrix(
            (self.data, self.indices, self.indptr), shape=self.shape, copy=True
        )

    def matvec(self, x: np.ndarray) -> np.ndarray:
        """Host (CPU) referans çarpımı: A @ x"""
        return self.to_scipy() @ np.asarray(x, dtype=VALUE_DTYPE)

    def to_device(self, launcher) -> DeviceCSRMatrix:
        """Dizileri launcher üzerinden GPU'ya kopyala."""
        return DeviceCSRMatrix(
            indptr=launcher.to_device(self.indptr),
            indices=launcher.to_device(self.indices),
            data=launcher.to_device(self.data),
            nrows=self.nrows,
            ncols=self.ncols,
            nnz=self.nnz,
        )

    def __repr__(self):
        return f"<CSRMatrix {self.nrows}x{self.ncols}, nnz={self.nnz}>"


def as_csr_matrix(A) -> CSRMatrix:
    """CSRMatrix, scipy.sparse veya yoğun diziyi CSRMatrix'e çevir."""
    if isinstance(A, CSRMatrix):
        return A
    if sp.issparse(A):
        return CSRMatrix.from_scipy(A)
    return CSRMatrix.from_dense(A)


def _validate_csr(indptr, indices, data, shape):
    nrows, ncols = shape

    if nrows <= 0 or ncols <= 0:
        raise MatrixFormatError(f"Matris boyutları pozitif olmalı, verilen: {shape}")

    if indptr.shape[0] != nrows + 1:
        raise MatrixFormatError(
            f"indptr uzunluğu {nrows + 1} olmalı, verilen: {indptr.shape[0]}"
        )

    nnz = data.shape[0]
    if indices.shape[0] != nnz:
        raise MatrixFormatError(
            f"indices ({indices.shape[0]}) ve data ({nnz}) aynı uzunlukta olmalı"
        )

    if nnz > _INDEX_MAX or nrows > _INDEX_MAX or ncols > _INDEX_MAX:
        raise MatrixFormatError("Matris int32 indeks aralığını aşıyor")

    if indptr[0] != 0 or indptr[-1] != nnz:
        raise MatrixFormatError(
            f"indptr[0] = 0 ve indptr[-1] = nnz ({nnz}) olmalı, "
            f"verilen: {indptr[0]}, {indptr[-1]}"
        )

    if np.any(np.diff(indptr) < 0):
        raise MatrixFormatError("indptr azalmayan (monoton) olmalı")

    if nnz and (indices.min() < 0 or indices.max() >= ncols):
        raise MatrixFormatError(f"Sütun indeksleri [0, {ncols}) aralığında olmalı")

    if not np.all(np.isfinite(data)):
        raise MatrixFormatError("Matris değerleri sonlu olmalı (NaN/inf yok)")
