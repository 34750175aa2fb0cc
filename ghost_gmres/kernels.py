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
GHOST-GMRES Numba CUDA kernel library.

Elementwise primitives, the atomic-add dot product reduction and the
one-thread-per-row CSR sparse matrix-vector product. Every kernel guards
its global index against N, since the launched thread count is rounded
up to whole blocks.

Scalar operands that are produced on the GPU (norms, Hessenberg entries)
are passed as single-element device arrays and read as ``cell[0]``.
"""

import math

from numba import cuda


# =============================================================================
# ELEMANTER ÇEKİRDEKLER
# =============================================================================

@cuda.jit('void(float64[:], float64, int64)')
def fill_kernel(dst, value, N):
    """dst[i] = value"""
    idx = cuda.grid(1)
    if idx < N:
        dst[idx] = value


@cuda.jit('void(float64[:], float64[:], int64)')
def sqrt_kernel(dst, src, N):
    """
    dst[i] = sqrt(src[i])

    Genelde N = 1: indirgenmiş kareler toplamını norma çevirir.
    """
    idx = cuda.grid(1)
    if idx < N:
        dst[idx] = math.sqrt(src[idx])


@cuda.jit('void(float64[:], float64[:], float64[:], int64)')
def divide_by_scalar_kernel(dst, src, cell, N):
    """
    dst[i] = src[i] / cell[0]

    cell[0] == 0 kontrolü çağıranın sorumluluğundadır (breakdown testi).
    """
    idx = cuda.grid(1)
    if idx < N:
        dst[idx] = src[idx] / cell[0]


@cuda.jit('void(float64[:], float64[:], float64[:], int64)')
def subtract_scaled_kernel(w, v, cell, N):
    """
    w[i] -= v[i] * cell[0]

    Modified Gram-Schmidt izdüşüm çıkarma adımı.
    """
    idx = cuda.grid(1)
    if idx < N:
        w[idx] -= v[idx] * cell[0]


@cuda.jit('void(float64[:], float64[:], int64)')
def subtract_kernel(dst, src, N):
    """dst[i] -= src[i]  (residual: r = A·x - b)"""
    idx = cuda.grid(1)
    if idx < N:
        dst[idx] -= src[idx]


@cuda.jit('void(float64[:], float64[:, :], float64[:], int64, int64)')
def combine_linear_kernel(x, basis, coeffs, k, N):
    """
    Krylov tabanı ile çözüm güncellemesi.

    Formül:
    ------
    x[i] += Σ_{t=0}^{k-1} basis[t, i] * coeffs[t]
    """
    idx = cuda.grid(1)
    if idx < N:
        acc = 0.0
        for t in range(k):
            acc += basis[t, idx] * coeffs[t]
        x[idx] += acc


# =============================================================================
# İNDİRGEME (DOT PRODUCT)
# =============================================================================

@cuda.jit('void(float64[:], float64[:], float64[:], int64)')
def dot_kernel(result, v1, v2, N):
    """
    result[0] += Σ v1[i] * v2[i]

    Her thread grid-stride döngüsüyle kısmi toplamını hesaplar, sonra
    tek bir atomik toplama ile result[0]'a ekler. result[0] çağıran
    tarafından sıfırlanmış olmalı; çekirdek onu asla sıfırlamaz.

    Not: toplama sırası deterministik değil, sonuç yalnızca kayan nokta
    yeniden gruplama hassasiyetinde tekrarlanabilir.
    """
    start = cuda.grid(1)
    stride = cuda.gridsize(1)

    if start < N:
        partial = 0.0
        for i in range(start, N, stride):
            partial += v1[i] * v2[i]
        cuda.atomic.add(result, 0, partial)


# =============================================================================
# SEYREK MATRİS-VEKTÖR ÇARPIMI (CSR SpMV)
# =============================================================================

@cuda.jit
def spmv_csr_kernel(w, indptr, indices, data, x, nrows):
    """
    w = A · x  (A CSR formatında)

    Her GPU thread bir satırı işler: satırın sıfırdan farklı elemanlarını
    [indptr[i], indptr[i+1]) aralığında dolaşır, toplamı register'da biriktirir
    ve w[i]'ye bir kez yazar. Satırlar arası senkronizasyon gerekmez.
    """
    row = cuda.grid(1)

    if row < nrows:
        acc = 0.0
        for k in range(indptr[row], indptr[row + 1]):
            acc += data[k] * x[indices[k]]
        w[row] = acc
