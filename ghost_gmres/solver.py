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
GHOST-GMRES restarted GMRES(m) driver.

    INIT → BUILD_BASIS → SOLVE_LS → UPDATE_X → CHECK_CONVERGENCE
         → RESTART | CONVERGED | MAX_ITER_REACHED | STAGNATED

Numerical outcomes (breakdown, non-convergence, stagnation) are reported
in the returned ``info`` dictionary; only device failures and invalid
arguments raise.
"""

import time
from enum import Enum
from typing import Optional, Tuple

import numpy as np

from .arnoldi import KrylovWorkspace, arnoldi_step, seed_basis
from .csr import as_csr_matrix
from .launcher import DEFAULT_THREADS_PER_BLOCK, KernelLauncher
from .least_squares import GivensLeastSquares


DEFAULT_RESTART = 30
DEFAULT_TOLERANCE = 1e-6
DEFAULT_MAX_ITERATIONS = 1000

# Bir restart döngüsü gerçek residual'ı bu oranda düşüremezse: durgunluk
STAGNATION_RTOL = 1e-10


class GMRESStatus(Enum):
    CONVERGED = "converged"
    MAX_ITER_REACHED = "max_iter_reached"
    STAGNATED = "stagnated"


# =============================================================================
# YARDIMCI FONKSİYONLAR
# =============================================================================

def compute_residual(A, X: np.ndarray, B: np.ndarray) -> float:
    """
    Host üzerinde residual hesapla: ||Ax - B||_2

    Parametreler:
    -----------
    A : CSRMatrix, scipy.sparse veya ndarray (N, N)
        Katsayı matrisi
    X : ndarray (N,) veya (N, 1)
        Çözüm vektörü
    B : ndarray (N,)
        Sağ taraf

    Dönüş:
    -----
    float
        L2 norm residual
    """
    A = as_csr_matrix(A)
    return float(np.linalg.norm(A.matvec(np.ravel(X)) - np.ravel(B)))


def check_diagonal_dominance(A) -> Tuple[bool, float]:
    """
    Diagonal-dominant kontrol.

    Koşul: |A_ii| > Σ_{j≠i} |A_ij| (her i için)

    Dönüş:
    -----
    Tuple[bool, float]
        (is_dd, ratio) - DD ise True, en küçük |A_ii| / Σ|A_ij| oranı
    """
    csr = as_csr_matrix(A).to_scipy()
    diag = np.abs(csr.diagonal())
    row_sums = np.asarray(abs(csr).sum(axis=1)).ravel()
    off_diag = row_sums - diag

    # Köşegen dışı elemanı olmayan satırlar oranı etkilemez
    mask = off_diag > 0
    min_ratio = float(np.min(diag[mask] / off_diag[mask])) if mask.any() else float("inf")

    if np.any(diag[~mask] == 0):
        min_ratio = 0.0

    return min_ratio > 1.0, min_ratio


def _device_residual(launcher, A_dev, x_dev, b_dev, r_dev, scratch, beta_cell) -> float:
    """r = A·x - b ve beta = ||r|| GPU'da; beta host'a döner."""
    launcher.spmv(A_dev, x_dev, r_dev)
    launcher.subtract(r_dev, b_dev)
    launcher.norm(r_dev, scratch, beta_cell)
    return launcher.read_scalar(beta_cell)


# =============================================================================
# ANA ÇÖZÜCÜ FONKSİYONU
# =============================================================================

def solve_gmres_gpu(
    A,
    B: np.ndarray,
    X_initial: Optional[np.ndarray] = None,
    restart: int = DEFAULT_RESTART,
    max_iterations: int = DEFAULT_MAX_ITERATIONS,
    tolerance: float = DEFAULT_TOLERANCE,
    max_restarts: Optional[int] = None,
    threads_per_block: int = DEFAULT_THREADS_PER_BLOCK,
    verbose: bool = True
) -> Tuple[np.ndarray, int, float, dict]:
    """
    GHOST-GMRES: GPU üzerinde restart'lı GMRES(m) ile Ax = b çöz.

    Parametreler:
    -----------
    A : CSRMatrix, scipy.sparse veya ndarray (N, N)
        Kare katsayı matrisi (simetrik olması gerekmez)
    B : ndarray (N,) veya (N, 1)
        Sağ taraf vektörü
    X_initial : ndarray (N,), optional
        İlk tahmin (default: sıfır vektörü)
    restart : int
        Krylov alt uzay boyutu m (default: 30, N ile sınırlanır)
    max_iterations : int
        Toplam iç iterasyon bütçesi (default: 1000)
    tolerance : float
        Göreli tolerans: ||Ax - b|| < tolerance·||b|| (default: 1e-6)
    max_restarts : int, optional
        Dış iterasyon (restart) bütçesi (default: sınırsız)
    threads_per_block : int
        GPU threads/block (default: 256)
    verbose : bool
        Detaylı çıktı göster (default: True)

    Dönüş:
    -----
    Tuple[ndarray, int, float, dict]
        - X : çözüm vektörü (N,), yakınsamasa bile en iyi tahmin
        - iterations : kullanılan toplam iç iterasyon
        - final_residual : son gerçek residual ||Ax - b||
        - info : ek bilgiler; info['status'] bir GMRESStatus

    Notlar:
    ------
    - Breakdown (H[j+1, j] ≈ 0) hata değildir: taban kısaltılır ve
      eldeki sütunlarla en küçük kareler çözülür.
    - Bir restart gerçek residual'ı büyütürse x önceki değerine döner
      (info['rollbacks']).
    - b = 0 ise tolerance mutlak tolerans olarak kullanılır.
    - GPU hataları DeviceError olarak yükselir; yakınsamama yükselmez.

    Örnek:
    -----
    >>> A = np.array([[10, -1, 2], [-1, 11, -1], [2, -1, 10]], dtype=np.float64)
    >>> B = np.array([6, 25, -11], dtype=np.float64)
    >>> X, iters, res, info = solve_gmres_gpu(A, B, restart=3, verbose=False)
    >>> info['status']
    <GMRESStatus.CONVERGED: 'converged'>
    """

    # ─────────────────────────────────────────────────────────────────
    # KONTROL VE HAZIRLIK
    # ─────────────────────────────────────────────────────────────────

    A = as_csr_matrix(A)
    N = A.nrows

    if A.nrows != A.ncols:
        raise ValueError(f"Kare matris gerekli, verilen: {A.nrows}x{A.ncols}")

    # B shape kontrolü (2D → 1D)
    B = np.asarray(B, dtype=np.float64)
    if B.ndim == 2:
        B = B.ravel()
    if B.shape != (N,):
        raise ValueError(f"B uzunluğu {N} olmalı, verilen: {B.shape}")
    if not np.all(np.isfinite(B)):
        raise ValueError("B sonlu değerler içermeli")

    if restart < 1:
        raise ValueError(f"restart >= 1 olmalı, verilen: {restart}")
    if max_iterations < 1:
        raise ValueError(f"max_iterations >= 1 olmalı, verilen: {max_iterations}")
    if not tolerance > 0:
        raise ValueError(f"tolerance pozitif olmalı, verilen: {tolerance}")
    if max_restarts is not None and max_restarts < 1:
        raise ValueError(f"max_restarts >= 1 olmalı, verilen: {max_restarts}")

    # Krylov uzayı N boyutunu aşamaz
    restart = min(restart, N)

    # İlk tahmin
    if X_initial is None:
        X_initial = np.zeros(N, dtype=np.float64)
    else:
        X_initial = np.asarray(X_initial, dtype=np.float64).ravel()
        if X_initial.shape != (N,):
            raise ValueError(f"X_initial uzunluğu {N} olmalı, verilen: {X_initial.shape}")

    # Relative tolerance (mutlak'a çevir)
    B_norm = float(np.linalg.norm(B))
    tol_abs = tolerance * B_norm if B_norm > 0 else tolerance

    launcher = KernelLauncher(threads_per_block)

    # İstatistikler
    info = {
        'system_size': N,
        'nnz': A.nnz,
        'b_norm': B_norm,
        'tolerance': tolerance,
        'tol_abs': tol_abs,
        'restart': restart,
        'blocks': launcher.blocks_for(N),
        'threads_per_block': threads_per_block,
        'residuals': [],
        'inner_residuals': [],
        'restarts': 0,
        'breakdowns': 0,
        'rollbacks': 0,
        'hessenberg': None,
        'gpu_memory_used': 0,
        'total_time': 0
    }

    if verbose:
        print(f"\n{'='*75}")
        print(f"{'GHOST-GMRES: Yeniden Başlatmalı GMRES(m) (GPU)':<50}")
        print(f"{'='*75}")
        print(f"Sistem boyutu: {N}×{N} (nnz = {A.nnz})")
        print(f"Restart boyutu m: {restart}")
        print(f"Tolerans: {tolerance:.2e}")
        print(f"Max iterasyon: {max_iterations}")
        print(f"GPU Config: {info['blocks']} blocks × {threads_per_block} threads")

        # Diagonal-dominant kontrol
        is_dd, dd_ratio = check_diagonal_dominance(A)
        print(f"Diagonal-dominant: {'✓ Evet' if is_dd else '✗ Hayır'} (ratio: {dd_ratio:.4f})")
        print(f"{'─'*75}")

    # ─────────────────────────────────────────────────────────────────
    # INIT: GPU'YA TRANSFER VE BAŞLANGIÇ RESIDUAL'I
    # ─────────────────────────────────────────────────────────────────

    start_total = time.time()

    A_gpu = A.to_device(launcher)
    B_gpu = launcher.to_device(B)
    X_gpu = launcher.to_device(X_initial.copy())
    R_gpu = launcher.device_array(N)
    beta_cell = launcher.scalar_cell()
    X_prev_gpu = launcher.device_array(N)
    coeffs_gpu = launcher.device_array(restart)
    ws = KrylovWorkspace(launcher, N, restart)

    # Breakdown ve tekillik testlerinin sabit ölçeği: ||A||_F
    anorm = float(np.linalg.norm(A.data))

    # GPU hafıza (MB)
    info['gpu_memory_used'] = launcher.allocated_bytes / (1024**2)

    if verbose:
        print(f"GPU Hafıza: ~{info['gpu_memory_used']:.2f} MB")
        print(f"\n{'Restart':<9} {'İç':<6} {'Residual':<18} {'Tahmin':<18} {'Durum':<15}")
        print(f"{'─'*75}")

    # r0 = A·x0 - b (işaret kuralı), beta = ||r0||
    beta = _device_residual(launcher, A_gpu, X_gpu, B_gpu, R_gpu, ws.scratch, beta_cell)
    info['residuals'].append(beta)

    iterations = 0
    status = None

    if beta < tol_abs:
        # Dejenere başarı: b = 0 veya ilk tahmin zaten çözüm
        status = GMRESStatus.CONVERGED
        if verbose:
            print(f"{0:<9} {0:<6} {beta:<18.8e} {'-':<18} {'CONVERGED ✓':<15}")

    # ─────────────────────────────────────────────────────────────────
    # RESTART DÖNGÜSÜ
    # ─────────────────────────────────────────────────────────────────

    while status is None:
        # BUILD_BASIS: V[0] = r / beta, H = 0
        ws.reset(launcher)
        seed_basis(launcher, ws, R_gpu, beta_cell)
        ls = GivensLeastSquares(restart, beta, scale=anorm)

        for j in range(restart):
            step = arnoldi_step(launcher, A_gpu, ws, j, anorm)
            estimate = ls.append_column(step.column)
            iterations += 1
            info['inner_residuals'].append(estimate)

            if step.breakdown:
                info['breakdowns'] += 1
                break
            if estimate < tol_abs or iterations >= max_iterations:
                break

        # SOLVE_LS: min ||beta·e1 - H·y||
        k = ls.k
        y = ls.solve()
        info['hessenberg'] = ls.hessenberg()

        # UPDATE_X: r = A·x - b olduğundan x ← x - V[0..k]ᵀ·y
        coeffs = np.zeros(restart)
        coeffs[:k] = -y
        launcher.copy_to_device(coeffs_gpu, coeffs)
        launcher.copy_device(X_prev_gpu, X_gpu)
        launcher.combine_linear(X_gpu, ws.V, coeffs_gpu, k)
        info['restarts'] += 1

        # CHECK_CONVERGENCE: gerçek residual (R_gpu bir sonraki restart'ın tohumu)
        prev_beta = beta
        beta = _device_residual(launcher, A_gpu, X_gpu, B_gpu, R_gpu, ws.scratch, beta_cell)

        if beta > prev_beta:
            # Güncelleme residual'ı büyüttü: önceki x en iyi tahmin
            launcher.copy_device(X_gpu, X_prev_gpu)
            beta = _device_residual(launcher, A_gpu, X_gpu, B_gpu, R_gpu, ws.scratch, beta_cell)
            info['rollbacks'] += 1

        info['residuals'].append(beta)

        if beta < tol_abs:
            status = GMRESStatus.CONVERGED
        elif iterations >= max_iterations or (
            max_restarts is not None and info['restarts'] >= max_restarts
        ):
            status = GMRESStatus.MAX_ITER_REACHED
        elif beta > prev_beta * (1.0 - STAGNATION_RTOL):
            status = GMRESStatus.STAGNATED

        if verbose:
            label = {
                None: "Restart",
                GMRESStatus.CONVERGED: "CONVERGED ✓",
                GMRESStatus.MAX_ITER_REACHED: "MAX ITER ✗",
                GMRESStatus.STAGNATED: "STAGNATED ✗",
            }[status]
            if step.breakdown:
                label += " (breakdown)"
            print(f"{info['restarts']:<9} {k:<6} {beta:<18.8e} "
                  f"{ls.residual_estimate:<18.8e} {label:<15}")

    # ─────────────────────────────────────────────────────────────────
    # SONUÇ
    # ─────────────────────────────────────────────────────────────────

    X_result = launcher.copy_to_host(X_gpu)
    converged = status is GMRESStatus.CONVERGED

    info['status'] = status
    info['converged'] = converged
    info['converged_iter'] = iterations if converged else -1
    info['launches'] = launcher.launch_count
    info['total_time'] = time.time() - start_total

    if verbose:
        print(f"{'─'*75}")
        if converged:
            print(f"✓ Yakınsama sağlandı {iterations} iterasyonda "
                  f"({info['restarts']} restart)!")
        elif status is GMRESStatus.STAGNATED:
            print(f"✗ Durgunluk: residual artık azalmıyor ({iterations} iterasyon)")
            print(f"  Son residual: {beta:.8e}")
        else:
            print(f"✗ Maksimum iterasyona ulaşıldı ({iterations})")
            print(f"  Son residual: {beta:.8e}")

    return X_result, iterations, beta, info
