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
GHOST-GMRES command line interface.

    ghost-gmres A.mtx b.mtx -o x.mtx --restart 30 --tol 1e-6 --maxit 1000

Without input files the built-in 4×4 example system is solved.
Exit status: 0 converged, 2 not converged, 1 input or device error.
"""

import argparse
import sys

import numpy as np

from .csr import CSRMatrix
from .diagnostics import print_device_report
from .errors import GhostSolverError
from .launcher import DEFAULT_THREADS_PER_BLOCK
from .mtx import load_mtx_matrix, load_mtx_vector, write_mtx_vector
from .solver import (
    DEFAULT_MAX_ITERATIONS,
    DEFAULT_RESTART,
    DEFAULT_TOLERANCE,
    solve_gmres_gpu,
)

EXIT_CONVERGED = 0
EXIT_ERROR = 1
EXIT_NOT_CONVERGED = 2


def example_system():
    """Basit 4x4 diagonal-dominant sistem; gerçek çözüm [1, 2, -1, 1]."""
    A = np.array([
        [10.0, -1.0, 2.0, 0.0],
        [-1.0, 11.0, -1.0, 3.0],
        [2.0, -1.0, 10.0, -1.0],
        [0.0, 3.0, -1.0, 8.0]
    ], dtype=np.float64)
    B = np.array([6.0, 25.0, -11.0, 15.0], dtype=np.float64)
    return CSRMatrix.from_dense(A), B


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ghost-gmres",
        description="GPU üzerinde restart'lı GMRES ile seyrek Ax = b çözücü",
    )
    parser.add_argument("matrix", nargs="?", help="A matrisi (MatrixMarket koordinat)")
    parser.add_argument("rhs", nargs="?", help="b vektörü (MatrixMarket koordinat, n x 1)")
    parser.add_argument("-o", "--output", help="x çözümünün yazılacağı dosya")
    parser.add_argument("--restart", type=int, default=DEFAULT_RESTART,
                        help=f"Krylov alt uzay boyutu m (default: {DEFAULT_RESTART})")
    parser.add_argument("--tol", type=float, default=DEFAULT_TOLERANCE,
                        help=f"göreli tolerans (default: {DEFAULT_TOLERANCE})")
    parser.add_argument("--maxit", type=int, default=DEFAULT_MAX_ITERATIONS,
                        help=f"toplam iç iterasyon bütçesi (default: {DEFAULT_MAX_ITERATIONS})")
    parser.add_argument("--max-restarts", type=int, default=None,
                        help="restart bütçesi (default: sınırsız)")
    parser.add_argument("--threads-per-block", type=int, default=DEFAULT_THREADS_PER_BLOCK,
                        help=f"GPU threads/block (default: {DEFAULT_THREADS_PER_BLOCK})")
    parser.add_argument("--quiet", action="store_true", help="ilerleme tablosunu yazdırma")
    parser.add_argument("--device-info", action="store_true", help="CUDA cihaz raporunu yazdır")
    return parser


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if (args.matrix is None) != (args.rhs is None):
        parser.error("matrix ve rhs birlikte verilmeli")

    verbose = not args.quiet

    if verbose:
        print("\n")
        print("╔" + "="*73 + "╗")
        print("║" + " "*17 + "GHOST-GMRES v3.0 - Restart'lı GMRES CUDA" + " "*16 + "║")
        print("╚" + "="*73 + "╝")

    if args.device_info:
        print_device_report()

    try:
        if args.matrix is None:
            A, B = example_system()
        else:
            A = load_mtx_matrix(args.matrix)
            B = load_mtx_vector(args.rhs)

        X, iters, res, info = solve_gmres_gpu(
            A, B,
            restart=args.restart,
            max_iterations=args.maxit,
            tolerance=args.tol,
            max_restarts=args.max_restarts,
            threads_per_block=args.threads_per_block,
            verbose=verbose,
        )

        if args.output:
            write_mtx_vector(args.output, X)
    except (GhostSolverError, ValueError) as e:
        print(f"✗ HATA: {e}", file=sys.stderr)
        return EXIT_ERROR

    if verbose:
        print(f"\nSonuç:")
        print(f"  Durum: {info['status'].value}")
        print(f"  İterasyonlar: {iters} ({info['restarts']} restart)")
        print(f"  Residual: {res:.8e}")
        if args.matrix is None:
            print(f"  Çözüm: {X}")

    return EXIT_CONVERGED if info['converged'] else EXIT_NOT_CONVERGED


if __name__ == '__main__':
    sys.exit(main())
