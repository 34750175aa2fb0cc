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
MatrixMarket coordinate file reading and writing.

Input: lines starting with '%' are comments, the first other line is
``rows cols nonzeros``, then one ``row col [value]`` line per entry
(1-indexed, a missing value means 1). Vectors are ``n × 1`` matrices.

Output: a fixed three-line banner, the size line and only the nonzero
entries, with values written at round-trip precision.
"""

from typing import List, Tuple

import numpy as np
import scipy.sparse as sp

from .csr import CSRMatrix, as_csr_matrix
from .errors import MatrixFileError, MatrixFormatError


BANNER = (
    "%%MatrixMarket matrix coordinate real general",
    "%" + "-" * 79,
    "%" + "-" * 79,
)

_VALUE_FORMAT = "%.17g"


# =============================================================================
# OKUMA
# =============================================================================

def _read_coordinate_file(filename) -> Tuple[Tuple[int, int, int], np.ndarray, np.ndarray, np.ndarray]:
    """
    Dosyayı tamamen oku ve ayrıştır.

    Dönüş:
    -----
    ((nrows, ncols, total), rows, cols, values)
        rows / cols 0-tabanlı, values float64
    """
    try:
        infile = open(filename, "r")
    except OSError as exc:
        raise MatrixFileError(f"Dosya açılamadı: {filename} ({exc})") from exc

    header = None
    rows: List[int] = []
    cols: List[int] = []
    values: List[float] = []

    with infile:
        for lineno, line in enumerate(infile, start=1):
            stripped = line.strip()
            if not stripped or stripped.startswith("%"):
                continue

            fields = stripped.split()
            try:
                if header is None:
                    if len(fields) < 3:
                        raise MatrixFormatError(
                            f"{filename}:{lineno}: 'rows cols nonzeros' bekleniyordu"
                        )
                    header = (int(fields[0]), int(fields[1]), int(fields[2]))
                    continue

                if len(fields) < 2:
                    raise MatrixFormatError(f"{filename}:{lineno}: 'row col [value]' bekleniyordu")
                rows.append(int(fields[0]) - 1)
                cols.append(int(fields[1]) - 1)
                # Değer yoksa 1 (pattern girdisi)
                values.append(float(fields[2]) if len(fields) > 2 else 1.0)
            except MatrixFormatError:
                raise
            except ValueError as exc:
                raise MatrixFormatError(f"{filename}:{lineno}: sayı okunamadı: {stripped!r}") from exc

    if header is None:
        raise MatrixFormatError(f"{filename}: boyut satırı bulunamadı")

    nrows, ncols, _ = header
    if nrows <= 0 or ncols <= 0:
        raise MatrixFormatError(f"{filename}: geçersiz boyut {nrows}x{ncols}")

    rows = np.asarray(rows, dtype=np.int64)
    cols = np.asarray(cols, dtype=np.int64)
    values = np.asarray(values, dtype=np.float64)

    if rows.size and (rows.min() < 0 or rows.max() >= nrows or cols.min() < 0 or cols.max() >= ncols):
        raise MatrixFormatError(f"{filename}: indeks {nrows}x{ncols} sınırları dışında")

    return header, rows, cols, values


def _keep_last(keys: np.ndarray) -> np.ndarray:
    """Tekrarlanan koordinatlarda son girdinin indeksleri (dosya sırasıyla)."""
    _, first_in_reversed = np.unique(keys[::-1], return_index=True)
    return np.sort(keys.shape[0] - 1 - first_in_reversed)


def load_mtx_matrix(filename) -> CSRMatrix:
    """
    MatrixMarket koordinat dosyasından seyrek matris oku.

    Hatalar:
    -------
    MatrixFileError
        Dosya açılamazsa
    MatrixFormatError
        İçerik bozuksa (matris asla kısmen yüklenmez)
    """
    (nrows, ncols, _), rows, cols, values = _read_coordinate_file(filename)

    keep = _keep_last(rows * ncols + cols)
    coo = sp.coo_matrix((values[keep], (rows[keep], cols[keep])), shape=(nrows, ncols))
    return CSRMatrix.from_scipy(coo)


def load_mtx_vector(filename) -> np.ndarray:
    """
    MatrixMarket koordinat dosyasından yoğun vektör oku (n × 1).

    Listelenmeyen elemanlar sıfırdır.
    """
    (nrows, ncols, _), rows, cols, values = _read_coordinate_file(filename)

    if ncols != 1 or np.any(cols != 0):
        raise MatrixFormatError(f"{filename}: vektör dosyasında sütun sayısı 1 olmalı")

    vec = np.zeros(nrows, dtype=np.float64)
    keep = _keep_last(rows)
    vec[rows[keep]] = values[keep]
    return vec


# =============================================================================
# YAZMA
# =============================================================================

def _write_coordinate_file(filename, shape, rows, cols, values):
    try:
        outfile = open(filename, "w")
    except OSError as exc:
        raise MatrixFileError(f"Dosya yazılamadı: {filename} ({exc})") from exc

    with outfile:
        for line in BANNER:
            outfile.write(line + "\n")
        outfile.write(f"{shape[0]} {shape[1]} {len(values)}\n")
        for r, c, v in zip(rows, cols, values):
            outfile.write(f"{r + 1} {c + 1} {_VALUE_FORMAT % v}\n")


def write_mtx_vector(filename, vec):
    """Vektörü n × 1 koordinat dosyası olarak yaz (sadece sıfırdan farklılar)."""
    vec = np.asarray(vec, dtype=np.float64).ravel()
    nz = np.flatnonzero(vec)
    _write_coordinate_file(filename, (vec.shape[0], 1), nz, np.zeros_like(nz), vec[nz])


def write_mtx_matrix(filename, A):
    """Matrisi satır sırasıyla koordinat dosyası olarak yaz (sadece sıfırdan farklılar)."""
    csr = as_csr_matrix(A).to_scipy()
    csr.sort_indices()
    coo = csr.tocoo()
    nz = coo.data != 0
    _write_coordinate_file(filename, csr.shape, coo.row[nz], coo.col[nz], coo.data[nz])
