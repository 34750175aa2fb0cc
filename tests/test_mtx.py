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

import numpy as np
import pytest
import scipy.sparse as sp

from ghost_gmres import (
    CSRMatrix,
    MatrixFileError,
    MatrixFormatError,
    load_mtx_matrix,
    load_mtx_vector,
    write_mtx_matrix,
    write_mtx_vector,
)
from ghost_gmres.mtx import BANNER


def _write(path, text):
    path.write_text(text)
    return str(path)


def test_load_matrix_with_comments_and_blank_lines(tmp_path):
    fname = _write(tmp_path / "A.mtx", (
        "%%MatrixMarket matrix coordinate real general\n"
        "% yorum\n"
        "\n"
        "3 3 4\n"
        "1 1 4.0\n"
        "2 2 5.5\n"
        "\n"
        "3 1 -1e-3\n"
        "1 3 2\n"
    ))
    A = load_mtx_matrix(fname)

    assert isinstance(A, CSRMatrix)
    assert A.shape == (3, 3)
    np.testing.assert_array_equal(
        A.to_scipy().toarray(),
        [[4.0, 0.0, 2.0], [0.0, 5.5, 0.0], [-1e-3, 0.0, 0.0]],
    )


def test_pattern_entries_default_to_one(tmp_path):
    fname = _write(tmp_path / "P.mtx", "2 2 2\n1 2\n2 1\n")
    A = load_mtx_matrix(fname)
    np.testing.assert_array_equal(A.to_scipy().toarray(), [[0.0, 1.0], [1.0, 0.0]])


def test_duplicate_entries_last_wins(tmp_path):
    fname = _write(tmp_path / "D.mtx", "2 2 3\n1 1 3.0\n2 2 1.0\n1 1 7.0\n")
    A = load_mtx_matrix(fname)
    assert A.nnz == 2
    np.testing.assert_array_equal(A.diagonal(), [7.0, 1.0])


def test_load_vector_unlisted_entries_are_zero(tmp_path):
    fname = _write(tmp_path / "b.mtx", "%\n5 1 2\n2 1 3.5\n5 1 -1\n")
    np.testing.assert_array_equal(load_mtx_vector(fname), [0.0, 3.5, 0.0, 0.0, -1.0])


def test_vector_requires_single_column(tmp_path):
    with pytest.raises(MatrixFormatError):
        load_mtx_vector(_write(tmp_path / "v.mtx", "3 2 1\n1 1 1.0\n"))
    with pytest.raises(MatrixFormatError):
        load_mtx_vector(_write(tmp_path / "w.mtx", "3 1 1\n1 2 1.0\n"))


def test_missing_file(tmp_path):
    with pytest.raises(MatrixFileError) as excinfo:
        load_mtx_matrix(str(tmp_path / "yok.mtx"))
    assert isinstance(excinfo.value, OSError)


@pytest.mark.parametrize("text", [
    "",
    "% sadece yorum\n",
    "3 3\n",
    "3 x 1\n1 1 1.0\n",
    "0 3 0\n",
    "3 3 1\n1\n",
    "3 3 1\n1 1 abc\n",
    "3 3 1\n4 1 1.0\n",
    "3 3 1\n1 0 1.0\n",
])
def test_malformed_files(tmp_path, text):
    with pytest.raises(MatrixFormatError):
        load_mtx_matrix(_write(tmp_path / "bad.mtx", text))


def test_write_vector_skips_zeros(tmp_path):
    fname = str(tmp_path / "x.mtx")
    write_mtx_vector(fname, np.array([0.0, 1.5, 0.0, -2.0]))

    lines = (tmp_path / "x.mtx").read_text().splitlines()
    assert tuple(lines[:3]) == BANNER
    assert lines[3] == "4 1 2"
    assert lines[4:] == ["2 1 1.5", "4 1 -2"]


def test_vector_values_keep_full_precision(tmp_path):
    np.random.seed(42)
    x = np.random.randn(10)
    fname = str(tmp_path / "x.mtx")
    write_mtx_vector(fname, x)
    np.testing.assert_array_equal(load_mtx_vector(fname), x)


def test_write_matrix_row_order_without_zeros(tmp_path):
    # Satır 1'de açık sıfır, satır 2'de sırasız sütunlar
    mat = sp.csr_matrix(
        (np.array([3.0, 0.0, 2.0, 1.0]), np.array([2, 1, 1, 0]), np.array([0, 1, 2, 4])),
        shape=(3, 3),
    )
    fname = str(tmp_path / "A.mtx")
    write_mtx_matrix(fname, mat)

    lines = (tmp_path / "A.mtx").read_text().splitlines()
    assert lines[3] == "3 3 3"
    assert lines[4:] == ["1 3 3", "3 1 1", "3 2 2"]

    A = load_mtx_matrix(fname)
    np.testing.assert_array_equal(A.to_scipy().toarray(), mat.toarray())
