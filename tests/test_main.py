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

from ghost_gmres import load_mtx_vector, write_mtx_matrix, write_mtx_vector
from ghost_gmres.main import EXIT_CONVERGED, EXIT_ERROR, EXIT_NOT_CONVERGED, example_system, main


def _system_files(tmp_path):
    A, B = example_system()
    a_file, b_file = str(tmp_path / "A.mtx"), str(tmp_path / "b.mtx")
    write_mtx_matrix(a_file, A)
    write_mtx_vector(b_file, B)
    return a_file, b_file


def test_solve_files_and_write_solution(tmp_path):
    a_file, b_file = _system_files(tmp_path)
    x_file = str(tmp_path / "x.mtx")

    code = main([a_file, b_file, "-o", x_file, "--quiet", "--threads-per-block", "32"])

    assert code == EXIT_CONVERGED
    np.testing.assert_allclose(load_mtx_vector(x_file), [1.0, 2.0, -1.0, 1.0], atol=1e-5)


def test_builtin_example(capsys):
    code = main(["--threads-per-block", "32"])

    out = capsys.readouterr().out
    assert code == EXIT_CONVERGED
    assert "GHOST-GMRES v3.0" in out
    assert "Durum: converged" in out


def test_matrix_without_rhs_is_usage_error(tmp_path):
    a_file, _ = _system_files(tmp_path)
    with pytest.raises(SystemExit) as excinfo:
        main([a_file])
    assert excinfo.value.code == 2


def test_missing_file_reports_error(tmp_path, capsys):
    code = main([str(tmp_path / "yok.mtx"), str(tmp_path / "b.mtx"), "--quiet"])

    assert code == EXIT_ERROR
    assert "HATA" in capsys.readouterr().err


def test_invalid_option_value_reports_error():
    assert main(["--quiet", "--restart", "0"]) == EXIT_ERROR


def test_not_converged_exit_code(tmp_path):
    a_file, b_file = _system_files(tmp_path)
    code = main([a_file, b_file, "--quiet", "--threads-per-block", "32",
                 "--restart", "1", "--maxit", "1", "--tol", "1e-14"])
    assert code == EXIT_NOT_CONVERGED


def test_device_report(capsys):
    main(["--quiet", "--device-info", "--threads-per-block", "32"])
    assert "CUDA Cihazları" in capsys.readouterr().out
