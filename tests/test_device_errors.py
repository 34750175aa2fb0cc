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
from numba import cuda
from numba.cuda.cudadrv.driver import CudaAPIError

from ghost_gmres import (
    DeviceAllocationError,
    DeviceError,
    KernelLaunchError,
    solve_gmres_gpu,
)
from ghost_gmres.main import EXIT_ERROR, example_system, main


def _out_of_memory(*args, **kwargs):
    raise CudaAPIError(2, "out of memory")


def _illegal_address(*args, **kwargs):
    raise CudaAPIError(700, "an illegal memory access was encountered")


class _LostArray:
    """Sürücü bağlantısı kopmuş bir GPU dizisi gibi davranır."""
    shape = (4,)

    def copy_to_host(self):
        _illegal_address()

    def copy_to_device(self, src):
        _illegal_address()


def test_allocation_failure_aborts_solve(monkeypatch):
    monkeypatch.setattr(cuda, "device_array", _out_of_memory)
    A, B = example_system()

    with pytest.raises(DeviceAllocationError) as excinfo:
        solve_gmres_gpu(A, B, threads_per_block=32, verbose=False)
    assert isinstance(excinfo.value.__cause__, CudaAPIError)


def test_transfer_failure_is_allocation_error(launcher, monkeypatch):
    monkeypatch.setattr(cuda, "to_device", _out_of_memory)
    with pytest.raises(DeviceAllocationError):
        launcher.to_device(np.zeros(8))


def test_kernel_failure_aborts_solve(monkeypatch):
    monkeypatch.setattr(cuda, "synchronize", _illegal_address)
    A, B = example_system()

    with pytest.raises(KernelLaunchError):
        solve_gmres_gpu(A, B, threads_per_block=32, verbose=False)


def test_failed_launch_is_not_counted(launcher, monkeypatch):
    d = launcher.device_array(8)
    monkeypatch.setattr(cuda, "synchronize", _illegal_address)

    with pytest.raises(KernelLaunchError):
        launcher.fill(d, 1.0)
    assert launcher.launch_count == 0


def test_copy_failures_are_device_errors(launcher):
    broken = _LostArray()
    with pytest.raises(DeviceError):
        launcher.copy_to_host(broken)
    with pytest.raises(DeviceError):
        launcher.read_scalar(broken)
    with pytest.raises(DeviceError):
        launcher.copy_device(broken, launcher.device_array(4))


def test_cli_reports_device_failure(monkeypatch, capsys):
    monkeypatch.setattr(cuda, "device_array", _out_of_memory)

    assert main(["--quiet", "--threads-per-block", "32"]) == EXIT_ERROR
    assert "HATA" in capsys.readouterr().err
