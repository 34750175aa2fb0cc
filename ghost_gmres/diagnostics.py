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
Device capability reporting and bounded device-data dumps.

Informational only: nothing in the solver depends on these functions.
"""

from typing import List

import numpy as np
from numba import cuda


# Hata ayıklama dökümünde host'a kopyalanacak en fazla eleman
DUMP_LIMIT = 16


def describe_devices() -> List[dict]:
    """
    Görünen CUDA cihazlarını listele.

    Dönüş:
    -----
    List[dict]
        Her cihaz için: id, name, compute_capability, free_mb, total_mb
        (CUDA yoksa boş liste)
    """
    if not cuda.is_available():
        return []

    devices = []
    for gpu in cuda.gpus:
        with gpu:
            free, total = cuda.current_context().get_memory_info()
        name = getattr(gpu, "name", "SIMULATOR")
        if isinstance(name, bytes):
            name = name.decode()
        devices.append({
            'id': gpu.id,
            'name': name,
            'compute_capability': tuple(gpu.compute_capability),
            'free_mb': free / (1024**2),
            'total_mb': total / (1024**2),
        })
    return devices


def print_device_report():
    """Cihaz bilgilerini tablo olarak yazdır."""
    devices = describe_devices()

    print(f"\n{'='*75}")
    print(f"{'GHOST-GMRES: CUDA Cihazları':<50}")
    print(f"{'='*75}")

    if not devices:
        print("✗ CUDA cihazı bulunamadı")
        return devices

    print(f"{'ID':<4} {'Cihaz':<32} {'CC':<8} {'Boş (MB)':<14} {'Toplam (MB)':<14}")
    print(f"{'─'*75}")
    for dev in devices:
        cc = "%d.%d" % dev['compute_capability']
        print(f"{dev['id']:<4} {dev['name']:<32} {cc:<8} "
              f"{dev['free_mb']:<14.1f} {dev['total_mb']:<14.1f}")
    return devices


def dump_device_prefix(array, count: int = DUMP_LIMIT, label: str = "array") -> str:
    """
    GPU dizisinin ilk en fazla `count` elemanını host'a kopyala ve biçimle.

    Sadece önek kopyalanır; büyük vektörlerde transfer sınırlı kalır.
    """
    if len(array.shape) != 1:
        raise ValueError(f"Sadece 1D diziler dökülebilir, shape={array.shape}")
    if count < 1:
        raise ValueError(f"count >= 1 olmalı, verilen: {count}")

    total = array.shape[0]
    n = min(count, total)
    prefix = array[:n].copy_to_host()
    body = np.array2string(prefix, precision=6, separator=", ")
    suffix = ", ..." if n < total else ""
    return f"{label}[0:{n}] / {total}: {body[:-1]}{suffix}]"
