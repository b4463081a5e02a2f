"""设备标识。

标签值为 "<厂商> <型号>"，优先读取 DMI 信息，读不到时退回 `platform`。
"""

from __future__ import annotations

import platform
from pathlib import Path
from typing import Optional

DMI_DIR = Path("/sys/devices/virtual/dmi/id")


def device_label(manufacturer: str, model: str) -> str:
    """以单个空格拼接厂商与型号。"""

    return f"{manufacturer} {model}"


def _read_dmi(name: str, dmi_dir: Path) -> Optional[str]:
    try:
        value = (dmi_dir / name).read_text(encoding="utf-8").strip()
    except OSError:
        return None
    return value or None


def detect_device_label(dmi_dir: Path = DMI_DIR) -> str:
    """探测当前主机的设备标签。

    参数:
        dmi_dir: DMI 信息目录（测试时可替换）。

    返回值:
        str: 形如 "LENOVO 20XW" 的标签。

    副作用:
        读取文件系统。
    """

    manufacturer = _read_dmi("sys_vendor", dmi_dir) or platform.system() or "unknown"
    model = _read_dmi("product_name", dmi_dir) or platform.machine() or "unknown"
    return device_label(manufacturer, model)
