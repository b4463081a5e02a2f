"""Stepsy 步数推送包。

把设备的实时步数以 Gauge 形式推送到 Prometheus Pushgateway，
每次调用仅推送一次，不做重试与排队。
"""

__all__ = ["__version__", "get_version"]

__version__ = "0.1.0"


def get_version() -> str:
    """返回当前包版本号。

    返回值:
        str: 版本号字符串，例如 "0.1.0"。
    副作用:
        无副作用，仅读取内置常量。
    """

    return __version__
