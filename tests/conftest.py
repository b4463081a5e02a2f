"""测试全局配置与模拟工具。

将 `src` 目录加入 `sys.path`，以便在未打包安装时可直接导入包；
同时提供 `requests_mock` 夹具作为 Pushgateway 的测试替身，
以及每个用例独立的注册表与设置。
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Any, Iterator

import pytest
import requests_mock as requests_mock_lib

SRC_DIR = Path(__file__).resolve().parents[1] / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from stepsy_push.config import PushSettings  # noqa: E402
from stepsy_push.metrics.pushgateway import register_steps_gauge  # noqa: E402
from stepsy_push.metrics.registry import GaugeHandle, MetricRegistry  # noqa: E402

GATEWAY = "http://pushgw.test:9091"


@pytest.fixture
def requests_mock() -> Iterator[requests_mock_lib.Mocker]:
    """拦截所有 `requests` 调用，未注册的 URL 会直接报错。"""

    with requests_mock_lib.Mocker() as mock:
        yield mock


@pytest.fixture
def registry() -> MetricRegistry:
    """每个用例独立的注册表。"""

    return MetricRegistry()


@pytest.fixture
def steps_gauge(registry: MetricRegistry) -> GaugeHandle:
    """已在 `registry` 上登记的 `steps{device}` Gauge。"""

    return register_steps_gauge(registry)


@pytest.fixture
def make_settings():
    """构造指向测试 Pushgateway 的设置，可按需覆盖字段。"""

    def _make(**overrides: Any) -> PushSettings:
        data: dict = {"prometheus_push_url": GATEWAY}
        data.update(overrides)
        return PushSettings(**data)

    return _make


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """清除可能影响设置加载的环境变量。"""

    monkeypatch.delenv("PROM_PUSHGATEWAY_URL", raising=False)
    for field_name in PushSettings.model_fields:
        monkeypatch.delenv("STEPSY_" + field_name.upper(), raising=False)
