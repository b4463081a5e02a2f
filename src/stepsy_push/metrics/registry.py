"""进程内指标注册表。

在 `prometheus_client.CollectorRegistry` 之上做一层显式持有的封装：
注册表由调用方创建并传入推送流程，不依赖全局默认注册表。
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Dict, List, Sequence, Tuple

from prometheus_client import CollectorRegistry, Gauge

from ..errors import DuplicateMetricError, LabelArityError

LabelValues = Tuple[str, ...]


@dataclass
class GaugeHandle:
    """已注册 Gauge 的句柄。

    属性:
        name: 指标名，在注册表内唯一。
        help: 说明文本，仅用于展示。
        label_keys: 标签键（注册时固定、有序）。
        gauge: 底层 `prometheus_client.Gauge`。
    """

    name: str
    help: str
    label_keys: Tuple[str, ...]
    gauge: Gauge

    def set(self, label_values: Sequence[str], value: float) -> None:
        """写入（覆盖）指定标签组合的当前值。

        参数:
            label_values: 与 `label_keys` 一一对应的标签值。
            value: 数值；整数会被转换为浮点数。

        返回值:
            None。

        副作用:
            覆盖该标签组合的旧值，其他标签组合不受影响；
            标签个数不符时抛出 `LabelArityError`。
        """

        if len(label_values) != len(self.label_keys):
            raise LabelArityError(self.name, len(self.label_keys), len(label_values))
        self.gauge.labels(*label_values).set(float(value))

    def samples(self) -> List[Tuple[LabelValues, float]]:
        """返回当前所有标签组合及其数值（顺序不保证）。"""

        out: List[Tuple[LabelValues, float]] = []
        for metric in self.gauge.collect():
            for sample in metric.samples:
                if sample.name != self.name:
                    continue
                key = tuple(sample.labels[k] for k in self.label_keys)
                out.append((key, float(sample.value)))
        return out


class MetricRegistry:
    """显式持有的指标注册表。

    参数:
        collector_registry: 可选的底层注册表；缺省新建一个独立实例，
            不会污染 `prometheus_client.REGISTRY`。
    """

    def __init__(self, collector_registry: CollectorRegistry | None = None) -> None:
        self.collector_registry = collector_registry or CollectorRegistry()
        self._gauges: Dict[str, GaugeHandle] = {}
        self._lock = threading.Lock()

    def register_gauge(
        self, name: str, help: str, label_keys: Sequence[str]
    ) -> GaugeHandle:
        """注册一个带标签的 Gauge。

        参数:
            name: 指标名。
            help: 说明文本。
            label_keys: 标签键列表。

        返回值:
            GaugeHandle: 新注册的句柄。

        副作用:
            向底层注册表登记；同名重复注册抛出 `DuplicateMetricError`。
        """

        keys = tuple(label_keys)
        with self._lock:
            if name in self._gauges:
                raise DuplicateMetricError(f"gauge already registered: {name}")
            try:
                gauge = Gauge(
                    name, help, labelnames=keys, registry=self.collector_registry
                )
            except ValueError as exc:
                # 底层注册表里已有同名时间序列
                raise DuplicateMetricError(str(exc)) from exc
            handle = GaugeHandle(name=name, help=help, label_keys=keys, gauge=gauge)
            self._gauges[name] = handle
            return handle

    def get(self, name: str) -> GaugeHandle:
        """按名称获取句柄，不存在时抛出 KeyError。"""

        with self._lock:
            if name not in self._gauges:
                raise KeyError(f"gauge not registered: {name}")
            return self._gauges[name]

    def snapshot(self, name: str) -> List[Tuple[LabelValues, float]]:
        """返回指定 Gauge 的当前取值快照。

        参数:
            name: 指标名。

        返回值:
            list: `(标签值元组, 数值)` 列表，顺序不保证稳定。

        副作用:
            无。
        """

        return self.get(name).samples()
