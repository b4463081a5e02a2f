"""单次推送调用。

流程：读取设置 → 解析推送配置 → 写入设备当前步数 → 推送一次 → 记录结果。
推送本身不写结果日志，由调用方通过 `log_result` 决定如何记录。
"""

from __future__ import annotations

import logging
from concurrent.futures import Executor, Future
from pathlib import Path
from typing import Optional

from .config import PushSettings, load_settings
from .device import detect_device_label
from .metrics.pushgateway import (
    PushOutcome,
    PushResult,
    build_push_config,
    push_live_value,
    register_steps_gauge,
)
from .metrics.registry import MetricRegistry

logger = logging.getLogger(__name__)


def log_result(result: PushResult) -> None:
    """按推送结论输出一条日志。"""

    if result.outcome is PushOutcome.SUCCESS:
        logger.info(
            "Pushed live steps (%s) to Pushgateway job %s with device name: %s",
            result.value,
            result.job,
            result.device,
        )
    elif result.outcome is PushOutcome.NOT_CONFIGURED:
        logger.info("Pushgateway url not configured, skipped push for %s", result.device)
    else:
        logger.warning(
            "Failed to push live steps to Pushgateway for %s: %s",
            result.device,
            result.error,
        )


class PushService:
    """持有注册表与 `steps` Gauge 的推送服务。

    参数:
        registry: 可选注册表；缺省新建。长驻宿主可复用同一实例，
            同一设备的值会被覆盖而不会累积。
        settings_path: 可选的设置文件路径，每次调用都重新读取。
    """

    def __init__(
        self,
        registry: Optional[MetricRegistry] = None,
        settings_path: Optional[Path] = None,
    ) -> None:
        self.registry = registry or MetricRegistry()
        self.gauge = register_steps_gauge(self.registry)
        self.settings_path = settings_path

    def handle(
        self,
        steps: int,
        is_live: bool = True,
        settings: Optional[PushSettings] = None,
        device: Optional[str] = None,
    ) -> PushResult:
        """执行一次推送调用。

        参数:
            steps: 当前步数。
            is_live: 触发方传入的实时标记（只记录，不改变行为）。
            settings: 预先加载的设置；缺省从 `settings_path`/环境变量读取。
            device: 设备标签；缺省取设置中的 `device_name`，再退回自动探测。

        返回值:
            PushResult: 推送结果；网络与认证失败不会抛出。

        副作用:
            网络请求与日志输出；设置非法时抛出 `SettingsError`。
        """

        if settings is None:
            settings = load_settings(self.settings_path)
        config = build_push_config(settings)
        label = device or settings.device_name or detect_device_label()
        logger.debug("invocation steps=%s live=%s device=%s", steps, is_live, label)
        result = push_live_value(self.registry, self.gauge, config, label, steps)
        log_result(result)
        return result

    def submit(
        self,
        executor: Executor,
        steps: int,
        is_live: bool = True,
        settings: Optional[PushSettings] = None,
        device: Optional[str] = None,
    ) -> "Future[PushResult]":
        """把一次调用派发到执行器，避免阻塞调用方。"""

        return executor.submit(self.handle, steps, is_live, settings, device)
