"""推送设置的 Schema 与加载器。

设置项与宿主应用的偏好键保持一致，每次调用都重新读取：
先读可选的 YAML 文件，再用环境变量覆盖。

环境变量:
    STEPSY_<字段名大写>，例如 `STEPSY_PROMETHEUS_PUSH_URL`；
    推送地址另外兼容 `PROM_PUSHGATEWAY_URL`（优先级低于前者）。
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .errors import SettingsError
from .metrics.pushgateway import DEFAULT_TIMEOUT_SECONDS, PLACEHOLDER_URL

ENV_PREFIX = "STEPSY_"
FALLBACK_URL_ENV = "PROM_PUSHGATEWAY_URL"
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class PushSettings(BaseModel):
    """推送设置（禁止未知键）。

    参数:
        prometheus_push_url: Pushgateway 地址；未配置时为占位 URL。
        prometheus_auth_username: Basic 认证用户名。
        prometheus_auth_password: Basic 认证密码。
        prometheus_bearer_token: Bearer Token，优先于 Basic。
        prometheus_use_ssl: 是否强制 HTTPS。
        prometheus_timeout_seconds: 单次推送超时（秒）。
        device_name: 覆盖自动探测的设备标签。
        log_level: 日志级别。
    """

    model_config = ConfigDict(extra="forbid")

    prometheus_push_url: str = PLACEHOLDER_URL
    prometheus_auth_username: str = ""
    prometheus_auth_password: str = ""
    prometheus_bearer_token: str = ""
    prometheus_use_ssl: bool = False
    prometheus_timeout_seconds: float = Field(DEFAULT_TIMEOUT_SECONDS, gt=0)
    device_name: Optional[str] = None
    log_level: str = "INFO"

    @field_validator("log_level")
    @classmethod
    def _check_level(cls, value: str) -> str:
        level = value.upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"unknown log level: {value}")
        return level


def _read_yaml(path: Path) -> Dict[str, Any]:
    """读取 YAML 文件为字典。

    参数:
        path: YAML 文件路径。

    返回值:
        dict: 解析后的字典（空文件返回空字典）。

    副作用:
        文件 IO；内容不是映射时抛出 `SettingsError`。
    """

    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        raise SettingsError(f"invalid settings file {path}: {exc}") from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise SettingsError(f"settings file {path} must contain a mapping")
    return dict(data)


def _env_overrides(env: Mapping[str, str]) -> Dict[str, str]:
    """从环境变量中提取覆盖项。"""

    out: Dict[str, str] = {}
    url = env.get(FALLBACK_URL_ENV)
    if url:
        out["prometheus_push_url"] = url
    for field_name in PushSettings.model_fields:
        key = ENV_PREFIX + field_name.upper()
        if key in env:
            out[field_name] = env[key]
    return out


def load_settings(
    path: Optional[Path] = None, env: Optional[Mapping[str, str]] = None
) -> PushSettings:
    """加载推送设置。

    参数:
        path: 可选的 YAML 文件路径；文件不存在时视为全部使用默认值。
        env: 环境变量映射，缺省为 `os.environ`。

    返回值:
        PushSettings: 校验通过的设置。

    副作用:
        文件 IO；校验失败抛出 `SettingsError`。
    """

    data: Dict[str, Any] = {}
    if path is not None and path.exists():
        data.update(_read_yaml(path))
    data.update(_env_overrides(os.environ if env is None else env))
    try:
        return PushSettings(**data)
    except ValidationError as exc:
        raise SettingsError(str(exc)) from exc
