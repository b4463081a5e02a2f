"""Pushgateway 指标发布工具。

每次调用解析一次推送配置（地址、协议、认证方式），把设备实时步数写入
Gauge 后以 push-add 语义推送到 `<gateway>/metrics/job/stepsy_steps_live`。
推送失败只体现在返回的 `PushResult` 中，不会向调用方抛出异常。
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable, Dict, List, Optional, Tuple, Union

import requests  # type: ignore[import-untyped]
from prometheus_client import pushadd_to_gateway

from ..errors import TransportFailure
from .registry import GaugeHandle, MetricRegistry

if TYPE_CHECKING:
    from ..config import PushSettings

logger = logging.getLogger(__name__)

JOB_NAME = "stepsy_steps"
LIVE_SUFFIX = "_live"
GAUGE_NAME = "steps"
GAUGE_HELP = "Live step count"
DEVICE_LABEL = "device"
PLACEHOLDER_URL = "http://your-prometheus-pushgateway-url:9091"
DEFAULT_TIMEOUT_SECONDS = 10.0


class Scheme(str, enum.Enum):
    """传输协议。"""

    HTTP = "http"
    HTTPS = "https"


@dataclass(frozen=True)
class NoAuth:
    """不附带认证信息。"""

    def describe(self) -> Dict[str, str]:
        return {"mode": "none"}


@dataclass(frozen=True)
class BearerAuth:
    """Bearer Token 认证。"""

    token: str

    def describe(self) -> Dict[str, str]:
        return {"mode": "bearer", "token": "***"}


@dataclass(frozen=True)
class BasicAuth:
    """HTTP Basic 认证。"""

    username: str
    password: str

    def describe(self) -> Dict[str, str]:
        return {"mode": "basic", "username": self.username, "password": "***"}


AuthMode = Union[NoAuth, BearerAuth, BasicAuth]


def resolve_auth(
    bearer_token: Optional[str], username: Optional[str], password: Optional[str]
) -> AuthMode:
    """按优先级选择认证方式：Bearer > Basic > 无。

    参数:
        bearer_token: Bearer Token；非空时直接选用，忽略用户名/密码。
        username: Basic 认证用户名。
        password: Basic 认证密码。

    返回值:
        AuthMode: `BearerAuth`/`BasicAuth`/`NoAuth` 之一。

    副作用:
        无（纯函数）。
    """

    if bearer_token:
        return BearerAuth(bearer_token)
    if username and password:
        return BasicAuth(username, password)
    return NoAuth()


def resolve_scheme(use_ssl: bool) -> Scheme:
    """`use_ssl` 为真时强制 HTTPS，否则保持传输默认的 HTTP。"""

    return Scheme.HTTPS if use_ssl else Scheme.HTTP


@dataclass(frozen=True)
class PushConfig:
    """单次调用的推送配置。

    属性:
        endpoint_url: Pushgateway 地址（原样保存，不做校验）。
        job_name: 注册时使用的 job 名，固定为 `stepsy_steps`。
        scheme: 协议（只会升级为 HTTPS，不会降级）。
        auth: 认证方式。
        timeout_seconds: 单次请求超时（秒）。
    """

    endpoint_url: str
    job_name: str = JOB_NAME
    scheme: Scheme = Scheme.HTTP
    auth: AuthMode = NoAuth()
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS

    @property
    def is_placeholder(self) -> bool:
        """地址是否仍为未配置时的占位 URL。"""

        return self.endpoint_url.strip() == PLACEHOLDER_URL

    def describe(self) -> Dict[str, Any]:
        """返回可打印的配置摘要（敏感字段已脱敏）。"""

        return {
            "endpoint_url": self.endpoint_url,
            "gateway": gateway_address(self),
            "job": live_job_name(self.job_name),
            "scheme": self.scheme.value,
            "auth": self.auth.describe(),
            "timeout_seconds": self.timeout_seconds,
        }


def build_push_config(settings: "PushSettings") -> PushConfig:
    """根据设置解析推送配置。

    参数:
        settings: 本次调用读取到的 `PushSettings`。

    返回值:
        PushConfig: 协议与认证方式均已确定的配置。

    副作用:
        无；非法 URL 不在此处报错，只会在推送时失败。
    """

    return PushConfig(
        endpoint_url=settings.prometheus_push_url,
        job_name=JOB_NAME,
        scheme=resolve_scheme(settings.prometheus_use_ssl),
        auth=resolve_auth(
            settings.prometheus_bearer_token,
            settings.prometheus_auth_username,
            settings.prometheus_auth_password,
        ),
        timeout_seconds=settings.prometheus_timeout_seconds,
    )


def gateway_address(config: PushConfig) -> str:
    """计算实际请求的 Pushgateway 基础地址。

    参数:
        config: 推送配置。

    返回值:
        str: 带协议前缀的地址。无协议前缀时补上 `config.scheme`；
            `http://` 在 HTTPS 下升级为 `https://`；`https://` 永不降级。

    副作用:
        无。
    """

    url = config.endpoint_url.strip()
    lowered = url.lower()
    if lowered.startswith("https://"):
        return url
    if lowered.startswith("http://"):
        if config.scheme is Scheme.HTTPS:
            return "https://" + url[len("http://") :]
        return url
    return f"{config.scheme.value}://{url}"


def live_job_name(job_name: str = JOB_NAME) -> str:
    """实时推送在线路上使用的 job 名（追加 `_live` 后缀）。"""

    return job_name + LIVE_SUFFIX


def make_request_handler(config: PushConfig) -> Callable[..., Callable[[], None]]:
    """构建基于 `requests` 的 `prometheus_client` 推送 handler。

    参数:
        config: 推送配置，提供认证方式与超时。

    返回值:
        callable: 符合 `prometheus_client` handler 协议的工厂，
            返回的可调用对象执行真正的 HTTP 请求。

    副作用:
        调用时发起网络请求；任何请求异常或非 2xx 状态统一转为 `TransportFailure`。
    """

    def handler(
        url: str,
        method: str,
        timeout: Optional[float],
        headers: List[Tuple[str, str]],
        data: bytes,
    ) -> Callable[[], None]:
        def handle() -> None:
            req_headers = dict(headers)
            auth = None
            if isinstance(config.auth, BearerAuth):
                req_headers["Authorization"] = f"Bearer {config.auth.token}"
            elif isinstance(config.auth, BasicAuth):
                auth = requests.auth.HTTPBasicAuth(
                    config.auth.username, config.auth.password
                )
            try:
                resp = requests.request(
                    method,
                    url,
                    data=data,
                    headers=req_headers,
                    auth=auth,
                    timeout=timeout,
                )
                resp.raise_for_status()
            except (requests.RequestException, OSError, ValueError) as exc:
                raise TransportFailure(f"{method} {url} failed: {exc}") from exc

        return handle

    return handler


class PushOutcome(str, enum.Enum):
    """推送结论。"""

    SUCCESS = "success"
    FAILURE = "failure"
    NOT_CONFIGURED = "not_configured"


@dataclass
class PushResult:
    """一次推送的结果。

    属性:
        outcome: 推送结论。
        job: 线路上的 job 名。
        device: 设备标签值。
        value: 写入 Gauge 的数值。
        error: 失败描述（成功时为 None）。
    """

    outcome: PushOutcome
    job: str
    device: str
    value: float
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.outcome is PushOutcome.SUCCESS

    def to_dict(self) -> Dict[str, Any]:
        return {
            "outcome": self.outcome.value,
            "job": self.job,
            "device": self.device,
            "value": self.value,
            "error": self.error,
        }


def register_steps_gauge(registry: MetricRegistry) -> GaugeHandle:
    """在注册表上登记 `steps{device}` Gauge。"""

    return registry.register_gauge(GAUGE_NAME, GAUGE_HELP, (DEVICE_LABEL,))


def push_live_value(
    registry: MetricRegistry,
    gauge: GaugeHandle,
    config: PushConfig,
    device: str,
    value: int | float,
) -> PushResult:
    """写入设备当前值并向 Pushgateway 推送一次。

    参数:
        registry: 持有 Gauge 的注册表，整体快照会被推送。
        gauge: `steps` Gauge 句柄。
        config: 本次调用的推送配置。
        device: 设备标签，形如 "<厂商> <型号>"。
        value: 步数（整数会被转换为浮点数）。

    返回值:
        PushResult: 成功、失败或未配置；不会抛出网络相关异常。

    副作用:
        修改 Gauge 的取值；可能发起网络请求到 Pushgateway。
        失败不会回滚已写入的 Gauge 值，也不会重试。
    """

    job = live_job_name(config.job_name)
    gauge.set((device,), value)
    result = PushResult(PushOutcome.SUCCESS, job=job, device=device, value=float(value))

    if config.is_placeholder:
        logger.debug("push url is the placeholder, skipping push for %s", device)
        result.outcome = PushOutcome.NOT_CONFIGURED
        return result

    gateway = gateway_address(config)
    logger.debug("pushing %s=%s for %s to %s", gauge.name, value, device, gateway)
    try:
        pushadd_to_gateway(
            gateway,
            job=job,
            registry=registry.collector_registry,
            timeout=config.timeout_seconds,
            handler=make_request_handler(config),
        )
    except TransportFailure as exc:
        result.outcome = PushOutcome.FAILURE
        result.error = str(exc)
    except (ValueError, OSError) as exc:
        # 地址在交给 handler 之前就无法解析
        result.outcome = PushOutcome.FAILURE
        result.error = f"push to {gateway} failed: {exc}"
    return result
