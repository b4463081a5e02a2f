"""异常类型。

注册表层的错误（重复注册、标签个数不符）属于编码缺陷，应在初始化时直接抛出；
网络/认证类错误只在推送内部出现，最终被转换为失败结果而不会向外传播。
"""

from __future__ import annotations


class StepsyPushError(Exception):
    """本包所有异常的基类。"""


class DuplicateMetricError(StepsyPushError):
    """同一注册表内重复注册同名指标。"""


class LabelArityError(StepsyPushError):
    """`set` 时给出的标签值个数与注册时的标签键个数不一致。"""

    def __init__(self, name: str, expected: int, got: int) -> None:
        super().__init__(
            f"gauge {name!r} expects {expected} label value(s), got {got}"
        )
        self.name = name
        self.expected = expected
        self.got = got


class SettingsError(StepsyPushError):
    """配置文件或环境变量无法解析/校验失败。"""


class TransportFailure(StepsyPushError):
    """一次推送失败（连接、超时、DNS、TLS、非 2xx 或认证被拒）。"""
