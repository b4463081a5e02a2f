"""命令行入口（按需触发一次推送）。

示例:
    stepsy-push push --steps 1234 --config stepsy.yaml
    stepsy-push show-config --config stepsy.yaml
"""

from __future__ import annotations

import json as _json
import logging
from pathlib import Path
from typing import Optional

import typer

from .config import PushSettings, load_settings
from .errors import SettingsError
from .metrics.pushgateway import build_push_config
from .service import PushService

app = typer.Typer(help="Stepsy / Pushgateway 实时步数推送 CLI")


def _load_or_exit(config: Optional[str]) -> PushSettings:
    """加载设置，非法时打印错误并以退出码 2 结束。"""

    try:
        return load_settings(Path(config) if config else None)
    except SettingsError as exc:
        typer.echo(f"invalid settings: {exc}", err=True)
        raise typer.Exit(code=2)


@app.command()
def push(
    steps: int = typer.Option(..., "--steps", help="当前步数"),
    live: bool = typer.Option(True, "--live/--no-live", help="是否为实时更新"),
    config: Optional[str] = typer.Option(None, "--config", help="设置 YAML 路径"),
    device: Optional[str] = typer.Option(
        None, "--device", help="设备标签（默认自动探测）"
    ),
) -> None:
    """推送一次实时步数。

    参数:
        steps: 当前步数。
        live: 实时标记。
        config: 设置文件路径；缺省仅使用默认值与环境变量。
        device: 覆盖设备标签。

    返回值:
        无；以 JSON 打印推送结果。推送失败同样以 0 退出。

    副作用:
        网络请求到 Pushgateway；设置非法时以退出码 2 结束。
    """

    settings = _load_or_exit(config)
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    result = PushService().handle(steps, is_live=live, settings=settings, device=device)
    typer.echo(_json.dumps(result.to_dict(), ensure_ascii=False))


@app.command("show-config")
def show_config(
    config: Optional[str] = typer.Option(None, "--config", help="设置 YAML 路径"),
) -> None:
    """打印解析后的推送配置（敏感字段脱敏）。"""

    settings = _load_or_exit(config)
    typer.echo(_json.dumps(build_push_config(settings).describe(), ensure_ascii=False))


def main() -> None:
    """CLI 入口包装。"""

    app()


if __name__ == "__main__":
    main()
