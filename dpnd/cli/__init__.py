"""dpnd 命令行接口

CLI 按领域拆分为子模块，每个模块注册自己的命令到 main group。
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

import click

from dpnd import __version__
from dpnd.core.config import DEFAULT_CONFIG_FILE, Config, init_config
from dpnd.core.tools.registry import ToolRegistry
from dpnd.utils.logger import setup_logging


@dataclass
class CliState:
    """命令间共享的上下文；测试可预先注入 registry"""

    config: Config = field(default_factory=Config)
    manifest_path: Path | None = None
    registry: ToolRegistry | None = None


@click.group()
@click.version_option(version=__version__, prog_name="dpnd")
@click.option("--config", "config_path", default=DEFAULT_CONFIG_FILE, help="配置文件路径")
@click.option(
    "--manifest", "manifest_path", default=None,
    type=click.Path(dir_okay=False, path_type=Path),
    help="清单文件路径（默认在当前目录及上级目录查找）",
)
@click.pass_context
def main(ctx: click.Context, config_path: str, manifest_path: Path | None) -> None:
    """dpnd - 按清单拉取依赖项目"""
    state = ctx.ensure_object(CliState)
    state.config = init_config(config_path)
    setup_logging(level=state.config.log_level, json_output=state.config.log_json)
    state.manifest_path = manifest_path


# 注册各领域子命令
from dpnd.cli.cmd_install import register as _reg_install  # noqa: E402

_reg_install(main)
