"""CLI：依赖安装命令"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import click

from dpnd.core.exceptions import DpndError
from dpnd.core.installer import Installer
from dpnd.core.manifest_io import LoadedManifest, find_manifest, load_manifest
from dpnd.core.models import EntryState
from dpnd.core.tools.registry import ToolRegistry, default_registry

if TYPE_CHECKING:
    from dpnd.cli import CliState

_STATE_LABELS = {
    EntryState.MISSING: "未安装",
    EntryState.UP_TO_DATE: "已是最新",
    EntryState.DRIFTED: "版本不一致",
    EntryState.FOREIGN: "目录被占用",
    EntryState.UNKNOWN_TOOL: "未知工具",
    EntryState.ERROR: "检查失败",
}


def register(group: click.Group) -> None:
    group.add_command(install)
    group.add_command(status)


def _registry(state: CliState) -> ToolRegistry:
    return state.registry or default_registry(state.config)


def _load(state: CliState) -> LoadedManifest:
    """定位并解析清单，失败时转为 ClickException（退出码 1）"""
    try:
        path = state.manifest_path or find_manifest(Path.cwd(), state.config.manifest_name)
        return load_manifest(path)
    except DpndError as e:
        raise click.ClickException(f"[{e.code}] {e}") from e


@click.command()
@click.argument("names", nargs=-1)
@click.pass_context
def install(ctx: click.Context, names: tuple[str, ...]) -> None:
    """安装清单中的依赖（可只指定部分依赖名）"""
    state: CliState = ctx.obj
    loaded = _load(state)

    only = None
    if names:
        unknown = [n for n in names if loaded.manifest.get(n) is None]
        if unknown:
            raise click.BadParameter(
                f"清单中不存在: {', '.join(unknown)}", param_hint="NAMES",
            )
        only = set(names)

    try:
        report = Installer(_registry(state)).install(
            loaded.manifest, base_dir=loaded.base_dir, only=only,
        )
    except DpndError as e:
        raise click.ClickException(f"[{e.code}] {e}") from e

    for r in report.results:
        click.echo(f"  {r.entry.name:20s} {r.outcome.describe()}")

    counts = report.summary()
    click.echo(
        f"已安装: {counts['installed']}  已是最新: {counts['already_up_to_date']}  "
        f"跳过: {counts['skipped']}  失败: {counts['failed']}"
    )
    if not report.ok:
        ctx.exit(1)


@click.command()
@click.pass_obj
def status(state: CliState) -> None:
    """查看清单中各依赖的本地状态（不拉取）"""
    loaded = _load(state)
    statuses = Installer(_registry(state)).status(loaded.manifest, base_dir=loaded.base_dir)
    if not statuses:
        click.echo("清单中没有依赖。")
        return
    for s in statuses:
        label = _STATE_LABELS[s.state]
        detail = ""
        if s.state == EntryState.DRIFTED:
            detail = f" (当前 {s.current_ref}，清单 {s.entry.version_ref})"
        elif s.message:
            detail = f" ({s.message})"
        click.echo(f"  {s.entry.name:20s} [{s.entry.tool_id}] {label}{detail}")
