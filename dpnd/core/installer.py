"""安装编排器

按清单顺序逐个处理依赖，每个依赖得到且仅得到一个结果:

  1. target_dir = base_dir / target_root / name
  2. 工具未注册                     -> Failed(UnknownToolError)
  3. target_dir 不存在或为空目录      -> fetch -> Installed / Failed
  4. 已是该工具的检出:
       current_ref == version_ref   -> AlreadyUpToDate（不调用 fetch）
       否则                         -> fetch -> Installed / Failed
  5. 非空且无法识别                  -> Failed(TargetDirNotEmptyError)

单个依赖失败不影响其余依赖。编排器本身不删除、不修改 target_dir，
所有文件系统和网络操作都委托给拉取工具。严格串行执行：
工具会调用外部进程，并发使用它们占用的本地资源不安全。
"""

from __future__ import annotations

import logging
from collections.abc import Collection
from pathlib import Path

from dpnd.core.exceptions import (
    FetchFailedError,
    InstallError,
    TargetDirNotEmptyError,
    ToolError,
    UnknownToolError,
)
from dpnd.core.models import (
    DependencyEntry,
    EntryResult,
    EntryState,
    EntryStatus,
    InstallOutcome,
    InstallReport,
    Manifest,
)
from dpnd.core.tools.base import FetchTool, dir_is_empty
from dpnd.core.tools.registry import ToolRegistry

logger = logging.getLogger(__name__)


def _is_absent(target_dir: Path) -> bool:
    return not target_dir.exists() or dir_is_empty(target_dir)


class Installer:
    """依赖安装编排器"""

    def __init__(self, registry: ToolRegistry) -> None:
        self.registry = registry
        self._tools: dict[str, FetchTool] = {}

    def install(
        self,
        manifest: Manifest,
        *,
        base_dir: Path = Path("."),
        only: Collection[str] | None = None,
    ) -> InstallReport:
        """安装清单中的全部依赖，only 非空时只处理其中的依赖名

        Raises:
            InstallError: 目标根目录无法创建（此时不产生任何条目结果）
        """
        root = base_dir / manifest.target_root
        try:
            root.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise InstallError(f"无法创建目标根目录 {root}: {e}") from e

        report = InstallReport()
        for entry in manifest.entries:
            if only is not None and entry.name not in only:
                outcome = InstallOutcome.skipped("未选中")
            else:
                outcome = self._install_entry(entry, root / entry.name)
            self._log_outcome(entry, outcome)
            report.results.append(EntryResult(entry=entry, outcome=outcome))

        counts = report.summary()
        logger.info(
            "安装汇总: %d 已安装, %d 已是最新, %d 跳过, %d 失败",
            counts["installed"], counts["already_up_to_date"],
            counts["skipped"], counts["failed"],
        )
        return report

    def status(self, manifest: Manifest, *, base_dir: Path = Path(".")) -> list[EntryStatus]:
        """只读检查每个依赖的本地状态，不调用 fetch"""
        root = base_dir / manifest.target_root
        return [self._entry_status(entry, root / entry.name) for entry in manifest.entries]

    # ------------------------------------------------------------------
    # 内部实现
    # ------------------------------------------------------------------

    def _tool(self, tool_id: str) -> FetchTool | None:
        if tool_id not in self._tools:
            factory = self.registry.lookup(tool_id)
            if factory is None:
                return None
            self._tools[tool_id] = factory()
        return self._tools[tool_id]

    def _install_entry(self, entry: DependencyEntry, target_dir: Path) -> InstallOutcome:
        tool = self._tool(entry.tool_id)
        if tool is None:
            return InstallOutcome.failed(UnknownToolError(entry.tool_id))

        try:
            if _is_absent(target_dir):
                return self._fetch(tool, entry, target_dir)

            if not tool.is_installed(target_dir):
                return InstallOutcome.failed(TargetDirNotEmptyError(target_dir))

            current = tool.current_ref(target_dir)
            if current == entry.version_ref:
                return InstallOutcome.up_to_date()

            logger.info(
                "%s: 版本变化 %s -> %s", entry.name, current, entry.version_ref,
            )
            return self._fetch(tool, entry, target_dir)
        except TargetDirNotEmptyError as e:
            return InstallOutcome.failed(e)
        except ToolError as e:
            return InstallOutcome.failed(FetchFailedError(e))
        except OSError as e:
            # 名字过长、目录不可读等文件系统错误只影响当前依赖
            return InstallOutcome.failed(FetchFailedError(ToolError(f"访问 {target_dir} 失败: {e}")))

    @staticmethod
    def _fetch(tool: FetchTool, entry: DependencyEntry, target_dir: Path) -> InstallOutcome:
        tool.fetch(entry.location, entry.version_ref, target_dir)
        return InstallOutcome.installed()

    def _entry_status(self, entry: DependencyEntry, target_dir: Path) -> EntryStatus:
        tool = self._tool(entry.tool_id)
        if tool is None:
            return EntryStatus(entry, EntryState.UNKNOWN_TOOL)
        try:
            if _is_absent(target_dir):
                return EntryStatus(entry, EntryState.MISSING)
            if not tool.is_installed(target_dir):
                return EntryStatus(entry, EntryState.FOREIGN)
            current = tool.current_ref(target_dir)
        except (ToolError, OSError) as e:
            return EntryStatus(entry, EntryState.ERROR, message=str(e))
        if current == entry.version_ref:
            return EntryStatus(entry, EntryState.UP_TO_DATE, current_ref=current)
        return EntryStatus(entry, EntryState.DRIFTED, current_ref=current)

    @staticmethod
    def _log_outcome(entry: DependencyEntry, outcome: InstallOutcome) -> None:
        extra = {"entry": entry.name, "tool": entry.tool_id, "source_line": entry.source_line}
        if outcome.is_failure:
            logger.error(
                "%s (第 %d 行): %s", entry.name, entry.source_line, outcome.reason, extra=extra,
            )
        else:
            logger.info("%s: %s", entry.name, outcome.describe(), extra=extra)


def install(
    manifest: Manifest,
    registry: ToolRegistry,
    *,
    base_dir: Path = Path("."),
    only: Collection[str] | None = None,
) -> InstallReport:
    """便捷函数: 用给定注册表安装清单"""
    return Installer(registry).install(manifest, base_dir=base_dir, only=only)
