"""数据模型定义"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from dpnd.core.exceptions import DpndError, DuplicateEntryNameError, ParseError

# =========================================================================
# 清单模型
# =========================================================================


@dataclass(frozen=True)
class DependencyEntry:
    """清单中的单个依赖

    name 同时是本地目录名和诊断信息中的标识；
    version_ref 对编排器不透明，由具体工具解释（tag、分支、commit）。
    source_line 仅用于报错。
    """

    name: str
    tool_id: str
    location: str
    version_ref: str
    source_line: int = 0


@dataclass(frozen=True)
class Manifest:
    """解析后的清单: 目标根目录 + 有序依赖列表"""

    target_root: Path
    entries: tuple[DependencyEntry, ...] = ()

    def __post_init__(self) -> None:
        if not str(self.target_root) or str(self.target_root) == ".":
            raise ParseError("目标根目录不能为空")
        seen: dict[str, int] = {}
        for entry in self.entries:
            if entry.name in seen:
                raise DuplicateEntryNameError(
                    entry.name, seen[entry.name], entry.source_line,
                )
            seen[entry.name] = entry.source_line

    def get(self, name: str) -> DependencyEntry | None:
        for entry in self.entries:
            if entry.name == name:
                return entry
        return None

    def names(self) -> list[str]:
        return [e.name for e in self.entries]


# =========================================================================
# 安装结果
# =========================================================================


class OutcomeKind(str, Enum):
    INSTALLED = "installed"
    ALREADY_UP_TO_DATE = "already_up_to_date"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass(frozen=True)
class InstallOutcome:
    """单个依赖的安装结果

    部分失败是常规路径，因此以值而非异常表示:
    Failed 携带错误对象，Skipped 携带原因。
    """

    kind: OutcomeKind
    reason: str = ""
    error: DpndError | None = None

    @classmethod
    def installed(cls) -> InstallOutcome:
        return cls(OutcomeKind.INSTALLED)

    @classmethod
    def up_to_date(cls) -> InstallOutcome:
        return cls(OutcomeKind.ALREADY_UP_TO_DATE)

    @classmethod
    def skipped(cls, reason: str) -> InstallOutcome:
        return cls(OutcomeKind.SKIPPED, reason=reason)

    @classmethod
    def failed(cls, error: DpndError) -> InstallOutcome:
        return cls(OutcomeKind.FAILED, reason=str(error), error=error)

    @property
    def is_failure(self) -> bool:
        return self.kind == OutcomeKind.FAILED

    def describe(self) -> str:
        """单行人类可读描述"""
        if self.kind == OutcomeKind.INSTALLED:
            return "已安装"
        if self.kind == OutcomeKind.ALREADY_UP_TO_DATE:
            return "已是最新"
        if self.kind == OutcomeKind.SKIPPED:
            return f"已跳过: {self.reason}"
        return f"失败: {self.reason}"


@dataclass(frozen=True)
class EntryResult:
    entry: DependencyEntry
    outcome: InstallOutcome


@dataclass
class InstallReport:
    """一次安装运行的汇总，按清单顺序"""

    results: list[EntryResult] = field(default_factory=list)

    @property
    def failed(self) -> list[EntryResult]:
        return [r for r in self.results if r.outcome.is_failure]

    @property
    def ok(self) -> bool:
        return not self.failed

    def summary(self) -> dict[str, int]:
        counts = {k.value: 0 for k in OutcomeKind}
        for r in self.results:
            counts[r.outcome.kind.value] += 1
        return counts

    def pairs(self) -> list[tuple[str, OutcomeKind]]:
        return [(r.entry.name, r.outcome.kind) for r in self.results]


# =========================================================================
# 本地状态（status 命令）
# =========================================================================


class EntryState(str, Enum):
    MISSING = "missing"
    UP_TO_DATE = "up_to_date"
    DRIFTED = "drifted"
    FOREIGN = "foreign"
    UNKNOWN_TOOL = "unknown_tool"
    ERROR = "error"


@dataclass(frozen=True)
class EntryStatus:
    entry: DependencyEntry
    state: EntryState
    current_ref: str = ""
    message: str = ""
