"""拉取工具抽象 - Strategy Pattern

每种拉取机制（git、归档包 ...）实现一个 FetchTool 子类，
编排器只依赖本接口，新增机制无需修改编排器。
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable
from pathlib import Path

from dpnd.core.exceptions import TargetDirNotEmptyError


def dir_is_empty(path: Path) -> bool:
    """path 是否为空目录（不存在不算）"""
    return path.is_dir() and not any(path.iterdir())


class FetchTool(ABC):
    """拉取工具公共接口"""

    tool_id: str = ""

    @abstractmethod
    def is_installed(self, target_dir: Path) -> bool:
        """target_dir 是否存在且是本工具管理的检出"""

    @abstractmethod
    def current_ref(self, target_dir: Path) -> str:
        """返回当前检出的版本引用

        Raises:
            ToolError: 无法读取检出状态
        """

    @abstractmethod
    def fetch(self, location: str, version_ref: str, target_dir: Path) -> None:
        """将 location 的 version_ref 版本落地到 target_dir

        target_dir 不存在时自动创建（含上级目录）；
        已是本工具的检出时就地切换版本。

        Raises:
            TargetDirNotEmptyError: target_dir 非空且不是本工具的检出
            ToolError: 拉取或切换版本失败
        """

    def ensure_fetchable(self, target_dir: Path) -> None:
        """拒绝覆盖无法识别的非空目录"""
        if not target_dir.exists() or dir_is_empty(target_dir):
            return
        if not self.is_installed(target_dir):
            raise TargetDirNotEmptyError(target_dir)


ToolFactory = Callable[[], FetchTool]
