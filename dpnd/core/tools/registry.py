"""拉取工具注册表

工具名 -> 工厂函数的映射，由 CLI 入口在启动时填充一次。
编排器通过 lookup() 获取工厂，未注册的工具名返回 None，
由编排器转换为单条依赖的失败结果。
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from dpnd.core.tools.base import ToolFactory

if TYPE_CHECKING:
    from dpnd.core.config import Config

logger = logging.getLogger(__name__)


class ToolRegistry:
    """拉取工具注册表"""

    def __init__(self) -> None:
        self._factories: dict[str, ToolFactory] = {}

    def register(self, tool_id: str, factory: ToolFactory, *, replace: bool = False) -> None:
        if not tool_id or any(c.isspace() for c in tool_id):
            raise ValueError(f"无效的工具名: {tool_id!r}")
        if tool_id in self._factories and not replace:
            raise ValueError(f"工具已注册: {tool_id}")
        self._factories[tool_id] = factory
        logger.debug("拉取工具已注册: %s", tool_id)

    def lookup(self, tool_id: str) -> ToolFactory | None:
        return self._factories.get(tool_id)

    def tool_ids(self) -> list[str]:
        return sorted(self._factories)


def default_registry(config: Config | None = None) -> ToolRegistry:
    """内置工具注册表: git、tar"""
    from dpnd.core.config import get_config
    from dpnd.core.tools.git import GitTool
    from dpnd.core.tools.tar import TarTool

    cfg = config or get_config()
    registry = ToolRegistry()
    registry.register(GitTool.tool_id, lambda: GitTool(git_bin=cfg.git_bin))
    registry.register(TarTool.tool_id, TarTool)
    return registry
