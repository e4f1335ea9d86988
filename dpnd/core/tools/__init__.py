"""拉取工具

- base.py: FetchTool 抽象接口
- registry.py: 工具名 -> 工厂 注册表
- git.py: git 客户端拉取
- tar.py: tar 归档包拉取
"""

from dpnd.core.tools.base import FetchTool, ToolFactory
from dpnd.core.tools.registry import ToolRegistry, default_registry

__all__ = [
    "FetchTool",
    "ToolFactory",
    "ToolRegistry",
    "default_registry",
]
