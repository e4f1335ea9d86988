"""dpnd - 基于清单文件的依赖拉取工具"""

__version__ = "0.3.0"
