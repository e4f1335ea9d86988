"""集中配置管理

支持从 YAML 文件加载 + 环境变量覆盖，缺失文件时使用默认值。
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field

from dpnd.utils.yaml_io import load_yaml

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = ".dpnd.yml"


@dataclass
class Config:
    """全局配置"""

    # 清单
    manifest_name: str = "dpnd.txt"

    # 工具
    git_bin: str = "git"

    # 日志
    log_level: str = "INFO"
    log_json: bool = False

    # 自定义扩展 (放不到字段里的配置项)
    extra: dict = field(default_factory=dict)

    @classmethod
    def from_file(cls, path: str = DEFAULT_CONFIG_FILE) -> Config:
        """从 YAML 文件加载配置，不存在则返回默认"""
        data = load_yaml(path)
        known = {f.name for f in cls.__dataclass_fields__.values()} - {"extra"}
        matched = {k: v for k, v in data.items() if k in known}
        extra = {k: v for k, v in data.items() if k not in known}
        cfg = cls(**matched)
        cfg.extra = extra
        cfg.apply_env()
        return cfg

    def apply_env(self) -> None:
        """环境变量优先于配置文件"""
        level = os.getenv("DPND_LOG_LEVEL")
        if level:
            self.log_level = level
        if os.getenv("DPND_LOG_JSON", "") == "1":
            self.log_json = True


# 全局单例，首次 import 时不加载文件；由 CLI 入口显式初始化
_current: Config | None = None


def get_config() -> Config:
    """获取当前配置（未初始化则返回默认值）"""
    global _current  # noqa: PLW0603
    if _current is None:
        _current = Config()
    return _current


def init_config(path: str = DEFAULT_CONFIG_FILE) -> Config:
    """从文件初始化全局配置"""
    global _current  # noqa: PLW0603
    _current = Config.from_file(path)
    logger.debug("配置已加载: %s", path)
    return _current
