"""清单文件定位与读取

从起始目录开始，向上逐级查找清单文件；找到的清单所在目录即项目根目录，
目标根目录相对于它解析。
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from dpnd.core.exceptions import ManifestNotFoundError, ManifestReadError
from dpnd.core.models import Manifest
from dpnd.core.parser import parse

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LoadedManifest:
    manifest: Manifest
    path: Path

    @property
    def base_dir(self) -> Path:
        return self.path.parent


def find_manifest(start: Path, manifest_name: str) -> Path:
    """返回 start 或其最近的上级目录中的清单路径

    Raises:
        ManifestNotFoundError: 一直找到文件系统根目录都不存在
    """
    start = start.resolve()
    for directory in (start, *start.parents):
        candidate = directory / manifest_name
        if candidate.is_file():
            logger.debug("找到清单: %s", candidate)
            return candidate
    raise ManifestNotFoundError(manifest_name, start)


def read_manifest(path: Path) -> str:
    try:
        return path.read_bytes().decode("utf-8")
    except UnicodeDecodeError as e:
        raise ManifestReadError(path, f"不是 UTF-8 编码 ({e})") from e
    except OSError as e:
        raise ManifestReadError(path, str(e)) from e


def load_manifest(path: Path) -> LoadedManifest:
    """读取并解析清单文件，解析错误原样抛出"""
    text = read_manifest(path)
    manifest = parse(text)
    logger.info("已加载清单 %s: %d 个依赖", path, len(manifest.entries))
    return LoadedManifest(manifest=manifest, path=path)
