"""归档包拉取工具

location 为 http(s) URL 或本地 tar 文件路径，其中的 "{version}" 会被替换为
版本引用。解压到同级临时目录，写入标记文件后整体替换 target_dir，
失败时 target_dir 保持原状。

归档内只有一个顶层目录时（如 proj-v1.0/），以该目录内容作为检出根。
"""

from __future__ import annotations

import logging
import shutil
import tarfile
import tempfile
import urllib.error
import urllib.request
from pathlib import Path

from dpnd.core.exceptions import ToolError
from dpnd.core.tools.base import FetchTool
from dpnd.utils.net import is_remote, validate_url_scheme

logger = logging.getLogger(__name__)

MARKER_FILE = ".dpnd-archive"
_DOWNLOAD_TIMEOUT = 300


class ArchiveError(ToolError):
    """归档包下载或解压失败"""

    code = "ARCHIVE_FAILED"


class TarTool(FetchTool):
    """tar 归档包拉取工具"""

    tool_id = "tar"

    def is_installed(self, target_dir: Path) -> bool:
        return (target_dir / MARKER_FILE).is_file()

    def current_ref(self, target_dir: Path) -> str:
        try:
            return (target_dir / MARKER_FILE).read_text(encoding="utf-8").strip()
        except OSError as e:
            raise ArchiveError(f"无法读取标记文件 {target_dir / MARKER_FILE}: {e}") from e

    def fetch(self, location: str, version_ref: str, target_dir: Path) -> None:
        self.ensure_fetchable(target_dir)
        source = location.replace("{version}", version_ref)

        try:
            target_dir.parent.mkdir(parents=True, exist_ok=True)
            staging = Path(tempfile.mkdtemp(
                prefix=f".{target_dir.name}.", dir=str(target_dir.parent),
            ))
        except OSError as e:
            raise ArchiveError(f"无法创建临时目录: {e}") from e

        try:
            archive = self._obtain(source, staging)
            tree = staging / "tree"
            tree.mkdir()
            with tarfile.open(archive) as tf:
                tf.extractall(path=str(tree), filter="data")
            root = _single_root(tree)
            (root / MARKER_FILE).write_text(version_ref + "\n", encoding="utf-8")
            _swap_into_place(root, target_dir, staging / "old")
            logger.info("归档已解压: %s@%s -> %s", source, version_ref, target_dir)
        except (OSError, tarfile.TarError) as e:
            raise ArchiveError(f"处理归档失败 {source}: {e}") from e
        finally:
            shutil.rmtree(staging, ignore_errors=True)

    @staticmethod
    def _obtain(source: str, staging: Path) -> Path:
        """返回本地归档路径，远程地址先下载到 staging"""
        if not is_remote(source):
            path = Path(source).expanduser()
            if not path.is_file():
                raise ArchiveError(f"归档文件不存在: {source}")
            return path

        validate_url_scheme(source, context="tar")
        dest = staging / "download"
        logger.info("  下载: %s", source)
        try:
            with urllib.request.urlopen(source, timeout=_DOWNLOAD_TIMEOUT) as resp:  # nosec B310
                with open(dest, "wb") as f:
                    shutil.copyfileobj(resp, f)
        except (urllib.error.URLError, OSError) as e:
            raise ArchiveError(f"下载失败: {source} - {e}") from e
        return dest


def _single_root(tree: Path) -> Path:
    children = list(tree.iterdir())
    if len(children) == 1 and children[0].is_dir() and not children[0].is_symlink():
        return children[0]
    return tree


def _swap_into_place(new_root: Path, target_dir: Path, backup: Path) -> None:
    """用 new_root 替换 target_dir，替换失败时恢复旧内容"""
    had_old = target_dir.exists()
    if had_old:
        target_dir.rename(backup)
    try:
        new_root.rename(target_dir)
    except OSError:
        if had_old:
            backup.rename(target_dir)
        raise
