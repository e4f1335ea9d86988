"""TarTool 单元测试：使用本地构造的归档文件"""

from __future__ import annotations

import io
import tarfile
from pathlib import Path

import pytest

from dpnd.core.exceptions import TargetDirNotEmptyError, ToolError
from dpnd.core.tools.tar import MARKER_FILE, ArchiveError, TarTool


def _make_tar(path: Path, files: dict[str, str]) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    with tarfile.open(path, "w:gz") as tf:
        for name, content in files.items():
            data = content.encode("utf-8")
            info = tarfile.TarInfo(name)
            info.size = len(data)
            tf.addfile(info, io.BytesIO(data))
    return path


class TestTarTool:
    def test_fetch_strips_single_root(self, tmp_path: Path) -> None:
        archive = _make_tar(tmp_path / "dl/lib-1.0.tar.gz", {
            "lib-1.0/README": "hello",
            "lib-1.0/src/a.c": "int a;",
        })
        target = tmp_path / "deps/lib"
        tool = TarTool()

        tool.fetch(str(archive), "1.0", target)

        assert (target / "README").read_text(encoding="utf-8") == "hello"
        assert (target / "src/a.c").is_file()
        assert tool.is_installed(target)
        assert tool.current_ref(target) == "1.0"

    def test_version_placeholder(self, tmp_path: Path) -> None:
        _make_tar(tmp_path / "dl/lib-2.0.tar.gz", {"x.txt": "2"})
        target = tmp_path / "lib"
        TarTool().fetch(str(tmp_path / "dl/lib-{version}.tar.gz"), "2.0", target)
        assert (target / "x.txt").read_text(encoding="utf-8") == "2"

    def test_refetch_replaces_contents(self, tmp_path: Path) -> None:
        _make_tar(tmp_path / "v1.tar", {"old.txt": "1"})
        _make_tar(tmp_path / "v2.tar", {"new.txt": "2"})
        target = tmp_path / "lib"
        tool = TarTool()

        tool.fetch(str(tmp_path / "v1.tar"), "v1", target)
        tool.fetch(str(tmp_path / "v2.tar"), "v2", target)

        assert not (target / "old.txt").exists()
        assert (target / "new.txt").is_file()
        assert tool.current_ref(target) == "v2"
        assert [p.name for p in tmp_path.iterdir() if p.name.startswith(".lib.")] == []

    def test_missing_archive_leaves_target_untouched(self, tmp_path: Path) -> None:
        _make_tar(tmp_path / "v1.tar", {"keep.txt": "1"})
        target = tmp_path / "lib"
        tool = TarTool()
        tool.fetch(str(tmp_path / "v1.tar"), "v1", target)

        with pytest.raises(ArchiveError, match="不存在"):
            tool.fetch(str(tmp_path / "nope.tar"), "v2", target)

        assert (target / "keep.txt").is_file()
        assert tool.current_ref(target) == "v1"

    def test_corrupt_archive(self, tmp_path: Path) -> None:
        bad = tmp_path / "bad.tar.gz"
        bad.write_bytes(b"not a tarball")
        with pytest.raises(ArchiveError):
            TarTool().fetch(str(bad), "v1", tmp_path / "lib")
        assert not (tmp_path / "lib").exists()

    def test_refuses_foreign_dir(self, tmp_path: Path) -> None:
        _make_tar(tmp_path / "v1.tar", {"a": "1"})
        target = tmp_path / "lib"
        target.mkdir()
        (target / "mine.txt").write_text("x", encoding="utf-8")
        with pytest.raises(TargetDirNotEmptyError):
            TarTool().fetch(str(tmp_path / "v1.tar"), "v1", target)
        assert (target / "mine.txt").is_file()

    def test_disallowed_url_scheme(self, tmp_path: Path) -> None:
        with pytest.raises(ToolError, match="不允许的 URL 协议"):
            TarTool().fetch("ftp://example.com/lib.tar.gz", "v1", tmp_path / "lib")

    def test_member_outside_destination_rejected(self, tmp_path: Path) -> None:
        archive = _make_tar(tmp_path / "evil.tar.gz", {"../escape.txt": "x", "ok.txt": "y"})
        target = tmp_path / "deps/lib"

        with pytest.raises(ArchiveError):
            TarTool().fetch(str(archive), "1", target)

        assert not (tmp_path / "deps/escape.txt").exists()
        assert not target.exists()
