"""共享 fixture：fake 拉取工具 + 注册表

FakeFetchTool 用标记文件模拟检出：fetch() 在目标目录写入 .fake-ref，
is_installed() / current_ref() 读取它；所有调用都记录下来供断言。
"""

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from dpnd.core.exceptions import ToolError
from dpnd.core.tools.base import FetchTool
from dpnd.core.tools.registry import ToolRegistry

FAKE_MARKER = ".fake-ref"


class FakeFetchTool(FetchTool):
    tool_id = "fake"

    def __init__(self) -> None:
        self.fetch_calls: list[tuple[str, str, Path]] = []
        self.fail_with: ToolError | None = None

    def is_installed(self, target_dir: Path) -> bool:
        return (target_dir / FAKE_MARKER).is_file()

    def current_ref(self, target_dir: Path) -> str:
        return (target_dir / FAKE_MARKER).read_text(encoding="utf-8")

    def fetch(self, location: str, version_ref: str, target_dir: Path) -> None:
        self.fetch_calls.append((location, version_ref, target_dir))
        self.ensure_fetchable(target_dir)
        if self.fail_with is not None:
            raise self.fail_with
        target_dir.mkdir(parents=True, exist_ok=True)
        (target_dir / FAKE_MARKER).write_text(version_ref, encoding="utf-8")


@pytest.fixture(autouse=True)
def _clean_logging():
    """CLI 会配置根日志器，每个用例结束后清理，避免 handler 指向已关闭的流"""
    yield
    root = logging.getLogger()
    for handler in root.handlers[:]:
        if type(handler) is logging.StreamHandler:
            root.removeHandler(handler)


@pytest.fixture()
def fake_tool() -> FakeFetchTool:
    return FakeFetchTool()


@pytest.fixture()
def registry(fake_tool: FakeFetchTool) -> ToolRegistry:
    """注册 'git' 和 'fake' 两个工具名，均指向同一个 fake 实例"""
    reg = ToolRegistry()
    reg.register("git", lambda: fake_tool)
    reg.register("fake", lambda: fake_tool)
    return reg
