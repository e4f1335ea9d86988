"""清单解析器

清单格式（按行，空白分隔）:

    <target_root>

    <name> <tool_id> <location> <version_ref>
    # 注释

- 首个非空、非注释行为目标根目录（单个字段）
- 之后每个非空、非注释行为一个依赖，恰好 4 个字段
- 首个非空白字符为 '#' 的行整行忽略

解析是纯函数：不访问文件系统和网络，也不校验工具名是否已注册。
"""

from __future__ import annotations

import re
from pathlib import Path, PurePosixPath

from dpnd.core.exceptions import (
    DuplicateEntryNameError,
    EmptyManifestError,
    InvalidEntryNameError,
    InvalidEntrySpecError,
    InvalidTargetRootError,
    MissingTargetRootError,
)
from dpnd.core.models import DependencyEntry, Manifest

_BAD_NAME_CHARS_RE = re.compile(r"[^a-zA-Z0-9._-]")


def _is_skippable(line: str) -> bool:
    return not line or line.startswith("#")


def parse(text: str) -> Manifest:
    """将清单文本解析为 Manifest

    Raises:
        ParseError 的各子类，携带出错行号
    """
    # 只按 \n 计行，\r 由 strip() 去掉；其余 Unicode 行分隔符不算换行
    lines = text.split("\n")
    if not any(ln.strip() for ln in lines):
        raise EmptyManifestError()

    target_root: Path | None = None
    entries: list[DependencyEntry] = []
    first_seen: dict[str, int] = {}

    for idx, raw in enumerate(lines):
        ln_num = idx + 1
        line = raw.strip()
        if _is_skippable(line):
            continue

        if target_root is None:
            target_root = _parse_target_root(ln_num, line)
            continue

        entry = _parse_entry(ln_num, line)
        if entry.name in first_seen:
            raise DuplicateEntryNameError(entry.name, first_seen[entry.name], ln_num)
        first_seen[entry.name] = ln_num
        entries.append(entry)

    if target_root is None:
        raise MissingTargetRootError()

    return Manifest(target_root=target_root, entries=tuple(entries))


def _parse_target_root(ln_num: int, line: str) -> Path:
    words = line.split()
    if len(words) != 1:
        raise InvalidTargetRootError(ln_num, line, "应为单个路径")
    raw = words[0]
    if PurePosixPath(raw).is_absolute():
        raise InvalidTargetRootError(ln_num, line, "必须是相对路径")
    for part in raw.split("/"):
        if part in (".", ".."):
            raise InvalidTargetRootError(ln_num, line, f"不允许的路径段 '{part}'")
    return Path(*[p for p in raw.split("/") if p])


def _parse_entry(ln_num: int, line: str) -> DependencyEntry:
    words = line.split()
    if len(words) != 4:
        raise InvalidEntrySpecError(ln_num, line)

    name, tool_id, location, version_ref = words
    found = _BAD_NAME_CHARS_RE.search(name)
    if found:
        raise InvalidEntryNameError(ln_num, name, found.start())
    if name in (".", ".."):
        raise InvalidEntryNameError(ln_num, name, 0)

    return DependencyEntry(
        name=name,
        tool_id=tool_id,
        location=location,
        version_ref=version_ref,
        source_line=ln_num,
    )
