"""外部进程调用

拉取工具通过 CommandExecutor 协议调用 git 等外部程序，测试时注入 fake 实现，
不必 patch subprocess。
"""

from __future__ import annotations

import logging
import subprocess
from dataclasses import dataclass
from typing import Protocol

logger = logging.getLogger(__name__)

STDOUT_PREFIX = "[>] "
STDERR_PREFIX = "[!] "


def prefix_lines(text: str, prefix: str) -> str:
    """给每一行加前缀，保留末尾换行"""
    if not text:
        return ""
    out = "\n".join(f"{prefix}{ln}" for ln in text.splitlines())
    return out + "\n" if text.endswith("\n") else out


@dataclass(frozen=True)
class CommandResult:
    """一次外部命令的退出码和输出"""

    returncode: int
    stdout: str
    stderr: str

    @property
    def success(self) -> bool:
        return self.returncode == 0

    def transcript(self) -> str:
        """stdout 行加 "[>] "、stderr 行加 "[!] " 后拼接，用于错误报告"""
        return prefix_lines(self.stdout, STDOUT_PREFIX) + prefix_lines(self.stderr, STDERR_PREFIX)


class CommandExecutor(Protocol):
    """命令执行器协议

    程序无法启动时（如可执行文件不存在）抛出 OSError；
    启动后以非零状态退出时返回 success 为 False 的结果，不抛异常。
    """

    def execute(
        self,
        cmd: list[str],
        *,
        cwd: str = ".",
        env: dict[str, str] | None = None,
    ) -> CommandResult:
        ...


class LocalExecutor:
    """在本机以子进程方式执行，捕获 stdout/stderr"""

    def execute(
        self,
        cmd: list[str],
        *,
        cwd: str = ".",
        env: dict[str, str] | None = None,
    ) -> CommandResult:
        logger.debug("  exec: %s (cwd=%s)", " ".join(cmd), cwd)
        r = subprocess.run(
            cmd, capture_output=True, text=True,
            cwd=cwd, env=env, check=False,
        )
        if r.returncode != 0:
            logger.debug("  exit %d: %s", r.returncode, cmd[0])
        return CommandResult(r.returncode, r.stdout, r.stderr)


_default_executor: CommandExecutor = LocalExecutor()


def get_executor() -> CommandExecutor:
    return _default_executor


def set_executor(executor: CommandExecutor) -> None:
    """替换全局默认执行器，未显式传入 executor 的 GitTool 会使用它"""
    global _default_executor  # noqa: PLW0603
    _default_executor = executor
