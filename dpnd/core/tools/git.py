"""Git 拉取工具

通过外部 git 客户端完成 clone / fetch / checkout，引用解析、网络传输和
认证全部交给 git 本身。

检出成功后在该仓库的本地 git 配置中记录:
  dpnd.ref     清单中请求的版本引用（原样）
  dpnd.commit  检出后 HEAD 的 commit

current_ref() 仅在 HEAD 仍等于 dpnd.commit 时返回 dpnd.ref，
否则返回 HEAD 的 commit，这样手动切换过的检出会被识别为版本漂移。
"""

from __future__ import annotations

import logging
import shutil
from pathlib import Path

from dpnd.core.exceptions import ToolError
from dpnd.core.tools.base import FetchTool
from dpnd.utils.shell import CommandExecutor, CommandResult, get_executor

logger = logging.getLogger(__name__)

STAGE_RETRIEVE = "获取依赖"
STAGE_CHANGE_VERSION = "切换依赖版本"
STAGE_INSPECT = "读取检出状态"

_REF_KEY = "dpnd.ref"
_COMMIT_KEY = "dpnd.commit"


class GitCommandError(ToolError):
    """git 命令无法启动或以非零状态退出"""

    code = "GIT_COMMAND_FAILED"

    def __init__(
        self,
        stage: str,
        args: list[str],
        *,
        result: CommandResult | None = None,
        start_error: str = "",
    ) -> None:
        self.stage = stage
        self.args_list = list(args)
        self.result = result
        self.start_error = start_error
        cmd = "git " + " ".join(args)
        if result is None:
            detail = f"无法启动 `{cmd}`: {start_error}"
        else:
            detail = (
                f"`{cmd}` 失败 (rc={result.returncode})，输出如下:\n\n"
                f"{result.transcript()}"
            )
        super().__init__(f"无法{stage}: {detail}")


class GitTool(FetchTool):
    """基于 git 客户端的拉取工具"""

    tool_id = "git"

    def __init__(
        self,
        executor: CommandExecutor | None = None,
        git_bin: str = "git",
    ) -> None:
        self._executor = executor or get_executor()
        self._git_bin = git_bin

    # ------------------------------------------------------------------
    # FetchTool 接口
    # ------------------------------------------------------------------

    def is_installed(self, target_dir: Path) -> bool:
        return (target_dir / ".git").exists()

    def current_ref(self, target_dir: Path) -> str:
        head = self._head(target_dir)
        recorded_ref = self._config_get(target_dir, _REF_KEY)
        recorded_commit = self._config_get(target_dir, _COMMIT_KEY)
        if recorded_ref and recorded_commit == head:
            return recorded_ref
        return head

    def fetch(self, location: str, version_ref: str, target_dir: Path) -> None:
        if self.is_installed(target_dir):
            logger.info("就地切换版本: %s -> %s", target_dir, version_ref)
            self._update(location, version_ref, target_dir)
        else:
            self.ensure_fetchable(target_dir)
            logger.info("clone: %s@%s -> %s", location, version_ref, target_dir)
            self._clone(location, version_ref, target_dir)
        self._record(version_ref, target_dir)

    # ------------------------------------------------------------------
    # 内部实现
    # ------------------------------------------------------------------

    def _clone(self, location: str, version_ref: str, target_dir: Path) -> None:
        created = not target_dir.exists()
        try:
            target_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise ToolError(f"无法创建目录 {target_dir}: {e}") from e

        try:
            self._git(["clone", location, "."], target_dir, STAGE_RETRIEVE)
        except GitCommandError:
            if created:
                shutil.rmtree(target_dir, ignore_errors=True)
            raise
        self._git(["checkout", "--quiet", version_ref], target_dir, STAGE_CHANGE_VERSION)

    def _update(self, location: str, version_ref: str, target_dir: Path) -> None:
        self._git(["remote", "set-url", "origin", location], target_dir, STAGE_RETRIEVE)
        self._git(["fetch", "--tags", "origin"], target_dir, STAGE_RETRIEVE)
        # 分支名优先取远端，本地同名分支可能停留在旧的 commit
        remote_ref = f"origin/{version_ref}"
        if self._resolves(target_dir, remote_ref):
            args = ["checkout", "--quiet", "--detach", remote_ref]
        else:
            args = ["checkout", "--quiet", version_ref]
        self._git(args, target_dir, STAGE_CHANGE_VERSION)

    def _resolves(self, target_dir: Path, rev: str) -> bool:
        args = ["rev-parse", "--verify", "--quiet", f"{rev}^{{commit}}"]
        r = self._run(args, target_dir, STAGE_CHANGE_VERSION)
        return r.success

    def _record(self, version_ref: str, target_dir: Path) -> None:
        head = self._head(target_dir)
        self._git(["config", _REF_KEY, version_ref], target_dir, STAGE_CHANGE_VERSION)
        self._git(["config", _COMMIT_KEY, head], target_dir, STAGE_CHANGE_VERSION)

    def _head(self, target_dir: Path) -> str:
        return self._git(["rev-parse", "HEAD"], target_dir, STAGE_INSPECT).strip()

    def _config_get(self, target_dir: Path, key: str) -> str:
        args = ["config", "--get", key]
        r = self._run(args, target_dir, STAGE_INSPECT)
        # rc=1 表示键不存在
        if r.returncode == 1:
            return ""
        if not r.success:
            raise GitCommandError(STAGE_INSPECT, args, result=r)
        return r.stdout.strip()

    def _git(self, args: list[str], cwd: Path, stage: str) -> str:
        r = self._run(args, cwd, stage)
        if not r.success:
            raise GitCommandError(stage, args, result=r)
        return r.stdout

    def _run(self, args: list[str], cwd: Path, stage: str) -> CommandResult:
        try:
            return self._executor.execute([self._git_bin, *args], cwd=str(cwd))
        except OSError as e:
            raise GitCommandError(stage, args, start_error=str(e)) from e
