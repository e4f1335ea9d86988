"""统一异常体系

所有业务异常继承 DpndError，CLI 层据此输出友好提示并决定退出码。

分三类:
- 解析期异常 (ParseError 子类): 清单格式错误，整体中止解析
- 条目级异常 (ToolError / UnknownToolError / FetchFailedError 等):
  只影响单个依赖，作为 Failed 结果返回，不中止整次安装
- 进程级异常 (ManifestNotFoundError / ManifestReadError / InstallError):
  无法继续，由 CLI 统一报告一次
"""

from __future__ import annotations

from pathlib import Path


class DpndError(Exception):
    """基础异常"""

    code: str = "UNKNOWN"

    def __init__(self, message: str) -> None:
        super().__init__(message)


# =========================================================================
# 解析期异常
# =========================================================================


class ParseError(DpndError):
    """清单解析失败"""

    code = "PARSE_ERROR"
    line_num: int | None = None


class EmptyManifestError(ParseError):
    """清单内容为空（没有任何非空行）"""

    code = "EMPTY_MANIFEST"

    def __init__(self) -> None:
        super().__init__("清单为空")


class MissingTargetRootError(ParseError):
    """清单只有注释和空行，缺少目标根目录"""

    code = "MISSING_TARGET_ROOT"

    def __init__(self) -> None:
        super().__init__("清单缺少目标根目录（首个非注释行）")


class InvalidTargetRootError(ParseError):
    """目标根目录行不合法"""

    code = "INVALID_TARGET_ROOT"

    def __init__(self, line_num: int, raw_line: str, reason: str) -> None:
        super().__init__(f"第 {line_num} 行: 目标根目录无效 ({reason}): {raw_line}")
        self.line_num = line_num
        self.raw_line = raw_line
        self.reason = reason


class InvalidEntrySpecError(ParseError):
    """依赖行不是恰好 4 个字段"""

    code = "INVALID_ENTRY_SPEC"

    def __init__(self, line_num: int, raw_line: str) -> None:
        super().__init__(
            f"第 {line_num} 行: 依赖定义应为 "
            f"'<name> <tool> <location> <version>': {raw_line}"
        )
        self.line_num = line_num
        self.raw_line = raw_line


class InvalidEntryNameError(ParseError):
    """依赖名包含非法字符"""

    code = "INVALID_ENTRY_NAME"

    def __init__(self, line_num: int, name: str, bad_char_idx: int) -> None:
        super().__init__(
            f"第 {line_num} 行: 依赖名 '{name}' 在位置 {bad_char_idx} 包含非法字符"
        )
        self.line_num = line_num
        self.name = name
        self.bad_char_idx = bad_char_idx


class DuplicateEntryNameError(ParseError):
    """依赖名重复"""

    code = "DUPLICATE_ENTRY_NAME"

    def __init__(self, name: str, first_line: int, dup_line: int) -> None:
        super().__init__(
            f"第 {dup_line} 行: 依赖 '{name}' 重复定义（首次定义于第 {first_line} 行）"
        )
        self.line_num = dup_line
        self.name = name
        self.first_line = first_line
        self.dup_line = dup_line


# =========================================================================
# 条目级异常
# =========================================================================


class ToolError(DpndError):
    """拉取工具执行失败（各工具可派生具体类型）"""

    code = "TOOL_ERROR"


class TargetDirNotEmptyError(ToolError):
    """目标目录已存在、非空，且不是本工具管理的检出"""

    code = "TARGET_DIR_NOT_EMPTY"

    def __init__(self, target_dir: Path) -> None:
        super().__init__(f"目标目录非空且无法识别，拒绝覆盖: {target_dir}")
        self.target_dir = target_dir


class UnknownToolError(DpndError):
    """清单引用了未注册的拉取工具"""

    code = "UNKNOWN_TOOL"

    def __init__(self, tool_id: str) -> None:
        super().__init__(f"未知的拉取工具: {tool_id}")
        self.tool_id = tool_id


class FetchFailedError(DpndError):
    """拉取失败，包装工具抛出的 ToolError"""

    code = "FETCH_FAILED"

    def __init__(self, cause: ToolError) -> None:
        super().__init__(f"拉取失败: {cause}")
        self.cause = cause


# =========================================================================
# 进程级异常
# =========================================================================


class ManifestNotFoundError(DpndError):
    """当前目录及其上级目录均未找到清单文件"""

    code = "MANIFEST_NOT_FOUND"

    def __init__(self, manifest_name: str, start: Path) -> None:
        super().__init__(f"在 {start} 及其上级目录中未找到 '{manifest_name}'")
        self.manifest_name = manifest_name
        self.start = start


class ManifestReadError(DpndError):
    """清单文件读取或解码失败"""

    code = "MANIFEST_READ_ERROR"

    def __init__(self, path: Path, reason: str) -> None:
        super().__init__(f"读取清单失败 {path}: {reason}")
        self.path = path


class InstallError(DpndError):
    """安装无法开始（如目标根目录无法创建）"""

    code = "INSTALL_ERROR"
