"""网络工具：URL 判定与安全校验"""

from __future__ import annotations

from urllib.parse import urlparse

from dpnd.core.exceptions import ToolError

_ALLOWED_SCHEMES = frozenset(("http", "https"))


def is_remote(location: str) -> bool:
    """location 是否为 URL（含 scheme 且不是 Windows 盘符）"""
    scheme = urlparse(location).scheme
    return len(scheme) > 1


def validate_url_scheme(url: str, *, context: str = "") -> None:
    """校验 URL 仅使用 http/https，防止 file:// 等非预期协议访问

    Raises:
        ToolError: URL scheme 不在白名单内
    """
    parsed = urlparse(url)
    if parsed.scheme not in _ALLOWED_SCHEMES:
        label = f" ({context})" if context else ""
        raise ToolError(
            f"不允许的 URL 协议 '{parsed.scheme}'{label}，"
            f"仅支持 http/https: {url}"
        )
