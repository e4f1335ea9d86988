"""dpnd 日志配置

日志一律写 stderr，stdout 只留给每个依赖一行的安装结果，
方便脚本直接解析 `dpnd install` 的输出。
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone

TEXT_FORMAT = "%(asctime)s [%(levelname)-7s] %(name)s: %(message)s"

# 通过 logger.xxx(..., extra={...}) 附带、需要进入 JSON 输出的字段
_EXTRA_FIELDS = ("entry", "tool", "source_line")


class JSONFormatter(logging.Formatter):
    """每条记录一行 JSON，供 CI 流水线消费

    固定字段: timestamp, level, logger, message, module, function, line；
    记录带有 entry / tool / source_line 时一并输出，有异常时附 exception。
    """

    def format(self, record: logging.LogRecord) -> str:
        data: dict[str, object] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }
        for key in _EXTRA_FIELDS:
            if hasattr(record, key):
                data[key] = getattr(record, key)
        if record.exc_info and record.exc_info[1]:
            data["exception"] = self.formatException(record.exc_info)
        return json.dumps(data, ensure_ascii=False)


def setup_logging(level: str = "INFO", json_output: bool = False) -> None:
    """配置根日志器，重复调用时替换掉之前的 handler

    level 不是合法级别名时按 INFO 处理。
    """
    root = logging.getLogger()
    for old in root.handlers[:]:
        root.removeHandler(old)
        old.close()

    root.setLevel(getattr(logging, level.upper(), logging.INFO))

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(JSONFormatter() if json_output else logging.Formatter(TEXT_FORMAT))
    root.addHandler(handler)
