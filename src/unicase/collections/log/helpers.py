from __future__ import annotations

import json
import logging
import sys
import traceback
from typing import Any, Literal

ROOT_LOGGER_NAME = "unicase.collections"


def get_logger_adapter(name: str | None = None, **extra: Any) -> LoggerAdapter:
    """
    获取模块日志适配器. 本库只记录日志, 从不自行安装处理器.

    参数:
        name (str | None): 日志记录器的名称, 通常为模块的 `__name__`.
        **extra: 绑定到每条日志记录的扩展字段.
    """
    return LoggerAdapter(logging.getLogger(name), **extra)


class StandardHandler(logging.Handler):
    """
    标准日志处理器, 低于 WARNING 的日志输出到标准输出流, 其余输出到标准错误流.
    """

    def __init__(self) -> None:
        super().__init__()
        self.stdout = sys.stdout
        self.stderr = sys.stderr

    def flush(self) -> None:
        with self.lock:  # type: ignore
            self.stdout.flush()
            self.stderr.flush()

    def emit(self, record: logging.LogRecord) -> None:
        try:
            msg = self.format(record)
            stream = self.stdout if record.levelno < logging.WARNING else self.stderr
            stream.write(msg + "\n")
            stream.flush()
        except RecursionError:
            raise
        except Exception:
            self.handleError(record)

    def __repr__(self) -> str:
        level = logging.getLevelName(self.level)
        return f"<{type(self).__name__} <stdout> <stderr> ({level})>"


class EnhancedFormatter(logging.Formatter):
    """
    扩展的日志格式化器

    output_format 为 text 时按格式串输出; 为 json 时输出单行结构化日志,
    通过 `extra` 附加的扩展字段一并输出, 无法序列化的值(如 UniCaseKey)转为字符串.
    """

    # fmt: off
    RESERVED_FIELDS = {
        'name', 'msg', 'args', 'levelname', 'levelno', 'pathname', 'filename', 'module',
        'exc_info', 'exc_text', 'stack_info', 'lineno', 'funcName', 'created', 'msecs',
        'relativeCreated', 'thread', 'threadName', 'processName', 'process', 'taskName',
        'message', 'asctime', 'stacklevel', 'logger'
    }
    # fmt: on

    def __init__(
        self,
        textfmt: str | None = None,
        datefmt: str | None = None,
        style: Literal["%", "{", "$"] = "{",
        validate: bool = True,
        *,
        output_format: Literal["text", "json"] = "text",
    ) -> None:
        super().__init__(textfmt, datefmt, style, validate)
        self.output_format = output_format

    def format(self, record: logging.LogRecord) -> str:
        record.message = record.getMessage()
        record.asctime = self.formatTime(record, self.datefmt)

        if self.output_format == "text":
            s = self.formatMessage(record)
            if record.exc_info:
                s = f"{s}\n{self.formatException(record.exc_info)}"
            return s
        return self.formatJson(record)

    def formatJson(self, record: logging.LogRecord) -> str:
        json_dict: dict[str, Any] = {
            "timestamp": record.asctime,
            "level": record.levelname,
            "logger": record.name,
            "message": record.message,
            "location": {
                "module": record.module,
                "function": record.funcName,
                "line": record.lineno,
            },
        }
        if record.exc_info:
            typ, value, tb = record.exc_info
            json_dict["exception"] = {
                "$type": f"{typ.__module__}.{typ.__name__}" if typ else None,
                "message": str(value) if value else None,
                "traceback": traceback.format_exception(typ, value, tb),
            }
        # 扩展字段
        for key, value in vars(record).items():
            if key not in self.RESERVED_FIELDS and not key.startswith("_"):
                json_dict[key] = value

        return json.dumps(json_dict, ensure_ascii=False, default=str)


class LoggerAdapter:
    """
    日志适配器, 封装标准库 `logging.Logger`

    通过构造函数(或 `bind`)传入的 `extra` 字段会自动合并到每条日志记录的 `extra` 中,
    调用时传入的 `extra` 优先.
    """

    def __init__(self, logger: logging.Logger, **extra: Any) -> None:
        self.logger = logger
        self.extra = extra

    def bind(self, **extra: Any) -> LoggerAdapter:
        """返回合并了额外字段的新适配器."""
        return LoggerAdapter(self.logger, **{**self.extra, **extra})

    def process(self, kwargs: dict[str, Any]) -> dict[str, Any]:
        kwargs["extra"] = {**self.extra, **kwargs.get("extra", {})}
        return kwargs

    def debug(self, msg: str, *args: Any, **kwargs: Any) -> None:
        self.log(logging.DEBUG, msg, *args, **kwargs)

    def info(self, msg: str, *args: Any, **kwargs: Any) -> None:
        self.log(logging.INFO, msg, *args, **kwargs)

    def warning(self, msg: str, *args: Any, **kwargs: Any) -> None:
        self.log(logging.WARNING, msg, *args, **kwargs)

    def error(self, msg: str, *args: Any, **kwargs: Any) -> None:
        self.log(logging.ERROR, msg, *args, **kwargs)

    def log(self, level: int, msg: str, *args: Any, **kwargs: Any) -> None:
        # 热路径上的 debug 调用在未启用时不做任何合并
        if self.logger.isEnabledFor(level):
            kwargs = self.process(kwargs)
            self.logger.log(level, msg, *args, stacklevel=3, **kwargs)
