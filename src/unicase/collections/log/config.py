from __future__ import annotations

import logging
import logging.handlers
import sys
from datetime import datetime
from types import EllipsisType
from typing import Annotated, Any, Literal, Mapping

from pydantic import Field
from rich.logging import RichHandler

from unicase.collections.log import helpers
from unicase.collections.log.filters import FieldFilter
from unicase.collections.pydantic_utils import BaseModelEx, check, convert

OUTPUT_DEFAULT = "std"
OUTPUT_OPTIONS = ("std", "stdout", "stderr", "rich")
OUTPUT_TYPE = Literal["std", "stdout", "stderr", "rich"]

OUTPUT_FORMAT_DEFAULT = "text"
OUTPUT_FORMAT_TYPE = Literal["text", "json"]

TEXT_FORMAT_DEFAULT = "{asctime} {levelname} {name}: {message}"
DATE_FORMAT_DEFAULT = "%Y-%m-%d %H:%M:%S"

LEVEL_DEFAULT = "WARNING"
LEVEL_TYPE = Literal["CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"]

FILTERS_DEFAULT = None


class Handler(BaseModelEx):
    output: Annotated[
        str | OUTPUT_TYPE,
        convert(lambda v: vl if (vl := v.lower()) in OUTPUT_OPTIONS else v),
    ] = OUTPUT_DEFAULT
    output_format: Annotated[
        OUTPUT_FORMAT_TYPE,
        convert(str.lower),
    ] = OUTPUT_FORMAT_DEFAULT
    text_format: Annotated[
        str,
        check(lambda value: logging.StrFormatStyle(value).validate()),
    ] = TEXT_FORMAT_DEFAULT
    date_format: Annotated[
        str | None,
        check(datetime.now().strftime),
    ] = DATE_FORMAT_DEFAULT
    level: Annotated[
        LEVEL_TYPE,
        convert(str.upper),
    ] = LEVEL_DEFAULT
    filters: Annotated[
        list[str] | None,
        Field(min_length=1),
        check(str.strip, data_shape="list", check_result=True),
    ] = FILTERS_DEFAULT


class Log(BaseModelEx):
    name: str = helpers.ROOT_LOGGER_NAME
    level: Annotated[
        LEVEL_TYPE,
        convert(str.upper),
    ] = LEVEL_DEFAULT
    filters: Annotated[
        list[str] | None,
        Field(min_length=1),
        check(str.strip, data_shape="list", check_result=True),
    ] = FILTERS_DEFAULT
    propagate: bool = True
    handlers: list[Handler] | None = None


def get_handler(log: Handler) -> logging.Handler:
    """
    根据给定的处理器配置创建日志处理器.

    参数:
        log (Handler): 处理器配置的实例.

    返回:
        logging.Handler: 根据配置创建的日志处理器.

    异常:
        FileNotFoundError, PermissionError: 读写文件错误
    """
    if log.output == "std":
        handler: logging.Handler = helpers.StandardHandler()
    elif log.output == "stdout":
        handler = logging.StreamHandler(sys.stdout)
    elif log.output == "stderr":
        handler = logging.StreamHandler(sys.stderr)
    elif log.output == "rich":
        handler = RichHandler(
            show_path=False,
            markup=False,
            rich_tracebacks=False,
            log_time_format=log.date_format or DATE_FORMAT_DEFAULT,
        )
    else:
        handler = logging.handlers.WatchedFileHandler(log.output)

    if log.output == "rich":
        # RichHandler 自行渲染时间与级别, 只需格式化消息本身
        formatter = helpers.EnhancedFormatter("{message}", style="{")
    else:
        formatter = helpers.EnhancedFormatter(
            log.text_format,
            log.date_format,
            style="{",
            output_format=log.output_format,
        )
    handler.setFormatter(formatter)

    handler.setLevel(log.level)
    if log.filters is not None:
        handler.addFilter(FieldFilter(*log.filters))
    return handler


def get_logger(
    log: Log, *, logger: logging.Logger | str | None | EllipsisType = ...
) -> logging.Logger:
    """
    按配置重置并返回日志记录器: 级别/过滤器/传播标志/处理器全部以配置为准.
    """
    if logger is ...:
        logger = logging.getLogger(log.name)
    elif not isinstance(logger, logging.Logger):
        logger = logging.getLogger(logger)

    logger.setLevel(log.level)

    for f in logger.filters[:]:
        logger.removeFilter(f)
    if log.filters is not None:
        logger.addFilter(FieldFilter(*log.filters))

    logger.propagate = log.propagate

    for h in logger.handlers[:]:
        logger.removeHandler(h)
        h.close()
    if log.handlers is not None:
        for handler in log.handlers:
            logger.addHandler(get_handler(handler))

    return logger


def configure_logging(config: Log | Mapping[str, Any] | None = None) -> logging.Logger:
    """
    配置本库的日志记录器(默认名称 `unicase.collections`).

    参数:
        config: Log 实例或可验证为 Log 的映射; None 表示使用全部默认值.
    """
    if not isinstance(config, Log):
        config = Log.model_validate(config or {})
    return get_logger(config)
