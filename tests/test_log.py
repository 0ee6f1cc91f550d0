"""
日志模块测试: 配置模型, 处理器构建, JSON 格式化, 字段过滤器以及容器的调试日志.
"""

import json
import logging
import logging.handlers

import pytest
from pydantic import ValidationError
from rich.logging import RichHandler

from unicase.collections.index_map import UniCaseIndexMap
from unicase.collections.index_set import UniCaseIndexSet
from unicase.collections.log import helpers
from unicase.collections.log.config import Handler, Log, configure_logging, get_handler
from unicase.collections.log.filters import FieldFilter


@pytest.fixture
def root_logger():
    """测试后恢复库日志记录器的状态"""
    logger = logging.getLogger(helpers.ROOT_LOGGER_NAME)
    level, propagate = logger.level, logger.propagate
    yield logger
    for h in logger.handlers[:]:
        logger.removeHandler(h)
        h.close()
    for f in logger.filters[:]:
        logger.removeFilter(f)
    logger.setLevel(level)
    logger.propagate = propagate


def json_lines(text):
    return [json.loads(line) for line in text.splitlines() if line.strip()]


class TestConfigModels:
    """测试配置模型"""

    def test_defaults(self):
        log = Log()
        assert log.name == "unicase.collections"
        assert log.level == "WARNING"
        assert log.handlers is None

    def test_normalization(self):
        handler = Handler(output="STDOUT", output_format="JSON", level="debug")
        assert handler.output == "stdout"
        assert handler.output_format == "json"
        assert handler.level == "DEBUG"

    def test_file_output_keeps_path(self, tmp_path):
        path = str(tmp_path / "Out.log")
        assert Handler(output=path).output == path

    def test_empty_values_fall_back_to_defaults(self):
        handler = Handler(output="", filters=[])
        assert handler.output == "std"
        assert handler.filters is None

    def test_invalid_text_format(self):
        with pytest.raises(ValidationError):
            Handler(text_format="no fields")

    def test_invalid_level(self):
        with pytest.raises(ValidationError):
            Log(level="verbose")

    def test_blank_filter_rejected(self):
        with pytest.raises(ValidationError):
            Handler(filters=["levelno > 10", "  "])


class TestGetHandler:
    """测试处理器构建"""

    @pytest.mark.parametrize(
        "output, handler_type",
        [
            ("std", helpers.StandardHandler),
            ("stdout", logging.StreamHandler),
            ("stderr", logging.StreamHandler),
            ("rich", RichHandler),
        ],
    )
    def test_output_types(self, output, handler_type):
        handler = get_handler(Handler(output=output, level="INFO"))
        assert isinstance(handler, handler_type)
        assert handler.level == logging.INFO

    def test_file_output(self, tmp_path):
        path = tmp_path / "unicase.log"
        handler = get_handler(Handler(output=str(path)))
        try:
            assert isinstance(handler, logging.handlers.WatchedFileHandler)
        finally:
            handler.close()

    def test_filters_attached(self):
        handler = get_handler(Handler(filters=["levelno >= 30"]))
        assert any(isinstance(f, FieldFilter) for f in handler.filters)


class TestConfigureLogging:
    """测试库日志配置与容器调试日志"""

    def test_configure_from_mapping(self, root_logger):
        logger = configure_logging(
            {"level": "debug", "propagate": False, "handlers": [{"output": "stdout"}]}
        )
        assert logger is root_logger
        assert logger.level == logging.DEBUG
        assert logger.propagate is False
        assert len(logger.handlers) == 1

    def test_reconfigure_replaces_handlers(self, root_logger):
        configure_logging({"handlers": [{"output": "stdout"}, {"output": "stderr"}]})
        configure_logging(Log(handlers=[Handler(output="stdout")]))
        assert len(root_logger.handlers) == 1

    def test_container_debug_records_as_json(self, root_logger, capsys):
        configure_logging(
            {
                "level": "DEBUG",
                "propagate": False,
                "handlers": [
                    {"output": "stdout", "output_format": "json", "level": "DEBUG"}
                ],
            }
        )
        m = UniCaseIndexMap({"A": 1, "B": 2})
        m.retain(lambda _, v: v > 1)

        records = json_lines(capsys.readouterr().out)
        retain = [r for r in records if "retain" in r["message"]]
        assert len(retain) == 1
        assert retain[0]["level"] == "DEBUG"
        assert retain[0]["logger"] == "unicase.collections.base"
        assert retain[0]["container"] == "UniCaseIndexMap"
        assert retain[0]["removed"] == 1
        assert retain[0]["message"] == "UniCaseIndexMap.retain removed 1 of 2 entries"

    def test_text_format(self, root_logger, capsys):
        configure_logging(
            {
                "level": "DEBUG",
                "propagate": False,
                "handlers": [
                    {"output": "stdout", "level": "DEBUG", "text_format": "{levelname}|{message}"}
                ],
            }
        )
        UniCaseIndexSet(["a"]).clear()
        out = capsys.readouterr().out
        assert "DEBUG|UniCaseIndexSet.clear dropped 1 keys" in out.splitlines()

    def test_field_filter(self, root_logger, capsys):
        configure_logging(
            {
                "level": "DEBUG",
                "propagate": False,
                "handlers": [
                    {
                        "output": "stdout",
                        "output_format": "json",
                        "level": "DEBUG",
                        "filters": ["removed > 0"],
                    }
                ],
            }
        )
        s = UniCaseIndexSet(["a", "b"])
        s.retain(lambda k: True)
        s.retain(lambda k: k.folded == "a")

        records = json_lines(capsys.readouterr().out)
        assert [r["removed"] for r in records] == [1]

    def test_silent_by_default(self, root_logger, capsys):
        UniCaseIndexMap({"A": 1}).clear()
        assert capsys.readouterr().out == ""


class TestHelpers:
    """测试日志辅助类"""

    def test_standard_handler_routes_by_level(self, capsys):
        logger = logging.getLogger("unicase.collections.tests.routing")
        logger.propagate = False
        logger.setLevel(logging.DEBUG)
        handler = helpers.StandardHandler()
        handler.setFormatter(helpers.EnhancedFormatter("{message}"))
        logger.addHandler(handler)
        try:
            adapter = helpers.get_logger_adapter(logger.name)
            adapter.info("to %s", "stdout")
            adapter.warning("to %s", "stderr")
        finally:
            logger.removeHandler(handler)

        captured = capsys.readouterr()
        assert captured.out == "to stdout\n"
        assert captured.err == "to stderr\n"

    def test_bound_extra(self):
        records = []

        class Collect(logging.Handler):
            def emit(self, record):
                records.append(record)

        logger = logging.getLogger("unicase.collections.tests.extra")
        logger.propagate = False
        logger.setLevel(logging.DEBUG)
        handler = Collect()
        logger.addHandler(handler)
        try:
            adapter = helpers.get_logger_adapter(logger.name, container="A").bind(size=3)
            adapter.debug("hello", extra={"container": "B"})
        finally:
            logger.removeHandler(handler)

        assert records[0].container == "B"
        assert records[0].size == 3

    def test_field_filter_deny_policy(self):
        record = logging.LogRecord("x", logging.INFO, __file__, 1, "msg", None, None)
        assert FieldFilter("levelno >= 20", policy="deny").filter(record) is False
        assert FieldFilter("levelno >= 30", policy="deny").filter(record) is True
        assert FieldFilter("name == 'x'").filter(record) is True
