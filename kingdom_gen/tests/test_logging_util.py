import logging

from kingdom_gen import logging_util
from kingdom_gen.logging_util import NoDunderFormatter, get_logger, resolve_level


def test_resolve_level_names():
    assert resolve_level("debug") == logging.DEBUG
    assert resolve_level(" WARNING ") == logging.WARNING
    assert resolve_level("bogus") == logging.INFO
    assert resolve_level(None) == logging.INFO


def test_get_logger_adds_shared_handlers_once():
    logger = get_logger("kingdom_gen.tests.logging_target")
    again = get_logger("kingdom_gen.tests.logging_target")
    assert again is logger
    assert logger.handlers == [logging_util.file_handler, logging_util.stream_handler]
    assert logger.level == logging_util.LOG_LEVEL


def test_generator_client_logs_through_shared_handlers():
    from kingdom_gen.services import generator_client

    assert logging_util.stream_handler in generator_client.logger.handlers


def test_formatter_strips_dunders():
    record = logging.LogRecord("kingdom_gen.__init__", logging.INFO, __file__, 1, "hello", None, None)
    line = NoDunderFormatter("%(name)s %(message)s").format(record)
    assert line == "kingdom_gen.init hello"
