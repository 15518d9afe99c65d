import io
import json
import logging

import pytest


@pytest.mark.parametrize("log_format", ["console", "json"])
def test_init_logging(log_format, caplog):
    from cfdns.logs import init_logging, is_valid_log_format

    logger = logging.getLogger("test_cfdns")

    _stream = io.StringIO()
    stream_handler = logging.StreamHandler(_stream)

    logger.setLevel(logging.INFO)

    assert is_valid_log_format(log_format)
    init_logging(logger, log_format, "0.0.1", stream_handler=stream_handler)
    with caplog.at_level(logging.INFO):
        logger.info("hello")
    assert caplog.text
    _stream.seek(0)
    assert _stream.read()
    logger.removeHandler(stream_handler)


def test_json_logging_adds_version():
    from cfdns.logs import init_logging

    logger = logging.getLogger("test_cfdns_json")
    logger.setLevel(logging.INFO)
    _stream = io.StringIO()
    init_logging(logger, "json", "1.2.3", stream_handler=logging.StreamHandler(_stream))

    logger.info("Created record")

    line = json.loads(_stream.getvalue().splitlines()[-1])
    assert line["message"] == "Created record"
    assert line["version"] == "1.2.3"


def test_invalid_log_format():
    from cfdns.logs import init_logging, is_valid_log_format

    assert not is_valid_log_format("xml")
    with pytest.raises(NotImplementedError):
        init_logging(logging.getLogger("test_cfdns_xml"), "xml", "0.0.1")  # type: ignore[call-overload]
