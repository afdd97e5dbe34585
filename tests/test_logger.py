from loguru import logger

from mexc_stream.utils.logger import LogLevel, get_logger, log_config, setup_silent_logging


def test_file_sink_records_component(tmp_path):
    path = tmp_path / "stream.log"
    sink_id = log_config.add_file_logging(str(path), level=LogLevel.VERBOSE)
    try:
        get_logger("connection_manager").debug("handshake ok")
    finally:
        logger.remove(sink_id)

    content = path.read_text(encoding="utf-8")
    assert "connection_manager" in content
    assert "handshake ok" in content


def test_modes_switch_console_level():
    log_config.set_quiet_mode()
    assert log_config.current_level == LogLevel.QUIET

    log_config.set_development_mode()
    assert log_config.current_level == LogLevel.VERBOSE

    setup_silent_logging()
    assert log_config.current_level == LogLevel.SILENT
