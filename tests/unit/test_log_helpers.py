import logging
from pathlib import Path
from rasterwrap.log_helpers import setup_logger, shutdown_logger

def test_file_handler_and_shutdown(tmp_path: Path):
    log = tmp_path / "nested" / "run.log"
    root = setup_logger(str(log), logging.DEBUG)
    try:
        logging.getLogger("rasterwrap.test").debug("hola %s", "mundo")
        assert logging.getLogger("rasterio").level == logging.WARNING
    finally:
        shutdown_logger(root)
    assert root.handlers == []
    assert "DEBUG - hola mundo" in log.read_text(encoding="utf-8")

def test_shutdown_none_is_noop():
    shutdown_logger(None)
