import logging

import pytest

from logconfig import configure_logging


@pytest.fixture(autouse=True)
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    for handler in root.handlers:
        handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


def test_settings_from_file(tmp_path):
    config = tmp_path / "logging.ini"
    logfile = tmp_path / "split.log"
    config.write_text("[logging]\nlogfile = %s\nlog_level = debug\nmax_bytes = 2048\nbackup_count = 2\nformat = %%(levelname)s %%(message)s\n" % logfile, encoding="utf-8")

    handler = configure_logging(str(config))
    logging.debug("hello from the splitter")
    handler.flush()

    assert handler.maxBytes == 2048
    assert handler.backupCount == 2
    assert logging.getLogger().level == logging.DEBUG
    assert logfile.read_text().strip() == "DEBUG hello from the splitter"


def test_missing_file_uses_defaults(tmp_path):
    handler = configure_logging(str(tmp_path / "missing.ini"))
    assert handler.baseFilename == "/tmp/fsplitter.log"
    assert logging.getLogger().level == logging.INFO
