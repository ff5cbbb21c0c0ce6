# tests/test_logger.py
import logging
from logging.handlers import RotatingFileHandler

import pytest

from hogwild_ising.utils.logger import PerformanceMonitor, ProgressLogger, setup_logger


@pytest.fixture
def fresh_logger():
    name = "hogwild_ising.test_logger"
    yield name
    lg = logging.getLogger(name)
    for h in list(lg.handlers):
        lg.removeHandler(h)
        h.close()


def test_plain_file_handler(tmp_path, fresh_logger):
    log_file = tmp_path / "a" / "run.log"
    lg = setup_logger(fresh_logger, level="DEBUG", log_file=str(log_file), use_color=False)
    lg.info("hello")
    for h in lg.handlers:
        h.flush()
    file_handlers = [h for h in lg.handlers if isinstance(h, logging.FileHandler)]
    assert len(file_handlers) == 1
    assert not isinstance(file_handlers[0], RotatingFileHandler)
    assert "hello" in log_file.read_text(encoding="utf-8")


def test_rotating_file_handler(tmp_path, fresh_logger):
    log_file = tmp_path / "run.log"
    lg = setup_logger(fresh_logger, log_file=str(log_file), use_color=False, max_bytes=100, backup_count=2)
    rotating = [h for h in lg.handlers if isinstance(h, RotatingFileHandler)]
    assert len(rotating) == 1
    assert rotating[0].backupCount == 2
    for i in range(20):
        lg.info("message number %d", i)
    assert (tmp_path / "run.log.1").exists()
    assert not (tmp_path / "run.log.3").exists()


def test_setup_replaces_handlers(fresh_logger):
    setup_logger(fresh_logger, use_color=False)
    lg = setup_logger(fresh_logger, use_color=False)
    assert len(lg.handlers) == 1
    assert lg.propagate is False


def test_unknown_level(fresh_logger):
    with pytest.raises(ValueError):
        setup_logger(fresh_logger, level="LOUD")


def test_progress_logger_every_n(caplog):
    lg = logging.getLogger("progress_logger_test")
    with caplog.at_level(logging.INFO, logger=lg.name):
        p = ProgressLogger(7, desc="rounds", logger=lg, log_every_n=3)
        for _ in range(7):
            p.update()
        p.finish()
    lines = [r.getMessage() for r in caplog.records]
    # 第 3、6 步与最后一步，再加 finish
    assert len(lines) == 4
    assert lines[0].startswith("rounds: 3/7")
    assert lines[2].startswith("rounds: 7/7")


def test_performance_monitor(caplog):
    lg = logging.getLogger("performance_monitor_test")
    perf = PerformanceMonitor(lg)
    with caplog.at_level(logging.INFO, logger=lg.name):
        perf.start_timer("t")
        assert perf.stop_timer("t", log=False) >= 0.0
        assert perf.stop_timer("t") is None
        perf.count("flips", 3)
        perf.count("flips")
        perf.summary()
    assert perf.counters["flips"] == 4
    assert any("[count] flips: 4" in r.getMessage() for r in caplog.records)
