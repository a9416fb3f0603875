from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
import logging
import os
from pathlib import Path
import time

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
ROOT_LOGGER_NAME = "options_reconcile"


@dataclass(frozen=True)
class RunLogger:
    logger: logging.Logger
    log_path: Path | None
    started_at: datetime
    start_perf: float
    command_name: str


def _safe_name(value: str) -> str:
    cleaned = "".join(ch if ch.isalnum() or ch in {"-", "_"} else "_" for ch in value.strip())
    return cleaned or "options_reconcile"


def build_log_path(log_dir: Path, command_name: str, *, now: datetime | None = None) -> Path:
    now = now or datetime.now(timezone.utc)
    timestamp = now.strftime("%Y%m%dT%H%M%SZ")
    pid = os.getpid()
    return log_dir / now.strftime("%Y-%m-%d") / f"{_safe_name(command_name)}_{timestamp}_{pid}.log"


def setup_run_logger(
    log_dir: Path,
    command_name: str,
    *,
    level: int = logging.INFO,
    log_path: Path | None = None,
) -> RunLogger | None:
    """Attach a per-run file handler to the package logger.

    Returns None when the log directory cannot be created; the run itself
    continues without a log file.
    """
    effective_log_path = log_path or build_log_path(log_dir, command_name)
    try:
        effective_log_path.parent.mkdir(parents=True, exist_ok=True)
    except OSError:
        return None

    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.setLevel(level)
    logger.propagate = False
    _reset_file_handlers(logger)

    handler = logging.FileHandler(effective_log_path, mode="a", encoding="utf-8")
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(handler)

    started_at = datetime.now(timezone.utc)
    start_perf = time.perf_counter()
    logger.info("Start %s", command_name)
    return RunLogger(
        logger=logger,
        log_path=effective_log_path,
        started_at=started_at,
        start_perf=start_perf,
        command_name=command_name,
    )


def finalize_run_logger(run_logger: RunLogger) -> None:
    elapsed = time.perf_counter() - run_logger.start_perf
    run_logger.logger.info("End %s duration=%.2fs", run_logger.command_name, elapsed)
    _reset_file_handlers(run_logger.logger)


def _reset_file_handlers(logger: logging.Logger) -> None:
    for handler in list(logger.handlers):
        if isinstance(handler, logging.FileHandler):
            handler.flush()
            handler.close()
            logger.removeHandler(handler)
