"""Process memory snapshots and logging helpers."""

from __future__ import annotations

import itertools
import logging
import sys
import threading
from dataclasses import dataclass
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path

import psutil

logger = logging.getLogger("shrinkqueue")

_MIB = 1024 * 1024
_LOG_FORMAT = (
    "[%(asctime)s.%(msecs)03d] [%(levelname)s] [%(thread)d] "
    "[%(filename)s:%(lineno)d] [%(funcName)s] %(message)s"
)
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_snapshot_counter = itertools.count(1)
_snapshot_lock = threading.Lock()
_registered_loggers: set[str] = set()
_registry_lock = threading.Lock()


@dataclass
class MemoryStats:
    """Memory figures of the current process."""

    rss_mib: float = 0.0
    commit_mib: float = 0.0
    page_faults: int = 0
    peak_working_set: int = 0


def _peak_rss_bytes(info) -> int:
    peak = getattr(info, "peak_wset", None)
    if peak is not None:
        return int(peak)
    try:
        import resource
    except ImportError:
        return int(info.rss)
    max_rss = resource.getrusage(resource.RUSAGE_SELF).ru_maxrss
    # ru_maxrss is in bytes on macOS and in kilobytes elsewhere.
    return int(max_rss) if sys.platform == "darwin" else int(max_rss) * 1024


def get_memory_stats() -> MemoryStats:
    """Collect memory statistics of this process; zeros if they cannot be read."""
    try:
        info = psutil.Process().memory_info()
    except psutil.Error as exc:
        logger.error("Reading process memory info failed: %s", exc)
        return MemoryStats()
    committed = getattr(info, "private", None)
    if committed is None:
        committed = info.vms
    return MemoryStats(
        rss_mib=info.rss / _MIB,
        commit_mib=committed / _MIB,
        page_faults=int(getattr(info, "num_page_faults", 0)),
        peak_working_set=_peak_rss_bytes(info) // _MIB,
    )


def format_memory_stats(stats: MemoryStats) -> str:
    """Render ``stats`` as a single human-readable line."""
    return (
        f"rss(working set): {stats.rss_mib:.1f} MiB"
        f", commit size: {stats.commit_mib:.1f} MiB"
        f", peak WorkingSetSize: {stats.peak_working_set} MiB"
    )


def log_memory_snapshot(context: str = "") -> str:
    """Log a numbered memory snapshot and return the logged line."""
    with _snapshot_lock:
        number = next(_snapshot_counter)
    message = format_memory_stats(get_memory_stats())
    if context:
        message = f"{context} - {message}"
    line = f"[Snapshot #{number}] {message}"
    logger.info(line)
    return line


def pause_for_check(msg: str) -> str:
    """Log a memory snapshot labelled ``msg`` followed by a blank line."""
    line = log_memory_snapshot(msg)
    logger.info("")
    return line


def setup_logger(name: str, log_dir: str | Path | None = None) -> logging.Logger:
    """Create logger ``name`` writing to an hourly rotated ``<log_dir>/<name>.log``.

    ``log_dir`` defaults to a ``logs`` directory beside the running script.
    A name can be set up only once; a second attempt raises ``ValueError``.
    """
    with _registry_lock:
        if name in _registered_loggers:
            raise ValueError(f"logger with name '{name}' already exists")
        _registered_loggers.add(name)

    directory = Path(log_dir) if log_dir is not None else Path(sys.argv[0]).resolve().parent / "logs"
    directory.mkdir(parents=True, exist_ok=True)

    handler = TimedRotatingFileHandler(directory / f"{name}.log", when="H", encoding="utf-8")
    handler.setFormatter(logging.Formatter(_LOG_FORMAT, datefmt=_DATE_FORMAT))
    handler.setLevel(logging.INFO)

    new_logger = logging.getLogger(name)
    new_logger.setLevel(logging.INFO)
    new_logger.propagate = False
    new_logger.addHandler(handler)
    return new_logger