"""Command-line entry point running one of the queue and container demos."""

from __future__ import annotations

import argparse
import logging
from typing import Callable

from shrinkqueue.adapter_demo import run_adapter_queue_demo
from shrinkqueue.containers_demo import run_container_demo
from shrinkqueue.lockfree_demo import run_expand_demo, run_threadsafe_demo
from shrinkqueue.memstats import setup_logger

logger = logging.getLogger("shrinkqueue")


def _options(args: argparse.Namespace, **names: str) -> dict[str, int]:
    """Map given command-line options onto keyword arguments, skipping unset ones."""
    return {
        keyword: getattr(args, option)
        for keyword, option in names.items()
        if getattr(args, option) is not None
    }


def _adapter(args: argparse.Namespace) -> None:
    run_adapter_queue_demo(
        **_options(args, producers="producers", consumers="consumers", produce_count="count")
    )


def _containers(args: argparse.Namespace) -> None:
    run_container_demo(**_options(args, count="count"))


def _lockfree(args: argparse.Namespace) -> None:
    run_threadsafe_demo(
        **_options(
            args,
            n_producers="producers",
            n_consumers="consumers",
            push_per_producer="count",
        )
    )


def _expand(args: argparse.Namespace) -> None:
    run_expand_demo(**_options(args, count="count"))


_DEMOS: dict[str, Callable[[argparse.Namespace], None]] = {
    "adapter": _adapter,
    "containers": _containers,
    "lockfree": _lockfree,
    "expand": _expand,
}


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="shrinkqueue",
        description="Run a queue or container demo and log memory snapshots.",
    )
    parser.add_argument("demo", nargs="?", default="adapter", choices=sorted(_DEMOS))
    parser.add_argument("--count", type=int, help="items per producer, or items in total")
    parser.add_argument("--producers", type=int, help="number of producer threads")
    parser.add_argument("--consumers", type=int, help="number of consumer threads")
    parser.add_argument("--logger-name", default="sg_common", help="log file name stem")
    parser.add_argument("--log-dir", help="directory for the log file (default: ./logs beside the script)")
    return parser


def _file_handlers(name: str, log_dir: str | None) -> list[logging.Handler]:
    try:
        named = setup_logger(name, log_dir)
    except ValueError:
        named = logging.getLogger(name)
    if named is logger:
        return []
    return list(named.handlers)


def main(argv: list[str] | None = None) -> int:
    """Parse ``argv``, route package logging to the log file and run the chosen demo."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    handlers = _file_handlers(args.logger_name, args.log_dir)
    previous_level = logger.level
    logger.setLevel(logging.INFO)
    for handler in handlers:
        logger.addHandler(handler)
    try:
        logger.info("main start")
        try:
            _DEMOS[args.demo](args)
        except ValueError as exc:
            parser.error(str(exc))
        logger.info("main end")
    finally:
        for handler in handlers:
            handler.flush()
            logger.removeHandler(handler)
        logger.setLevel(previous_level)
    return 0