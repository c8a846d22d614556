import logging

import pytest

from shrinkqueue.cli import main


def _log_text(directory, name):
    return (directory / f"{name}.log").read_text(encoding="utf-8")


def test_containers_demo_writes_log(tmp_path):
    code = main(["containers", "--count", "3", "--log-dir", str(tmp_path), "--logger-name", "cli_containers"])
    assert code == 0
    text = _log_text(tmp_path, "cli_containers")
    assert "main start" in text
    assert "main end" in text
    assert "[Begin] Part:vector test===========" in text


def test_adapter_demo_passes(tmp_path):
    code = main(
        [
            "adapter",
            "--producers", "2",
            "--consumers", "1",
            "--count", "10",
            "--log-dir", str(tmp_path),
            "--logger-name", "cli_adapter",
        ]
    )
    assert code == 0
    text = _log_text(tmp_path, "cli_adapter")
    assert "[PASS] All test finished!" in text
    assert "[FAIL]" not in text


def test_lockfree_demo_logs_stats(tmp_path):
    code = main(
        [
            "lockfree",
            "--producers", "2",
            "--consumers", "1",
            "--count", "5",
            "--log-dir", str(tmp_path),
            "--logger-name", "cli_lockfree",
        ]
    )
    assert code == 0
    assert "Is total push == total pop: True" in _log_text(tmp_path, "cli_lockfree")


def test_expand_demo_logs_counts(tmp_path):
    code = main(["expand", "--count", "7", "--log-dir", str(tmp_path), "--logger-name", "cli_expand"])
    assert code == 0
    text = _log_text(tmp_path, "cli_expand")
    assert "Push finished, success = 7, fail = 0" in text
    assert "Pop finished, total pop = 7" in text


def test_unknown_demo_rejected(tmp_path):
    with pytest.raises(SystemExit) as excinfo:
        main(["nonsense", "--log-dir", str(tmp_path)])
    assert excinfo.value.code == 2


def test_negative_count_is_usage_error(tmp_path):
    with pytest.raises(SystemExit) as excinfo:
        main(["expand", "--count", "-1", "--log-dir", str(tmp_path), "--logger-name", "cli_negative"])
    assert excinfo.value.code == 2


def test_package_logger_restored(tmp_path):
    package_logger = logging.getLogger("shrinkqueue")
    before_handlers = list(package_logger.handlers)
    before_level = package_logger.level
    code = main(["expand", "--count", "1", "--log-dir", str(tmp_path), "--logger-name", "cli_restore"])
    assert code == 0
    assert "Pop finished, total pop = 1" in _log_text(tmp_path, "cli_restore")
    assert package_logger.handlers == before_handlers
    assert package_logger.level == before_level