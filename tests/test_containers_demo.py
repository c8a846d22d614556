import logging

import pytest

from shrinkqueue.containers_demo import run_container_demo, section

CONTAINERS = {"vector", "deque", "queue", "list", "map", "unordered_map"}


def test_every_container_removes_all_elements():
    result = run_container_demo(25)
    assert set(result) == CONTAINERS
    assert all(removed == 25 for removed in result.values())


def test_zero_count_removes_nothing():
    result = run_container_demo(0)
    assert set(result) == CONTAINERS
    assert sum(result.values()) == 0


def test_negative_count_rejected():
    with pytest.raises(ValueError):
        run_container_demo(-1)


def test_section_logs_begin_and_end(caplog):
    with caplog.at_level(logging.INFO, logger="shrinkqueue"):
        with section("alpha"):
            logging.getLogger("shrinkqueue").info("inside")
    messages = [record.getMessage() for record in caplog.records]
    begin = messages.index("[Begin] Part:alpha===========")
    inside = messages.index("inside")
    end = messages.index("[End] Part:alpha===========")
    assert begin < inside < end


def test_section_logs_end_when_body_raises(caplog):
    with caplog.at_level(logging.INFO, logger="shrinkqueue"):
        with pytest.raises(RuntimeError):
            with section("broken"):
                raise RuntimeError("boom")
    messages = [record.getMessage() for record in caplog.records]
    assert "[End] Part:broken===========" in messages


def test_demo_logs_each_section(caplog):
    with caplog.at_level(logging.INFO, logger="shrinkqueue"):
        run_container_demo(3)
    messages = [record.getMessage() for record in caplog.records]
    for name in CONTAINERS:
        assert f"[Begin] Part:{name} test===========" in messages
        assert f"[End] Part:{name} test===========" in messages
    assert any(message.startswith("[Snapshot #") for message in messages)