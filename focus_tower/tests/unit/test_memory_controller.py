"""Unit tests for InMemoryPartitionController."""

import pytest

from focus_tower.errors import ConfigurationError, PartitionWriteError
from focus_tower.protocols import PartitionControllerProtocol
from focus_tower.resources import InMemoryPartitionController
from focus_tower.types import NEUTRAL_CPU_WEIGHT, PartitionName


def test_satisfies_protocol(memory_controller):
    assert isinstance(memory_controller, PartitionControllerProtocol)


def test_starts_with_neutral_weights(memory_controller):
    assert memory_controller.get_weight(PartitionName.FOCUS) == NEUTRAL_CPU_WEIGHT
    assert not memory_controller.initialized


def test_ensure_partitions(memory_controller):
    memory_controller.ensure_partitions(1000, 10)

    assert memory_controller.initialized
    assert memory_controller.get_weight(PartitionName.FOCUS) == 1000
    assert memory_controller.get_weight(PartitionName.BACKGROUND) == 10


def test_rejects_out_of_range_weight(memory_controller):
    with pytest.raises(ConfigurationError):
        memory_controller.set_weight(PartitionName.FOCUS, 0)


def test_move_is_exclusive(memory_controller):
    memory_controller.move_into(PartitionName.FOCUS, 1)
    memory_controller.move_into(PartitionName.BACKGROUND, 1)

    assert memory_controller.members(PartitionName.FOCUS) == []
    assert memory_controller.members(PartitionName.BACKGROUND) == [1]


def test_move_to_root_leaves_both(memory_controller):
    memory_controller.move_into(PartitionName.FOCUS, 1)
    memory_controller.move_to_root(1)

    assert memory_controller.members(PartitionName.FOCUS) == []
    assert memory_controller.members(PartitionName.BACKGROUND) == []


def test_dead_pid_is_rejected(mock_logger):
    controller = InMemoryPartitionController(mock_logger, live_pids={1, 2})

    with pytest.raises(PartitionWriteError):
        controller.move_into(PartitionName.FOCUS, 3)
    with pytest.raises(PartitionWriteError):
        controller.move_to_root(3)

    assert controller.history == [("focus", 3, False), ("root", 3, False)]


def test_set_live_pids(mock_logger):
    controller = InMemoryPartitionController(mock_logger, live_pids=[])
    controller.set_live_pids(None)

    controller.move_into(PartitionName.BACKGROUND, 8)

    assert controller.history == [("background", 8, True)]
