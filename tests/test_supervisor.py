# tests/test_supervisor.py

from __future__ import annotations

import pytest

from puppet_client.config import Intervals
from puppet_client.core.messages import Command
from puppet_client.core.session import Session
from puppet_client.errors import ConfigError
from puppet_client.scheduling.supervisor import TaskKind, TaskSupervisor

from .fakes import FakeConnection, FakeExecutor, FakeIntervalSource, FakeSnapshotSource


@pytest.fixture()
def supervisor(
    executor: FakeExecutor,
    connection: FakeConnection,
    session: Session,
    intervals: FakeIntervalSource,
) -> TaskSupervisor:
    return TaskSupervisor(executor, connection, session, FakeSnapshotSource(b"screen"), intervals)


def _assert_single_live(supervisor: TaskSupervisor, executor: FakeExecutor, expected: TaskKind) -> None:
    assert supervisor.registry.live_kinds() == [expected]
    assert executor.live_names() == [expected.value]


def test_idle_session_starts_heartbeat_only(supervisor: TaskSupervisor, executor: FakeExecutor) -> None:
    supervisor.check()

    _assert_single_live(supervisor, executor, TaskKind.HEARTBEAT)
    assert executor.schedules[0].interval_ms == 5000


def test_taking_control_swaps_heartbeat_for_snapshots(
    supervisor: TaskSupervisor,
    executor: FakeExecutor,
    session: Session,
) -> None:
    supervisor.check()
    heartbeat = supervisor.registry.heartbeat

    session.start_controlled()
    supervisor.check()

    assert heartbeat is not None and heartbeat.is_cancelled()
    _assert_single_live(supervisor, executor, TaskKind.SNAPSHOT)
    assert executor.live()[0].interval_ms == 200


def test_releasing_control_swaps_back(
    supervisor: TaskSupervisor,
    executor: FakeExecutor,
    session: Session,
) -> None:
    session.start_controlled()
    supervisor.check()
    session.stop_controlled()
    supervisor.check()

    _assert_single_live(supervisor, executor, TaskKind.HEARTBEAT)
    assert len(executor.schedules) == 2


def test_repeated_check_is_idempotent(
    supervisor: TaskSupervisor,
    executor: FakeExecutor,
    session: Session,
) -> None:
    for controlled in (False, True):
        session.controlled = controlled
        supervisor.check()
        created, cancels = len(executor.schedules), executor.cancel_count()

        supervisor.check()

        assert len(executor.schedules) == created
        assert executor.cancel_count() == cancels


def test_exactly_one_live_schedule_after_every_check(
    supervisor: TaskSupervisor,
    executor: FakeExecutor,
    session: Session,
) -> None:
    for controlled in [False, True, True, False, True, False, False, True]:
        session.controlled = controlled
        supervisor.check()
        expected = TaskKind.SNAPSHOT if controlled else TaskKind.HEARTBEAT
        _assert_single_live(supervisor, executor, expected)


def test_reset_cancels_everything_and_next_check_recovers(
    supervisor: TaskSupervisor,
    executor: FakeExecutor,
    session: Session,
) -> None:
    session.start_controlled()
    supervisor.check()

    supervisor.reset()
    assert supervisor.registry.live_kinds() == []
    assert executor.live() == []

    supervisor.check()
    _assert_single_live(supervisor, executor, TaskKind.SNAPSHOT)


def test_reset_when_nothing_scheduled_is_harmless(supervisor: TaskSupervisor, executor: FakeExecutor) -> None:
    supervisor.reset()
    supervisor.reset()

    assert executor.schedules == []


def test_restarted_snapshot_schedule_gets_fresh_buffer(
    supervisor: TaskSupervisor,
    executor: FakeExecutor,
    connection: FakeConnection,
    session: Session,
) -> None:
    session.start_controlled()
    supervisor.check()
    executor.live()[0].body()
    first_task = supervisor.snapshot_task

    supervisor.reset()
    supervisor.check()
    executor.live()[0].body()

    assert supervisor.snapshot_task is not first_task
    # Same screen, but the new task has never sent it.
    assert [r.value for r in connection.sent] == [b"screen", b"screen"]


def test_schedule_bodies_send_the_right_requests(
    supervisor: TaskSupervisor,
    executor: FakeExecutor,
    connection: FakeConnection,
    session: Session,
) -> None:
    supervisor.check()
    executor.live()[0].body()

    session.start_controlled()
    supervisor.check()
    executor.live()[0].body()

    assert connection.sent_commands() == [Command.HEARTBEAT, Command.SCREEN]


def test_intervals_are_reread_when_a_schedule_restarts(
    supervisor: TaskSupervisor,
    executor: FakeExecutor,
    session: Session,
    intervals: FakeIntervalSource,
) -> None:
    supervisor.check()
    assert executor.schedules[-1].interval_ms == 5000

    intervals.intervals = Intervals(task_check_ms=100, heartbeat_ms=750, snapshot_ms=50)
    supervisor.reset()
    supervisor.check()

    assert executor.schedules[-1].interval_ms == 750


def test_config_failure_during_check_propagates(
    supervisor: TaskSupervisor,
    session: Session,
    intervals: FakeIntervalSource,
) -> None:
    intervals.fail = True

    with pytest.raises(ConfigError):
        supervisor.check()


def test_config_failure_at_construction_propagates(
    executor: FakeExecutor,
    connection: FakeConnection,
    session: Session,
) -> None:
    broken = FakeIntervalSource()
    broken.fail = True

    with pytest.raises(ConfigError):
        TaskSupervisor(executor, connection, session, FakeSnapshotSource(None), broken)
