from __future__ import annotations

import pytest

from shared.models.deploy_queue import EmptyQueueError, QueueEntry
from shared.repositories.deploy_queue import DeployQueue


def _holders(queue: DeployQueue) -> list[str]:
    return [entry.holder for entry in queue.get()]


def test_empty_queue_has_no_current_or_next(queue: DeployQueue) -> None:
    assert queue.is_empty()
    assert queue.length() == 0
    assert len(queue) == 0
    assert queue.current() is None
    assert queue.next() is None
    assert not queue.is_current("A")
    assert not queue.is_next("A")
    assert not queue.contains("A")
    assert queue.first_group() == ()


def test_advance_on_empty_queue_raises(queue: DeployQueue) -> None:
    with pytest.raises(EmptyQueueError):
        queue.advance()


def test_push_appends_in_turn_order_and_trims_metadata(queue: DeployQueue) -> None:
    first = queue.push("A", "  my_api \n")
    queue.push("B")

    assert first == QueueEntry(holder="A", metadata="my_api")
    assert _holders(queue) == ["A", "B"]
    assert queue.current().metadata == "my_api"
    assert queue.next().metadata == ""
    assert queue.is_current("A")
    assert queue.is_next("B")
    assert not queue.is_current("B")


def test_length_tracks_pushes_minus_removals(queue: DeployQueue) -> None:
    for holder in ["A", "B", "A", "C", "B"]:
        queue.push(holder)

    queue.advance()
    removed = queue.remove("B")

    assert removed == 2
    assert queue.length() == 5 - 1 - removed


def test_advance_promotes_previous_next(queue: DeployQueue) -> None:
    queue.push("A")
    queue.push("B")
    queue.push("C")
    expected = queue.next()

    finished = queue.advance()

    assert finished.holder == "A"
    assert queue.current() is expected


def test_matchers_accept_predicates(queue: DeployQueue) -> None:
    queue.push("A", "svcA")
    queue.push("B", "svcB")

    assert queue.is_current(lambda entry: entry.metadata == "svcA")
    assert queue.is_next(lambda entry: entry.metadata.endswith("B"))
    assert queue.contains(lambda entry: entry.holder == "B")
    assert not queue.contains(lambda entry: entry.metadata == "svcC")


def test_first_group_only_covers_leading_run(queue: DeployQueue) -> None:
    for holder in ["A", "A", "B", "A"]:
        queue.push(holder)

    group = queue.first_group()

    assert len(group) == 2
    assert all(entry.holder == "A" for entry in group)


def test_remove_keeps_relative_order(queue: DeployQueue) -> None:
    for holder, metadata in [("A", "1"), ("B", "2"), ("A", "3"), ("B", "4")]:
        queue.push(holder, metadata)

    assert queue.remove("B") == 2
    assert [(e.holder, e.metadata) for e in queue.get()] == [("A", "1"), ("A", "3")]


def test_remove_without_match_is_not_an_error(queue: DeployQueue) -> None:
    queue.push("A")

    assert queue.remove("Z") == 0
    assert queue.remove(lambda entry: False) == 0
    assert _holders(queue) == ["A"]


def test_get_returns_a_snapshot(queue: DeployQueue) -> None:
    queue.push("A")
    snapshot = queue.get()

    queue.push("B")

    assert isinstance(snapshot, tuple)
    assert len(snapshot) == 1
    assert queue.length() == 2


def test_duplicate_pushes_are_distinct_entries(queue: DeployQueue) -> None:
    queue.push("A", "svc")
    queue.push("A", "svc")

    assert queue.length() == 2
    queue.advance()
    assert queue.is_current("A")


def test_clear_empties_the_queue(queue: DeployQueue) -> None:
    queue.push("A")
    queue.push("B")

    assert queue.clear() == 2
    assert queue.is_empty()


def test_turns_walk_through_interleaved_holders(queue: DeployQueue) -> None:
    queue.push("U1", "svcA")
    queue.push("U2", "svcB")
    queue.push("U1", "svcC")

    assert [(e.holder, e.metadata) for e in queue.get()] == [
        ("U1", "svcA"),
        ("U2", "svcB"),
        ("U1", "svcC"),
    ]
    assert [e.metadata for e in queue.first_group()] == ["svcA"]

    queue.advance()
    assert queue.is_current("U2")

    queue.advance()
    assert queue.current().metadata == "svcC"
    assert [e.metadata for e in queue.first_group()] == ["svcC"]
