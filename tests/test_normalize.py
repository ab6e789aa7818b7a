from __future__ import annotations

from todoist_backup.contracts.task import CanonicalTask, TaskComment, TaskDue, TaskStatus
from todoist_backup.normalize import (
    attach_comments,
    build_label_map,
    build_name_map,
    merge_tasks,
    normalize,
    normalize_active,
    normalize_comment,
    normalize_completed,
    sort_tasks,
)


def test_normalize_active_coerces_ids_to_strings() -> None:
    task = normalize_active(
        {"id": 1, "content": "A", "project_id": 7, "labels": ["x"], "due": {"date": "2025-01-02"}, "extra": True}
    )

    assert task is not None
    assert task.id == "1"
    assert task.project_id == "7"
    assert task.labels == ["x"]
    assert task.due == TaskDue(date="2025-01-02")
    assert task.status == TaskStatus.ACTIVE
    assert task.canonical_url == "https://todoist.com/showTask?id=1"


def test_normalize_active_falls_back_to_label_ids() -> None:
    task = normalize_active({"id": "9", "label_ids": [3, 4]})

    assert task is not None
    assert task.labels == ["3", "4"]


def test_normalize_active_drops_malformed_records() -> None:
    assert normalize_active({"content": "no id"}) is None
    assert normalize_active("junk") is None
    assert normalize_active(None) is None
    assert normalize_active({"id": 1, "labels": "not-a-list"}) is None


def test_normalize_completed_prefers_nested_task() -> None:
    task = normalize_completed(
        {
            "task_id": "9",
            "content": "flat",
            "completed_at": "2025-01-05T10:00:00Z",
            "task": {"id": "9", "content": "nested", "due": {"date": "2025-01-01"}},
        }
    )

    assert task is not None
    assert task.content == "nested"
    assert task.status == TaskStatus.COMPLETED
    assert task.completed_at == "2025-01-05T10:00:00Z"
    assert task.due == TaskDue(date="2025-01-01")


def test_normalize_completed_uses_flat_fields_without_nested_task() -> None:
    task = normalize_completed({"task_id": 5, "content": "flat", "project_id": 7, "completed_date": "2025-01-05"})

    assert task is not None
    assert task.id == "5"
    assert task.content == "flat"
    assert task.project_id == "7"
    assert task.completed_date == "2025-01-05"


def test_normalize_completed_without_identity_is_dropped() -> None:
    assert normalize_completed({"content": "orphan"}) is None


def test_merge_active_overwrites_completed_and_clears_completion() -> None:
    completed = CanonicalTask(id="1", content="old", status=TaskStatus.COMPLETED, completed_at="2025-01-01T00:00:00Z")
    active = CanonicalTask(id="1", content="reopened")

    merged = merge_tasks([active], [completed])

    assert len(merged) == 1
    assert merged[0].content == "reopened"
    assert merged[0].status == TaskStatus.ACTIVE
    assert merged[0].completed_at is None
    assert merged[0].completed_date is None


def test_merge_sets_fallback_due_from_each_record() -> None:
    completed = CanonicalTask(id="2", status=TaskStatus.COMPLETED, due=TaskDue(date="2025-01-02"))
    undated = CanonicalTask(id="3")

    merged = {task.id: task for task in merge_tasks([undated], [completed])}

    assert merged["2"].fallback_due == "January 2nd, 2025"
    assert merged["2"].status == TaskStatus.COMPLETED
    assert merged["3"].fallback_due is None


def test_normalize_composes_both_listings() -> None:
    tasks = normalize(
        [{"id": 1, "content": "a"}, {"content": "dropped"}],
        [{"task_id": 2, "content": "b"}, {"task_id": 1, "content": "stale"}],
    )

    by_id = {task.id: task for task in tasks}
    assert set(by_id) == {"1", "2"}
    assert by_id["1"].status == TaskStatus.ACTIVE
    assert by_id["2"].status == TaskStatus.COMPLETED


def test_normalize_comment_sanitizes_and_falls_back_to_task_id() -> None:
    comment = normalize_comment({"id": 3, "content": " hi \n there", "posted_at": "2025-01-02T00:00:00Z"}, "9")

    assert comment == TaskComment(id="3", task_id="9", text="hi there", posted_at="2025-01-02T00:00:00Z")
    assert normalize_comment({"content": "no id"}, "9") is None


def test_attach_comments_defaults_to_empty_list() -> None:
    tasks = [CanonicalTask(id="1"), CanonicalTask(id="2")]
    comment = TaskComment(id="c", task_id="1", text="x")

    enriched = attach_comments(tasks, {"1": [comment]})

    assert enriched[0].comments == [comment]
    assert enriched[1].comments == []


def test_sort_tasks_orders_active_first_then_due_then_title() -> None:
    tasks = [
        CanonicalTask(id="c", content="done", status=TaskStatus.COMPLETED, due=TaskDue(date="2024-01-01")),
        CanonicalTask(id="n", content="no due"),
        CanonicalTask(id="b", content="Beta", due=TaskDue(date="2025-01-02")),
        CanonicalTask(id="a", content="alpha", due=TaskDue(date="2025-01-02")),
        CanonicalTask(id="e", content="early", due=TaskDue(date="2025-01-01")),
    ]

    assert [task.id for task in sort_tasks(tasks)] == ["e", "a", "b", "n", "c"]


def test_build_name_map_skips_incomplete_records() -> None:
    assert build_name_map([{"id": 1, "name": "Work"}, {"id": 2}, {"name": "orphan"}, "junk"]) == {"1": "Work"}


def test_build_label_map_maps_ids_and_names() -> None:
    assert build_label_map([{"id": 1, "name": "home"}, {"name": "solo"}, {"id": 3}]) == {
        "1": "home",
        "home": "home",
        "solo": "solo",
    }
