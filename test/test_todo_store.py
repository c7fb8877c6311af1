import asyncio

import pytest

from storage.todo_store import InMemoryTodoStore, InvalidTodoError
from todo_app.models import ParsedData, TodoCreate, TodoUpdate, ValidationResult, ValidationStatus


def _run(coro):
    return asyncio.run(coro)


def test_create_and_get_roundtrip():
    store = InMemoryTodoStore()
    created = _run(store.create(TodoCreate(title="Write docs", description="API section", category="Work")))
    fetched = _run(store.get(created.id))

    assert (fetched.title, fetched.description, fetched.category) == ("Write docs", "API section", "Work")
    assert fetched.completed is False
    assert fetched.validation_status is ValidationStatus.PENDING


@pytest.mark.parametrize(
    "payload",
    [
        TodoCreate(category="Work"),
        TodoCreate(title="   ", category="Work"),
        TodoCreate(title="No category"),
        TodoCreate(title="Bad category", category="Errands"),
    ],
)
def test_invalid_creates_write_nothing(payload):
    store = InMemoryTodoStore()
    with pytest.raises(InvalidTodoError):
        _run(store.create(payload))
    assert _run(store.list()) == []


def test_list_filters_and_orders_newest_first():
    store = InMemoryTodoStore()
    a = _run(store.create(TodoCreate(title="A", category="Work")))
    b = _run(store.create(TodoCreate(title="B", category="Personal")))
    c = _run(store.create(TodoCreate(title="C", category="Work")))

    assert [t.id for t in _run(store.list())] == [c.id, b.id, a.id]
    assert [t.id for t in _run(store.list("Work"))] == [c.id, a.id]
    # unknown filters are ignored
    assert len(_run(store.list("Errands"))) == 3


def test_partial_update_keeps_other_fields():
    store = InMemoryTodoStore()
    created = _run(store.create(TodoCreate(title="X", description="d", category="Work")))

    updated = _run(store.update(created.id, TodoUpdate(completed=True)))

    assert updated.completed is True
    assert (updated.title, updated.description, updated.category) == ("X", "d", "Work")
    assert updated.created_at == created.created_at


def test_update_rejects_invalid_category():
    store = InMemoryTodoStore()
    created = _run(store.create(TodoCreate(title="X", category="Work")))
    with pytest.raises(InvalidTodoError):
        _run(store.update(created.id, TodoUpdate(category="Errands")))
    assert _run(store.get(created.id)).category == "Work"


def test_update_missing_returns_none():
    assert _run(InMemoryTodoStore().update(99, TodoUpdate(completed=True))) is None


def test_delete():
    store = InMemoryTodoStore()
    keep = _run(store.create(TodoCreate(title="Keep", category="Work")))
    gone = _run(store.create(TodoCreate(title="Gone", category="Personal")))

    assert _run(store.delete(12345)) is None
    assert len(_run(store.list())) == 2

    deleted = _run(store.delete(gone.id))
    assert deleted.title == "Gone"
    assert [t.id for t in _run(store.list())] == [keep.id]


def test_create_validated_stores_smart_fields():
    store = InMemoryTodoStore()
    validation = ValidationResult(
        original_text="buy a cake",
        parsed_data=ParsedData.default_for("buy a cake"),
        validation_status=ValidationStatus.WARNING,
        location_data={"query": None, "address": None, "coordinates": None},
    )
    todo = _run(store.create_validated("buy a cake", 'Parsed from: "buy a cake"', "Personal", "buy a cake", validation))

    assert todo.validation_status is ValidationStatus.WARNING
    assert todo.original_text == "buy a cake"
    assert todo.parsed_data["task"] == "buy a cake"
    assert todo.location_data["coordinates"] is None


def test_title_longer_than_column_is_rejected():
    store = InMemoryTodoStore()
    with pytest.raises(InvalidTodoError):
        _run(store.create(TodoCreate(title="x" * 256, category="Work")))
    assert _run(store.list()) == []

    created = _run(store.create(TodoCreate(title="x" * 255, category="Work")))
    with pytest.raises(InvalidTodoError):
        _run(store.update(created.id, TodoUpdate(title="y" * 256)))
    assert _run(store.get(created.id)).title == "x" * 255
