"""
Todo persistence.

Two stores share one async contract: a PostgreSQL store for deployments and
an in-memory store for local runs and tests. Category and title are the only
values checked here; everything else is stored as given.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Dict, List, Optional

from storage import db
from todo_app.models import CATEGORIES, Todo, TodoCreate, TodoUpdate, ValidationResult, ValidationStatus

logger = logging.getLogger(__name__)

CATEGORY_ERROR = 'Category must be either "Work" or "Personal"'
MAX_TITLE_LENGTH = 255
TITLE_LENGTH_ERROR = f"Title must be at most {MAX_TITLE_LENGTH} characters"

_UPDATABLE = ("title", "description", "category", "completed")


class InvalidTodoError(ValueError):
    """A write was rejected because a required field is missing or out of range."""


def check_new_todo(payload: TodoCreate) -> None:
    if not payload.title or not payload.title.strip() or not payload.category:
        raise InvalidTodoError("Title and category are required")
    if len(payload.title) > MAX_TITLE_LENGTH:
        raise InvalidTodoError(TITLE_LENGTH_ERROR)
    if payload.category not in CATEGORIES:
        raise InvalidTodoError(CATEGORY_ERROR)


def merge_update(existing: Todo, changes: TodoUpdate) -> Dict[str, Any]:
    """Apply only the fields present in the request; the rest keep their value."""
    provided = changes.model_dump(exclude_unset=True)
    merged = {field: getattr(existing, field) for field in _UPDATABLE}
    for field in _UPDATABLE:
        if field in provided and provided[field] is not None:
            merged[field] = provided[field]

    if merged["category"] not in CATEGORIES:
        raise InvalidTodoError(CATEGORY_ERROR)
    if not merged["title"] or not str(merged["title"]).strip():
        raise InvalidTodoError("Title must not be empty")
    if len(merged["title"]) > MAX_TITLE_LENGTH:
        raise InvalidTodoError(TITLE_LENGTH_ERROR)
    return merged


def validated_fields(
    title: str,
    description: str,
    category: str,
    original_text: Optional[str],
    validation: Optional[ValidationResult],
) -> Dict[str, Any]:
    """Column values for a todo created from (optionally) validated text."""
    if validation is None:
        return {
            "title": title,
            "description": description,
            "category": category,
            "original_text": original_text,
            "parsed_data": None,
            "validation_status": ValidationStatus.PENDING.value,
            "business_info": None,
            "suggested_alternatives": None,
            "scheduled_datetime": None,
            "location_data": None,
        }

    return {
        "title": title,
        "description": description,
        "category": category,
        "original_text": validation.original_text,
        "parsed_data": validation.parsed_data.model_dump(mode="json"),
        "validation_status": validation.validation_status.value,
        "business_info": validation.business_info.model_dump(mode="json") if validation.business_info else None,
        "suggested_alternatives": validation.suggested_alternatives,
        "scheduled_datetime": validation.scheduled_datetime,
        "location_data": validation.location_data,
    }


class TodoStore(ABC):
    name: str = "abstract"

    @abstractmethod
    async def list(self, category: Optional[str] = None) -> List[Todo]:
        ...

    @abstractmethod
    async def get(self, todo_id: int) -> Optional[Todo]:
        ...

    @abstractmethod
    async def create(self, payload: TodoCreate) -> Todo:
        ...

    @abstractmethod
    async def create_validated(
        self,
        title: str,
        description: str,
        category: str,
        original_text: Optional[str] = None,
        validation: Optional[ValidationResult] = None,
    ) -> Todo:
        ...

    @abstractmethod
    async def update(self, todo_id: int, changes: TodoUpdate) -> Optional[Todo]:
        ...

    @abstractmethod
    async def delete(self, todo_id: int) -> Optional[Todo]:
        ...


class PostgresTodoStore(TodoStore):
    """Parameterized SQL against the `todos` table (see schema.sql)."""

    name = "postgres"

    async def list(self, category: Optional[str] = None) -> List[Todo]:
        if category in CATEGORIES:
            rows = await db.fetch(
                "SELECT * FROM todos WHERE category = $1 ORDER BY created_at DESC, id DESC",
                category,
            )
        else:
            rows = await db.fetch("SELECT * FROM todos ORDER BY created_at DESC, id DESC")
        return [Todo(**dict(row)) for row in rows]

    async def get(self, todo_id: int) -> Optional[Todo]:
        row = await db.fetchrow("SELECT * FROM todos WHERE id = $1", todo_id)
        return Todo(**dict(row)) if row else None

    async def create(self, payload: TodoCreate) -> Todo:
        check_new_todo(payload)
        row = await db.fetchrow(
            "INSERT INTO todos (title, description, category) VALUES ($1, $2, $3) RETURNING *",
            payload.title,
            payload.description or "",
            payload.category,
        )
        logger.info(f"Created todo {row['id']}")
        return Todo(**dict(row))

    async def create_validated(
        self,
        title: str,
        description: str,
        category: str,
        original_text: Optional[str] = None,
        validation: Optional[ValidationResult] = None,
    ) -> Todo:
        check_new_todo(TodoCreate(title=title, description=description, category=category))
        fields = validated_fields(title, description, category, original_text, validation)
        row = await db.fetchrow(
            """
            INSERT INTO todos (
                title, description, category, original_text, parsed_data,
                validation_status, business_info, suggested_alternatives,
                scheduled_datetime, location_data
            ) VALUES ($1, $2, $3, $4, $5, $6, $7, $8, $9, $10)
            RETURNING *
            """,
            fields["title"],
            fields["description"],
            fields["category"],
            fields["original_text"],
            fields["parsed_data"],
            fields["validation_status"],
            fields["business_info"],
            fields["suggested_alternatives"],
            fields["scheduled_datetime"],
            fields["location_data"],
        )
        logger.info(f"Created todo {row['id']} with status {row['validation_status']}")
        return Todo(**dict(row))

    async def update(self, todo_id: int, changes: TodoUpdate) -> Optional[Todo]:
        existing = await self.get(todo_id)
        if existing is None:
            return None

        merged = merge_update(existing, changes)
        row = await db.fetchrow(
            """
            UPDATE todos SET title = $1, description = $2, category = $3, completed = $4
            WHERE id = $5
            RETURNING *
            """,
            merged["title"],
            merged["description"],
            merged["category"],
            merged["completed"],
            todo_id,
        )
        # deleted between the read and the write
        return Todo(**dict(row)) if row else None

    async def delete(self, todo_id: int) -> Optional[Todo]:
        row = await db.fetchrow("DELETE FROM todos WHERE id = $1 RETURNING *", todo_id)
        if row is None:
            return None
        logger.info(f"Deleted todo {todo_id}")
        return Todo(**dict(row))


class InMemoryTodoStore(TodoStore):
    """Same contract as PostgresTodoStore, kept in a dict. Not shared across processes."""

    name = "in-memory"

    def __init__(self) -> None:
        self._todos: Dict[int, Todo] = {}
        self._next_id = 1

    async def list(self, category: Optional[str] = None) -> List[Todo]:
        todos = list(self._todos.values())
        if category in CATEGORIES:
            todos = [t for t in todos if t.category == category]
        todos.sort(key=lambda t: (t.created_at, t.id), reverse=True)
        return [t.model_copy(deep=True) for t in todos]

    async def get(self, todo_id: int) -> Optional[Todo]:
        todo = self._todos.get(todo_id)
        return todo.model_copy(deep=True) if todo else None

    async def create(self, payload: TodoCreate) -> Todo:
        check_new_todo(payload)
        return await self._insert({
            "title": payload.title,
            "description": payload.description or "",
            "category": payload.category,
        })

    async def create_validated(
        self,
        title: str,
        description: str,
        category: str,
        original_text: Optional[str] = None,
        validation: Optional[ValidationResult] = None,
    ) -> Todo:
        check_new_todo(TodoCreate(title=title, description=description, category=category))
        return await self._insert(validated_fields(title, description, category, original_text, validation))

    async def _insert(self, fields: Dict[str, Any]) -> Todo:
        todo = Todo(id=self._next_id, created_at=datetime.now(), **fields)
        self._todos[todo.id] = todo
        self._next_id += 1
        logger.info(f"Created todo {todo.id}")
        return todo.model_copy(deep=True)

    async def update(self, todo_id: int, changes: TodoUpdate) -> Optional[Todo]:
        existing = self._todos.get(todo_id)
        if existing is None:
            return None
        merged = merge_update(existing, changes)
        updated = existing.model_copy(update=merged)
        self._todos[todo_id] = updated
        return updated.model_copy(deep=True)

    async def delete(self, todo_id: int) -> Optional[Todo]:
        todo = self._todos.pop(todo_id, None)
        if todo is not None:
            logger.info(f"Deleted todo {todo_id}")
        return todo
