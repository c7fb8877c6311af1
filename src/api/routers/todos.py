import logging
import time
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException

from api.dependencies import get_todo_store
from api.metrics import TODOS_CREATED_TOTAL, record_request
from storage.todo_store import InvalidTodoError, TodoStore
from todo_app.models import Todo, TodoCreate, TodoUpdate

router = APIRouter()
logger = logging.getLogger(__name__)

NOT_FOUND = "Todo not found"


@router.get("/todos")
async def list_todos(
    category: Optional[str] = None,
    store: TodoStore = Depends(get_todo_store),
) -> list[Todo]:
    """List todos, newest first. Unknown categories are ignored."""
    start = time.time()
    todos = await store.list(category)
    record_request("/todos", "ok", start, time.time())
    return todos


@router.get("/todos/{todo_id}")
async def get_todo(todo_id: int, store: TodoStore = Depends(get_todo_store)) -> Todo:
    todo = await store.get(todo_id)
    if todo is None:
        raise HTTPException(status_code=404, detail=NOT_FOUND)
    return todo


@router.post("/todos", status_code=201)
async def create_todo(payload: TodoCreate, store: TodoStore = Depends(get_todo_store)) -> Todo:
    start = time.time()
    try:
        todo = await store.create(payload)
    except InvalidTodoError as e:
        record_request("/todos", "rejected", start, time.time())
        raise HTTPException(status_code=400, detail=str(e))

    record_request("/todos", "created", start, time.time())
    try:
        TODOS_CREATED_TOTAL.labels(source="manual").inc()
    except Exception:
        pass
    return todo


@router.put("/todos/{todo_id}")
async def update_todo(
    todo_id: int,
    payload: TodoUpdate,
    store: TodoStore = Depends(get_todo_store),
) -> Todo:
    """Partial update: fields left out of the body keep their current value."""
    try:
        todo = await store.update(todo_id, payload)
    except InvalidTodoError as e:
        raise HTTPException(status_code=400, detail=str(e))

    if todo is None:
        raise HTTPException(status_code=404, detail=NOT_FOUND)
    return todo


@router.delete("/todos/{todo_id}")
async def delete_todo(todo_id: int, store: TodoStore = Depends(get_todo_store)) -> dict:
    todo = await store.delete(todo_id)
    if todo is None:
        raise HTTPException(status_code=404, detail=NOT_FOUND)
    return {"message": "Todo deleted successfully", "todo": todo.model_dump(mode="json")}
