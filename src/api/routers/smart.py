import asyncio
import logging
import time
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from api.dependencies import get_search_client, get_todo_store, get_validator
from api.metrics import TODOS_CREATED_TOTAL, VALIDATIONS_TOTAL, record_request
from search.tavily_client import TavilyClient
from storage.todo_store import MAX_TITLE_LENGTH, InvalidTodoError, TodoStore
from todo_app.models import CATEGORIES, BusinessInfo, ParsedData, ValidationResult
from validation.todo_validator import TodoValidator

router = APIRouter()
logger = logging.getLogger(__name__)

MAX_SEARCH_RESULTS = 10
DEFAULT_SEARCH_RESULTS = 5


class ValidateIn(BaseModel):
    text: Optional[str] = None


class SmartCreateIn(BaseModel):
    text: Optional[str] = None
    title: Optional[str] = None
    description: Optional[str] = None
    category: Optional[str] = None


def _server_error(message: str, error: Exception) -> HTTPException:
    return HTTPException(
        status_code=500,
        detail={
            "error": "Internal server error",
            "message": message,
            "details": str(error),
        },
    )


async def _validate(validator: TodoValidator, text: str) -> ValidationResult:
    result = await asyncio.to_thread(validator.validate_todo, text)
    try:
        VALIDATIONS_TOTAL.labels(status=result.validation_status.value).inc()
    except Exception:
        pass
    return result


@router.post("/todos/validate")
async def validate_todo(
    payload: ValidateIn,
    validator: TodoValidator = Depends(get_validator),
) -> ValidationResult:
    start = time.time()
    if not payload.text or not payload.text.strip():
        raise HTTPException(status_code=400, detail="Text is required and must be a non-empty string")

    try:
        result = await _validate(validator, payload.text.strip())
    except Exception as e:
        logger.exception("Error validating todo")
        record_request("/todos/validate", "error", start, time.time())
        raise _server_error("Failed to validate todo", e)

    record_request("/todos/validate", result.validation_status.value, start, time.time())
    return result


@router.post("/todos/create", status_code=201)
async def create_validated_todo(
    payload: SmartCreateIn,
    validator: TodoValidator = Depends(get_validator),
    store: TodoStore = Depends(get_todo_store),
) -> dict:
    """Create a todo from free text, explicit fields, or both.

    Explicit fields win over what was parsed from the text.
    """
    start = time.time()
    text = payload.text.strip() if payload.text and payload.text.strip() else None

    title = payload.title
    description = payload.description
    category = payload.category

    validation: Optional[ValidationResult] = None
    if text:
        try:
            validation = await _validate(validator, text)
        except Exception as e:
            logger.exception("Error validating todo text for creation")
            record_request("/todos/create", "error", start, time.time())
            raise _server_error("Failed to create todo", e)

        parsed = validation.parsed_data
        if not title and parsed.task:
            # the full text stays in original_text and the description
            title = parsed.task[:MAX_TITLE_LENGTH]
        if not description:
            description = f'Parsed from: "{text}"'
        if not category and parsed.category:
            category = parsed.category

    if not title:
        raise HTTPException(
            status_code=400,
            detail="Title is required (either directly or through text parsing)",
        )

    if category not in CATEGORIES:
        category = "Personal"

    try:
        todo = await store.create_validated(
            title=title,
            description=description or "",
            category=category,
            original_text=text,
            validation=validation,
        )
    except InvalidTodoError as e:
        raise HTTPException(status_code=400, detail=str(e))

    record_request("/todos/create", "created", start, time.time())
    try:
        TODOS_CREATED_TOTAL.labels(source="smart" if validation else "manual").inc()
    except Exception:
        pass

    return {
        "todo": todo.model_dump(mode="json"),
        "validation": validation.model_dump(mode="json", by_alias=True) if validation else None,
    }


@router.get("/todos/suggestions/{todo_id}")
async def get_suggestions(
    todo_id: int,
    store: TodoStore = Depends(get_todo_store),
    validator: TodoValidator = Depends(get_validator),
) -> dict:
    todo = await store.get(todo_id)
    if todo is None:
        raise HTTPException(status_code=404, detail="Todo not found")

    if not todo.parsed_data or not todo.business_info:
        return {
            "suggestions": [],
            "message": "No additional suggestions available for this todo",
        }

    try:
        parsed = ParsedData.model_validate(todo.parsed_data)
        business_info = BusinessInfo.model_validate(todo.business_info)
        issues = validator.issues_for(todo)
        alternatives = await asyncio.to_thread(
            validator.generate_alternatives, parsed, business_info, issues
        )
    except Exception as e:
        logger.exception(f"Error fetching suggestions for todo {todo_id}")
        raise _server_error("Failed to fetch suggestions", e)

    return {
        "todoId": todo_id,
        "suggestions": alternatives,
        "currentStatus": todo.validation_status.value,
    }


def _clamp_limit(limit: Optional[str]) -> int:
    try:
        value = int(limit) if limit is not None else DEFAULT_SEARCH_RESULTS
    except ValueError:
        value = DEFAULT_SEARCH_RESULTS
    if value <= 0:
        value = DEFAULT_SEARCH_RESULTS
    return min(value, MAX_SEARCH_RESULTS)


@router.get("/search/businesses")
async def search_businesses(
    type: Optional[str] = None,
    location: Optional[str] = None,
    limit: Optional[str] = None,
    search: TavilyClient = Depends(get_search_client),
) -> dict:
    if not type or not location:
        raise HTTPException(status_code=400, detail="Both type and location parameters are required")

    max_results = _clamp_limit(limit)
    businesses = await asyncio.to_thread(search.search_nearby_businesses, type, location, max_results)

    return {
        "query": {"type": type, "location": location, "limit": max_results},
        "results": businesses,
    }
