from fastapi import Request

from api.state import Services
from search.tavily_client import TavilyClient
from storage.todo_store import TodoStore
from validation.todo_validator import TodoValidator


def get_services(request: Request) -> Services:
    return request.app.state.services


def get_todo_store(request: Request) -> TodoStore:
    return get_services(request).store


def get_validator(request: Request) -> TodoValidator:
    return get_services(request).validator


def get_search_client(request: Request) -> TavilyClient:
    return get_services(request).search
