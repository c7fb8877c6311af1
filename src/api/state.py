import os
from dataclasses import dataclass
from typing import Optional

from llm.llm_client import LLMClient
from search.tavily_client import TavilyClient, TavilyConfig
from storage.todo_store import InMemoryTodoStore, PostgresTodoStore, TodoStore
from validation.todo_validator import TodoValidator

USE_DATABASE = os.getenv(
    "USE_DATABASE", "true" if os.getenv("DATABASE_URL") else "false"
).lower() in {"1", "true", "yes"}


@dataclass
class Services:
    """Everything a request handler needs, built once per process at startup."""

    store: TodoStore
    llm: LLMClient
    search: TavilyClient
    validator: TodoValidator


def build_services(
    store: Optional[TodoStore] = None,
    llm: Optional[LLMClient] = None,
    search: Optional[TavilyClient] = None,
) -> Services:
    store = store or (PostgresTodoStore() if USE_DATABASE else InMemoryTodoStore())
    llm = llm or LLMClient.from_env()
    search = search or TavilyClient(TavilyConfig.from_env())
    return Services(
        store=store,
        llm=llm,
        search=search,
        validator=TodoValidator(llm, search),
    )
