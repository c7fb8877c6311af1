import pytest
from datetime import date

from llm.llm_client import LLMClient
from search.tavily_client import TavilyClient, TavilyConfig

TODAY = date(2026, 10, 19)


class FakeProvider:
    def __init__(self, response_text: str):
        self._response_text = response_text
        self.calls = []

    def generate(self, *, system: str, user: str, temperature: float = 0.2) -> str:
        self.calls.append({"system": system, "user": user, "temperature": temperature})
        return self._response_text


class ScriptedProvider(FakeProvider):
    """Answers extraction prompts and suggestion prompts differently."""

    def __init__(self, extraction_text: str, suggestions_text: str = '{"suggestions": [], "reasoning": "none"}'):
        super().__init__(extraction_text)
        self._suggestions_text = suggestions_text

    def generate(self, *, system: str, user: str, temperature: float = 0.2) -> str:
        super().generate(system=system, user=user, temperature=temperature)
        if "Validation Issues:" in user:
            return self._suggestions_text
        return self._response_text


class FakeSearch(TavilyClient):
    """Search client whose lookups return canned values; local heuristics stay real."""

    def __init__(self, business_info=None, nearby=None):
        super().__init__(TavilyConfig(api_key="test-key"))
        self.business_info = business_info
        self.nearby = nearby or []
        self.lookups = []

    def search_business(self, business_name, location):
        self.lookups.append((business_name, location))
        return self.business_info.model_copy(deep=True)

    def search_nearby_businesses(self, business_type, location, limit=5):
        return self.nearby[:limit]


class FakeResponse:
    def __init__(self, payload, status_code: int = 200):
        self._payload = payload
        self.status_code = status_code

    def raise_for_status(self):
        import requests

        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")

    def json(self):
        if isinstance(self._payload, Exception):
            raise self._payload
        return self._payload


@pytest.fixture
def fake_provider_factory():
    def _make(response_text: str):
        return FakeProvider(response_text)
    return _make


@pytest.fixture
def unconfigured_llm():
    return LLMClient(provider=None, today=lambda: TODAY)


@pytest.fixture
def unconfigured_search():
    return TavilyClient(TavilyConfig(api_key=""))
