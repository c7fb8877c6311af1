from __future__ import annotations
from abc import ABC, abstractmethod


class MalformedResponseError(ValueError):
    """The provider answered successfully but the body carries no usable text."""


class LLMProvider(ABC):
    @abstractmethod
    def generate(self, *, system: str, user: str, temperature: float = 0.2) -> str:
        """
        Must return the model output as TEXT (JSON is parsed/validated in LLMClient).
        Transport failures surface as httpx.HTTPError, unusable bodies as
        MalformedResponseError.
        """
        raise NotImplementedError
