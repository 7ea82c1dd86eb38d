"""Shared fixtures for provider and adapter unit tests.

Backend SDK clients are replaced with mocks; streams are replaced with
FakeStream so tests can observe ordering and connection release.
"""

from collections.abc import Iterable
from typing import Any

import pytest

from llm_providers.config import ProviderType
from llm_providers.llm.base import ChatModel


class FakeStream:
    """Async-iterable stand-in for an SDK stream object.

    Attributes:
        items: Native chunks yielded in order.
        fail_after: Index at which ``error`` is raised instead of yielding.
        closed: True once ``close()`` or ``aclose()`` has been awaited.
        delivered: Number of chunks handed to the consumer.
    """

    def __init__(
        self,
        items: Iterable[Any],
        error: Exception | None = None,
        fail_after: int | None = None,
    ) -> None:
        self.items = list(items)
        self.error = error
        self.fail_after = fail_after
        self.closed = False
        self.delivered = 0

    def __aiter__(self):
        return self

    async def __anext__(self):
        if self.fail_after is not None and self.delivered == self.fail_after:
            raise self.error
        if self.delivered >= len(self.items):
            raise StopAsyncIteration
        item = self.items[self.delivered]
        self.delivered += 1
        return item

    async def close(self) -> None:
        self.closed = True

    async def aclose(self) -> None:
        self.closed = True


class BackendError(Exception):
    """Backend failure exposing only a ``status`` attribute."""

    def __init__(self, message: str, status: int) -> None:
        super().__init__(message)
        self.status = status


@pytest.fixture
def openai_model():
    """Chat model bound to an OpenAI provider."""
    return ChatModel(
        id="gpt-4o",
        provider_type=ProviderType.OPENAI,
        provider_id="openai",
        model="gpt-4o",
    )


@pytest.fixture
def azure_model():
    """Chat model bound to an Azure OpenAI provider."""
    return ChatModel(
        id="azure-gpt-4o",
        provider_type=ProviderType.AZURE_OPENAI,
        provider_id="azure",
        model="gpt-4o",
    )


@pytest.fixture
def anthropic_model():
    """Chat model bound to an Anthropic provider."""
    return ChatModel(
        id="claude-sonnet",
        provider_type=ProviderType.ANTHROPIC,
        provider_id="anthropic",
        model="claude-sonnet-4-5",
    )


@pytest.fixture
def gemini_model():
    """Chat model bound to a Gemini provider."""
    return ChatModel(
        id="gemini-flash",
        provider_type=ProviderType.GEMINI,
        provider_id="gemini",
        model="gemini-2.5-flash",
    )


@pytest.fixture
def fake_stream():
    """FakeStream class, for building streams inside tests."""
    return FakeStream


@pytest.fixture
def backend_error():
    """BackendError class, for status-only backend failures."""
    return BackendError
