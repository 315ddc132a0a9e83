"""Shared pytest fixtures for the Cyclone test suite."""

from __future__ import annotations

from datetime import datetime
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from src.interfaces.calendar_provider import ICalendarProvider
from src.interfaces.chat_surface import IConversation, IMessageHandle
from src.interfaces.document_store_provider import IDocumentStoreProvider
from src.interfaces.llm_provider import ILLMProvider
from src.interfaces.pdf_text_provider import IPdfTextProvider
from src.models.chat import MessageView
from src.models.extraction import ContentSource, ExtractionResult, ItemKind
from src.models.records import CalendarEventRef, StoreRecordRef, TaskRef
from src.pipeline.interaction_cache import InteractionCache
from src.providers.cache.memory_cache import MemoryCacheProvider
from src.utils.clock import OperatingClock


# ---------------------------------------------------------------------------
# Time
# ---------------------------------------------------------------------------


class FakeTimer:
    """Monotonic clock that only moves when told to."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def fake_timer() -> FakeTimer:
    return FakeTimer()


@pytest.fixture
def clock() -> OperatingClock:
    """Operating clock frozen at 2025-06-10 09:30 Asia/Taipei (a Tuesday)."""
    return OperatingClock(timezone="Asia/Taipei", now_fn=lambda: datetime(2025, 6, 10, 9, 30))


# ---------------------------------------------------------------------------
# Cache
# ---------------------------------------------------------------------------


@pytest.fixture
def memory_cache(fake_timer: FakeTimer) -> MemoryCacheProvider:
    return MemoryCacheProvider(default_ttl=3600, check_period=600, max_size=100, timer=fake_timer)


@pytest.fixture
def interaction_cache(memory_cache: MemoryCacheProvider) -> InteractionCache:
    return InteractionCache(memory_cache, analysis_ttl=3600, record_ttl=86400, claim_ttl=120, url_processing_ttl=60)


# ---------------------------------------------------------------------------
# Extraction results
# ---------------------------------------------------------------------------


@pytest.fixture
def sample_result() -> ExtractionResult:
    return ExtractionResult(
        title="部門會議",
        kind=ItemKind.EVENT,
        start_date="2025-06-11",
        start_time="14:00",
        location="三樓會議室",
        summary="每週例行部門會議",
        description="每週例行部門會議",
        confidence=0.9,
        source=ContentSource.TEXT,
    )


@pytest.fixture
def llm_reply() -> dict[str, Any]:
    """A well-formed model reply for 明天下午兩點開會 with today = 2025-06-10."""
    return {
        "title": "開會",
        "type": "event",
        "startDate": "2025-06-11",
        "startTime": "14:00",
        "endDate": None,
        "endTime": None,
        "location": None,
        "deadline": None,
        "deadlineDescription": None,
        "contact": {"name": None, "phone": None, "email": None},
        "priority": "medium",
        "summary": "明天下午兩點開會",
        "confidence": 0.9,
        "reminder": {"enabled": False},
    }


# ---------------------------------------------------------------------------
# Provider mocks
# ---------------------------------------------------------------------------


@pytest.fixture
def mock_llm() -> MagicMock:
    llm = MagicMock(spec=ILLMProvider)
    llm.generate = AsyncMock(return_value="{}")
    llm.supports_mime_type.return_value = True
    llm.get_provider_name.return_value = "gemini"
    llm.is_available.return_value = True
    return llm


@pytest.fixture
def mock_pdf_text() -> MagicMock:
    provider = MagicMock(spec=IPdfTextProvider)
    provider.extract_text = AsyncMock(return_value="")
    provider.get_provider_name.return_value = "pymupdf"
    return provider


@pytest.fixture
def mock_document_store() -> MagicMock:
    store = MagicMock(spec=IDocumentStoreProvider)
    store.create_record = AsyncMock(
        return_value=StoreRecordRef(id="page-1", url="https://www.notion.so/page1")
    )
    store.create_info_record = AsyncMock(
        return_value=StoreRecordRef(id="page-2", url="https://www.notion.so/page2")
    )
    store.query_calendar_items = AsyncMock(return_value=[])
    store.is_available.return_value = True
    store.get_provider_name.return_value = "notion"
    return store


@pytest.fixture
def mock_calendar() -> MagicMock:
    calendar = MagicMock(spec=ICalendarProvider)
    calendar.create_event = AsyncMock(
        return_value=CalendarEventRef(id="evt-1", link="https://calendar.google.com/event?eid=evt-1")
    )
    calendar.create_task = AsyncMock(return_value=TaskRef(id="task-1"))
    calendar.is_configured.return_value = True
    calendar.get_provider_name.return_value = "google"
    return calendar


# ---------------------------------------------------------------------------
# Chat surface fakes
# ---------------------------------------------------------------------------


class FakeMessageHandle(IMessageHandle):
    """Records every view the handler renders into a posted message."""

    def __init__(self, message_id: str) -> None:
        self._message_id = message_id
        self.views: list[MessageView] = []

    @property
    def message_id(self) -> str:
        return self._message_id

    async def edit(self, view: MessageView) -> None:
        self.views.append(view)

    @property
    def last_view(self) -> MessageView:
        return self.views[-1]


class FakeConversation(IConversation):
    """In-memory conversation: replies get sequential ids, attachments come from a dict."""

    def __init__(self, attachments: dict[str, bytes] | None = None) -> None:
        self.handles: list[FakeMessageHandle] = []
        self.reactions: list[str] = []
        self._attachments = attachments or {}
        self._next_id = 900000000000000001

    async def reply(self, view: MessageView) -> IMessageHandle:
        handle = FakeMessageHandle(str(self._next_id))
        self._next_id += 1
        handle.views.append(view)
        self.handles.append(handle)
        return handle

    async def react(self, emoji: str) -> None:
        self.reactions.append(emoji)

    async def read_attachment(self, attachment) -> bytes:  # noqa: ANN001
        return self._attachments[attachment.url]


@pytest.fixture
def conversation() -> FakeConversation:
    return FakeConversation()
