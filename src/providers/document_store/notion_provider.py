"""Notion document store over the public REST API (httpx).

Pages are created with ``POST /v1/pages`` and the calendar database is
read back for ``/today`` with ``POST /v1/databases/{id}/query``.
Property names match the two existing Notion databases:

    info database      title | date | type | url | 摘要 | Author
    calendar database  Name | 日期 | 類型 | 優先級 | 狀態

Page bodies are built from blocks: the summary or description, detail
lines for time/location/deadline, contact info, a video embed for
YouTube links, and a footer stamped with the local creation time.
"""

from __future__ import annotations

import re
from datetime import date
from typing import Any

import httpx
import structlog

from src.interfaces.document_store_provider import IDocumentStoreProvider
from src.models.content import UrlCategory
from src.models.extraction import ItemKind, Priority
from src.models.records import CalendarItem, CalendarRecord, InfoRecord, StoreRecordRef
from src.utils.clock import OperatingClock
from src.utils.errors import DownstreamWriteError, ProviderUnavailableError, ServiceNotConfiguredError
from src.utils.retry import is_safe_to_resend, with_retry

logger = structlog.get_logger(logger_name=__name__)

_API_URL = "https://api.notion.com/v1"
_NOTION_VERSION = "2022-06-28"
_TEXT_LIMIT = 2000
_TITLE_LIMIT = 100
_FOOTER = "Created by Cyclone Discord Bot"

_KIND_LABELS = {"event": "活動", "task": "任務", "note": "任務"}
_PENDING_STATUS = "待處理"
_IN_PROGRESS_STATUS = "進行中"
_PRIORITY_BY_LABEL = {priority.label: priority for priority in Priority}
_QUERY_PAGE_SIZE = 100
_AUTHOR_UNSAFE_RE = re.compile(r"[,，\n\r\t]")


def page_url(page_id: str) -> str:
    """Desktop-friendly page URL (dashes removed)."""
    return f"https://www.notion.so/{page_id.replace('-', '')}"


def sanitize_author(author: str | None) -> str | None:
    """Multi-select options cannot contain commas; collapse them to spaces."""
    if not author:
        return None
    cleaned = _AUTHOR_UNSAFE_RE.sub(" ", author).strip()[:_TITLE_LIMIT]
    return cleaned or None


def _rich_text(content: str, **annotations: Any) -> dict[str, Any]:
    item: dict[str, Any] = {"type": "text", "text": {"content": content[:_TEXT_LIMIT]}}
    if annotations:
        item["annotations"] = annotations
    return item


def _paragraph(*parts: dict[str, Any]) -> dict[str, Any]:
    return {"object": "block", "type": "paragraph", "paragraph": {"rich_text": list(parts)}}


def _labelled(label: str, value: str) -> dict[str, Any]:
    return _paragraph(_rich_text(label, bold=True), _rich_text(value))


def _divider() -> dict[str, Any]:
    return {"object": "block", "type": "divider", "divider": {}}


class NotionDocumentStore(IDocumentStoreProvider):
    """Writes calendar items and collected links to Notion databases.

    Parameters
    ----------
    api_key:
        Notion integration token.
    info_database_id / calendar_database_id:
        Target databases; an empty id makes the matching create call
        raise :class:`ServiceNotConfiguredError`.
    clock:
        Supplies the footer timestamp and the info record date.
    retry_delay:
        Seconds before the first resend of a throttled request.
    """

    def __init__(
        self,
        api_key: str,
        info_database_id: str,
        calendar_database_id: str,
        clock: OperatingClock,
        http_client: httpx.AsyncClient | None = None,
        timeout: float = 15.0,
        retry_delay: float = 1.0,
    ) -> None:
        self._api_key = api_key
        self._info_db = info_database_id
        self._calendar_db = calendar_database_id
        self._clock = clock
        self._client = http_client or httpx.AsyncClient(timeout=httpx.Timeout(timeout))
        self._retry_delay = retry_delay

    # ------------------------------------------------------------------
    # IDocumentStoreProvider implementation
    # ------------------------------------------------------------------

    async def create_record(self, record: CalendarRecord) -> StoreRecordRef:
        if not self._api_key or not self._calendar_db:
            raise ServiceNotConfiguredError(
                message="NOTION_DATABASE_ID_CALENDAR is not set",
                provider_name=self.get_provider_name(),
            )

        properties: dict[str, Any] = {
            "Name": {"title": [{"text": {"content": record.title[:_TITLE_LIMIT]}}]},
            "類型": {"select": {"name": _KIND_LABELS.get(record.record_type, "任務")}},
            "優先級": {"select": {"name": record.priority.label}},
            "狀態": {"select": {"name": _PENDING_STATUS}},
        }
        date_property = self._date_property(record)
        if date_property:
            properties["日期"] = {"date": date_property}

        ref = await self._create_page(self._calendar_db, properties, self._calendar_blocks(record))
        logger.info("notion_calendar_record_created", page_id=ref.id, record_type=record.record_type)
        return ref

    async def create_info_record(self, record: InfoRecord) -> StoreRecordRef:
        if not self._api_key or not self._info_db:
            raise ServiceNotConfiguredError(
                message="NOTION_DATABASE_ID_INFO is not set",
                provider_name=self.get_provider_name(),
            )

        content = record.content
        properties: dict[str, Any] = {
            "title": {"title": [{"text": {"content": (content.title or "Untitled")[:_TITLE_LIMIT]}}]},
            "date": {"date": {"start": record.saved_on}},
            "type": {"select": {"name": content.category.record_type}},
            "url": {"url": content.url},
        }
        if content.description:
            properties["摘要"] = {"rich_text": [{"text": {"content": content.description[:_TEXT_LIMIT]}}]}
        author = sanitize_author(content.author)
        if author:
            properties["Author"] = {"multi_select": [{"name": author}]}

        ref = await self._create_page(self._info_db, properties, self._info_blocks(record))
        logger.info("notion_info_record_created", page_id=ref.id, category=content.category.value)
        return ref

    async def query_calendar_items(self, day: date) -> list[CalendarItem]:
        if not self._api_key or not self._calendar_db:
            raise ServiceNotConfiguredError(
                message="NOTION_DATABASE_ID_CALENDAR is not set",
                provider_name=self.get_provider_name(),
            )

        events = await self._query(
            {
                "and": [
                    {"property": "日期", "date": {"equals": day.isoformat()}},
                    {"property": "類型", "select": {"equals": _KIND_LABELS["event"]}},
                ]
            },
            sorts=[{"property": "日期", "direction": "ascending"}],
        )
        tasks = await self._query(
            {
                "and": [
                    {
                        "or": [
                            {"property": "狀態", "select": {"equals": _PENDING_STATUS}},
                            {"property": "狀態", "select": {"equals": _IN_PROGRESS_STATUS}},
                        ]
                    },
                    {"property": "類型", "select": {"equals": _KIND_LABELS["task"]}},
                ]
            },
            sorts=[
                {"property": "優先級", "direction": "ascending"},
                {"property": "日期", "direction": "ascending"},
            ],
        )
        logger.info("notion_calendar_queried", day=day.isoformat(), events=len(events), tasks=len(tasks))
        return [_to_calendar_item(page, ItemKind.EVENT) for page in events] + [
            _to_calendar_item(page, ItemKind.TASK) for page in tasks
        ]

    def is_available(self) -> bool:
        return bool(self._api_key)

    def get_provider_name(self) -> str:
        return "notion"

    # ------------------------------------------------------------------
    # Page body construction
    # ------------------------------------------------------------------

    def _date_property(self, record: CalendarRecord) -> dict[str, Any] | None:
        if not record.start_date:
            return None
        if record.start_time:
            prop: dict[str, Any] = {
                "start": f"{record.start_date}T{record.start_time}:00",
                "time_zone": self._clock.timezone_name,
            }
            if record.end_time:
                prop["end"] = f"{record.end_date or record.start_date}T{record.end_time}:00"
            return prop
        prop = {"start": record.start_date}
        if record.end_date and record.end_date != record.start_date:
            prop["end"] = record.end_date
        return prop

    def _calendar_blocks(self, record: CalendarRecord) -> list[dict[str, Any]]:
        blocks: list[dict[str, Any]] = []
        if record.summary:
            blocks.append(
                {
                    "object": "block",
                    "type": "callout",
                    "callout": {
                        "rich_text": [_rich_text(record.summary)],
                        "icon": {"type": "emoji", "emoji": "📋"},
                    },
                }
            )
        if record.start_time:
            span = f"{record.start_time} - {record.end_time}" if record.end_time else record.start_time
            blocks.append(_labelled("🕐 Time: ", span))
        if record.location:
            blocks.append(_labelled("📍 Location: ", record.location))
        if record.deadline:
            due = record.deadline
            if record.deadline_description:
                due = f"{due} ({record.deadline_description})"
            blocks.append(_labelled("⏰ Deadline: ", due))
        if record.back_link:
            blocks.append(
                _paragraph(
                    _rich_text("📅 Google Calendar: ", bold=True),
                    {"type": "text", "text": {"content": "Open event", "link": {"url": record.back_link}}},
                )
            )
        if record.contact_lines:
            blocks.append(
                {
                    "object": "block",
                    "type": "heading_3",
                    "heading_3": {"rich_text": [_rich_text("Contact")]},
                }
            )
            blocks.append(_paragraph(_rich_text("\n".join(record.contact_lines))))
        blocks.append(_divider())
        blocks.append(self._footer())
        return blocks

    def _info_blocks(self, record: InfoRecord) -> list[dict[str, Any]]:
        content = record.content
        blocks: list[dict[str, Any]] = []
        if content.description:
            blocks.append(_paragraph(_rich_text(content.description)))
        if content.category is UrlCategory.YOUTUBE:
            blocks.append(
                {
                    "object": "block",
                    "type": "video",
                    "video": {"type": "external", "external": {"url": content.url}},
                }
            )
        blocks.append(_divider())
        blocks.append(self._footer())
        return blocks

    def _footer(self) -> dict[str, Any]:
        return _paragraph(
            _rich_text(f"{_FOOTER} [{self._clock.timestamp_label()}]", italic=True, color="gray")
        )

    # ------------------------------------------------------------------
    # HTTP
    # ------------------------------------------------------------------

    async def _create_page(
        self,
        database_id: str,
        properties: dict[str, Any],
        children: list[dict[str, Any]],
    ) -> StoreRecordRef:
        payload = {
            "parent": {"database_id": database_id},
            "properties": properties,
            "children": children,
        }
        headers = {
            "Authorization": f"Bearer {self._api_key}",
            "Notion-Version": _NOTION_VERSION,
            "Content-Type": "application/json",
        }

        async def _post() -> httpx.Response:
            response = await self._client.post(f"{_API_URL}/pages", json=payload, headers=headers)
            response.raise_for_status()
            return response

        try:
            # POST /pages is not idempotent; only resend when nothing can have been created.
            response = await with_retry(
                _post,
                operation="notion_create_page",
                retry_if=is_safe_to_resend,
                delay=self._retry_delay,
            )
            page_id = response.json()["id"]
        except httpx.HTTPStatusError as exc:
            logger.error(
                "notion_create_page_failed",
                status=exc.response.status_code,
                body=exc.response.text[:500],
                title=_first_title(properties),
            )
            raise DownstreamWriteError(
                message=f"Notion rejected the page (HTTP {exc.response.status_code})",
                provider_name=self.get_provider_name(),
            ) from exc
        except (httpx.HTTPError, ValueError, KeyError) as exc:
            raise DownstreamWriteError(
                message=f"Notion request failed: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

        return StoreRecordRef(id=page_id, url=page_url(page_id))

    async def _query(
        self,
        query_filter: dict[str, Any],
        sorts: list[dict[str, Any]],
    ) -> list[dict[str, Any]]:
        """Run a calendar database query, following ``next_cursor`` pages."""
        headers = {
            "Authorization": f"Bearer {self._api_key}",
            "Notion-Version": _NOTION_VERSION,
            "Content-Type": "application/json",
        }
        url = f"{_API_URL}/databases/{self._calendar_db}/query"
        results: list[dict[str, Any]] = []
        cursor: str | None = None

        while True:
            payload: dict[str, Any] = {"filter": query_filter, "sorts": sorts, "page_size": _QUERY_PAGE_SIZE}
            if cursor:
                payload["start_cursor"] = cursor

            async def _post(body: dict[str, Any] = payload) -> httpx.Response:
                response = await self._client.post(url, json=body, headers=headers)
                response.raise_for_status()
                return response

            try:
                response = await with_retry(_post, operation="notion_query", delay=self._retry_delay)
                data = response.json()
            except httpx.HTTPStatusError as exc:
                logger.error(
                    "notion_query_failed",
                    status=exc.response.status_code,
                    body=exc.response.text[:500],
                )
                raise ProviderUnavailableError(
                    message=f"Notion query failed (HTTP {exc.response.status_code})",
                    provider_name=self.get_provider_name(),
                ) from exc
            except (httpx.HTTPError, ValueError) as exc:
                raise ProviderUnavailableError(
                    message=f"Notion query failed: {exc}",
                    provider_name=self.get_provider_name(),
                ) from exc

            if not isinstance(data, dict):
                raise ProviderUnavailableError(
                    message="Notion query returned an unexpected body",
                    provider_name=self.get_provider_name(),
                )
            results.extend(page for page in data.get("results", []) if isinstance(page, dict))
            cursor = data.get("next_cursor")
            if not data.get("has_more") or not cursor:
                return results


def _first_title(properties: dict[str, Any]) -> str | None:
    for value in properties.values():
        if "title" in value:
            return value["title"][0]["text"]["content"]
    return None


def _to_calendar_item(page: dict[str, Any], kind: ItemKind) -> CalendarItem:
    properties = page.get("properties") or {}
    title_parts = (properties.get("Name") or {}).get("title") or []
    title = "".join(
        part.get("plain_text") or (part.get("text") or {}).get("content", "") for part in title_parts
    ).strip()

    start = ((properties.get("日期") or {}).get("date") or {}).get("start") or ""
    on = start[:10] or None
    time = start[11:16] if "T" in start else None

    priority_name = ((properties.get("優先級") or {}).get("select") or {}).get("name")
    status_name = ((properties.get("狀態") or {}).get("select") or {}).get("name")
    return CalendarItem(
        title=title or "Untitled",
        kind=kind,
        on=on,
        time=time or None,
        priority=_PRIORITY_BY_LABEL.get(priority_name, Priority.MEDIUM),
        in_progress=status_name == _IN_PROGRESS_STATUS,
    )
