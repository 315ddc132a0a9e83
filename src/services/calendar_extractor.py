"""AI-based calendar extraction for messages, images and PDFs.

Sends content to an AI provider together with a prompt that encodes the
operating locale's conventions (ROC-era years, relative dates in the
Asia/Taipei time zone, event-vs-task wording) and maps the JSON reply
onto an immutable :class:`ExtractionResult`.

Two separate steps turn the reply into a result:

  - :func:`parse_model_json` finds the JSON object in the reply.  It is
    the only step allowed to fail (``MalformedResponseError``).
  - :func:`normalize_extraction` fills every missing or invalid field
    with its default.  It never raises for any JSON object, including
    an empty one.

PDFs go through an ordered list of strategies: the whole file inline
first, then its text layer as plain text.  An empty text layer is
terminal (``UnreadableDocumentError``).
"""

from __future__ import annotations

import json
import math
import re
from datetime import date
from typing import Any, Awaitable, Callable, Mapping

from src.interfaces.llm_provider import ILLMProvider, PromptPart
from src.interfaces.pdf_text_provider import IPdfTextProvider
from src.models.extraction import (
    Contact,
    ContentSource,
    ExtractionResult,
    ItemKind,
    Priority,
    Reminder,
    ReminderMode,
)
from src.utils.clock import ROC_YEAR_OFFSET, OperatingClock
from src.utils.errors import (
    CycloneError,
    LLMError,
    MalformedResponseError,
    UnreadableDocumentError,
)
from src.utils.logging import get_logger
from src.utils.retry import with_timeout

PLACEHOLDER_TITLE = "Untitled"

_JSON_FENCE_RE = re.compile(r"```(?:json)?\s*\n?(.*?)\n?\s*```", re.DOTALL)
_DATE_RE = re.compile(r"^(\d{2,4})\s*[-/.年]\s*(\d{1,2})\s*[-/.月]\s*(\d{1,2})")
_TIME_RE = re.compile(r"^(\d{1,2})[:：](\d{2})")
_NULL_STRINGS = frozenset({"", "null", "none", "n/a", "无", "無"})

_KIND_ALIASES = {"task": ItemKind.TASK, "任務": ItemKind.TASK}
_PRIORITY_ALIASES = {
    "high": Priority.HIGH,
    "高": Priority.HIGH,
    "medium": Priority.MEDIUM,
    "中": Priority.MEDIUM,
    "low": Priority.LOW,
    "低": Priority.LOW,
}

# Long PDFs are cut before being resent as text.
_MAX_TEXT_CHARS = 30000

# Two- and three-digit years in this range are read as ROC years (1991-2111).
_MIN_ROC_YEAR = 80
_MAX_ROC_YEAR = 200


# ---------------------------------------------------------------------------
# Prompt construction
# ---------------------------------------------------------------------------


def build_extraction_prompt(clock: OperatingClock) -> str:
    """Return the extraction instructions anchored to *clock*'s today."""
    today = clock.today()
    roc_year = clock.roc_year()
    return f"""You are an administrative assistant who extracts calendar information from
official notices, announcements, chat messages and images. Most input is in
Traditional Chinese (Taiwan).

Today is {today.isoformat()} ({clock.weekday_name()}), time zone {clock.timezone_name}.
The current ROC (民國) year is {roc_year}.

DATE RULES
- Convert every ROC-era year to the Gregorian calendar: Gregorian = ROC + {ROC_YEAR_OFFSET}.
  Example: 民國{roc_year}年2月6日 -> {roc_year + ROC_YEAR_OFFSET}-02-06; {roc_year}/02/06 -> {roc_year + ROC_YEAR_OFFSET}-02-06.
- Resolve relative dates against today: 今天 = today, 明天 = today + 1 day,
  後天 = today + 2 days, 下週X / 下星期X = that weekday of next week.
- Output dates as YYYY-MM-DD and times as 24-hour HH:MM (下午兩點 -> 14:00).

EXTRACT
1. title: a concise subject, at most 30 characters, in the language of the input
2. startDate / startTime, endDate / endTime
3. location
4. deadline and deadlineDescription (registration closes, documents due, ...)
5. contact: name, phone, email of the person in charge
6. type: "event" if someone has to attend or watch something at a time
   (開會, 上課, 課程, 直播, 研習, 講座, 聚餐, 典禮, 會議, interviews, doctor visits);
   "task" if something has to be done by a time (買, 繳, 交, 寄, 報名, 填寫, 提交, 付款)
7. reminder, when the user asks to be reminded (提醒我, 通知我):
   - "remind me at 4pm tomorrow to buy milk" -> mode "exact", exactTime is that moment
   - "meeting at 4pm tomorrow, remind me 2 hours before" -> mode "before", beforeMinutes 120

Reply with JSON only, no markdown code block:
{{
  "title": "concise title",
  "type": "event",
  "startDate": "YYYY-MM-DD",
  "startTime": "HH:MM",
  "endDate": "YYYY-MM-DD",
  "endTime": "HH:MM",
  "location": "place",
  "deadline": "YYYY-MM-DD",
  "deadlineDescription": "what is due",
  "contact": {{"name": "name", "phone": "phone", "email": "email"}},
  "priority": "medium",
  "summary": "what this is about, at most 50 characters",
  "confidence": 0.8,
  "reminder": {{
    "enabled": false,
    "mode": "before",
    "exactTime": "YYYY-MM-DD HH:MM",
    "beforeMinutes": 60,
    "description": "original reminder wording"
  }}
}}

NOTES
- type is exactly "event" or "task".
- priority is "high" for near deadlines, "medium" for ordinary notices, "low" for reference material.
- confidence is a number from 0.0 to 1.0 for how sure you are about the dates.
- Use null for any field you cannot determine.
- If the content contains no date information at all, set confidence to 0.
- In official notices the 說明 section usually holds the dates and requirements,
  and 辦法 / 注意事項 hold how to register or submit."""


# ---------------------------------------------------------------------------
# Response parsing
# ---------------------------------------------------------------------------


def parse_model_json(response_text: str) -> dict[str, Any]:
    """Return the first JSON object in *response_text*.

    Raises
    ------
    MalformedResponseError
        If no JSON object can be decoded.
    """
    text = (response_text or "").strip()
    fence_match = _JSON_FENCE_RE.search(text)
    if fence_match:
        text = fence_match.group(1).strip()

    start = text.find("{")
    if start == -1:
        raise MalformedResponseError(message="AI response contains no JSON object")

    # ValueError also covers integers past the interpreter's digit limit.
    try:
        parsed, _ = json.JSONDecoder().raw_decode(text, start)
    except (ValueError, RecursionError):
        # Trailing junk inside the object; fall back to the outermost braces.
        end = text.rfind("}")
        try:
            parsed = json.loads(text[start : end + 1])
        except (ValueError, RecursionError) as exc:
            raise MalformedResponseError(message=f"AI response is not valid JSON: {exc}") from exc

    if not isinstance(parsed, dict):
        raise MalformedResponseError(message="AI response JSON is not an object")
    return parsed


# ---------------------------------------------------------------------------
# Normalization
# ---------------------------------------------------------------------------


def normalize_extraction(
    data: Mapping[str, Any],
    source: ContentSource = ContentSource.TEXT,
) -> ExtractionResult:
    """Build a fully-defaulted result from any parsed JSON object."""
    reminder_data = data.get("reminder")
    if not isinstance(reminder_data, Mapping):
        reminder_data = {}
    contact_data = data.get("contact")
    if not isinstance(contact_data, Mapping):
        contact_data = {}

    summary = _clean_text(data.get("summary"))
    return ExtractionResult(
        title=_clean_text(data.get("title")) or PLACEHOLDER_TITLE,
        kind=_KIND_ALIASES.get((_clean_text(data.get("type")) or "").lower(), ItemKind.EVENT),
        start_date=_clean_date(data.get("startDate")),
        end_date=_clean_date(data.get("endDate")),
        start_time=_clean_time(data.get("startTime")),
        end_time=_clean_time(data.get("endTime")),
        location=_clean_text(data.get("location")),
        deadline=_clean_date(data.get("deadline")),
        deadline_description=_clean_text(data.get("deadlineDescription")),
        contact=Contact(
            name=_clean_text(contact_data.get("name")),
            phone=_clean_text(contact_data.get("phone")),
            email=_clean_text(contact_data.get("email")),
        ),
        priority=_PRIORITY_ALIASES.get((_clean_text(data.get("priority")) or "").lower(), Priority.MEDIUM),
        summary=summary,
        description=summary,
        confidence=_clean_confidence(data.get("confidence")),
        reminder=Reminder(
            enabled=reminder_data.get("enabled") is True,
            mode=ReminderMode.EXACT if reminder_data.get("mode") == "exact" else ReminderMode.BEFORE,
            exact_time=_clean_text(reminder_data.get("exactTime")),
            before_minutes=_clean_minutes(reminder_data.get("beforeMinutes")),
            description=_clean_text(reminder_data.get("description")),
        ),
        source=source,
    )


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _finite_float(value: Any) -> float | None:
    if not _is_number(value):
        return None
    try:
        number = float(value)
    except OverflowError:
        return None
    return number if math.isfinite(number) else None


def _clean_text(value: Any) -> str | None:
    if _is_number(value):
        try:
            return str(value)
        except ValueError:
            return None
    if not isinstance(value, str):
        return None
    value = value.strip()
    if value.lower() in _NULL_STRINGS:
        return None
    return value


def _clean_date(value: Any) -> str | None:
    text = _clean_text(value)
    if text is None:
        return None
    match = _DATE_RE.match(text)
    if not match:
        return None
    year, month, day = (int(group) for group in match.groups())
    if len(match.group(1)) < 4:
        if not _MIN_ROC_YEAR <= year <= _MAX_ROC_YEAR:
            return None
        year += ROC_YEAR_OFFSET
    elif year < 1000:
        return None
    try:
        return date(year, month, day).isoformat()
    except ValueError:
        return None


def _clean_time(value: Any) -> str | None:
    text = _clean_text(value)
    if text is None:
        return None
    match = _TIME_RE.match(text)
    if not match:
        return None
    hour, minute = int(match.group(1)), int(match.group(2))
    if hour > 23 or minute > 59:
        return None
    return f"{hour:02d}:{minute:02d}"


def _clean_confidence(value: Any) -> float:
    number = _finite_float(value)
    if number is None:
        return 0.5
    return min(max(number, 0.0), 1.0)


def _clean_minutes(value: Any) -> int | None:
    number = _finite_float(value)
    if number is None or not number.is_integer():
        return None
    return int(value)


# ---------------------------------------------------------------------------
# Extractor
# ---------------------------------------------------------------------------


class CalendarExtractor:
    """Turns raw content into an :class:`ExtractionResult` via an AI provider.

    Parameters
    ----------
    llm_provider:
        Model used for every extraction.
    pdf_text_provider:
        Text-layer reader used when the model cannot take a PDF inline.
    clock:
        Source of "today" for the prompt.
    timeout:
        Seconds allowed for one model call before it is abandoned.
    """

    def __init__(
        self,
        llm_provider: ILLMProvider,
        pdf_text_provider: IPdfTextProvider,
        clock: OperatingClock,
        timeout: float = 60.0,
    ) -> None:
        self._llm = llm_provider
        self._pdf_text = pdf_text_provider
        self._clock = clock
        self._timeout = timeout
        self._logger = get_logger(__name__)
        self._pdf_strategies: tuple[Callable[[bytes], Awaitable[ExtractionResult]], ...] = (
            self._pdf_inline,
            self._pdf_text_layer,
        )

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def extract_from_text(
        self,
        text: str,
        source: ContentSource = ContentSource.TEXT,
    ) -> ExtractionResult:
        parts = [
            PromptPart.from_text(build_extraction_prompt(self._clock)),
            PromptPart.from_text(f"\n\nContent to analyse:\n{text[:_MAX_TEXT_CHARS]}"),
        ]
        return await self._run(parts, source)

    async def extract_from_image(self, image_bytes: bytes, mime_type: str) -> ExtractionResult:
        parts = [
            PromptPart.from_text(build_extraction_prompt(self._clock)),
            PromptPart.from_bytes(image_bytes, mime_type),
        ]
        return await self._run(parts, ContentSource.IMAGE)

    async def extract_from_pdf(self, pdf_bytes: bytes) -> ExtractionResult:
        """Try each PDF strategy in order; the last strategy's error is raised."""
        self._logger.info("pdf_extraction_started", size_kb=len(pdf_bytes) // 1024)
        errors: list[CycloneError] = []
        for strategy in self._pdf_strategies:
            try:
                return await strategy(pdf_bytes)
            except UnreadableDocumentError:
                raise
            except CycloneError as exc:
                errors.append(exc)
                self._logger.warning(
                    "pdf_strategy_failed",
                    strategy=strategy.__name__,
                    error=str(exc),
                )
        raise errors[-1]

    def get_provider_name(self) -> str:
        return self._llm.get_provider_name()

    # ------------------------------------------------------------------
    # PDF strategies
    # ------------------------------------------------------------------

    async def _pdf_inline(self, pdf_bytes: bytes) -> ExtractionResult:
        if not self._llm.supports_mime_type("application/pdf"):
            raise LLMError(
                message="Provider cannot read PDFs inline",
                provider_name=self._llm.get_provider_name(),
            )
        parts = [
            PromptPart.from_text(build_extraction_prompt(self._clock)),
            PromptPart.from_bytes(pdf_bytes, "application/pdf"),
        ]
        return await self._run(parts, ContentSource.PDF)

    async def _pdf_text_layer(self, pdf_bytes: bytes) -> ExtractionResult:
        text = await self._pdf_text.extract_text(pdf_bytes)
        if not text.strip():
            raise UnreadableDocumentError(provider_name=self._pdf_text.get_provider_name())
        self._logger.info("pdf_text_fallback", chars=len(text))
        return await self.extract_from_text(text, source=ContentSource.PDF)

    # ------------------------------------------------------------------
    # Model call
    # ------------------------------------------------------------------

    async def _run(self, parts: list[PromptPart], source: ContentSource) -> ExtractionResult:
        provider_name = self._llm.get_provider_name()
        raw = await with_timeout(
            self._llm.generate(parts),
            self._timeout,
            lambda: LLMError(
                message=f"AI extraction timed out after {self._timeout:.0f}s",
                provider_name=provider_name,
            ),
        )
        try:
            data = parse_model_json(raw)
        except MalformedResponseError:
            self._logger.error("ai_response_malformed", provider=provider_name, response=raw[:500])
            raise
        result = normalize_extraction(data, source).with_deadline_fallback()
        self._logger.info(
            "calendar_extracted",
            provider=provider_name,
            source=source.value,
            kind=result.kind.value,
            confidence=result.confidence,
            has_date=result.is_usable,
        )
        return result
