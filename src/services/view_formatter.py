"""Platform-neutral views for every state the bot renders.

Each function returns a :class:`MessageView`; the Discord adapter turns
it into an embed plus buttons.  Keeping the wording here means the
handlers and the button resolver can be tested without discord.py.
"""

from __future__ import annotations

from src.models.chat import ActionStyle, MessageView, ViewAction, ViewField, ViewTone
from src.models.content import FetchedContent, UrlCategory
from src.models.extraction import ContentSource, ExtractionResult, ItemKind, Priority
from src.models.interaction import ActionTag
from src.models.records import CalendarItem, StoreRecordRef

_EMPTY = "Not set"
_BAR_WIDTH = 10

_SOURCE_LABELS = {
    ContentSource.TEXT: "text message",
    ContentSource.IMAGE: "image",
    ContentSource.PDF: "PDF",
    ContentSource.COMMAND: "/ai command",
}

_PRIORITY_BADGES = {Priority.HIGH: "🔴 High", Priority.MEDIUM: "🟡 Medium", Priority.LOW: "⚪ Low"}
_PRIORITY_DOTS = {Priority.HIGH: "🔴", Priority.MEDIUM: "🟡", Priority.LOW: "⚪"}

# Overdue tasks beyond this are summarised as a count.
_MAX_OVERDUE_LINES = 5


def confidence_bar(confidence: float) -> str:
    filled = round(confidence * _BAR_WIDTH)
    return f"{'█' * filled}{'░' * (_BAR_WIDTH - filled)} {round(confidence * 100)}%"


def preview_actions(ui_message_id: str) -> list[ViewAction]:
    """The four choices offered for a pending extraction."""
    return [
        ViewAction(
            custom_id=ActionTag.CREATE_EVENT.custom_id(ui_message_id),
            label="Google Calendar",
            emoji="📅",
            style=ActionStyle.PRIMARY,
        ),
        ViewAction(
            custom_id=ActionTag.CREATE_TASK.custom_id(ui_message_id),
            label="Google Tasks",
            emoji="✅",
            style=ActionStyle.SUCCESS,
        ),
        ViewAction(
            custom_id=ActionTag.STORE_ONLY.custom_id(ui_message_id),
            label="Notion only",
            emoji="📝",
            style=ActionStyle.SECONDARY,
        ),
        ViewAction(
            custom_id=ActionTag.CANCEL.custom_id(ui_message_id),
            label="Cancel",
            emoji="✖️",
            style=ActionStyle.DANGER,
        ),
    ]


# ---------------------------------------------------------------------------
# Calendar flow
# ---------------------------------------------------------------------------


def processing_view(source: ContentSource) -> MessageView:
    return MessageView(
        title="⏳ Analysing...",
        description=f"Reading the {_SOURCE_LABELS[source]} for dates and times.",
        tone=ViewTone.PROCESSING,
    )


def calendar_preview_view(
    result: ExtractionResult,
    ui_message_id: str,
    quoted_text: str | None = None,
) -> MessageView:
    """Preview of an extraction with the four save/cancel actions.

    ``quoted_text`` echoes the command input for ``/ai`` previews.
    """
    fields = [
        ViewField(name="📆 Date", value=_date_span(result)),
        ViewField(name="🕐 Time", value=_time_span(result)),
        ViewField(name="🏷️ Type", value="Event" if result.kind is ItemKind.EVENT else "Task"),
    ]
    if result.location:
        fields.append(ViewField(name="📍 Location", value=result.location))
    if result.deadline:
        deadline = result.deadline
        if result.deadline_description:
            deadline = f"{deadline} ({result.deadline_description})"
        fields.append(ViewField(name="⏰ Deadline", value=deadline))
    fields.append(ViewField(name="📊 Priority", value=_PRIORITY_BADGES[result.priority]))
    if not result.contact.is_empty():
        contact = " / ".join(
            value for value in (result.contact.name, result.contact.phone, result.contact.email) if value
        )
        fields.append(ViewField(name="👤 Contact", value=contact, inline=False))
    if result.reminder.enabled:
        fields.append(ViewField(name="🔔 Reminder", value=_reminder_text(result), inline=False))
    fields.append(ViewField(name="🎯 Confidence", value=confidence_bar(result.confidence), inline=False))

    return MessageView(
        title=f"📋 {result.display_title()}",
        description=_preview_description(result, quoted_text),
        tone=ViewTone.INFO,
        fields=fields,
        actions=preview_actions(ui_message_id),
        footer=f"Source: {_SOURCE_LABELS[result.source]} · choose where to save it",
    )


def extraction_failed_view(reason: str) -> MessageView:
    return MessageView(
        title="❌ Could not read a date",
        description=f"{reason}\nPlease check the content and send it again.",
        tone=ViewTone.ERROR,
    )


def event_created_view(result: ExtractionResult, event_link: str | None, record: StoreRecordRef) -> MessageView:
    fields = [ViewField(name="📆 Date", value=_date_span(result))]
    if event_link:
        fields.append(ViewField(name="📅 Google Calendar", value=f"[Open event]({event_link})"))
    fields.append(ViewField(name="📝 Notion", value=f"[Open page]({record.url})"))
    return MessageView(
        title=f"✅ Added to Google Calendar: {result.display_title()}",
        tone=ViewTone.SUCCESS,
        fields=fields,
    )


def task_created_view(result: ExtractionResult, record: StoreRecordRef) -> MessageView:
    return MessageView(
        title=f"✅ Added to Google Tasks: {result.display_title()}",
        tone=ViewTone.SUCCESS,
        fields=[
            ViewField(name="⏰ Due", value=result.deadline or result.start_date or _EMPTY),
            ViewField(name="📝 Notion", value=f"[Open page]({record.url})"),
        ],
    )


def stored_view(result: ExtractionResult, record: StoreRecordRef) -> MessageView:
    return MessageView(
        title=f"📝 Saved to Notion: {result.display_title()}",
        tone=ViewTone.SUCCESS,
        fields=[ViewField(name="📝 Notion", value=f"[Open page]({record.url})")],
    )


def cancelled_view() -> MessageView:
    return MessageView(title="✖️ Cancelled", description="Nothing was saved.", tone=ViewTone.MUTED)


def service_unavailable_view(service_name: str) -> MessageView:
    return MessageView(
        title=f"⚠️ {service_name} is not configured",
        description="Pick another option on the preview, or ask an admin to connect the service.",
        tone=ViewTone.WARNING,
    )


def expired_view() -> MessageView:
    return MessageView(
        title="⌛ This preview has expired",
        description="Please send the message again to analyse it.",
        tone=ViewTone.WARNING,
    )


def in_progress_view() -> MessageView:
    return MessageView(
        title="⏳ Already being handled",
        description="Another choice on this preview is still in progress.",
        tone=ViewTone.WARNING,
    )


def operation_failed_view(reason: str) -> MessageView:
    return MessageView(
        title="❌ Operation failed",
        description=f"{reason}\nThe preview is still available; you can try another option.",
        tone=ViewTone.ERROR,
    )


# ---------------------------------------------------------------------------
# Info-collect flow
# ---------------------------------------------------------------------------


def link_processing_view(url: str, category: UrlCategory) -> MessageView:
    return MessageView(
        title=f"⏳ Saving {category.display_name} link...",
        description=url,
        tone=ViewTone.PROCESSING,
    )


def link_saved_view(content: FetchedContent, record: StoreRecordRef) -> MessageView:
    fields = [ViewField(name="🏷️ Type", value=content.category.display_name)]
    if content.author:
        fields.append(ViewField(name="👤 Author", value=content.author))
    fields.append(ViewField(name="📝 Notion", value=f"[Open page]({record.url})"))
    description = content.description[:300] if content.description else ""
    return MessageView(
        title=f"✅ {content.title[:240]}",
        description=description,
        tone=ViewTone.SUCCESS,
        url=content.url,
        thumbnail=content.thumbnail,
        fields=fields,
        footer=content.site_name,
    )


def link_failed_view(url: str, reason: str) -> MessageView:
    return MessageView(
        title="❌ Could not save this link",
        description=f"{url}\n{reason}",
        tone=ViewTone.ERROR,
    )


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


def quick_entry_view(
    heading: str,
    title: str,
    record: StoreRecordRef,
    details: list[tuple[str, str | None]],
) -> MessageView:
    fields = [ViewField(name="📋 Title", value=title, inline=False)]
    fields.extend(ViewField(name=name, value=value or _EMPTY) for name, value in details)
    fields.append(ViewField(name="🔗 Notion", value=f"[Open page]({record.url})", inline=False))
    return MessageView(title=heading, tone=ViewTone.SUCCESS, fields=fields)


def input_error_view(reason: str) -> MessageView:
    return MessageView(title="❌ Invalid input", description=reason, tone=ViewTone.ERROR)


def status_view(checks: dict[str, bool], uptime: str, cache_stats: dict[str, int]) -> MessageView:
    lines = [f"{'✅' if ok else '❌'} {name}" for name, ok in checks.items()]
    cache_line = f"{cache_stats.get('keys', 0)} keys · {cache_stats.get('hits', 0)} hits · {cache_stats.get('misses', 0)} misses"
    return MessageView(
        title="🤖 Bot status",
        tone=ViewTone.INFO,
        fields=[
            ViewField(name="⏱️ Uptime", value=uptime),
            ViewField(name="🗃️ Cache", value=cache_line),
            ViewField(name="⚙️ Configuration", value="\n".join(lines), inline=False),
        ],
        footer="Cyclone Discord Bot",
    )


def query_failed_view(reason: str) -> MessageView:
    return MessageView(title="❌ Query failed", description=reason, tone=ViewTone.ERROR)


def today_view(day_iso: str, weekday: str, items: list[CalendarItem]) -> MessageView:
    """Events on *day_iso* plus open tasks, split into overdue and due today."""
    events = [item for item in items if item.kind is ItemKind.EVENT and item.on == day_iso]
    tasks = [item for item in items if item.kind is ItemKind.TASK]
    overdue = [task for task in tasks if task.on and task.on < day_iso]
    due_today = [task for task in tasks if task.on == day_iso]

    if events:
        event_text = "\n".join(f"• {event.time or 'All day'}  {event.title}" for event in events)
    else:
        event_text = "No events today 🎉"

    task_lines: list[str] = []
    if overdue:
        task_lines.append("⚠️ **Overdue:**")
        task_lines.extend(
            f"{_PRIORITY_DOTS[task.priority]} ~~{task.on}~~ {task.title}" for task in overdue[:_MAX_OVERDUE_LINES]
        )
        if len(overdue) > _MAX_OVERDUE_LINES:
            task_lines.append(f"...and {len(overdue) - _MAX_OVERDUE_LINES} more overdue")
    if due_today:
        if task_lines:
            task_lines.append("")
        task_lines.append("📋 **Due today:**")
        task_lines.extend(
            f"{_PRIORITY_DOTS[task.priority]} {task.title}{' [in progress]' if task.in_progress else ''}"
            for task in due_today
        )

    high_priority = sum(1 for task in tasks if task.priority is Priority.HIGH)
    return MessageView(
        title=f"📅 Today | {day_iso} ({weekday})",
        tone=ViewTone.WARNING,
        fields=[
            ViewField(name=f"🗓️ Events ({len(events)})", value=event_text, inline=False),
            ViewField(
                name=f"✅ Tasks (due today {len(due_today)} / overdue {len(overdue)})",
                value="\n".join(task_lines) or "No tasks due today 🎉",
                inline=False,
            ),
            ViewField(
                name="📊 Overview",
                value=f"Open tasks: {len(tasks)} (high priority: {high_priority})",
                inline=False,
            ),
        ],
        footer="Cyclone Discord Bot",
    )


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _date_span(result: ExtractionResult) -> str:
    start = result.start_date or result.deadline
    if not start:
        return _EMPTY
    if result.end_date and result.end_date != start:
        return f"{start} → {result.end_date}"
    return start


def _time_span(result: ExtractionResult) -> str:
    if not result.start_time:
        return "All day"
    if result.end_time:
        return f"{result.start_time} - {result.end_time}"
    return result.start_time


def _reminder_text(result: ExtractionResult) -> str:
    reminder = result.reminder
    if reminder.exact_time:
        text = f"At {reminder.exact_time}"
    elif reminder.before_minutes is not None:
        text = f"{reminder.before_minutes} min before"
    else:
        text = "Requested"
    if reminder.description:
        text = f"{text} ({reminder.description})"
    return text


def _preview_description(result: ExtractionResult, quoted_text: str | None) -> str:
    summary = result.summary or ""
    if not quoted_text:
        return summary
    quote = f"> {quoted_text[:500]}"
    return f"{quote}\n\n{summary}" if summary else quote
