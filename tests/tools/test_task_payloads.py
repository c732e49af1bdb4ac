"""Tests for tool payload builders and text formatting."""

from __future__ import annotations

from datetime import datetime, timezone

from mstodo_mcp.exceptions import GraphHttpError, UnauthenticatedError
from mstodo_mcp.graph.models import DateTimeTimeZone, TodoTask
from mstodo_mcp.tools.bulk import ARCHIVE_COPY_FIELDS, copy_fields
from mstodo_mcp.tools.formatting import failure_text, format_date, format_task
from mstodo_mcp.tools.tasks import build_task_body, build_task_query


class TestBuildTaskQuery:
    """Tests for build_task_query."""

    def test_empty_when_no_options(self) -> None:
        assert build_task_query() == ""

    def test_keeps_dollar_and_quotes_readable(self) -> None:
        """Given a filter with quotes, $ and ' are left unescaped and spaces encoded."""
        assert build_task_query(filter="status eq 'completed'", top=10) == (
            "$filter=status%20eq%20'completed'&$top=10"
        )

    def test_count_false_is_sent(self) -> None:
        assert build_task_query(count=False) == "$count=false"


class TestBuildTaskBody:
    """Tests for build_task_body."""

    def test_omits_unset_fields(self) -> None:
        assert build_task_body(title="Ship") == {"title": "Ship"}

    def test_wraps_dates_in_utc_shape(self) -> None:
        payload = build_task_body(start_date_time="2025-03-01T08:00:00Z", reminder_date_time="2025-03-01T07:30:00Z")

        assert payload == {
            "startDateTime": {"dateTime": "2025-03-01T08:00:00Z", "timeZone": "UTC"},
            "reminderDateTime": {"dateTime": "2025-03-01T07:30:00Z", "timeZone": "UTC"},
        }

    def test_empty_date_ignored_unless_clearing(self) -> None:
        """Given an empty date, it is dropped on create and nulled on update."""
        assert build_task_body(due_date_time="") == {}
        assert build_task_body(due_date_time="", clear_empty_dates=True) == {"dueDateTime": None}

    def test_false_reminder_flag_is_kept(self) -> None:
        assert build_task_body(is_reminder_on=False) == {"isReminderOn": False}


def test_copy_fields_skips_nulls_and_read_only_fields() -> None:
    """Given a raw task, only writable non-null fields are copied."""
    raw = {
        "id": "T1",
        "title": "Report",
        "body": None,
        "createdDateTime": "2024-01-01T00:00:00Z",
        "categories": ["Work"],
    }

    assert copy_fields(raw, ARCHIVE_COPY_FIELDS) == {"title": "Report", "categories": ["Work"]}


class TestFormatting:
    """Tests for text rendering helpers."""

    def test_failure_text_for_missing_token(self) -> None:
        assert failure_text("fetching tasks", UnauthenticatedError()) == "Failed to authenticate with Microsoft API"

    def test_failure_text_for_http_error(self) -> None:
        text = failure_text("fetching tasks", GraphHttpError(500, "boom"))

        assert text == "Error fetching tasks: HTTP error! status: 500, body: boom"

    def test_format_date_handles_graph_precision(self) -> None:
        """Given Graph's seven fractional digits, the date still parses."""
        value = DateTimeTimeZone(dateTime="2025-06-30T22:15:00.1234567", timeZone="UTC")

        assert format_date(value) == "2025-06-30"
        assert format_date(value, with_time=True) == "2025-06-30 22:15 UTC"

    def test_format_date_none(self) -> None:
        assert format_date(None) == "Unknown"

    def test_format_date_aware_datetime(self) -> None:
        assert format_date(datetime(2025, 1, 2, 3, 4, tzinfo=timezone.utc), with_time=True) == "2025-01-02 03:04 UTC"

    def test_format_task_truncates_long_description(self) -> None:
        task = TodoTask.model_validate(
            {
                "id": "T1",
                "title": "Write",
                "status": "notStarted",
                "categories": ["A", "B"],
                "body": {"content": "x" * 60, "contentType": "text"},
            }
        )

        assert format_task(task) == (
            "○ ID: T1\nTitle: Write\nCategories: A, B\nDescription: " + "x" * 50 + "...\n---"
        )
