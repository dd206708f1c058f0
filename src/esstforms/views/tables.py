from __future__ import annotations

import math
import re
from dataclasses import dataclass
from datetime import timezone
from typing import Any, Mapping, Optional, Sequence

from esstforms.schemas import ListType
from esstforms.timefmt import SITE_TZ, format_site_minutes, parse_datetime

PAGE_SIZE = 20

_ISO_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_CLOCK = re.compile(r"^\d{1,2}:\d{2}$")


@dataclass(frozen=True)
class Column:
    """
    One table column.

    Attributes:
        header: Display header.
        key: Row key (the sheet header for most sheets).
        kind: text | timestamp | date | clock
        long_text: Wrapped instead of truncated.
        blank_falsy: Render every falsy value (0, "", False) as blank.
    """

    header: str
    key: str
    kind: str = "text"
    long_text: bool = False
    blank_falsy: bool = False


@dataclass(frozen=True)
class Page:
    rows: list[Mapping[str, Any]]
    page: int
    total_pages: int
    total: int

    @property
    def has_prev(self) -> bool:
        return self.page > 1

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages


def _header_columns(headers: Sequence[str], **kwargs: Any) -> list[Column]:
    # Rows are keyed by the sheet header; any header mentioning "time" holds a timestamp.
    return [
        Column(h, h, kind="timestamp" if "time" in h.lower() else "text", **kwargs)
        for h in headers
    ]


COLUMNS: dict[ListType, list[Column]] = {
    ListType.CONTROL: _header_columns(
        [
            "No.",
            "타임스탬프(TimeStamp)",
            "대상 호기(Line)",
            "Machine",
            "현상(Symptom)",
            "요청자(Requester)",
            "요청 내용(Request Detail)",
            "조치 내용(Action Detail)",
            "완료 여부(Completion Status)",
        ]
    ),
    ListType.ALARM: [
        Column("No.", "no"),
        Column("타임스탬프(TimeStamp)", "timestamp", kind="timestamp"),
        Column("일자", "date", kind="date"),
        Column("시작 시간", "startTime", kind="clock"),
        Column("종료 시간", "endTime", kind="clock"),
        Column("대상 호기(Line)", "targetLine"),
        Column("Machine", "machine"),
        Column("알람 코드", "alarmCode", long_text=True),
        Column("현상(Symptom)", "symptom", long_text=True),
        Column("원인", "cause", long_text=True),
        Column("조치 내용(Action Detail)", "actionDetail", long_text=True),
        Column("조치 인원(Requester)", "requester"),
        Column("여부(Completion Status)", "completion"),
    ],
    ListType.DAMAGED: [
        Column("NO.", "NO.", blank_falsy=True),
        Column("타임스탬프", "타임스탬프", kind="timestamp", blank_falsy=True),
        Column("파손 호기", "파손 호기", blank_falsy=True),
        Column("품목", "품목", blank_falsy=True),
        Column("형번", "형번", blank_falsy=True),
        Column("수량", "수량", blank_falsy=True),
        Column("수급 방법", "수급 방법", blank_falsy=True),
    ],
    ListType.PARAM: _header_columns(
        [
            "No.",
            "타임스탬프(TimeStamp)",
            "대상 호기(Line)",
            "Machine",
            "Unit",
            "변경 유형",
            "Assy'",
            "변경 시간",
            "요청자",
            "변경자",
            "변경 파라미터",
            "이전 값",
            "변경 값",
            "변경 사유",
        ]
    ),
}


def paginate(rows: Sequence[Mapping[str, Any]], page: int = 1, page_size: int = PAGE_SIZE) -> Page:
    """
    Slice one page out of `rows`, clamping `page` into 1..total_pages.
    """
    total = len(rows)
    total_pages = math.ceil(total / page_size) if total else 0
    current = max(1, min(page, total_pages)) if total_pages else 1
    start = (current - 1) * page_size
    return Page(list(rows[start : start + page_size]), current, total_pages, total)


def _format_clock(value: Any) -> str:
    if isinstance(value, str) and _CLOCK.match(value):
        return value
    # Sheets hands back some times as fractional hours (9.5 -> 9:30).
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        hours = math.floor(value)
        minutes = round((value - hours) * 60)
        return f"{hours}:{minutes:02d}"
    parsed = parse_datetime(value)
    if parsed is None:
        return str(value)
    return parsed.astimezone(SITE_TZ).strftime("%H:%M")


def _format_date(value: Any) -> str:
    if isinstance(value, str) and _ISO_DATE.match(value):
        return value
    parsed = parse_datetime(value)
    if parsed is None:
        return str(value)
    return parsed.astimezone(timezone.utc).strftime("%Y-%m-%d")


def _format_timestamp(value: Any) -> str:
    parsed = parse_datetime(value)
    if parsed is None:
        return str(value)
    return format_site_minutes(parsed)


def format_cell(value: Any, column: Column) -> str:
    if value is None or (column.blank_falsy and not value):
        return ""
    if column.kind == "timestamp":
        return _format_timestamp(value)
    if column.kind == "date":
        return _format_date(value)
    if column.kind == "clock":
        return _format_clock(value)
    return str(value)


def format_row(row: Mapping[str, Any], columns: Sequence[Column]) -> list[str]:
    return [format_cell(row.get(col.key), col) for col in columns]


def page_summary(page: Page) -> str:
    return (
        f"총 {page.total}건 | 페이지 {page.page} / {page.total_pages} "
        f"(Total {page.total} Items | Page {page.page} / {page.total_pages})"
    )


def render_page(list_type: ListType, rows: Sequence[Mapping[str, Any]], page: int = 1,
                max_width: Optional[int] = 40) -> str:
    """
    Plain-text table of one page, for the terminal viewer.
    """
    if not rows:
        return "데이터가 없습니다. (No data.)"

    columns = COLUMNS[list_type]
    current = paginate(rows, page)
    body = [format_row(r, columns) for r in current.rows]

    def clip(text: str, col: Column) -> str:
        text = text.replace("\n", " ")
        if max_width and not col.long_text and len(text) > max_width:
            return text[: max_width - 1] + "…"
        return text

    table = [[c.header for c in columns]] + [[clip(v, c) for v, c in zip(r, columns)] for r in body]
    widths = [max(len(line[i]) for line in table) for i in range(len(columns))]
    lines = [" | ".join(cell.ljust(w) for cell, w in zip(line, widths)) for line in table]
    lines.insert(1, "-+-".join("-" * w for w in widths))
    lines.append("")
    lines.append(page_summary(current))
    return "\n".join(lines)
