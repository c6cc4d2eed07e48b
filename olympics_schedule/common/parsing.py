import re
from datetime import date, datetime
from typing import Optional

import pytz
from bs4 import BeautifulSoup

# Display format used by the published artifacts, e.g. "February 6, 2026"
DISPLAY_DATE_FORMAT = "%B %d, %Y"

# Date formats seen in display strings and cached artifacts
DATE_FORMATS = [
    DISPLAY_DATE_FORMAT,
    "%b %d, %Y",
    "%Y-%m-%d",
    "%d %B %Y",
]

_TIME_RE = re.compile(r"T(\d{2}:\d{2})")
_ISO_DATE_RE = re.compile(r"(\d{4}-\d{2}-\d{2})")


def clean_text(s: str | None) -> str | None:
    if s is None:
        return None
    s = re.sub(r"\s+", " ", s.strip())
    return s or None


def parse_time(timestamp: str | None) -> str:
    """Return the wall-clock HH:MM written in an ISO-like timestamp ('' if absent).

    The time is taken literally, i.e. local to the source, without any zone
    conversion.
    """
    if not timestamp:
        return ""
    m = _TIME_RE.search(timestamp)
    return m.group(1) if m else ""


def iso_date_from(timestamp: str | None) -> Optional[str]:
    """First embedded YYYY-MM-DD substring of *timestamp*, if it is a real date."""
    if not timestamp:
        return None
    m = _ISO_DATE_RE.search(timestamp)
    if not m:
        return None
    try:
        datetime.strptime(m.group(1), "%Y-%m-%d")
    except ValueError:
        return None
    return m.group(1)


def display_date(value: date) -> str:
    # strftime %d zero-pads; the artifacts use "February 6, 2026"
    return f"{value.strftime('%B')} {value.day}, {value.year}"


def format_display_date(timestamp: str | None) -> str:
    """Display date of the calendar day written in *timestamp* ('' if unparseable)."""
    iso = iso_date_from(timestamp)
    if not iso:
        return ""
    return display_date(datetime.strptime(iso, "%Y-%m-%d").date())


def parse_display_date(s: str | None) -> date | None:
    if not s:
        return None
    s = clean_text(s)
    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(s, fmt).date()
        except ValueError:
            continue
    return None


def parse_instant(timestamp: str, tz_name: str) -> datetime:
    """Parse an ISO-like timestamp into an aware datetime.

    Naive timestamps are interpreted in *tz_name*. Raises ValueError for
    malformed input; callers decide whether that is fatal.
    """
    value = (timestamp or "").strip()
    if not value:
        raise ValueError("empty timestamp")
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = pytz.timezone(tz_name).localize(parsed)
    return parsed


def now_in(tz_name: str) -> datetime:
    return datetime.now(pytz.timezone(tz_name))


def iso_with_offset(moment: datetime, tz_name: str) -> str:
    """Second-precision ISO string in *tz_name*, e.g. 2026-02-05T15:30:00+01:00."""
    local = moment.astimezone(pytz.timezone(tz_name)).replace(microsecond=0)
    return local.isoformat()


def soup_from_html(html: str) -> BeautifulSoup:
    return BeautifulSoup(html, "html.parser")


def text_from_html(html: str | None) -> str:
    """Visible text of a markup fragment, one line per block element."""
    if not html:
        return ""
    return soup_from_html(html).get_text("\n", strip=True)
