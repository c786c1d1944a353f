"""Version-specific GEDCOM date parsing and formatting.

GEDCOM 5.5.1 writes dates as "15 JAN 1985" with optional qualifiers
(ABT, BEF, AFT, BET ... AND ...). GEDCOM 7.0 files produced by this project
carry ISO 8601 dates. The codec is chosen once from the header version via
date_codec_for() so the parser and generator never branch on version.
"""

import re
from dataclasses import dataclass
from datetime import date

from .records import GedcomVersion


MONTHS = ["JAN", "FEB", "MAR", "APR", "MAY", "JUN",
          "JUL", "AUG", "SEP", "OCT", "NOV", "DEC"]

# Month name mappings (handle abbreviations and full names)
MONTH_MAP = {
    "JAN": 1,
    "JANUARY": 1,
    "FEB": 2,
    "FEBRUARY": 2,
    "MAR": 3,
    "MARCH": 3,
    "APR": 4,
    "APRIL": 4,
    "MAY": 5,
    "JUN": 6,
    "JUNE": 6,
    "JUL": 7,
    "JULY": 7,
    "AUG": 8,
    "AUGUST": 8,
    "SEP": 9,
    "SEPT": 9,
    "SEPTEMBER": 9,
    "OCT": 10,
    "OCTOBER": 10,
    "NOV": 11,
    "NOVEMBER": 11,
    "DEC": 12,
    "DECEMBER": 12,
}

QUALIFIERS = ("ABT", "CAL", "EST", "BEF", "AFT", "INT", "FROM", "TO")

ISO_DATE_RE = re.compile(r"^(\d{4})(?:-(\d{2})(?:-(\d{2}))?)?$")
CALENDAR_ESCAPE_RE = re.compile(r"^@#D([A-Z ]+)@\s*")
RANGE_RE = re.compile(r"^(BET|FROM)\s+(.+?)\s+(AND|TO)\s+(.+)$")
QUALIFIED_RE = re.compile(r"^(ABT|CAL|EST|BEF|AFT|INT|FROM|TO)\.?\s+(.+)$")
FULL_DATE_RE = re.compile(r"^(\d{1,2})\s+([A-Z]+)\.?\s+(\d{3,4})(?:/\d{2})?$")
MONTH_YEAR_RE = re.compile(r"^([A-Z]+)\.?\s+(\d{3,4})(?:/\d{2})?$")
YEAR_RE = re.compile(r"^(\d{3,4})(?:/\d{2})?$")
# INT dates carry the original phrase in parentheses after the date
TRAILING_PHRASE_RE = re.compile(r"\s*\(.*\)\s*$")


@dataclass
class ParsedDate:
    """A GEDCOM date broken into components.

    `raw` keeps the original text so callers needing the exact precision
    or qualifier can retain it.
    """
    raw: str
    year: int
    month: int | None = None
    day: int | None = None
    qualifier: str | None = None
    calendar: str | None = None
    end: "ParsedDate | None" = None

    @property
    def is_approximate(self) -> bool:
        return self.qualifier is not None

    @property
    def iso(self) -> str:
        """Partial ISO form: '1985', '1985-01' or '1985-01-15'."""
        result = f"{self.year:04d}"
        if self.month:
            result += f"-{self.month:02d}"
            if self.day:
                result += f"-{self.day:02d}"
        return result

    def to_date(self) -> date:
        """Calendar date with missing month/day normalized to the first."""
        return date(self.year, self.month or 1, self.day or 1)


def _validated(raw: str, year: int, month: int | None, day: int | None) -> ParsedDate | None:
    if year < 1:
        return None
    if month is not None and not 1 <= month <= 12:
        return None
    if day is not None:
        if month is None:
            return None
        try:
            date(year, month, day)
        except ValueError:
            return None
    return ParsedDate(raw=raw, year=year, month=month, day=day)


def iso_to_parts(value: str) -> tuple[int, int | None, int | None] | None:
    match = ISO_DATE_RE.match(value.strip())
    if not match:
        return None
    year = int(match.group(1))
    month = int(match.group(2)) if match.group(2) else None
    day = int(match.group(3)) if match.group(3) else None
    return year, month, day


# ============================================================================
# Codecs
# ============================================================================

class DateCodec:
    """Parses and formats dates for one GEDCOM version."""

    version = GedcomVersion.V5_5_1

    def parse(self, value: str | None) -> ParsedDate | None:
        raise NotImplementedError

    def format(self, iso_date: str | None) -> str:
        raise NotImplementedError

    def format_calendar_date(self, value: date) -> str:
        return self.format(value.isoformat())


class Gedcom551Dates(DateCodec):
    """Traditional GEDCOM dates: '15 JAN 1985', 'JAN 1985', 'ABT 1985', 'BET 1975 AND 1985'."""

    version = GedcomVersion.V5_5_1

    def parse(self, value: str | None) -> ParsedDate | None:
        if not value or not value.strip():
            return None

        raw = value.strip()
        working = raw.upper()

        calendar = None
        escape = CALENDAR_ESCAPE_RE.match(working)
        if escape:
            calendar = escape.group(1).strip()
            working = working[escape.end():]

        range_match = RANGE_RE.match(working)
        if range_match:
            start = self._parse_simple(raw, range_match.group(2))
            if start is None:
                return None
            start.qualifier = range_match.group(1)
            start.end = self._parse_simple(range_match.group(4), range_match.group(4))
            start.calendar = calendar
            return start

        qualifier = None
        qualified = QUALIFIED_RE.match(working)
        if qualified:
            qualifier = qualified.group(1)
            working = qualified.group(2)
            if qualifier == "INT":
                working = TRAILING_PHRASE_RE.sub("", working)

        parsed = self._parse_simple(raw, working)
        if parsed is None:
            return None
        parsed.qualifier = qualifier
        parsed.calendar = calendar
        return parsed

    def _parse_simple(self, raw: str, text: str) -> ParsedDate | None:
        text = text.strip().upper()

        match = FULL_DATE_RE.match(text)
        if match:
            month = MONTH_MAP.get(match.group(2))
            if month is None:
                return None
            return _validated(raw, int(match.group(3)), month, int(match.group(1)))

        match = MONTH_YEAR_RE.match(text)
        if match:
            month = MONTH_MAP.get(match.group(1))
            if month is None:
                return None
            return _validated(raw, int(match.group(2)), month, None)

        match = YEAR_RE.match(text)
        if match:
            return _validated(raw, int(match.group(1)), None, None)

        return None

    def format(self, iso_date: str | None) -> str:
        """Render a partial ISO date as '15 JAN 1985', 'JAN 1985' or '1985'.

        Anything that is not ISO is assumed to be GEDCOM text already and
        is passed through.
        """
        if not iso_date:
            return ""
        parts = iso_to_parts(iso_date)
        if parts is None:
            return iso_date.strip()
        year, month, day = parts
        if month and 1 <= month <= 12:
            if day:
                return f"{day} {MONTHS[month - 1]} {year}"
            return f"{MONTHS[month - 1]} {year}"
        return str(year)

    def format_calendar_date(self, value: date) -> str:
        # Header dates keep the two-digit day
        return f"{value.day:02d} {MONTHS[value.month - 1]} {value.year}"


class Gedcom70Dates(Gedcom551Dates):
    """ISO 8601 dates, falling back to the traditional grammar for other text."""

    version = GedcomVersion.V7_0

    def parse(self, value: str | None) -> ParsedDate | None:
        if not value or not value.strip():
            return None
        raw = value.strip()
        parts = iso_to_parts(raw)
        if parts is not None:
            return _validated(raw, *parts)
        return super().parse(value)

    def format(self, iso_date: str | None) -> str:
        if not iso_date:
            return ""
        return iso_date.strip()

    def format_calendar_date(self, value: date) -> str:
        return value.isoformat()


_CODECS = {
    GedcomVersion.V5_5_1: Gedcom551Dates(),
    GedcomVersion.V7_0: Gedcom70Dates(),
}


def date_codec_for(version: GedcomVersion | str | None) -> DateCodec:
    """Pick the date codec for a declared version (5.5.1 when unknown)."""
    try:
        return _CODECS[GedcomVersion(version)]
    except ValueError:
        return _CODECS[GedcomVersion.V5_5_1]


def parse_date(value: str | None, version: GedcomVersion | str = GedcomVersion.V5_5_1) -> ParsedDate | None:
    """Parse a GEDCOM date string. Returns None if the date cannot be parsed."""
    return date_codec_for(version).parse(value)
