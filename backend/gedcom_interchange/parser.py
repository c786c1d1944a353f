"""GEDCOM record parser: line-oriented text to a tree of tagged records."""

import logging
import re
from pathlib import Path

from .encoding import decode_gedcom
from .errors import GedcomParseError
from .records import GedcomVersion, ParsedDocument, Record

logger = logging.getLogger("gedcom_interchange.parser")

LINE_SPLIT_RE = re.compile(r"\r\n|\r|\n")

# <level> [@xref@] <TAG> [value]; only the single delimiter after the tag is consumed
LINE_RE = re.compile(
    r"^(?P<level>\d+)[ \t]+"
    r"(?:(?P<xref>@[^@\s]+@)[ \t]+)?"
    r"(?P<tag>[A-Za-z0-9_]+)"
    r"(?:[ \t](?P<value>.*))?$"
)
LEVEL_RE = re.compile(r"^\d+[ \t]")
UNTERMINATED_XREF_RE = re.compile(r"^\d+[ \t]+@[^@\s]*(?:\s|$)")

CONTINUATION_TAGS = ("CONT", "CONC")

RECORD_KINDS = {
    "INDI": "individuals",
    "FAM": "families",
    "SOUR": "sources",
    "OBJE": "objects",
    "REPO": "repositories",
    "SUBM": "submitters",
}


# ============================================================================
# Line Tokenizing
# ============================================================================

def tokenize_line(line: str, line_number: int = 0) -> tuple[int, str | None, str, str]:
    """Split one GEDCOM line into (level, xref, tag, value).

    Raises GedcomParseError when the line has no level, an unterminated
    cross-reference id or no tag.
    """
    text = line.lstrip()

    match = LINE_RE.match(text)
    if match:
        return (
            int(match.group("level")),
            match.group("xref"),
            match.group("tag"),
            match.group("value") or "",
        )

    if not LEVEL_RE.match(text) and not text.isdigit():
        raise GedcomParseError("Cannot determine level", line_number, line)
    if UNTERMINATED_XREF_RE.match(text):
        raise GedcomParseError("Unterminated cross-reference id", line_number, line)
    raise GedcomParseError("Malformed line", line_number, line)


# ============================================================================
# Parsing
# ============================================================================

def parse(text: str) -> ParsedDocument:
    """Parse GEDCOM text into a ParsedDocument.

    Structural problems raise GedcomParseError immediately. Dangling
    references are left for validation.
    """
    if text.startswith("\ufeff"):
        text = text[1:]

    roots: list[Record] = []
    # stack[n] is the most recent record at level n
    stack: list[Record] = []

    for line_number, line in enumerate(LINE_SPLIT_RE.split(text), start=1):
        if not line.strip():
            continue

        level, xref, tag, value = tokenize_line(line, line_number)

        if level > len(stack):
            if not stack:
                raise GedcomParseError(
                    f"First record must be at level 0, found level {level}", line_number, line
                )
            raise GedcomParseError(
                f"Level jumps from {len(stack) - 1} to {level}", line_number, line
            )

        del stack[level:]

        if tag in CONTINUATION_TAGS:
            if level == 0:
                raise GedcomParseError(f"{tag} line has no parent record", line_number, line)
            parent = stack[level - 1]
            if tag == "CONT":
                parent.value += "\n" + value
            else:
                parent.value += value
            continue

        record = Record(level=level, tag=tag, value=value, xref=xref, line_number=line_number)
        if level == 0:
            roots.append(record)
        else:
            stack[level - 1].children.append(record)
        stack.append(record)

    document = build_document(roots)
    logger.debug(
        f"Parsed {len(roots)} records: {len(document.individuals)} individuals, "
        f"{len(document.families)} families, {len(document.sources)} sources, "
        f"{len(document.objects)} objects (GEDCOM {document.version.value})"
    )
    return document


def build_document(roots: list[Record]) -> ParsedDocument:
    """Group top-level records by kind and read header metadata."""
    document = ParsedDocument(records=roots)

    for record in roots:
        if record.tag == "HEAD" and document.header is None:
            document.header = record
        elif record.tag == "TRLR":
            document.has_trailer = True
        elif record.tag in RECORD_KINDS:
            getattr(document, RECORD_KINDS[record.tag]).append(record)

    header = document.header
    if header is not None:
        gedc = header.sub_record("GEDC")
        if gedc is not None:
            document.version_string = gedc.sub_value("VERS")
        document.charset = header.sub_value("CHAR")
        document.source_program = header.sub_value("SOUR")
        document.submitter_xref = header.sub_value("SUBM")

    if document.version_string and document.version_string.startswith("7"):
        document.version = GedcomVersion.V7_0
    else:
        document.version = GedcomVersion.V5_5_1

    return document


def parse_bytes(data: bytes) -> ParsedDocument:
    """Decode raw GEDCOM bytes (UTF-8, UTF-16, ANSI or ANSEL) and parse them."""
    return parse(decode_gedcom(data))


def parse_file(file_path: str | Path) -> ParsedDocument:
    """Parse a GEDCOM file from disk."""
    return parse_bytes(Path(file_path).read_bytes())
