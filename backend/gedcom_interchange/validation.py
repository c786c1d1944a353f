"""Structural validation of a parsed GEDCOM document.

Findings are returned as data; validation never raises.
"""

from dataclasses import dataclass, field
from enum import Enum

from .records import GedcomVersion, ParsedDocument, Record


class Severity(str, Enum):
    ERROR = "error"
    WARNING = "warning"


@dataclass
class Finding:
    severity: Severity
    message: str
    xref: str | None = None
    line_number: int | None = None


@dataclass
class StructureReport:
    """Validation findings plus a preview of what an import would produce."""
    valid: bool
    findings: list[Finding] = field(default_factory=list)
    people: int = 0
    families: int = 0

    @property
    def errors(self) -> list[Finding]:
        return [f for f in self.findings if f.severity == Severity.ERROR]

    @property
    def warnings(self) -> list[Finding]:
        return [f for f in self.findings if f.severity == Severity.WARNING]


# Pointer tags checked inside INDI and FAM records, and the record kind they must name
REFERENCE_TARGETS = {
    "HUSB": "INDI",
    "WIFE": "INDI",
    "CHIL": "INDI",
    "FAMS": "FAM",
    "FAMC": "FAM",
    "SOUR": "SOUR",
    "OBJE": "OBJE",
}

RECORD_LABELS = {
    "INDI": "individual",
    "FAM": "family",
}


def _error(message: str, record: Record | None = None) -> Finding:
    return Finding(
        severity=Severity.ERROR,
        message=message,
        xref=record.xref if record is not None else None,
        line_number=record.line_number if record is not None else None,
    )


def _warning(message: str, record: Record | None = None) -> Finding:
    return Finding(
        severity=Severity.WARNING,
        message=message,
        xref=record.xref if record is not None else None,
        line_number=record.line_number if record is not None else None,
    )


# ============================================================================
# Checks
# ============================================================================

def _check_header(document: ParsedDocument) -> list[Finding]:
    header = document.header
    if header is None:
        return [_error("Missing required HEAD record")]

    findings = []
    if header.sub_record("SOUR") is None:
        findings.append(_warning("Header is missing SOUR (source program)", header))
    if not document.version_string:
        findings.append(_warning("Header is missing GEDC VERS", header))
    # GEDCOM 7.0 dropped CHAR; files are always UTF-8
    if header.sub_record("CHAR") is None and document.version != GedcomVersion.V7_0:
        findings.append(_warning("Header is missing CHAR", header))
    if document.submitter_xref and document.lookup_kind(document.submitter_xref, "SUBM") is None:
        findings.append(
            _warning(f"Header SUBM {document.submitter_xref} not found", header)
        )
    return findings


def _check_trailer(document: ParsedDocument) -> list[Finding]:
    if not document.has_trailer:
        return [_error("Missing required TRLR record")]

    findings = []
    seen_trailer = False
    for record in document.records:
        if seen_trailer:
            findings.append(_warning(f"Record {record.tag} appears after TRLR", record))
        elif record.tag == "TRLR":
            seen_trailer = True
    return findings


def _check_xrefs(document: ParsedDocument) -> list[Finding]:
    findings = []
    seen = set()
    for record in document.records:
        if record.xref:
            if record.xref in seen:
                findings.append(_error(f"Duplicate xref: {record.xref}", record))
            seen.add(record.xref)
        elif record.tag in RECORD_LABELS:
            findings.append(
                _warning(f"{RECORD_LABELS[record.tag].capitalize()} record has no xref", record)
            )
    return findings


def _check_references(document: ParsedDocument) -> list[Finding]:
    findings = []
    for record in document.individuals + document.families:
        label = RECORD_LABELS[record.tag]
        owner = record.xref or "(no xref)"
        for child in record.walk():
            if child is record:
                continue
            expected = REFERENCE_TARGETS.get(child.tag)
            pointer = child.pointer
            if expected is None or pointer is None:
                continue
            if document.lookup_kind(pointer, expected) is None:
                findings.append(Finding(
                    severity=Severity.WARNING,
                    message=f"Broken reference in {label} {owner}: {child.tag} {pointer} not found",
                    xref=record.xref,
                    line_number=child.line_number,
                ))
    return findings


# ============================================================================
# Entry Points
# ============================================================================

def validate(document: ParsedDocument) -> list[Finding]:
    """Return every structural problem found in the document."""
    findings = []
    findings.extend(_check_header(document))
    findings.extend(_check_trailer(document))
    findings.extend(_check_xrefs(document))
    findings.extend(_check_references(document))
    return findings


def validate_structure(document: ParsedDocument) -> StructureReport:
    """Validate and count: valid means no error-level findings."""
    findings = validate(document)
    return StructureReport(
        valid=not any(f.severity == Severity.ERROR for f in findings),
        findings=findings,
        people=len(document.individuals),
        families=len(document.families),
    )
