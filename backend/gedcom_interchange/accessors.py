"""Record accessors: project INDI, FAM, SOUR, OBJE, REPO and SUBM records into flat structures."""

from .dates import date_codec_for, DateCodec
from .records import (
    Family,
    Individual,
    MediaObject,
    ParsedDocument,
    Record,
    Repository,
    Source,
    Submitter,
)


VALID_SEX_CODES = ("M", "F", "X")


# ============================================================================
# Helpers
# ============================================================================

def parse_name(value: str | None) -> tuple[str, str]:
    """Split a GEDCOM name into (given names, surname).

    The surname is delimited by slashes: "John /Smith/" -> ("John", "Smith").
    Text after the closing slash (suffixes) stays with the given names.
    A name without slashes has an empty surname.
    """
    if not value or not value.strip():
        return "", ""

    text = value.strip()
    first_slash = text.find("/")
    last_slash = text.rfind("/")

    if first_slash != -1 and last_slash > first_slash:
        surname = " ".join(text[first_slash + 1:last_slash].split())
        given = " ".join(f"{text[:first_slash]} {text[last_slash + 1:]}".split())
        return given, surname

    return " ".join(text.replace("/", " ").split()), ""


def _codec_for(document: ParsedDocument | None) -> DateCodec:
    return date_codec_for(document.version if document else None)


def _pointers(record: Record, tag: str) -> list[str]:
    return [child.pointer for child in record.sub_records(tag) if child.pointer]


def _notes(record: Record, document: ParsedDocument | None) -> list[str]:
    """Inline NOTE text, with NOTE pointers resolved through the document index."""
    notes = []
    for note in record.sub_records("NOTE"):
        text = note.value
        if note.pointer:
            target = document.lookup(note.pointer) if document else None
            if target is None:
                continue
            text = target.value
        text = text.strip()
        if text:
            notes.append(text)
    return notes


def _event_date(record: Record, tag: str, codec: DateCodec) -> tuple[str | None, str | None]:
    """Return (partial ISO date, raw date text) for the first event with the tag."""
    event = record.sub_record(tag)
    if event is None:
        return None, None
    raw = event.sub_value("DATE")
    if raw is None:
        return None, None
    parsed = codec.parse(raw)
    return (parsed.iso if parsed else None), raw


def _event_place(record: Record, tag: str) -> str | None:
    event = record.sub_record(tag)
    if event is None:
        return None
    return event.sub_value("PLAC")


def extract_event_sources(record: Record, tag: str | None = None) -> list[str]:
    """Source xrefs cited by a record, or by its first event with the given tag."""
    target = record.sub_record(tag) if tag else record
    if target is None:
        return []
    return _pointers(target, "SOUR")


def extract_event_objects(record: Record, tag: str | None = None) -> list[str]:
    """Object xrefs linked from a record or one of its events, without duplicates."""
    targets = [record.sub_record(tag)] if tag else [record] + list(record.children)
    seen = []
    for target in targets:
        if target is None:
            continue
        for xref in _pointers(target, "OBJE"):
            if xref not in seen:
                seen.append(xref)
    return seen


# ============================================================================
# Individuals and Families
# ============================================================================

def parse_individual(record: Record, document: ParsedDocument | None = None) -> Individual:
    """Project an INDI record into an Individual."""
    codec = _codec_for(document)
    individual = Individual(xref=record.xref or "")

    maiden_name = None
    primary = None
    for name in record.sub_records("NAME"):
        name_type = (name.sub_value("TYPE") or "").lower()
        if name_type == "maiden":
            if maiden_name is None:
                maiden_given, maiden_surname = parse_name(name.value)
                maiden_name = maiden_surname or maiden_given or None
            continue
        if primary is None:
            primary = name

    if primary is not None:
        given, surname = parse_name(primary.value)
        # GIVN/SURN sub-records take precedence over the slash convention
        given = primary.sub_value("GIVN") or given
        surname = primary.sub_value("SURN") or surname
        individual.first_name = given
        individual.last_name = surname
        individual.name = " ".join(part for part in (given, surname) if part)
    individual.maiden_name = maiden_name

    sex = (record.sub_value("SEX") or "").upper()
    individual.sex = sex if sex in VALID_SEX_CODES else None

    individual.birth_date, individual.birth_date_raw = _event_date(record, "BIRT", codec)
    individual.birth_place = _event_place(record, "BIRT")
    individual.death_date, individual.death_date_raw = _event_date(record, "DEAT", codec)
    individual.death_place = _event_place(record, "DEAT")
    individual.deceased = record.sub_record("DEAT") is not None

    individual.occupation = record.sub_value("OCCU")
    individual.notes = _notes(record, document)
    individual.families_as_spouse = _pointers(record, "FAMS")
    individual.families_as_child = _pointers(record, "FAMC")

    sources = _pointers(record, "SOUR")
    for child in record.children:
        for xref in extract_event_sources(child):
            if xref not in sources:
                sources.append(xref)
    individual.sources = sources
    individual.objects = extract_event_objects(record)

    return individual


def parse_family(record: Record, document: ParsedDocument | None = None) -> Family:
    """Project a FAM record into a Family."""
    codec = _codec_for(document)
    husband = record.sub_record("HUSB")
    wife = record.sub_record("WIFE")

    family = Family(
        xref=record.xref or "",
        husband=husband.pointer if husband is not None else None,
        wife=wife.pointer if wife is not None else None,
        children=_pointers(record, "CHIL"),
    )
    family.marriage_date, family.marriage_date_raw = _event_date(record, "MARR", codec)
    family.marriage_place = _event_place(record, "MARR")
    family.divorce_date, family.divorce_date_raw = _event_date(record, "DIV", codec)
    family.divorced = record.sub_record("DIV") is not None
    family.notes = _notes(record, document)
    family.sources = _pointers(record, "SOUR")
    return family


# ============================================================================
# Sources, Objects, Repositories, Submitters
# ============================================================================

def parse_source(record: Record, document: ParsedDocument | None = None) -> Source:
    repository = record.sub_record("REPO")
    return Source(
        xref=record.xref or "",
        title=record.sub_value("TITL") or "",
        author=record.sub_value("AUTH"),
        publication=record.sub_value("PUBL"),
        repository=repository.pointer if repository is not None else None,
        notes=_notes(record, document),
    )


def parse_object(record: Record, document: ParsedDocument | None = None) -> MediaObject:
    """Project an OBJE record.

    FORM and TITL may sit directly on the record (5.5) or beneath FILE (5.5.1, 7.0).
    """
    file_record = record.sub_record("FILE")
    file_path = file_record.value.strip() if file_record is not None else ""

    form = record.sub_value("FORM")
    title = record.sub_value("TITL")
    if file_record is not None:
        form = file_record.sub_value("FORM") or form
        title = file_record.sub_value("TITL") or title

    return MediaObject(
        xref=record.xref or "",
        file_path=file_path,
        format=form,
        title=title,
        notes=_notes(record, document),
    )


def _address(record: Record) -> str | None:
    address = record.sub_record("ADDR")
    if address is None:
        return None
    return address.value.strip() or None


def parse_repository(record: Record, document: ParsedDocument | None = None) -> Repository:
    return Repository(
        xref=record.xref or "",
        name=record.sub_value("NAME") or "",
        address=_address(record),
        phone=record.sub_value("PHON"),
        email=record.sub_value("EMAIL"),
        website=record.sub_value("WWW"),
        notes=_notes(record, document),
    )


def parse_submitter(record: Record, document: ParsedDocument | None = None) -> Submitter:
    return Submitter(
        xref=record.xref or "",
        name=record.sub_value("NAME") or "",
        address=_address(record),
        phone=record.sub_value("PHON"),
        email=record.sub_value("EMAIL"),
        notes=_notes(record, document),
    )
