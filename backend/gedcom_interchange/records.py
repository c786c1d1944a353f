"""Record tree, parsed document and flat projections shared by parser, mapper and generator."""

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator


POINTER_RE = re.compile(r"^@[^@]+@$")


class GedcomVersion(str, Enum):
    """Declared GEDCOM format version."""
    V5_5_1 = "5.5.1"
    V7_0 = "7.0"


class MappedTag(str, Enum):
    """Tags that are translated into the domain model.

    Every other tag is kept as an opaque pass-through record.
    """
    NAME = "NAME"
    SEX = "SEX"
    BIRT = "BIRT"
    DEAT = "DEAT"
    OCCU = "OCCU"
    NOTE = "NOTE"
    FAMS = "FAMS"
    FAMC = "FAMC"
    HUSB = "HUSB"
    WIFE = "WIFE"
    CHIL = "CHIL"
    MARR = "MARR"
    DIV = "DIV"


_MAPPED_TAGS = {tag.value: tag for tag in MappedTag}


# ============================================================================
# Record Tree
# ============================================================================

@dataclass
class Record:
    """A single GEDCOM line and the lines nested beneath it.

    Children are owned by their parent; there are no back-pointers.
    Links between top-level records are pointer strings resolved through
    ParsedDocument.lookup().
    """
    level: int
    tag: str
    value: str = ""
    xref: str | None = None
    children: list["Record"] = field(default_factory=list)
    line_number: int = 0

    @property
    def pointer(self) -> str | None:
        """The value when it is a cross-reference such as '@F1@'."""
        value = self.value.strip()
        if POINTER_RE.match(value):
            return value
        return None

    @property
    def mapped_tag(self) -> MappedTag | None:
        return _MAPPED_TAGS.get(self.tag.upper())

    def sub_records(self, tag: str) -> list["Record"]:
        """All direct children carrying the given tag, in file order."""
        return [child for child in self.children if child.tag == tag]

    def sub_record(self, tag: str) -> "Record | None":
        for child in self.children:
            if child.tag == tag:
                return child
        return None

    def sub_value(self, tag: str) -> str | None:
        """Stripped value of the first child with the tag, or None when absent or empty."""
        child = self.sub_record(tag)
        if child is None:
            return None
        value = child.value.strip()
        return value or None

    def walk(self) -> Iterator["Record"]:
        """Depth-first iteration over this record and all descendants."""
        yield self
        for child in self.children:
            yield from child.walk()


@dataclass
class ParsedDocument:
    """A parsed GEDCOM file.

    Owns every top-level record in `records` (file order) and an xref index
    built once at construction. Typed lists are views over the same records.
    """
    records: list[Record] = field(default_factory=list)
    header: Record | None = None
    version: GedcomVersion = GedcomVersion.V5_5_1
    version_string: str | None = None
    charset: str | None = None
    source_program: str | None = None
    submitter_xref: str | None = None
    has_trailer: bool = False
    individuals: list[Record] = field(default_factory=list)
    families: list[Record] = field(default_factory=list)
    sources: list[Record] = field(default_factory=list)
    objects: list[Record] = field(default_factory=list)
    repositories: list[Record] = field(default_factory=list)
    submitters: list[Record] = field(default_factory=list)
    index: dict[str, Record] = field(default_factory=dict, repr=False)

    def __post_init__(self):
        if not self.index:
            for record in self.records:
                # First definition wins; duplicates are reported by validation.
                if record.xref and record.xref not in self.index:
                    self.index[record.xref] = record

    def lookup(self, xref: str | None) -> Record | None:
        if not xref:
            return None
        if not xref.startswith("@"):
            xref = f"@{xref}@"
        return self.index.get(xref)

    def lookup_kind(self, xref: str | None, tag: str) -> Record | None:
        """Resolve an xref only if it names a record of the given kind."""
        record = self.lookup(xref)
        if record is not None and record.tag == tag:
            return record
        return None


# ============================================================================
# Flat Projections
# ============================================================================
# Produced by the accessors on import and consumed by the generator on
# export. Dates are partial ISO strings ("1985", "1985-01", "1985-01-15");
# xrefs keep their '@' delimiters.

@dataclass
class Individual:
    xref: str
    name: str = ""
    first_name: str = ""
    last_name: str = ""
    maiden_name: str | None = None
    sex: str | None = None
    birth_date: str | None = None
    birth_date_raw: str | None = None
    birth_place: str | None = None
    death_date: str | None = None
    death_date_raw: str | None = None
    death_place: str | None = None
    deceased: bool = False
    occupation: str | None = None
    notes: list[str] = field(default_factory=list)
    families_as_spouse: list[str] = field(default_factory=list)
    families_as_child: list[str] = field(default_factory=list)
    sources: list[str] = field(default_factory=list)
    objects: list[str] = field(default_factory=list)


@dataclass
class Family:
    xref: str
    husband: str | None = None
    wife: str | None = None
    children: list[str] = field(default_factory=list)
    marriage_date: str | None = None
    marriage_date_raw: str | None = None
    marriage_place: str | None = None
    divorce_date: str | None = None
    divorce_date_raw: str | None = None
    divorced: bool = False
    notes: list[str] = field(default_factory=list)
    sources: list[str] = field(default_factory=list)


@dataclass
class Source:
    xref: str
    title: str = ""
    author: str | None = None
    publication: str | None = None
    repository: str | None = None
    notes: list[str] = field(default_factory=list)


@dataclass
class MediaObject:
    xref: str
    file_path: str = ""
    format: str | None = None
    title: str | None = None
    notes: list[str] = field(default_factory=list)


@dataclass
class Repository:
    xref: str
    name: str = ""
    address: str | None = None
    phone: str | None = None
    email: str | None = None
    website: str | None = None
    notes: list[str] = field(default_factory=list)


@dataclass
class Submitter:
    xref: str
    name: str = ""
    address: str | None = None
    phone: str | None = None
    email: str | None = None
    notes: list[str] = field(default_factory=list)
