"""GEDCOM generator: serialize flat projections into GEDCOM text."""

import logging
from datetime import date
from typing import Iterable

from pydantic import BaseModel, Field

from .dates import date_codec_for
from .records import Family, GedcomVersion, Individual, MediaObject, Source

logger = logging.getLogger("gedcom_interchange.generator")

SUBMITTER_XREF = "@SUBM1@"


class GeneratorOptions(BaseModel):
    """Options controlling generated GEDCOM output."""
    max_line_length: int = Field(default=80, ge=20)
    source_program: str = "gedcom-interchange"
    submitter_name: str = "gedcom-interchange"
    version: GedcomVersion = GedcomVersion.V5_5_1
    generation_date: date | None = None  # defaults to today


# ============================================================================
# Line Formatting
# ============================================================================

def format_line(level: int, tag: str, value: str | None = None, xref: str | None = None) -> str:
    """Format one line: '<level> [<xref>] <tag> [<value>]'."""
    line = f"{level}"
    if xref:
        line += f" {xref}"
    line += f" {tag}"
    if value:
        line += f" {value}"
    return line


def format_long_line(
    level: int,
    tag: str,
    value: str | None,
    max_line_length: int = 80,
    xref: str | None = None,
) -> list[str]:
    """Format a value that may need CONT/CONC continuation lines.

    Embedded newlines always start a CONT line. A line that is too long is
    broken at the last space in the window when that space sits at or past
    half the available width; the space is dropped and the next line is a
    CONT. Otherwise the line is hard-broken at the width and continued with
    CONC. A reader folding the result back sees a soft break as a newline
    where the space was, not as the space itself.
    """
    if not value:
        return [format_line(level, tag, xref=xref)]

    lines = []
    current_level, current_tag, current_xref = level, tag, xref

    for index, paragraph in enumerate(value.split("\n")):
        if index > 0:
            current_level, current_tag, current_xref = level + 1, "CONT", None

        remaining = paragraph
        while True:
            prefix = format_line(current_level, current_tag, xref=current_xref) + " "
            width = max(max_line_length - len(prefix), 1)

            if len(remaining) <= width:
                lines.append(format_line(current_level, current_tag, remaining, current_xref))
                break

            split = remaining.rfind(" ", 0, width + 1)
            if split > 0 and split >= width / 2:
                lines.append(format_line(current_level, current_tag, remaining[:split], current_xref))
                remaining = remaining[split + 1:]
                next_tag = "CONT"
            else:
                lines.append(format_line(current_level, current_tag, remaining[:width], current_xref))
                remaining = remaining[width:]
                next_tag = "CONC"

            current_level, current_tag, current_xref = level + 1, next_tag, None

    return lines


# ============================================================================
# Generator
# ============================================================================

class GedcomGenerator:
    """Builds GEDCOM text from individuals, families, sources and objects."""

    def __init__(self, options: GeneratorOptions | None = None):
        self.options = options or GeneratorOptions()
        self.codec = date_codec_for(self.options.version)

    def _long(self, level: int, tag: str, value: str | None) -> list[str]:
        return format_long_line(level, tag, value, self.options.max_line_length)

    def _date_line(self, iso_date: str | None, raw: str | None) -> list[str]:
        if iso_date:
            return [format_line(2, "DATE", self.codec.format(iso_date))]
        if raw:
            return [format_line(2, "DATE", raw)]
        return []

    def header_lines(self) -> list[str]:
        options = self.options
        today = options.generation_date or date.today()
        return [
            "0 HEAD",
            format_line(1, "SOUR", options.source_program),
            format_line(2, "NAME", options.source_program),
            "2 VERS 1.0",
            format_line(1, "DATE", self.codec.format_calendar_date(today)),
            "1 GEDC",
            format_line(2, "VERS", options.version.value),
            "2 FORM LINEAGE-LINKED",
            "1 CHAR UTF-8",
            format_line(1, "SUBM", SUBMITTER_XREF),
        ]

    def submitter_lines(self) -> list[str]:
        return [
            format_line(0, "SUBM", xref=SUBMITTER_XREF),
            format_line(1, "NAME", self.options.submitter_name),
        ]

    def individual_lines(self, individual: Individual) -> list[str]:
        lines = [format_line(0, "INDI", xref=individual.xref)]

        lines.append(format_line(1, "NAME", f"{individual.first_name} /{individual.last_name}/".strip()))
        if individual.maiden_name:
            lines.append(format_line(1, "NAME", f"{individual.first_name} /{individual.maiden_name}/".strip()))
            lines.append("2 TYPE maiden")

        if individual.sex:
            lines.append(format_line(1, "SEX", individual.sex))

        if individual.birth_date or individual.birth_date_raw or individual.birth_place:
            lines.append("1 BIRT")
            lines.extend(self._date_line(individual.birth_date, individual.birth_date_raw))
            if individual.birth_place:
                lines.extend(self._long(2, "PLAC", individual.birth_place))

        if individual.death_date or individual.death_date_raw or individual.death_place:
            lines.append("1 DEAT")
            lines.extend(self._date_line(individual.death_date, individual.death_date_raw))
            if individual.death_place:
                lines.extend(self._long(2, "PLAC", individual.death_place))
        elif individual.deceased:
            # Known to be dead, no details
            lines.append("1 DEAT Y")

        if individual.occupation:
            lines.extend(self._long(1, "OCCU", individual.occupation))

        for note in individual.notes:
            lines.extend(self._long(1, "NOTE", note))

        for xref in individual.families_as_spouse:
            lines.append(format_line(1, "FAMS", xref))
        for xref in individual.families_as_child:
            lines.append(format_line(1, "FAMC", xref))
        for xref in individual.sources:
            lines.append(format_line(1, "SOUR", xref))
        for xref in individual.objects:
            lines.append(format_line(1, "OBJE", xref))

        return lines

    def family_lines(self, family: Family) -> list[str]:
        lines = [format_line(0, "FAM", xref=family.xref)]

        if family.husband:
            lines.append(format_line(1, "HUSB", family.husband))
        if family.wife:
            lines.append(format_line(1, "WIFE", family.wife))

        if family.marriage_date or family.marriage_date_raw or family.marriage_place:
            lines.append("1 MARR")
            lines.extend(self._date_line(family.marriage_date, family.marriage_date_raw))
            if family.marriage_place:
                lines.extend(self._long(2, "PLAC", family.marriage_place))

        if family.divorced or family.divorce_date or family.divorce_date_raw:
            lines.append("1 DIV")
            lines.extend(self._date_line(family.divorce_date, family.divorce_date_raw))

        for xref in family.children:
            lines.append(format_line(1, "CHIL", xref))
        for note in family.notes:
            lines.extend(self._long(1, "NOTE", note))
        for xref in family.sources:
            lines.append(format_line(1, "SOUR", xref))

        return lines

    def source_lines(self, source: Source) -> list[str]:
        lines = [format_line(0, "SOUR", xref=source.xref)]
        if source.title:
            lines.extend(self._long(1, "TITL", source.title))
        if source.author:
            lines.extend(self._long(1, "AUTH", source.author))
        if source.publication:
            lines.extend(self._long(1, "PUBL", source.publication))
        if source.repository:
            lines.append(format_line(1, "REPO", source.repository))
        for note in source.notes:
            lines.extend(self._long(1, "NOTE", note))
        return lines

    def object_lines(self, media: MediaObject) -> list[str]:
        lines = [
            format_line(0, "OBJE", xref=media.xref),
            format_line(1, "FILE", media.file_path),
        ]
        if media.format:
            lines.append(format_line(2, "FORM", media.format))
        if media.title:
            lines.extend(self._long(2, "TITL", media.title))
        for note in media.notes:
            lines.extend(self._long(1, "NOTE", note))
        return lines

    def generate(
        self,
        individuals: Iterable[Individual],
        families: Iterable[Family],
        sources: Iterable[Source] = (),
        objects: Iterable[MediaObject] = (),
    ) -> str:
        lines = self.header_lines() + self.submitter_lines()
        counts = {"INDI": 0, "FAM": 0, "SOUR": 0, "OBJE": 0}

        for individual in individuals:
            lines.extend(self.individual_lines(individual))
            counts["INDI"] += 1
        for family in families:
            lines.extend(self.family_lines(family))
            counts["FAM"] += 1
        for source in sources:
            lines.extend(self.source_lines(source))
            counts["SOUR"] += 1
        for media in objects:
            lines.extend(self.object_lines(media))
            counts["OBJE"] += 1

        lines.append("0 TRLR")
        logger.debug(f"Generated {len(lines)} lines: {counts}")
        return "\n".join(lines) + "\n"


def generate(
    individuals: Iterable[Individual],
    families: Iterable[Family],
    options: GeneratorOptions | None = None,
    sources: Iterable[Source] = (),
    objects: Iterable[MediaObject] = (),
) -> str:
    """Generate a complete GEDCOM file ending in a newline."""
    return GedcomGenerator(options).generate(individuals, families, sources, objects)
