"""Import/export facade over the parser, validator, mapper and generator."""

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Iterable

from .accessors import parse_object, parse_source
from .generator import GeneratorOptions, generate
from .mapper import map_from_gedcom, map_to_gedcom
from .models import Person, Relationship, RelationshipType
from .parser import parse, parse_bytes
from .records import MediaObject, ParsedDocument, Source
from .validation import Finding, Severity, validate

logger = logging.getLogger("gedcom_interchange.service")


@dataclass
class ImportResult:
    document: ParsedDocument
    findings: list[Finding] = field(default_factory=list)
    people: list[Person] = field(default_factory=list)
    relationships: list[Relationship] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    sources: list[Source] = field(default_factory=list)
    objects: list[MediaObject] = field(default_factory=list)


def import_gedcom(content: str | bytes) -> ImportResult:
    """Parse, validate and map a GEDCOM file.

    Raises GedcomParseError on structural errors; everything else is
    reported through findings and warnings.
    """
    document = parse_bytes(content) if isinstance(content, bytes) else parse(content)
    findings = validate(document)
    mapped = map_from_gedcom(document)

    result = ImportResult(
        document=document,
        findings=findings,
        people=mapped.people,
        relationships=mapped.relationships,
        warnings=mapped.warnings,
        sources=[parse_source(record, document) for record in document.sources],
        objects=[parse_object(record, document) for record in document.objects],
    )
    logger.info(
        f"Imported GEDCOM {document.version.value}: {len(result.people)} people, "
        f"{len(result.relationships)} relationships, {len(findings)} findings"
    )
    return result


def export_gedcom(
    people: list[Person],
    relationships: list[Relationship],
    options: GeneratorOptions | None = None,
    sources: Iterable[Source] = (),
    objects: Iterable[MediaObject] = (),
) -> str:
    """Generate GEDCOM text for a set of people and relationships."""
    projection = map_to_gedcom(people, relationships)
    content = generate(projection.individuals, projection.families, options, sources, objects)
    logger.info(
        f"Exported {len(projection.individuals)} individuals and "
        f"{len(projection.families)} families"
    )
    return content


def calculate_statistics(result: ImportResult) -> dict[str, Any]:
    """Summary counts for an import."""
    return {
        "people_count": len(result.people),
        "relationship_count": len(result.relationships),
        "spousal_relationships": sum(
            1 for r in result.relationships if r.type == RelationshipType.SPOUSE
        ),
        "warning_count": len(result.warnings)
        + sum(1 for f in result.findings if f.severity == Severity.WARNING),
        "error_count": sum(1 for f in result.findings if f.severity == Severity.ERROR),
    }


def format_file_name(today: date | None = None) -> str:
    """Download name for an export, e.g. 'family-tree-2024-03-01.ged'."""
    today = today or date.today()
    return f"family-tree-{today.isoformat()}.ged"
