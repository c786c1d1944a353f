from .errors import GedcomError, GedcomParseError
from .records import (
    GedcomVersion,
    MappedTag,
    Record,
    ParsedDocument,
    Individual,
    Family,
    Source,
    MediaObject,
    Repository,
    Submitter,
)
from .dates import ParsedDate, Gedcom551Dates, Gedcom70Dates, date_codec_for, parse_date
from .encoding import decode_gedcom, detect_charset
from .parser import parse, parse_bytes, parse_file
from .accessors import (
    parse_name,
    parse_individual,
    parse_family,
    parse_source,
    parse_object,
    parse_repository,
    parse_submitter,
    extract_event_sources,
    extract_event_objects,
)
from .validation import Severity, Finding, StructureReport, validate, validate_structure
from .models import Gender, RelationshipType, Person, Relationship, MappingResult
from .mapper import GedcomProjection, map_from_gedcom, map_to_gedcom
from .generator import GeneratorOptions, format_long_line, generate
from .service import (
    ImportResult,
    import_gedcom,
    export_gedcom,
    calculate_statistics,
    format_file_name,
)
from .config import Settings, load_settings

__all__ = [
    "GedcomError",
    "GedcomParseError",
    # Records and projections
    "GedcomVersion",
    "MappedTag",
    "Record",
    "ParsedDocument",
    "Individual",
    "Family",
    "Source",
    "MediaObject",
    "Repository",
    "Submitter",
    # Dates and encoding
    "ParsedDate",
    "Gedcom551Dates",
    "Gedcom70Dates",
    "date_codec_for",
    "parse_date",
    "decode_gedcom",
    "detect_charset",
    # Parser and accessors
    "parse",
    "parse_bytes",
    "parse_file",
    "parse_name",
    "parse_individual",
    "parse_family",
    "parse_source",
    "parse_object",
    "parse_repository",
    "parse_submitter",
    "extract_event_sources",
    "extract_event_objects",
    # Validation
    "Severity",
    "Finding",
    "StructureReport",
    "validate",
    "validate_structure",
    # Domain mapping
    "Gender",
    "RelationshipType",
    "Person",
    "Relationship",
    "MappingResult",
    "GedcomProjection",
    "map_from_gedcom",
    "map_to_gedcom",
    # Generator
    "GeneratorOptions",
    "format_long_line",
    "generate",
    # Facade and settings
    "ImportResult",
    "import_gedcom",
    "export_gedcom",
    "calculate_statistics",
    "format_file_name",
    "Settings",
    "load_settings",
]
