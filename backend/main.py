"""GEDCOM Interchange - HTTP backend.

FastAPI server exposing GEDCOM validation, import into people/relationships
and export back to GEDCOM text. The server keeps no state between requests.
"""

import logging
import os

from dotenv import load_dotenv

# Load environment variables
load_dotenv()

# Configure logging
logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger("gedcom_interchange.api")

from fastapi import FastAPI, HTTPException, UploadFile, File
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse
from pydantic import BaseModel

from gedcom_interchange import (
    Finding,
    GedcomParseError,
    GeneratorOptions,
    Person,
    Relationship,
    calculate_statistics,
    export_gedcom,
    format_file_name,
    import_gedcom,
    load_settings,
    parse_bytes,
    validate_structure,
)

GEDCOM_EXTENSIONS = (".ged", ".gedcom")


# Create FastAPI app
app = FastAPI(
    title="GEDCOM Interchange",
    description="Import and export family trees as GEDCOM 5.5.1 and 7.0",
    version="1.0.0",
)

# Configure CORS for frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=load_settings().cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Request/Response models
class FindingResponse(BaseModel):
    """A single validation finding."""
    severity: str
    message: str
    xref: str | None = None
    line_number: int | None = None


class ValidateResponse(BaseModel):
    """Result of validating an uploaded GEDCOM file."""
    valid: bool
    findings: list[FindingResponse] = []
    preview: dict[str, int] = {}


class ImportResponse(BaseModel):
    """People and relationships read from an uploaded GEDCOM file."""
    message: str
    people: list[Person]
    relationships: list[Relationship]
    findings: list[FindingResponse] = []
    warnings: list[str] = []
    statistics: dict[str, int] = {}


class ExportRequest(BaseModel):
    """People and relationships to write as GEDCOM."""
    people: list[Person]
    relationships: list[Relationship] = []
    options: GeneratorOptions | None = None  # Defaults come from settings


def _finding_responses(findings: list[Finding]) -> list[FindingResponse]:
    return [
        FindingResponse(
            severity=finding.severity.value,
            message=finding.message,
            xref=finding.xref,
            line_number=finding.line_number,
        )
        for finding in findings
    ]


async def _read_upload(file: UploadFile) -> bytes:
    """Read an uploaded GEDCOM file, enforcing extension and size limits."""
    filename = file.filename or ""
    logger.info(f"Received GEDCOM file upload: {filename}")

    if not filename.lower().endswith(GEDCOM_EXTENSIONS):
        logger.warning(f"Invalid file type: {filename}")
        raise HTTPException(status_code=400, detail="File must be a GEDCOM file (.ged or .gedcom)")

    content = await file.read()
    logger.debug(f"Read {len(content)} bytes from file")

    max_bytes = load_settings().max_upload_bytes
    if len(content) > max_bytes:
        logger.warning(f"Upload {filename} is {len(content)} bytes, limit is {max_bytes}")
        raise HTTPException(status_code=413, detail=f"File exceeds the {max_bytes} byte limit")
    return content


# Endpoints

@app.get("/health")
async def health_check():
    """Health check endpoint."""
    logger.debug("Health check requested")
    return {"status": "healthy"}


@app.post("/gedcom/validate", response_model=ValidateResponse)
async def validate_gedcom(file: UploadFile = File(...)):
    """Check an uploaded GEDCOM file without importing it."""
    content = await _read_upload(file)

    try:
        document = parse_bytes(content)
    except GedcomParseError as e:
        logger.info(f"GEDCOM file failed structural parsing: {e}")
        return ValidateResponse(
            valid=False,
            findings=[FindingResponse(
                severity="error",
                message=e.message,
                line_number=e.line_number,
            )],
        )

    report = validate_structure(document)
    return ValidateResponse(
        valid=report.valid,
        findings=_finding_responses(report.findings),
        preview={"people": report.people, "families": report.families},
    )


@app.post("/gedcom/import", response_model=ImportResponse)
async def import_gedcom_file(file: UploadFile = File(...)):
    """Upload a GEDCOM file and map it to people and relationships."""
    content = await _read_upload(file)

    try:
        result = import_gedcom(content)
    except GedcomParseError as e:
        logger.error(f"Failed to parse GEDCOM file: {e}")
        raise HTTPException(status_code=400, detail=f"Failed to parse GEDCOM file: {e}")

    logger.info(f"Imported {len(result.people)} people from {file.filename}")
    return ImportResponse(
        message=f"Successfully parsed GEDCOM file: {file.filename}",
        people=result.people,
        relationships=result.relationships,
        findings=_finding_responses(result.findings),
        warnings=result.warnings,
        statistics=calculate_statistics(result),
    )


@app.post("/gedcom/export")
async def export_gedcom_file(request: ExportRequest):
    """Generate a GEDCOM file from people and relationships."""
    options = request.options or load_settings().generator_options()
    content = export_gedcom(request.people, request.relationships, options)
    filename = format_file_name(options.generation_date)

    logger.info(f"Exporting {len(request.people)} people as {filename}")
    return PlainTextResponse(
        content,
        media_type="text/plain; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
