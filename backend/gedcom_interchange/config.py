"""Settings read from environment variables (a .env file is loaded by main.py)."""

import logging
import os

from pydantic import BaseModel

from .generator import GeneratorOptions
from .records import GedcomVersion

logger = logging.getLogger("gedcom_interchange.config")

DEFAULT_MAX_LINE_LENGTH = 80
DEFAULT_MAX_UPLOAD_BYTES = 10 * 1024 * 1024
DEFAULT_CORS_ORIGINS = ["http://localhost:5173", "http://localhost:3000", "http://127.0.0.1:5173"]


class Settings(BaseModel):
    source_program: str = "gedcom-interchange"
    submitter_name: str = "gedcom-interchange"
    max_line_length: int = DEFAULT_MAX_LINE_LENGTH
    version: GedcomVersion = GedcomVersion.V5_5_1
    max_upload_bytes: int = DEFAULT_MAX_UPLOAD_BYTES
    log_level: str = "INFO"
    cors_origins: list[str] = DEFAULT_CORS_ORIGINS

    def generator_options(self) -> GeneratorOptions:
        return GeneratorOptions(
            max_line_length=self.max_line_length,
            source_program=self.source_program,
            submitter_name=self.submitter_name,
            version=self.version,
        )


def _int_env(name: str, default: int, minimum: int = 1) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw)
    except ValueError:
        logger.warning(f"{name}={raw!r} is not a number, using {default}")
        return default
    if value < minimum:
        logger.warning(f"{name}={value} is below {minimum}, using {default}")
        return default
    return value


def load_settings() -> Settings:
    """Read settings from the environment. Called per use, never cached."""
    version = os.getenv("GEDCOM_VERSION", GedcomVersion.V5_5_1.value).strip()
    if version not in (v.value for v in GedcomVersion):
        logger.warning(f"GEDCOM_VERSION={version!r} is not supported, using 5.5.1")
        version = GedcomVersion.V5_5_1.value

    origins = os.getenv("CORS_ORIGINS")
    cors_origins = (
        [origin.strip() for origin in origins.split(",") if origin.strip()]
        if origins
        else list(DEFAULT_CORS_ORIGINS)
    )

    return Settings(
        source_program=os.getenv("GEDCOM_SOURCE_PROGRAM") or "gedcom-interchange",
        submitter_name=os.getenv("GEDCOM_SUBMITTER_NAME") or "gedcom-interchange",
        max_line_length=_int_env("GEDCOM_MAX_LINE_LENGTH", DEFAULT_MAX_LINE_LENGTH, minimum=20),
        version=GedcomVersion(version),
        max_upload_bytes=_int_env("GEDCOM_MAX_UPLOAD_BYTES", DEFAULT_MAX_UPLOAD_BYTES),
        log_level=(os.getenv("LOG_LEVEL") or "INFO").upper(),
        cors_origins=cors_origins,
    )
