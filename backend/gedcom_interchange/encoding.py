"""Character-set detection and decoding for raw GEDCOM bytes."""

import codecs
import logging
import re
import unicodedata

from .errors import GedcomParseError

logger = logging.getLogger("gedcom_interchange.encoding")

CHAR_LINE_RE = re.compile(rb"^\s*1[ \t]+CHAR[ \t]+([A-Za-z0-9_\-]+)", re.MULTILINE)

# How far into the file to look for the header CHAR line
HEADER_SCAN_BYTES = 4096


# ============================================================================
# ANSEL (Z39.47) tables
# ============================================================================

ANSEL_SPACING = {
    0xA1: "Ł",  # L with stroke
    0xA2: "Ø",  # O with stroke
    0xA3: "Đ",  # D with stroke
    0xA4: "Þ",  # thorn
    0xA5: "Æ",  # AE
    0xA6: "Œ",  # OE
    0xA7: "ʹ",  # soft sign
    0xA8: "·",  # middle dot
    0xA9: "♭",  # flat
    0xAA: "®",  # registered
    0xAB: "±",  # plus-minus
    0xAC: "Ơ",  # O with horn
    0xAD: "Ư",  # U with horn
    0xAE: "ʼ",  # alif
    0xB0: "ʻ",  # ayn
    0xB1: "ł",  # l with stroke
    0xB2: "ø",  # o with stroke
    0xB3: "đ",  # d with stroke
    0xB4: "þ",  # thorn
    0xB5: "æ",  # ae
    0xB6: "œ",  # oe
    0xB7: "ʺ",  # hard sign
    0xB8: "ı",  # dotless i
    0xB9: "£",  # pound
    0xBA: "ð",  # eth
    0xBC: "ơ",  # o with horn
    0xBD: "ư",  # u with horn
    0xC0: "°",  # degree
    0xC1: "ℓ",  # script l
    0xC2: "℗",  # sound recording copyright
    0xC3: "©",  # copyright
    0xC4: "♯",  # sharp
    0xC5: "¿",  # inverted question mark
    0xC6: "¡",  # inverted exclamation mark
    0xC7: "ß",  # eszett
    0xC8: "€",  # euro
    0xCF: "ß",  # eszett (GEDCOM extension)
}

# Combining marks are written before the character they modify
ANSEL_COMBINING = {
    0xE0: "\u0309",  # hook above
    0xE1: "\u0300",  # grave
    0xE2: "\u0301",  # acute
    0xE3: "\u0302",  # circumflex
    0xE4: "\u0303",  # tilde
    0xE5: "\u0304",  # macron
    0xE6: "\u0306",  # breve
    0xE7: "\u0307",  # dot above
    0xE8: "\u0308",  # diaeresis
    0xE9: "\u030C",  # caron
    0xEA: "\u030A",  # ring above
    0xEB: "\uFE20",  # ligature left half
    0xEC: "\uFE21",  # ligature right half
    0xED: "\u0315",  # comma above right
    0xEE: "\u030B",  # double acute
    0xEF: "\u0310",  # candrabindu
    0xF0: "\u0327",  # cedilla
    0xF1: "\u0328",  # ogonek
    0xF2: "\u0323",  # dot below
    0xF3: "\u0324",  # double dot below
    0xF4: "\u0325",  # ring below
    0xF5: "\u0333",  # double underline
    0xF6: "\u0332",  # underline
    0xF7: "\u0326",  # comma below
    0xF8: "\u031C",  # left half ring below
    0xF9: "\u032E",  # breve below
    0xFA: "\uFE22",  # double tilde left half
    0xFB: "\uFE23",  # double tilde right half
    0xFE: "\u0313",  # comma above
}


def decode_ansel(data: bytes) -> str:
    """Decode ANSEL bytes to NFC-normalized text."""
    output = []
    pending_marks = []

    for byte in data:
        if byte in ANSEL_COMBINING:
            pending_marks.append(ANSEL_COMBINING[byte])
            continue

        if byte < 0x80:
            char = chr(byte)
        else:
            char = ANSEL_SPACING.get(byte, "\uFFFD")

        output.append(char)
        if pending_marks:
            output.extend(pending_marks)
            pending_marks = []

    # Marks with no following base character are kept as-is
    output.extend(pending_marks)
    return unicodedata.normalize("NFC", "".join(output))


# ============================================================================
# Detection
# ============================================================================

def detect_charset(data: bytes) -> str | None:
    """Guess the character set of a GEDCOM file.

    Byte order marks win; otherwise the header CHAR line is used.
    Returns a normalized name ('UTF-8', 'UTF-16', 'ANSEL', 'ANSI', 'ASCII')
    or None when nothing is declared.
    """
    if data.startswith(codecs.BOM_UTF8):
        return "UTF-8"
    if data.startswith(codecs.BOM_UTF16_LE) or data.startswith(codecs.BOM_UTF16_BE):
        return "UTF-16"
    # UTF-16 without a BOM still starts with "0" followed or preceded by a NUL
    if data[:2] in (b"0\x00", b"\x000"):
        return "UTF-16"

    match = CHAR_LINE_RE.search(data[:HEADER_SCAN_BYTES])
    if not match:
        return None

    declared = match.group(1).decode("ascii").upper()
    # A UNICODE declaration readable as 8-bit text was saved as UTF-8
    if declared in ("UTF-8", "UTF8", "UNICODE"):
        return "UTF-8"
    if declared in ("ANSI", "WINDOWS-1252", "CP1252"):
        return "ANSI"
    if declared in ("ANSEL", "ASCII"):
        return declared
    logger.warning(f"Unrecognized CHAR value {declared!r}, assuming UTF-8")
    return "UTF-8"


def decode_gedcom(data: bytes) -> str:
    """Decode raw GEDCOM bytes to text using the detected character set.

    Raises GedcomParseError when UTF-16 data is truncated or malformed.
    """
    charset = detect_charset(data)

    if charset == "UTF-16":
        if data[:2] == b"0\x00":
            encoding = "utf-16-le"
        elif data[:2] == b"\x000":
            encoding = "utf-16-be"
        else:
            encoding = "utf-16"
        try:
            return data.decode(encoding)
        except UnicodeDecodeError as e:
            raise GedcomParseError(f"File is not valid UTF-16: {e.reason} at byte {e.start}") from e
    if charset == "ANSEL":
        return decode_ansel(data)
    if charset == "ANSI":
        return data.decode("cp1252", errors="replace")

    try:
        return data.decode("utf-8-sig")
    except UnicodeDecodeError:
        logger.warning("File is not valid UTF-8, decoding as latin-1")
        return data.decode("latin-1")
