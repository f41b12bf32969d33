"""
Helper functions for moving PDF payloads between JSON and binary.

Clients send and receive PDFs as base64 text; the upstream services speak
raw bytes.
"""

import base64
import re

_DATA_URI_PREFIX = re.compile(r"^\s*data:[\w/+.-]*(;[\w=.-]+)*;base64,", re.IGNORECASE)
_NON_ALPHABET = re.compile(r"[^A-Za-z0-9+/=]")


def decode_pdf_blob(text: str) -> bytes:
    """
    Decode a base64 PDF payload sent by a client.

    Decoding never fails, matching what browser and Node clients expect:
    characters outside the base64 alphabet are skipped, URL-safe `-`/`_`
    are read as `+`/`/`, decoding stops at the first `=`, and a dangling
    final character is dropped. A `data:application/pdf;base64,` prefix is
    removed first.

    Args:
        text: Base64 text from the request body

    Returns:
        Decoded PDF bytes (possibly empty)

    Example:
        >>> decode_pdf_blob("AA==AA==")
        b'\\x00'
    """
    cleaned = _DATA_URI_PREFIX.sub("", text, count=1)
    cleaned = cleaned.replace("-", "+").replace("_", "/")
    cleaned = _NON_ALPHABET.sub("", cleaned).split("=", 1)[0]
    # A lone trailing sextet carries no full byte
    if len(cleaned) % 4 == 1:
        cleaned = cleaned[:-1]
    cleaned += "=" * (-len(cleaned) % 4)

    return base64.b64decode(cleaned, validate=False)


def encode_pdf_blob(content: bytes) -> str:
    """Convert PDF bytes to base64 text for a JSON response."""
    return base64.b64encode(content).decode("ascii")
