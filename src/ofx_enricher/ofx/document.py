"""Decoding of OFX export response bodies."""

from pathlib import Path
import base64
import binascii
import logging

from ..utils.exceptions import ExportError

logger = logging.getLogger(__name__)

# Leading tokens of a plain-text export (SGML header or bare XML/SGML body)
OFX_HEADER_TOKENS = ("OFXHEADER", "<?xml", "<OFX>")


def looks_like_ofx(text: str) -> bool:
    """True when ``text`` starts the way a plain OFX export does."""
    head = text.lstrip("\ufeff \t\r\n")[:64].upper()
    return any(head.startswith(token.upper()) for token in OFX_HEADER_TOKENS)


def decode_export(body: str) -> str:
    """
    Return the OFX text from an export response body.

    Plain exports are returned as-is. Some responses carry the document
    base64-encoded; those are recognised by the missing OFX header and
    decoded.

    Raises:
        ExportError: If the body is empty or neither OFX nor base64 OFX
    """
    if not body or not body.strip():
        raise ExportError("Empty response from export endpoint")

    if looks_like_ofx(body):
        return body

    try:
        decoded = base64.b64decode("".join(body.split()), validate=True)
        text = decoded.decode("utf-8")
    except (binascii.Error, UnicodeDecodeError) as e:
        raise ExportError(
            f"Export response is not an OFX document (session expired?): {e}"
        ) from e

    if not looks_like_ofx(text):
        raise ExportError("Decoded export response is not an OFX document")

    logger.debug("Export response was base64-encoded")
    return text


def read_ofx_file(file_path: Path) -> str:
    """
    Read a saved OFX export.

    Raises:
        ExportError: If the file cannot be read or is not OFX
    """
    logger.info(f"Reading OFX export: {file_path}")
    try:
        body = file_path.read_text(encoding="utf-8", errors="replace")
    except OSError as e:
        raise ExportError(f"Failed to read OFX file: {e}") from e
    return decode_export(body)
