"""
Text extraction for indexed documents.

Each decoder turns a raw payload into the plain text that gets embedded:

* PDF  - page text via ``pypdf``; a fixed placeholder when nothing is extractable.
* JSON - the string ``text`` field of a top-level object, or ``None``.
* XML  - one line per catalog ``offer`` (name, description, price), markup removed.

Decoding is all-or-nothing: a payload that does not fit its format raises
``DocumentDecodeError`` and produces no text.
"""

import io
import json
import re
import xml.etree.ElementTree as ET
from typing import Callable, Dict, Optional

from loguru import logger
from pypdf import PdfReader

from aibot.errors import DocumentDecodeError
from aibot.services.documents.classifier import FileFormat

TAG_PATTERN = re.compile(r"<[^>]*>")

PDF_PLACEHOLDER_TEXT = "PDF document (no extractable text)"


def strip_tags(text: str) -> str:
    """
    Remove every ``<...>`` substring.

    :param text: text possibly containing markup
    :return: text without tags
    """
    return TAG_PATTERN.sub("", text)


def decode_pdf(payload: bytes) -> str:
    """
    Extract the text of every page of a PDF.

    :param payload: raw PDF bytes
    :return: page texts joined by newlines, or the placeholder text
    :raises DocumentDecodeError: if the payload is not a readable PDF
    """
    try:
        reader = PdfReader(io.BytesIO(payload))
        pages = [page.extract_text() or "" for page in reader.pages]
    except Exception as e:
        raise DocumentDecodeError(FileFormat.PDF.value, str(e)) from e

    text = "\n".join(page.strip() for page in pages if page.strip())
    if not text:
        logger.debug("PDF has no extractable text, using placeholder")
        return PDF_PLACEHOLDER_TEXT
    return text


def decode_json(payload: bytes) -> Optional[str]:
    """
    Extract the ``text`` field of a JSON object.

    :param payload: raw JSON bytes
    :return: the text, or None when there is no string ``text`` field
    :raises DocumentDecodeError: if the payload is not valid JSON
    """
    try:
        data = json.loads(payload)
    except (UnicodeDecodeError, ValueError) as e:
        raise DocumentDecodeError(FileFormat.JSON.value, str(e)) from e

    if not isinstance(data, dict):
        return None
    text = data.get("text")
    if not isinstance(text, str):
        return None
    return text


def _element_text(element: Optional[ET.Element]) -> str:
    """Return the character data of an element and its descendants, without markup."""
    if element is None:
        return ""
    # Escaped markup and CDATA arrive as literal tags in the character data
    return strip_tags("".join(element.itertext())).strip()


def _format_offer(offer: ET.Element) -> str:
    name = _element_text(offer.find("name"))
    description = _element_text(offer.find("description"))
    price = (offer.findtext("price") or "").strip()
    return f"Name: {name}, Description: {description}, Price: {price}"


def decode_xml(payload: bytes) -> str:
    """
    Extract catalog offers as newline-delimited text.

    :param payload: raw XML bytes
    :return: one line per offer; empty string when there are no offers
    :raises DocumentDecodeError: if the payload is not well-formed XML
    """
    try:
        root = ET.fromstring(payload)
    except ET.ParseError as e:
        raise DocumentDecodeError(FileFormat.XML.value, str(e)) from e

    lines = [_format_offer(offer) for offer in root.iter("offer")]
    logger.debug(f"Decoded {len(lines)} catalog offers")
    return "\n".join(lines)


_DECODERS: Dict[FileFormat, Callable[[bytes], Optional[str]]] = {
    FileFormat.PDF: decode_pdf,
    FileFormat.JSON: decode_json,
    FileFormat.XML: decode_xml,
}


def decode_document(file_format: FileFormat, payload: bytes) -> Optional[str]:
    """
    Dispatch a payload to the decoder for its format.

    :param file_format: classified format, must not be UNKNOWN
    :param payload: raw document bytes
    :return: extracted text, or None when there is nothing to vectorize
    """
    try:
        decoder = _DECODERS[file_format]
    except KeyError:
        raise ValueError(f"No decoder for format: {file_format}") from None
    return decoder(payload)
