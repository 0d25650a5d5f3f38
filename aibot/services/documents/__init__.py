"""Document classification, download and text extraction."""

from aibot.services.documents.classifier import (
    FileFormat,
    classify_file,
    classify_url,
    is_url,
)
from aibot.services.documents.decoder import (
    PDF_PLACEHOLDER_TEXT,
    decode_document,
    strip_tags,
)
from aibot.services.documents.fetcher import fetch_url

__all__ = [
    "FileFormat",
    "classify_file",
    "classify_url",
    "is_url",
    "PDF_PLACEHOLDER_TEXT",
    "decode_document",
    "strip_tags",
    "fetch_url",
]
