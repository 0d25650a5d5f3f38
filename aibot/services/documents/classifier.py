"""Pick a document decoder from a filename or URL."""

from enum import Enum

from yarl import URL


class FileFormat(str, Enum):
    """Document formats the bot can index."""

    PDF = "pdf"
    JSON = "json"
    XML = "xml"
    UNKNOWN = "unknown"


# Case-sensitive: "report.PDF" is not a PDF
_SUFFIXES = {
    ".pdf": FileFormat.PDF,
    ".json": FileFormat.JSON,
    ".xml": FileFormat.XML,
}

URL_PREFIXES = ("http://", "https://")


def classify_file(name: str) -> FileFormat:
    """
    Classify a filename by its suffix.

    :param name: filename or path
    :return: matching format, or UNKNOWN
    """
    for suffix, file_format in _SUFFIXES.items():
        if name.endswith(suffix):
            return file_format
    return FileFormat.UNKNOWN


def classify_url(url: str) -> FileFormat:
    """
    Classify a document URL by the suffix of its path.

    Unlike :func:`classify_file` on the raw string, the query string and
    fragment are ignored: ``https://host/x.pdf?t=1`` is a PDF and
    ``https://host/page?f=x.pdf`` is not.

    :param url: absolute http(s) URL
    :return: matching format, or UNKNOWN
    """
    try:
        path = URL(url).path
    except ValueError:
        return FileFormat.UNKNOWN
    return classify_file(path)


def is_url(text: str) -> bool:
    """Return True when the text is an http(s) document reference."""
    return text.startswith(URL_PREFIXES)
