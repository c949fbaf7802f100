"""Text extraction and document metadata.

Word and PDF files are handed to format specific extractors, plain text and
markdown are decoded as UTF-8. Each extractor is a plain callable taking the
file bytes and returning text, so formats can be swapped or stubbed.
"""

import hashlib
import io
import os
import re
from collections.abc import Callable

import docx
import pypdf

from shared.errors.knowledge_errors import ParseError, UnsupportedFormatError
from shared.models.document import ParsedDocument

Extractor = Callable[[bytes], str]

TITLE_MAX_LENGTH = 100


def extract_word_text(data: bytes) -> str:
    """Extract paragraph and table text from a Word document.

    Only the Office Open XML format is readable; legacy binary .doc files
    fail here and are reported as parse errors.
    """
    document = docx.Document(io.BytesIO(data))
    parts = [paragraph.text for paragraph in document.paragraphs]
    for table in document.tables:
        for row in table.rows:
            parts.append("\t".join(cell.text for cell in row.cells))
    return "\n".join(parts)


def extract_pdf_text(data: bytes) -> str:
    reader = pypdf.PdfReader(io.BytesIO(data))
    return "\n\n".join(page.extract_text() or "" for page in reader.pages)


def decode_text(data: bytes) -> str:
    # invalid byte sequences become U+FFFD instead of failing the document
    return data.decode("utf-8", errors="replace").lstrip("\ufeff")


DEFAULT_EXTRACTORS: dict[str, Extractor] = {
    ".docx": extract_word_text,
    ".doc": extract_word_text,
    ".pdf": extract_pdf_text,
    ".txt": decode_text,
    ".md": decode_text,
}


def extract_title(content: str, file_name: str) -> str:
    """Return the first non-empty line of the text, shortened to 100 characters.

    Falls back to the file name when the text has no non-empty line.
    """
    for line in content.split("\n"):
        line = line.strip()
        if line:
            if len(line) <= TITLE_MAX_LENGTH:
                return line
            return line[:TITLE_MAX_LENGTH - 3] + "..."
    return file_name


def generate_document_id(file_path: str) -> str:
    """Derive a stable document id from the normalised absolute path.

    Returns:
        str: "<name-slug>-<12 hex chars of sha256(path)>"
    """
    normalized = os.path.abspath(file_path).replace("\\", "/")
    digest = hashlib.sha256(normalized.encode("utf-8")).hexdigest()[:12]
    stem = os.path.splitext(os.path.basename(file_path))[0].lower()
    slug = re.sub(r"[^a-z0-9]", "-", stem)[:30]
    return f"{slug}-{digest}"


def extract_category(file_path: str, root_path: str) -> str | None:
    """Return the top-level folder below the root, or None for files directly in the root."""
    relative = os.path.relpath(os.path.abspath(file_path), os.path.abspath(root_path))
    parts = relative.split(os.sep)
    if len(parts) > 1 and parts[0] not in ("", os.curdir, os.pardir):
        return parts[0]
    return None


class DocumentParser:
    """Dispatches files to text extractors by extension."""

    def __init__(self, extractors: dict[str, Extractor] | None = None) -> None:
        self._extractors = dict(DEFAULT_EXTRACTORS if extractors is None else extractors)

    def parse(self, file_path: str) -> str:
        """Extract the plain text of a file.

        Args:
            file_path (str): Path of the file to read.

        Returns:
            str: The extracted text.

        Raises:
            UnsupportedFormatError: If no extractor is registered for the extension.
            ParseError: If the file cannot be read or the extractor fails.
        """
        extension = os.path.splitext(file_path)[1].lower()
        extractor = self._extractors.get(extension)
        if extractor is None:
            raise UnsupportedFormatError(file_path, extension)

        try:
            with open(file_path, "rb") as handle:
                data = handle.read()
        except OSError as exc:
            raise ParseError(file_path, f"cannot read file: {exc}") from exc

        try:
            return extractor(data)
        except Exception as exc:
            raise ParseError(file_path, f"{type(exc).__name__}: {exc}") from exc

    def parse_document(self, file_path: str, root_path: str) -> ParsedDocument:
        """Extract text and derive id, name, category and title of a document.

        Raises:
            UnsupportedFormatError: If no extractor is registered for the extension.
            ParseError: If the file cannot be read or the extractor fails.
        """
        content = self.parse(file_path)
        name = os.path.basename(file_path)
        return ParsedDocument(
            id=generate_document_id(file_path),
            name=name,
            path=os.path.abspath(file_path),
            content=content,
            category=extract_category(file_path, root_path),
            title=extract_title(content, name),
        )
