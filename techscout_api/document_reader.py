"""Text extraction for uploaded documents."""

import io
import zipfile
from pathlib import PurePath

import docx
import structlog
from docx.opc.exceptions import PackageNotFoundError
from pypdf import PdfReader
from pypdf.errors import PyPdfError

from techscout_api.errors import ValidationError

logger = structlog.get_logger()

SUPPORTED_EXTENSIONS = (".pdf", ".txt", ".doc", ".docx")


def _extract_pdf_text(data: bytes) -> str:
    reader = PdfReader(io.BytesIO(data))
    pages_text = []
    for page in reader.pages:
        page_text = page.extract_text()
        if page_text:
            pages_text.append(page_text)
    return "\n\n".join(pages_text)


def _extract_docx_text(data: bytes) -> str:
    document = docx.Document(io.BytesIO(data))
    return "\n".join(paragraph.text for paragraph in document.paragraphs)


def _decode_text(data: bytes) -> str:
    # Legacy .doc files are binary; decoding keeps whatever text runs they contain.
    return data.decode("utf-8", errors="ignore")


class DocumentReader:
    """Validates an upload and returns its plain text."""

    def __init__(self, max_bytes: int = 10 * 1024 * 1024):
        self.max_bytes = max_bytes

    def validate(self, filename: str | None, size: int) -> str:
        """Check name, type and size of an upload.

        Returns:
            The lower-cased file extension.

        Raises:
            ValidationError: If the upload is missing, empty, too large or of an
                unsupported type.
        """
        if not filename:
            raise ValidationError("No file provided")

        extension = PurePath(filename).suffix.lower()
        if extension not in SUPPORTED_EXTENSIONS:
            raise ValidationError(
                f"Unsupported file type. Accepted types: {', '.join(SUPPORTED_EXTENSIONS)}"
            )
        if size == 0:
            raise ValidationError("Uploaded file is empty.")
        if size > self.max_bytes:
            raise ValidationError(f"File exceeds the {self.max_bytes // (1024 * 1024)} MB upload limit.")
        return extension

    def read(self, filename: str | None, data: bytes) -> str:
        """Extract text from an uploaded file's bytes."""
        extension = self.validate(filename, len(data))

        try:
            if extension == ".pdf":
                text = _extract_pdf_text(data)
            elif extension == ".docx":
                text = _extract_docx_text(data)
            else:
                text = _decode_text(data)
        except (
            PyPdfError,
            PackageNotFoundError,
            zipfile.BadZipFile,
            ValueError,
            KeyError,
            OSError,
        ) as e:
            logger.warning("Failed to read uploaded document", filename=filename, error=str(e))
            raise ValidationError(f"Could not read {extension[1:].upper()} file.") from e

        logger.info("Document text extracted", filename=filename, chars=len(text))
        return text
