"""Disk-backed storage for claim documents."""
import os
import random
import time
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Iterable, Optional

from expense_claims.config import settings
from expense_claims.exceptions import ErrorCode, FileProcessingException, ResourceNotFoundException
from expense_claims.utils.logging_config import get_logger

logger = get_logger(__name__)

# Extension used when the client-supplied name has none
CONTENT_TYPE_EXTENSIONS = {
    "application/pdf": ".pdf",
    "image/jpeg": ".jpg",
    "image/png": ".png",
}

STAGING_DIR_SUFFIX = "-staging"


@dataclass
class StoredDocument:
    """A blob accepted by the store.

    `path` is the final location recorded on the document row; while the
    blob is staged it lives at `staged_path` instead.
    """

    original_name: str
    path: str
    staged_path: Optional[str] = None

    @property
    def is_staged(self) -> bool:
        return self.staged_path is not None


def normalize_content_type(content_type: Optional[str]) -> str:
    """Strip parameters and case from a Content-Type header value."""
    if not content_type:
        return ""
    return content_type.split(";", 1)[0].strip().lower()


class DocumentStore:
    """
    File system store for uploaded claim documents.

    Blobs are written into a staging directory first and moved into the
    upload directory with `promote` once the owning database rows are
    committed. Names are generated, so client-supplied names never reach
    the file system.
    """

    def __init__(
        self,
        root_dir: str,
        allowed_content_types: Iterable[str],
        max_size_bytes: int,
        url_prefix: str = "/uploads",
    ):
        """
        Initialize the store and create its directories.

        Args:
            root_dir: Directory holding promoted documents
            allowed_content_types: Accepted MIME types
            max_size_bytes: Maximum accepted blob size
            url_prefix: Public URL prefix the root directory is served under
        """
        self.root_dir = Path(root_dir)
        # Kept beside the root so staged blobs are never served publicly
        self.staging_dir = self.root_dir.parent / f".{self.root_dir.name}{STAGING_DIR_SUFFIX}"
        self.allowed_content_types = {normalize_content_type(t) for t in allowed_content_types}
        self.max_size_bytes = max_size_bytes
        self.url_prefix = url_prefix.rstrip("/")

        self.root_dir.mkdir(parents=True, exist_ok=True)
        self.staging_dir.mkdir(parents=True, exist_ok=True)

    def generate_name(self, original_name: str, content_type: str, field_name: str = "documents") -> str:
        """
        Build a unique storage name: <field>-<epoch millis>-<random><ext>.

        Args:
            original_name: Client-supplied file name (only its extension is used)
            content_type: Normalized content type, used when the name has no extension
            field_name: Form field the file arrived under

        Returns:
            Generated file name
        """
        extension = Path(original_name or "").suffix.lower()
        if not extension:
            extension = CONTENT_TYPE_EXTENSIONS.get(content_type, "")
        return f"{field_name}-{int(time.time() * 1000)}-{random.randint(0, 10**9)}{extension}"

    def validate_document(self, original_name: str, content_type: Optional[str], size: int) -> str:
        """
        Check content type and size of an upload.

        Returns:
            Normalized content type

        Raises:
            FileProcessingException: UnsupportedType or TooLarge
        """
        normalized = normalize_content_type(content_type)
        if normalized not in self.allowed_content_types:
            raise FileProcessingException(
                message="Only PDF, JPEG and PNG documents are allowed",
                code=ErrorCode.UNSUPPORTED_TYPE,
                filename=original_name,
                file_type=normalized or None,
            )

        if size > self.max_size_bytes:
            raise FileProcessingException(
                message=f"Document exceeds the maximum size of {self.max_size_bytes // (1024 * 1024)}MB",
                code=ErrorCode.TOO_LARGE,
                filename=original_name,
                details={"size_bytes": size, "max_size_bytes": self.max_size_bytes},
            )
        return normalized

    def stage(self, content: bytes, original_name: str, content_type: Optional[str]) -> StoredDocument:
        """
        Validate a blob and write it into the staging directory.

        Args:
            content: File content
            original_name: Client-supplied file name
            content_type: Client-supplied content type

        Returns:
            StoredDocument whose `path` is the final location

        Raises:
            FileProcessingException: If the document is rejected
        """
        normalized = self.validate_document(original_name, content_type, len(content))
        name = self.generate_name(original_name, normalized)
        staged_path = self.staging_dir / name

        with open(staged_path, "wb") as f:
            f.write(content)

        logger.debug(
            f"Document staged: {name}",
            extra={"extra_fields": {"original_name": original_name, "size_bytes": len(content)}}
        )
        return StoredDocument(
            original_name=original_name,
            path=str(self.root_dir / name),
            staged_path=str(staged_path),
        )

    def promote(self, stored: StoredDocument) -> StoredDocument:
        """Move a staged blob to its final location."""
        if not stored.is_staged:
            return stored
        os.replace(stored.staged_path, stored.path)
        return StoredDocument(original_name=stored.original_name, path=stored.path)

    def save(self, content: bytes, original_name: str, content_type: Optional[str]) -> StoredDocument:
        """Validate a blob and write it straight to its final location."""
        return self.promote(self.stage(content, original_name, content_type))

    def _within_root(self, path: str) -> Optional[Path]:
        candidate = Path(path)
        try:
            candidate.resolve().relative_to(self.root_dir.resolve())
        except ValueError:
            return None
        return candidate

    def exists(self, path: str) -> bool:
        candidate = self._within_root(path)
        return candidate is not None and candidate.is_file()

    def resolve(self, path: str) -> Path:
        """
        Return the on-disk location of a stored blob.

        Raises:
            ResourceNotFoundException: If the blob is missing
        """
        candidate = self._within_root(path)
        if candidate is None or not candidate.is_file():
            raise ResourceNotFoundException("Document file", Path(path).name)
        return candidate

    def delete(self, path: str) -> bool:
        """
        Best-effort removal of a blob.

        Returns:
            True if a file was removed, False otherwise
        """
        try:
            if os.path.exists(path):
                os.unlink(path)
                logger.info(f"Removed document file: {path}")
                return True
            return False
        except OSError as e:
            logger.warning(
                f"Failed to remove document file: {path} - {str(e)}",
                extra={"extra_fields": {"file_path": path}}
            )
            return False

    def discard(self, stored: StoredDocument) -> None:
        """Best-effort removal of a blob from both staging and final locations."""
        if stored.staged_path:
            self.delete(stored.staged_path)
        self.delete(stored.path)

    def public_url(self, path: str) -> str:
        return f"{self.url_prefix}/{Path(path).name}"


@lru_cache
def get_document_store() -> DocumentStore:
    """Return the process-wide store configured from settings."""
    return DocumentStore(
        root_dir=settings.UPLOAD_DIR,
        allowed_content_types=settings.allowed_document_types_list,
        max_size_bytes=settings.MAX_DOCUMENT_SIZE_MB * 1024 * 1024,
        url_prefix=settings.UPLOADS_URL_PREFIX,
    )
