"""Domain objects passed between the routers, the pipeline and the storage backends."""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional


@dataclass(frozen=True)
class IncomingFile:
    """One uploaded file as handed over by the request parser.

    Exactly one of ``content`` (bytes held in memory) or ``path`` (bytes the
    request parser already spooled to disk) is expected to be set.
    """
    original_name: str
    content_type: Optional[str]
    size_bytes: int
    content: Optional[bytes] = None
    path: Optional[Path] = None

    @property
    def in_memory(self) -> bool:
        return self.content is not None

    def read_bytes(self) -> bytes:
        if self.content is not None:
            return self.content
        if self.path is not None:
            return self.path.read_bytes()
        raise ValueError("IncomingFile has neither content nor path")


@dataclass(frozen=True)
class StoredFileRecord:
    """A file after it has been persisted by one of the storage backends."""
    storage_key: str
    display_name: str
    access_url: str
