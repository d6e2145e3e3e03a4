"""Uploaded statement file model."""
import mimetypes
from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class StatementFile:
    """
    An uploaded statement, already buffered in memory.

    Attributes:
        content: Raw file bytes
        name: Original filename
        media_type: Declared media type (may be empty)
    """
    content: bytes
    name: str
    media_type: str = ""

    @classmethod
    def from_path(cls, path: Path) -> "StatementFile":
        """Read a file from disk, guessing its media type from the name."""
        path = Path(path)
        media_type, _ = mimetypes.guess_type(path.name)
        return cls(content=path.read_bytes(), name=path.name, media_type=media_type or "")

    @property
    def size(self) -> int:
        """File size in bytes."""
        return len(self.content)

    @property
    def extension(self) -> str:
        """Lower-case extension including the dot, or an empty string."""
        return Path(self.name).suffix.lower()

    @property
    def is_pdf(self) -> bool:
        """Whether the declared type or the extension indicates a PDF."""
        return self.media_type == 'application/pdf' or self.extension == '.pdf'

    def head(self, size: int = 1000) -> str:
        """Decode the first ``size`` bytes leniently."""
        return self.content[:size].decode('utf-8', errors='replace')

    def text(self, encoding: str = 'utf-8') -> str:
        """Decode the whole file leniently."""
        return self.content.decode(encoding, errors='replace')
