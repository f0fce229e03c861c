"""
Code sources uploaded to Moss.

A SourceSet is an ordered list of named byte streams. Order matters: for the
submission set it becomes the file index on the wire. Each stream is read
exactly once; re-submitting requires fresh sources.
"""
from dataclasses import dataclass, field
from pathlib import Path
from typing import BinaryIO, Callable, Iterator

from .errors import SourceConsumedError


@dataclass
class CodeSource:
    """A named byte stream that is uploaded once."""
    display_name: str
    content: BinaryIO | None = None
    opener: Callable[[], BinaryIO] | None = None  # Lazily opens content (add_file)
    consumed: bool = False

    def __post_init__(self):
        if not self.display_name or "\n" in self.display_name:
            raise ValueError(f"Invalid display name: {self.display_name!r}")
        if self.content is None and self.opener is None:
            raise ValueError("CodeSource needs either content or an opener")

    def read(self) -> bytes:
        """
        Read the whole stream, close it and mark the source consumed.

        Raises:
            SourceConsumedError: if the source was already read
        """
        if self.consumed:
            raise SourceConsumedError(f"Source {self.display_name!r} was already uploaded")
        self.consumed = True
        stream = self.content if self.content is not None else self.opener()
        try:
            return stream.read()
        finally:
            stream.close()
            self.content = None


@dataclass
class SourceSet:
    """Ordered collection of code sources."""
    sources: list[CodeSource] = field(default_factory=list)

    def add(self, content: BinaryIO, display_name: str) -> CodeSource:
        """Append an already opened binary stream."""
        source = CodeSource(display_name=display_name, content=content)
        self.sources.append(source)
        return source

    def add_file(self, path: str | Path, display_name: str | None = None) -> CodeSource:
        """
        Append a file from disk. The file is opened only when it is uploaded.

        Args:
            path: Path to the source file
            display_name: Name shown on the result page (default: the path as given,
                which keeps the directory for directory mode)

        Raises:
            FileNotFoundError: if the path is not an existing file
        """
        path = Path(path)
        if not path.is_file():
            raise FileNotFoundError(f"Source file {path} not found")
        name = display_name or path.as_posix()
        source = CodeSource(display_name=name, opener=lambda: open(path, "rb"))
        self.sources.append(source)
        return source

    def __len__(self) -> int:
        return len(self.sources)

    def __iter__(self) -> Iterator[CodeSource]:
        return iter(self.sources)
