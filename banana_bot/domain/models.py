"""Domain data models — pure Python dataclasses."""

from dataclasses import dataclass


@dataclass(frozen=True)
class ImageCandidate:
    """An image reference found in a post or in the thread history."""

    url: str
    name: str
    mime: str


@dataclass
class InputImage:
    """Downloaded image bytes fed to the generator."""

    data: bytes
    mime: str
    name: str = ""


@dataclass
class GeneratedImage:
    """Generator output, uploaded straight back to the thread."""

    data: bytes
    mime: str
    name: str
