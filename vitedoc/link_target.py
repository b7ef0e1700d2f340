"""Data models for representing resolved output locations."""

from dataclasses import dataclass


@dataclass(frozen=True)
class LinkTarget:
    """Where an entity lives in the generated site."""

    qualified_name: str
    kind: str
    file_path: str | None  # relative to the output root, e.g. api/L/Apple.md
    url: str  # e.g. /api/L/Apple
    anchor: str | None = None  # members only, without the leading '#'

    @property
    def link(self) -> str:
        return f"{self.url}#{self.anchor}" if self.anchor else self.url
