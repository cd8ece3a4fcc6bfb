"""Ordered labeled-section model for the free-text record context.

Sections are kept structured while the recorder and facades add to them and
are serialized to text only when the row is written.
"""

from __future__ import annotations

from dataclasses import dataclass

SECTION_SEPARATOR = "\n"
CALLER_INFO_LABEL = "Caller Info"
ERROR_DETAILS_LABEL = "Error Details"


@dataclass(frozen=True)
class ContextSection:
    """One block of context text with an optional label."""

    text: str
    label: str | None = None
    label_when_leading: bool = True

    def render(self, *, leading: bool) -> str:
        """Render the section, dropping the label when leading if configured."""
        if self.label is None or (leading and not self.label_when_leading):
            return self.text
        return f"{self.label}: {self.text}"


@dataclass(frozen=True)
class RecordContext:
    """Immutable ordered collection of context sections."""

    sections: tuple[ContextSection, ...] = ()

    @classmethod
    def from_text(cls, text: str | None) -> "RecordContext":
        """Seed a context from caller-supplied text; empty text adds nothing."""
        if not text:
            return cls()
        return cls(sections=(ContextSection(text=text),))

    @property
    def is_empty(self) -> bool:
        return len(self.sections) == 0

    def append(
        self,
        text: str,
        *,
        label: str | None = None,
        label_when_leading: bool = True,
    ) -> "RecordContext":
        """Return a new context with one section appended."""
        section = ContextSection(
            text=text,
            label=label,
            label_when_leading=label_when_leading,
        )
        return RecordContext(sections=(*self.sections, section))

    def serialize(self) -> str | None:
        """Join rendered sections for storage; ``None`` when nothing was added."""
        if self.is_empty:
            return None
        return SECTION_SEPARATOR.join(
            section.render(leading=index == 0)
            for index, section in enumerate(self.sections)
        )
