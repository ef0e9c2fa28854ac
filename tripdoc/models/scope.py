"""Export scope - which document sections are selected."""

from collections.abc import Iterable

from pydantic import BaseModel, ConfigDict, model_validator

from tripdoc.models.common import SECTION_ORDER, SectionKey

DEFAULT_SECTION = SectionKey.itinerary
_ALL_ALIASES = {"all", "full"}


class Scope(BaseModel):
    """Either "all sections" or a non-empty set of section keys.

    Scopes are immutable; ``toggle`` returns a new scope.
    """

    model_config = ConfigDict(frozen=True)

    all_sections: bool = False
    sections: frozenset[SectionKey] = frozenset()

    @model_validator(mode="after")
    def check_not_empty(self) -> "Scope":
        if not self.all_sections and not self.sections:
            raise ValueError("scope must select at least one section")
        return self

    @classmethod
    def all(cls) -> "Scope":
        return cls(all_sections=True)

    @classmethod
    def of(cls, *keys: SectionKey | str) -> "Scope":
        return cls(sections=frozenset(SectionKey(key) for key in keys))

    @classmethod
    def parse(cls, raw: str | Iterable[str] | None) -> "Scope":
        """Parse ``"full"``/``"all"`` or a comma-separated list of section keys.

        A missing or blank value means all sections.
        """
        if raw is None:
            return cls.all()
        parts = raw.split(",") if isinstance(raw, str) else list(raw)
        keys = [part.strip().lower() for part in parts if part and part.strip()]
        if not keys or any(key in _ALL_ALIASES for key in keys):
            return cls.all()
        return cls.of(*keys)

    def contains(self, key: SectionKey) -> bool:
        return self.all_sections or key in self.sections

    def selected(self) -> list[SectionKey]:
        """Selected keys in presentation order."""
        return [key for key in SECTION_ORDER if self.contains(key)]

    def toggle(self, key: SectionKey | str) -> "Scope":
        """Flip one section in or out of the scope.

        Deselecting the last remaining section snaps back to the default
        single-section scope instead of producing an empty one.
        """
        key = SectionKey(key)
        current = set(SECTION_ORDER) if self.all_sections else set(self.sections)
        if key in current:
            current.discard(key)
        else:
            current.add(key)
        if not current:
            return Scope.of(DEFAULT_SECTION)
        if current == set(SECTION_ORDER):
            return Scope.all()
        return Scope(sections=frozenset(current))

    def label(self) -> str:
        if self.all_sections:
            return "full"
        return "-".join(key.value for key in self.selected())
