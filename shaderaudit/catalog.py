"""Static table of auditable controls and the names they are consumed under."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

DEFAULT_TAG_PREFIX = "TEControlTag."


class ControlTag(str, Enum):
    """Abstract control identifiers shared by every shader pattern."""

    SPEED = "SPEED"
    XPOS = "XPOS"
    YPOS = "YPOS"
    SIZE = "SIZE"
    QUANTITY = "QUANTITY"
    SPIN = "SPIN"
    BRIGHTNESS = "BRIGHTNESS"
    WOW1 = "WOW1"
    WOW2 = "WOW2"
    WOWTRIGGER = "WOWTRIGGER"
    ANGLE = "ANGLE"
    TWIST = "TWIST"
    LEVELREACTIVITY = "LEVELREACTIVITY"
    FREQREACTIVITY = "FREQREACTIVITY"
    EXPLODE = "EXPLODE"

    @classmethod
    def parse(cls, value: str) -> Optional["ControlTag"]:
        """Return the tag named by ``value`` (case-insensitive) or None."""
        try:
            return cls[value.strip().upper()]
        except KeyError:
            return None


@dataclass(frozen=True)
class ControlCatalogEntry:
    """One auditable control: its uniform binding and looser accessor spellings."""

    tag: ControlTag
    uniform_name: Optional[str] = None
    alternate_terms: Tuple[str, ...] = field(default_factory=tuple)


_DEFAULT_ENTRIES: Tuple[ControlCatalogEntry, ...] = (
    ControlCatalogEntry(ControlTag.XPOS, "iTranslate", ("getXPos",)),
    ControlCatalogEntry(ControlTag.YPOS, "iTranslate", ("getYPos",)),
    ControlCatalogEntry(ControlTag.SIZE, "iScale", ("getSize",)),
    ControlCatalogEntry(ControlTag.QUANTITY, "iQuantity", ("getQuantity",)),
    ControlCatalogEntry(ControlTag.SPIN, "iSpin", ("getSpin", "getRotationAngleFromSpin")),
    ControlCatalogEntry(ControlTag.WOW1, "iWow1", ("getWow1",)),
    ControlCatalogEntry(ControlTag.WOW2, "iWow2", ("getWow2",)),
    ControlCatalogEntry(ControlTag.WOWTRIGGER, "iWowTrigger", ("getWowTrigger",)),
    ControlCatalogEntry(
        ControlTag.ANGLE,
        "iRotationAngle",
        ("getStaticRotationAngle", "getRotationAngleFromPeriod"),
    ),
    ControlCatalogEntry(ControlTag.LEVELREACTIVITY, "levelReact", ("getLevelReactivity",)),
    ControlCatalogEntry(ControlTag.FREQREACTIVITY, "frequencyReact", ("getFrequencyReactivity",)),
)


class ControlCatalog:
    """Read-only, ordered lookup of catalog entries keyed by tag."""

    def __init__(
        self,
        entries: Iterable[ControlCatalogEntry] = _DEFAULT_ENTRIES,
        *,
        tag_prefix: str = DEFAULT_TAG_PREFIX,
    ) -> None:
        ordered: Dict[ControlTag, ControlCatalogEntry] = {}
        for entry in entries:
            ordered[entry.tag] = entry
        self._entries: Tuple[ControlCatalogEntry, ...] = tuple(ordered.values())
        self._by_tag: Mapping[ControlTag, ControlCatalogEntry] = dict(ordered)
        self.tag_prefix = tag_prefix

    def entries(self) -> Sequence[ControlCatalogEntry]:
        return self._entries

    def entry_for(self, tag: ControlTag) -> Optional[ControlCatalogEntry]:
        return self._by_tag.get(tag)

    def tags(self) -> List[ControlTag]:
        return [entry.tag for entry in self._entries]

    def reference_token(self, tag: ControlTag) -> str:
        """Return the token implementation code uses to reference ``tag`` directly."""
        return f"{self.tag_prefix}{tag.value}"

    def with_overrides(
        self,
        overrides: Iterable[ControlCatalogEntry],
        *,
        replace: bool = False,
        tag_prefix: Optional[str] = None,
    ) -> "ControlCatalog":
        """Return a new catalog with ``overrides`` replacing or extending entries."""
        base: List[ControlCatalogEntry] = [] if replace else list(self._entries)
        return ControlCatalog(
            [*base, *overrides],
            tag_prefix=self.tag_prefix if tag_prefix is None else tag_prefix,
        )

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self):  # type: ignore[no-untyped-def]
        return iter(self._entries)


DEFAULT_CATALOG = ControlCatalog()


__all__ = [
    "ControlCatalog",
    "ControlCatalogEntry",
    "ControlTag",
    "DEFAULT_CATALOG",
    "DEFAULT_TAG_PREFIX",
]
