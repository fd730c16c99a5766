from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

# Catalogue as reported by the Generator: expansion name -> card ids
Catalogue = Mapping[str, Sequence[str]]


@dataclass(eq=False)
class CardNode:
    """Leaf of a selection tree. Identity is the card id."""
    id: str
    name: str
    is_checked: bool = False


@dataclass(eq=False)
class ExpansionNode:
    """Expansion row of a selection tree; children are in display order."""
    id: str
    name: str
    is_checked: bool = False
    children: List[CardNode] = field(default_factory=list)


@dataclass(frozen=True)
class GenerationRequest:
    """Constraints handed to the Generator.

    Absent constraints are ``None``, never an empty sequence: the Generator
    reads ``include_expansions=[]`` as "use no expansions at all".
    """
    project_count: Optional[int] = None
    bane_count: Optional[int] = None
    include_expansions: Optional[Tuple[str, ...]] = None
    include_cards: Optional[Tuple[str, ...]] = None
    ban_cards: Optional[Tuple[str, ...]] = None

    def to_payload(self) -> Dict[str, Any]:
        def _seq(values: Optional[Tuple[str, ...]]) -> Optional[List[str]]:
            return list(values) if values is not None else None

        return {
            "project_count": self.project_count,
            "bane_count": self.bane_count,
            "include_expansions": _seq(self.include_expansions),
            "include_cards": _seq(self.include_cards),
            "ban_cards": _seq(self.ban_cards),
        }


@dataclass(frozen=True)
class GeneratedSetup:
    """A setup as produced by the Generator (read-only)."""
    kingdom_cards: Tuple[str, ...]
    bane_card: Optional[str] = None
    bane_cards: Mapping[str, str] = field(default_factory=dict)
    second_zebra: Optional[str] = None
    project_cards: Tuple[str, ...] = ()

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "GeneratedSetup":
        """Parse the Generator's JSON setup.

        Raises:
            ValueError: when the payload is not shaped like a setup
        """
        if not isinstance(payload, Mapping):
            raise ValueError(f"Setup payload must be an object, got {type(payload).__name__}")
        kingdom = payload.get("kingdom_cards")
        if not isinstance(kingdom, list):
            raise ValueError("Setup payload is missing 'kingdom_cards'")
        bane_cards = payload.get("bane_cards") or {}
        if not isinstance(bane_cards, Mapping):
            raise ValueError("Setup payload 'bane_cards' must be an object")
        return cls(
            kingdom_cards=tuple(str(c) for c in kingdom),
            bane_card=payload.get("bane_card"),
            bane_cards={str(k): str(v) for k, v in bane_cards.items()},
            second_zebra=payload.get("second_zebra"),
            project_cards=tuple(str(p) for p in (payload.get("project_cards") or [])),
        )

    def to_payload(self) -> Dict[str, Any]:
        return {
            "kingdom_cards": list(self.kingdom_cards),
            "bane_card": self.bane_card,
            "bane_cards": dict(self.bane_cards),
            "second_zebra": self.second_zebra,
            "project_cards": list(self.project_cards),
        }

    def cards(self) -> List[str]:
        """Kingdom cards plus the designated bane card, when not already listed."""
        results = list(self.kingdom_cards)
        if self.bane_card is not None and self.bane_card not in results:
            results.append(self.bane_card)
        return results


@dataclass(frozen=True)
class DisplayGroup:
    expansion_label: str
    cards: Tuple[str, ...]


@dataclass(frozen=True)
class DisplayModel:
    """Display-ready setup: kingdom cards grouped by expansion label."""
    groups: Tuple[DisplayGroup, ...]
    project_cards: Tuple[str, ...] = ()

    @property
    def has_projects(self) -> bool:
        return bool(self.project_cards)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "groups": [
                {"expansion_label": g.expansion_label, "cards": list(g.cards)} for g in self.groups
            ],
            "project_cards": list(self.project_cards),
        }
