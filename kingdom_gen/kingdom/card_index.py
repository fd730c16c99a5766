"""Card -> expansion membership index.

Built once from the Generator's catalogue (expansion -> card ids) by
inverting it. A card can belong to several expansions (second editions,
promotional reprints). Membership order follows catalogue iteration order;
callers that need a stable label use :meth:`CardExpansionIndex.expansion_label`,
which sorts.

The index is immutable after construction and safe to share across
request handlers without locking.
"""
from __future__ import annotations

from types import MappingProxyType
from typing import Dict, Iterator, List, Mapping, Tuple

from kingdom_gen.exceptions import CardIndexLookupError
from kingdom_gen.type_definitions import Catalogue

LABEL_SEPARATOR = "/"


class CardExpansionIndex(Mapping[str, Tuple[str, ...]]):
    """Read-only mapping of card id -> expansions containing it."""

    __slots__ = ("_index",)

    def __init__(self, memberships: Mapping[str, Tuple[str, ...]]):
        self._index: Mapping[str, Tuple[str, ...]] = MappingProxyType(
            {card: tuple(exps) for card, exps in memberships.items()}
        )

    @classmethod
    def from_catalogue(cls, catalogue: Catalogue) -> "CardExpansionIndex":
        inverted: Dict[str, List[str]] = {}
        for expansion, cards in catalogue.items():
            for card in cards:
                exps = inverted.setdefault(card, [])
                if expansion not in exps:
                    exps.append(expansion)
        return cls({card: tuple(exps) for card, exps in inverted.items()})

    def __getitem__(self, card_id: str) -> Tuple[str, ...]:
        return self._index[card_id]

    def __iter__(self) -> Iterator[str]:
        return iter(self._index)

    def __len__(self) -> int:
        return len(self._index)

    def memberships(self, card_id: str) -> Tuple[str, ...]:
        """Expansions containing ``card_id``.

        Raises:
            CardIndexLookupError: the card is unknown to the catalogue
        """
        try:
            return self._index[card_id]
        except KeyError:
            raise CardIndexLookupError(card_id, details={"indexed_cards": len(self._index)}) from None

    def expansion_label(self, card_id: str) -> str:
        return LABEL_SEPARATOR.join(sorted(self.memberships(card_id)))
