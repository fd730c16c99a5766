"""Turn a generated setup into the grouped model the results panel shows.

Kingdom cards are grouped under the sorted, ``/``-joined list of the
expansions that contain them (``Base1/Base2``), groups are ordered by that
label and each group's cards are sorted by card id. Names are then made
readable (``YoungWitch`` -> ``Young Witch``) and annotated:

1. the designated bane card gets `` (Bane)``;
2. otherwise a card with a bane variant gets `` (<variant>)``, and a Zebra
   variant also names the second zebra card: `` (Zebra with Stables)``.

Only the first matching rule applies. Display names never feed back into
any id comparison.
"""
from __future__ import annotations

from typing import Dict, List, Union

from kingdom_gen.type_definitions import DisplayGroup, DisplayModel, GeneratedSetup

from .card_index import CardExpansionIndex

ZEBRA_VARIANT = "Zebra"
BANE_SUFFIX = " (Bane)"


def format_card_name(name: str) -> str:
    """Insert a space before every internal uppercase letter (any script) and trim."""
    text = name or ""
    return "".join(
        f" {ch}" if i and ch.isupper() else ch for i, ch in enumerate(text)
    ).strip()


def annotate_card(card: str, setup: GeneratedSetup) -> str:
    """Display string for ``card``: readable name plus its bane annotation."""
    label = format_card_name(card)
    if setup.bane_card is not None and card == setup.bane_card:
        return label + BANE_SUFFIX
    variant = setup.bane_cards.get(card)
    if variant is None:
        return label
    variant_label = format_card_name(variant)
    if variant_label == ZEBRA_VARIANT and setup.second_zebra is not None:
        return f"{label} ({variant_label} with {setup.second_zebra})"
    return f"{label} ({variant_label})"


def project_setup(setup: GeneratedSetup, index: CardExpansionIndex) -> DisplayModel:
    """Build the display model for ``setup``.

    Raises:
        CardIndexLookupError: a kingdom card is missing from ``index``
    """
    grouped: Dict[str, List[str]] = {}
    for card in setup.cards():
        grouped.setdefault(index.expansion_label(card), []).append(card)

    groups = tuple(
        DisplayGroup(
            expansion_label=label,
            cards=tuple(annotate_card(card, setup) for card in sorted(grouped[label])),
        )
        for label in sorted(grouped)
    )
    return DisplayModel(groups=groups, project_cards=tuple(setup.project_cards))


def project_result(
    result: Union[GeneratedSetup, BaseException],
    index: CardExpansionIndex,
) -> Union[DisplayModel, BaseException]:
    """Project a successful setup; hand an error back untouched."""
    if isinstance(result, BaseException):
        return result
    return project_setup(result, index)
