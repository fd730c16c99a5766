"""Derive a :class:`GenerationRequest` from the form state.

The builder only copies fields across. It deliberately leaves
include/ban overlap and satisfiability checks to the Generator, whose
error is then shown to the user as-is.
"""
from __future__ import annotations

from typing import Any, Iterable, List, Optional, Sequence, Tuple

from kingdom_gen.exceptions import InvalidCountChoiceError
from kingdom_gen.settings import RANDOM_CHOICE
from kingdom_gen.type_definitions import GenerationRequest

from .selection_tree import SelectionTree, TreePurpose, checked_card_ids, checked_expansion_ids


def _as_constraint(values: Optional[Sequence[str]]) -> Optional[Tuple[str, ...]]:
    # Empty means "no constraint" and must travel as None.
    if not values:
        return None
    return tuple(values)


def build_generation_request(
    includes: SelectionTree,
    bans: SelectionTree,
    expansions: SelectionTree,
    project_count: Optional[int] = None,
    bane_count: Optional[int] = None,
) -> GenerationRequest:
    """Assemble the request for one submit.

    Args:
        includes: tree whose checked cards must appear in the kingdom
        bans: tree whose checked cards must not appear
        expansions: pool tree; its checked expansion rows limit the pool
        project_count: forced number of projects, None to let the Generator pick
        bane_count: forced number of bane cards, None to let the Generator pick
    """
    for tree, purpose in ((includes, TreePurpose.INCLUDES), (bans, TreePurpose.BANS), (expansions, TreePurpose.EXPANSIONS)):
        if tree.purpose is not purpose:
            raise ValueError(f"Expected a {purpose.value} tree, got {tree.purpose.value}")
    return GenerationRequest(
        project_count=project_count,
        bane_count=bane_count,
        include_expansions=_as_constraint(checked_expansion_ids(expansions)),
        include_cards=_as_constraint(checked_card_ids(includes)),
        ban_cards=_as_constraint(checked_card_ids(bans)),
    )


def parse_count_choice(raw: Any, options: Iterable[int], field_name: str = "count") -> Optional[int]:
    """Resolve a radio value to an int, or None for the random option.

    Raises:
        InvalidCountChoiceError: the value is not one of ``options``
    """
    allowed: List[int] = [int(o) for o in options]
    if raw is None:
        return None
    if isinstance(raw, bool):
        raise InvalidCountChoiceError(field_name, raw, allowed)
    if isinstance(raw, int):
        value = raw
    else:
        text = str(raw).strip().lower()
        if text in {"", RANDOM_CHOICE}:
            return None
        try:
            value = int(text)
        except ValueError:
            raise InvalidCountChoiceError(field_name, raw, allowed) from None
    if value not in allowed:
        raise InvalidCountChoiceError(field_name, raw, allowed)
    return value
