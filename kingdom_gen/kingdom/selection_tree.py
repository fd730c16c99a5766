"""Checkbox hierarchies (expansion -> cards) backing the setup form.

Three trees exist per session, one per :class:`TreePurpose`:

- ``includes`` / ``bans``: every node toggles on its own. Checking an
  expansion row does not check its cards ("include this whole expansion" is
  not a constraint the Generator accepts) and checking a card leaves its
  expansion row alone.
- ``expansions`` (the allowed pool): only expansion rows are toggleable.
  A card row mirrors whether any expansion containing it is checked.

Trees are built once and then only mutated through :meth:`SelectionTree.toggle`;
nodes are never created or destroyed afterwards.
"""
from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Iterable, Iterator, List, Optional

from kingdom_gen.exceptions import NodeNotToggleableError, SelectionTreeError, UnknownNodeError
from kingdom_gen.type_definitions import CardNode, Catalogue, ExpansionNode

from .setup_projector import format_card_name

__all__ = [
    "TreePurpose",
    "SelectionTree",
    "build_selection_trees",
    "toggle_node",
    "checked_card_ids",
    "checked_expansion_ids",
]


class TreePurpose(str, Enum):
    INCLUDES = "includes"
    BANS = "bans"
    EXPANSIONS = "expansions"

    @property
    def expansion_level_only(self) -> bool:
        return self is TreePurpose.EXPANSIONS


class SelectionTree:
    """Ordered expansion nodes plus an id lookup over every node."""

    def __init__(self, purpose: TreePurpose, expansions: Iterable[ExpansionNode]):
        self.purpose = TreePurpose(purpose)
        self.expansions: List[ExpansionNode] = list(expansions)
        self._expansions_by_id: Dict[str, ExpansionNode] = {}
        self._cards_by_id: Dict[str, CardNode] = {}
        for exp in self.expansions:
            if exp.id in self._expansions_by_id:
                raise SelectionTreeError(f"Duplicate expansion id '{exp.id}' in {self.purpose.value} tree")
            self._expansions_by_id[exp.id] = exp
            for card in exp.children:
                existing = self._cards_by_id.get(card.id)
                if existing is not None and existing is not card:
                    raise SelectionTreeError(
                        f"Card id '{card.id}' appears as two different nodes in {self.purpose.value} tree"
                    )
                self._cards_by_id[card.id] = card
        clash = set(self._expansions_by_id) & set(self._cards_by_id)
        if clash:
            raise SelectionTreeError(
                f"Ids used by both an expansion and a card: {sorted(clash)}",
                details={"purpose": self.purpose.value},
            )

    @classmethod
    def from_catalogue(cls, purpose: TreePurpose, catalogue: Catalogue) -> "SelectionTree":
        """Build a tree with one expansion node per catalogue entry.

        Card children are sorted by display name. A card listed under more
        than one expansion is a single shared node.
        """
        shared: Dict[str, CardNode] = {}
        expansions: List[ExpansionNode] = []
        for expansion, card_ids in catalogue.items():
            children: List[CardNode] = []
            seen: set[str] = set()
            for card_id in card_ids:
                if card_id in seen:
                    continue
                seen.add(card_id)
                node = shared.get(card_id)
                if node is None:
                    node = CardNode(id=card_id, name=format_card_name(card_id))
                    shared[card_id] = node
                children.append(node)
            children.sort(key=lambda n: (n.name, n.id))
            expansions.append(ExpansionNode(id=expansion, name=format_card_name(expansion), children=children))
        return cls(purpose, expansions)

    def __iter__(self) -> Iterator[ExpansionNode]:
        return iter(self.expansions)

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._expansions_by_id or node_id in self._cards_by_id

    def card(self, card_id: str) -> CardNode:
        try:
            return self._cards_by_id[card_id]
        except KeyError:
            raise UnknownNodeError(self.purpose.value, card_id) from None

    def expansion(self, expansion_id: str) -> ExpansionNode:
        try:
            return self._expansions_by_id[expansion_id]
        except KeyError:
            raise UnknownNodeError(self.purpose.value, expansion_id) from None

    def toggle(self, node_id: str) -> bool:
        """Flip ``node_id`` according to this tree's rules; return its new state."""
        exp = self._expansions_by_id.get(node_id)
        if exp is not None:
            exp.is_checked = not exp.is_checked
            if self.purpose.expansion_level_only:
                self._sync_pool_cards()
            return exp.is_checked
        card = self._cards_by_id.get(node_id)
        if card is None:
            raise UnknownNodeError(self.purpose.value, node_id)
        if self.purpose.expansion_level_only:
            raise NodeNotToggleableError(self.purpose.value, node_id)
        card.is_checked = not card.is_checked
        return card.is_checked

    def _sync_pool_cards(self) -> None:
        # A card is in the pool iff any expansion containing it is checked.
        for card in self._cards_by_id.values():
            card.is_checked = False
        for exp in self.expansions:
            if exp.is_checked:
                for card in exp.children:
                    card.is_checked = True

    def checked_card_ids(self) -> Optional[List[str]]:
        ids: List[str] = []
        seen: set[str] = set()
        for exp in self.expansions:
            for card in exp.children:
                if card.is_checked and card.id not in seen:
                    seen.add(card.id)
                    ids.append(card.id)
        return ids or None

    def checked_expansion_ids(self) -> Optional[List[str]]:
        ids = [exp.id for exp in self.expansions if exp.is_checked]
        return ids or None

    def to_context(self) -> Dict[str, Any]:
        """Plain structure for template rendering.

        DOM ids are ``<purpose>-<node id>``; repeat appearances of a shared
        card get a ``--<expansion id>`` suffix so ids stay unique in the page.
        An expansion is ``open`` while it or any of its cards is checked.
        """
        prefix = self.purpose.value
        rendered: set[str] = set()
        expansions: List[Dict[str, Any]] = []
        for exp in self.expansions:
            cards: List[Dict[str, Any]] = []
            for card in exp.children:
                dom_id = f"{prefix}-{card.id}"
                if card.id in rendered:
                    dom_id = f"{dom_id}--{exp.id}"
                rendered.add(card.id)
                cards.append({
                    "id": card.id,
                    "dom_id": dom_id,
                    "name": card.name,
                    "checked": card.is_checked,
                    "disabled": self.purpose.expansion_level_only,
                })
            expansions.append({
                "id": exp.id,
                "dom_id": f"{prefix}-{exp.id}",
                "name": exp.name,
                "checked": exp.is_checked,
                "open": exp.is_checked or any(card["checked"] for card in cards),
                "cards": cards,
            })
        return {
            "purpose": prefix,
            "expansion_level_only": self.purpose.expansion_level_only,
            "expansions": expansions,
        }


def build_selection_trees(catalogue: Catalogue) -> Dict[TreePurpose, SelectionTree]:
    return {purpose: SelectionTree.from_catalogue(purpose, catalogue) for purpose in TreePurpose}


def toggle_node(tree: SelectionTree, node_id: str) -> bool:
    return tree.toggle(node_id)


def checked_card_ids(tree: SelectionTree) -> Optional[List[str]]:
    """Checked card ids (each once, display order), or None when nothing is checked."""
    return tree.checked_card_ids()


def checked_expansion_ids(tree: SelectionTree) -> Optional[List[str]]:
    """Checked expansion ids in tree order, or None when nothing is checked."""
    return tree.checked_expansion_ids()
