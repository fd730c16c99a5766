"""Selection-to-request-to-display pipeline for kingdom setups."""

from .card_index import CardExpansionIndex
from .request_builder import build_generation_request, parse_count_choice
from .selection_tree import (
    SelectionTree,
    TreePurpose,
    build_selection_trees,
    checked_card_ids,
    checked_expansion_ids,
    toggle_node,
)
from .setup_projector import format_card_name, project_result, project_setup

__all__ = [
    'CardExpansionIndex',
    'SelectionTree',
    'TreePurpose',
    'build_generation_request',
    'build_selection_trees',
    'checked_card_ids',
    'checked_expansion_ids',
    'format_card_name',
    'parse_count_choice',
    'project_result',
    'project_setup',
    'toggle_node',
]
