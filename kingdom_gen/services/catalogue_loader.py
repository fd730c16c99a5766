"""Process-wide catalogue state, built once at startup.

Responsibilities
================
- Ask the Generator for its catalogue and the legal project/bane counts.
- Build the card -> expansions index from that catalogue.
- Keep the result as read-only state for the rest of the process.

There is no refresh path: ``initialize`` is a no-op once the state exists
(unless ``force`` is passed, which tests use). Before initialization every
consumer gets :class:`GeneratorNotReadyError`.
"""
from __future__ import annotations

import threading
from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping, Optional, Tuple

from kingdom_gen.exceptions import GeneratorNotReadyError, GeneratorUnavailableError, KingdomGenError
from kingdom_gen.kingdom.card_index import CardExpansionIndex
from kingdom_gen.logging_util import get_logger

from .generator_client import KingdomGenerator, load_generator

__all__ = [
    "CatalogueState",
    "initialize",
    "get_catalogue_state",
    "is_initialized",
    "reset_catalogue_state",
]

logger = get_logger(__name__)

_STATE: Optional["CatalogueState"] = None
_LOCK = threading.Lock()


@dataclass(frozen=True, slots=True)
class CatalogueState:
    """Generator handle plus everything derived from its catalogue."""

    generator: KingdomGenerator
    catalogue: Mapping[str, Tuple[str, ...]]
    index: CardExpansionIndex
    project_count_options: Tuple[int, ...]
    bane_count_options: Tuple[int, ...]

    @property
    def expansions(self) -> Tuple[str, ...]:
        return tuple(self.catalogue)


def _build_state(generator: KingdomGenerator) -> CatalogueState:
    try:
        raw = generator.catalogue()
        project_counts = tuple(int(v) for v in generator.project_count_options())
        bane_counts = tuple(int(v) for v in generator.bane_count_options())
    except KingdomGenError:
        raise
    except Exception as e:
        raise GeneratorUnavailableError(f"{type(e).__name__}: {e}") from e
    catalogue = MappingProxyType({str(exp): tuple(str(c) for c in cards) for exp, cards in raw.items()})
    index = CardExpansionIndex.from_catalogue(catalogue)
    state = CatalogueState(
        generator=generator,
        catalogue=catalogue,
        index=index,
        project_count_options=project_counts,
        bane_count_options=bane_counts,
    )
    logger.info(
        f"Catalogue loaded: {len(catalogue)} expansions, {len(index)} cards, "
        f"project counts {list(state.project_count_options)}, bane counts {list(state.bane_count_options)}"
    )
    return state


def initialize(generator: KingdomGenerator | None = None, *, force: bool = False) -> CatalogueState:
    """Build the catalogue state (once).

    Args:
        generator: Generator to use; defaults to the configured backend.
        force: Rebuild even if a state already exists.

    Raises:
        GeneratorUnavailableError: the Generator could not be loaded or queried
    """
    global _STATE
    with _LOCK:
        if _STATE is not None and not force:
            return _STATE
        _STATE = _build_state(generator or load_generator())
        return _STATE


def get_catalogue_state() -> CatalogueState:
    state = _STATE
    if state is None:
        raise GeneratorNotReadyError()
    return state


def is_initialized() -> bool:
    return _STATE is not None


def reset_catalogue_state() -> None:
    """Drop the cached state (testing/support)."""
    global _STATE
    with _LOCK:
        _STATE = None
