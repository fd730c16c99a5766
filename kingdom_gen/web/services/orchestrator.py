from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional, Union

from kingdom_gen.exceptions import GenerationError, InternalDefectError
from kingdom_gen.kingdom.request_builder import build_generation_request
from kingdom_gen.kingdom.selection_tree import TreePurpose
from kingdom_gen.kingdom.setup_projector import project_setup
from kingdom_gen.logging_util import get_logger
from kingdom_gen.services.catalogue_loader import CatalogueState
from kingdom_gen.services.generator_client import coerce_generator_error
from kingdom_gen.type_definitions import DisplayModel, GeneratedSetup, GenerationRequest

from .tasks import ensure_selection_trees

logger = get_logger(__name__)


@dataclass(frozen=True)
class SubmitOk:
    display: DisplayModel
    setup: GeneratedSetup
    request: GenerationRequest


@dataclass(frozen=True)
class SubmitErr:
    error: BaseException
    request: GenerationRequest

    @property
    def is_defect(self) -> bool:
        return isinstance(self.error, InternalDefectError)


@dataclass(frozen=True)
class SubmitStale:
    """A newer submit started while this one was waiting on the Generator."""
    sequence: int


SubmitResult = Union[SubmitOk, SubmitErr, SubmitStale]


def next_submit_sequence(sess: Dict[str, Any]) -> int:
    with sess["lock"]:
        sess["submit_seq"] = int(sess.get("submit_seq", 0)) + 1
        return sess["submit_seq"]


def is_latest_submit(sess: Dict[str, Any], sequence: int) -> bool:
    with sess["lock"]:
        return int(sess.get("submit_seq", 0)) == sequence


def generate_display(state: CatalogueState, request: GenerationRequest) -> Union[SubmitOk, SubmitErr]:
    """Call the Generator and project its setup; never a partial result."""
    try:
        setup = state.generator.generate(request)
    except GenerationError as e:
        logger.info(f"Generator rejected request [{e.code}]: {e.message}")
        return SubmitErr(error=e, request=request)
    except Exception as e:
        error = coerce_generator_error(e)
        logger.warning(
            f"Generator raised {type(e).__name__}; reporting it as [{error.code}]: {error.message}", exc_info=True
        )
        return SubmitErr(error=error, request=request)
    try:
        display = project_setup(setup, state.index)
    except InternalDefectError as e:
        logger.error(f"Projection failed for setup {setup.to_payload()}: {e}", exc_info=True)
        return SubmitErr(error=e, request=request)
    return SubmitOk(display=display, setup=setup, request=request)


def submit_setup(
    sess: Dict[str, Any],
    state: CatalogueState,
    project_count: Optional[int] = None,
    bane_count: Optional[int] = None,
) -> SubmitResult:
    """Run one submit for a session.

    Each submit takes the next sequence number; if another submit has started
    by the time the Generator answers, the outcome is discarded as stale.
    """
    trees = ensure_selection_trees(sess, state.catalogue)
    sequence = next_submit_sequence(sess)
    request = build_generation_request(
        trees[TreePurpose.INCLUDES],
        trees[TreePurpose.BANS],
        trees[TreePurpose.EXPANSIONS],
        project_count=project_count,
        bane_count=bane_count,
    )
    logger.info(f"Submit #{sequence}: {request.to_payload()}")
    outcome = generate_display(state, request)
    if not is_latest_submit(sess, sequence):
        logger.info(f"Submit #{sequence} superseded; discarding its result")
        return SubmitStale(sequence=sequence)
    return outcome
