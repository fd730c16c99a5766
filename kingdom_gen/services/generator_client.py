"""
Kingdom Generator adapters.

The setup Generator is an external collaborator: this module only knows its
contract (catalogue, legal counts, generate) and how to reach it.

Two backends are supported:

- an in-process object named by an import path (``package.module:attribute``),
- a generator HTTP service reached with ``requests``.

Generator errors travel in the Generator's own serialised form: unit errors
are a bare kind string (``"CouldNotSatisfyKingdomCards"``) and the
include/ban overlap is ``{"IntersectingCardBansAndIncludes": ["Sentry"]}``.
"""
from __future__ import annotations

import importlib
import inspect

from typing import Any, Dict, List, Mapping, Optional, Protocol, Sequence, runtime_checkable

import requests

from kingdom_gen import settings
from kingdom_gen.exceptions import (
    ConflictError,
    GenerationError,
    GeneratorUnavailableError,
    KingdomGenError,
    UnsatisfiableError,
)
from kingdom_gen.logging_util import get_logger
from kingdom_gen.type_definitions import Catalogue, GeneratedSetup, GenerationRequest

logger = get_logger(__name__)

CONFLICT_KIND = "IntersectingCardBansAndIncludes"

# Human-readable text for each unsatisfiable kind
ERROR_MESSAGES: Dict[str, str] = {
    "CouldNotSatisfyProjectsFromExpansions": (
        "The requested project count could not be satisfied! "
        "Ensure you're not specifying expansions which preclude projects."
    ),
    "CouldNotSatisfyKingdomCards": "Could not pick 10 kingdom cards! Ensure your filters don't over-limit cards.",
    "CouldNotSatisfyBaneCard": "Could not pick a bane card! Ensure your filters don't over-limit cards.",
    "CouldNotSatisfySecondZebra": "Could not pick a second zebra card! Ensure your filters don't over-limit cards.",
    "TooManyCardsIncluded": (
        "Too many cards were asked to be included! "
        "I currently can't generate a kingdom with more than 10 cards."
    ),
}


@runtime_checkable
class KingdomGenerator(Protocol):
    def catalogue(self) -> Catalogue: ...

    def project_count_options(self) -> Sequence[int]: ...

    def bane_count_options(self) -> Sequence[int]: ...

    def generate(self, request: GenerationRequest) -> GeneratedSetup: ...


def translate_generator_error(payload: Any) -> GenerationError:
    """Map a serialised Generator error onto the local error taxonomy."""
    if isinstance(payload, str):
        kind = payload.strip()
        return UnsatisfiableError(kind, ERROR_MESSAGES.get(kind))
    if isinstance(payload, Mapping) and len(payload) == 1:
        kind, value = next(iter(payload.items()))
        if kind == CONFLICT_KIND:
            cards = value if isinstance(value, list) else [value]
            return ConflictError(str(c) for c in cards)
        return UnsatisfiableError(str(kind), ERROR_MESSAGES.get(str(kind)), details={"value": value})
    return GeneratorUnavailableError("unrecognised error payload", details={"payload": payload})


def coerce_generator_error(error: BaseException) -> KingdomGenError:
    """Bring an exception raised inside a Generator into the local taxonomy.

    Local errors pass through. A foreign exception whose only argument is a
    serialised Generator error (a known kind string, or the conflict mapping)
    is translated; anything else becomes a :class:`GenerationError` whose
    message is the exception text, unchanged.
    """
    if isinstance(error, KingdomGenError):
        return error
    args = getattr(error, "args", ())
    if len(args) == 1:
        payload = args[0]
        if isinstance(payload, str) and payload.strip() in ERROR_MESSAGES:
            return translate_generator_error(payload)
        if isinstance(payload, Mapping) and len(payload) == 1:
            kind = next(iter(payload))
            if kind == CONFLICT_KIND or kind in ERROR_MESSAGES:
                return translate_generator_error(payload)
    message = str(error) or type(error).__name__
    return GenerationError(message, details={"type": type(error).__name__})


def _coerce_catalogue(raw: Any) -> Dict[str, List[str]]:
    if not isinstance(raw, Mapping):
        raise GeneratorUnavailableError("catalogue is not an expansion -> cards mapping")
    catalogue: Dict[str, List[str]] = {}
    for expansion, cards in raw.items():
        if isinstance(cards, (str, bytes)) or not isinstance(cards, Sequence):
            raise GeneratorUnavailableError(
                "catalogue cards must be a list", details={"expansion": str(expansion)}
            )
        catalogue[str(expansion)] = [str(c) for c in cards]
    return catalogue


def _coerce_options(raw: Any, name: str) -> List[int]:
    try:
        return [int(v) for v in raw]
    except (TypeError, ValueError):
        raise GeneratorUnavailableError(f"{name} options must be a list of integers") from None


class HttpGenerator:
    """Generator reached over HTTP (JSON in, JSON out)."""

    def __init__(self, base_url: str, timeout: float | None = None, session: requests.Session | None = None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout if timeout is not None else settings.generator_timeout_s()
        self._session = session or requests.Session()

    def __repr__(self) -> str:
        return f"HttpGenerator({self.base_url!r})"

    def _url(self, key: str) -> str:
        return f"{self.base_url}{settings.GENERATOR_ENDPOINTS[key]}"

    def _get_json(self, key: str) -> Any:
        url = self._url(key)
        try:
            response = self._session.get(url, timeout=self.timeout)
            response.raise_for_status()
            return response.json()
        except requests.RequestException as e:
            logger.error(f"Generator request failed: GET {url}: {e}")
            raise GeneratorUnavailableError(str(e), details={"url": url}) from e
        except ValueError as e:
            logger.error(f"Generator returned invalid JSON: GET {url}: {e}")
            raise GeneratorUnavailableError("invalid JSON response", details={"url": url}) from e

    def catalogue(self) -> Dict[str, List[str]]:
        return _coerce_catalogue(self._get_json("catalogue"))

    def project_count_options(self) -> List[int]:
        return _coerce_options(self._get_json("project_counts"), "project count")

    def bane_count_options(self) -> List[int]:
        return _coerce_options(self._get_json("bane_counts"), "bane count")

    def generate(self, request: GenerationRequest) -> GeneratedSetup:
        url = self._url("generate")
        try:
            response = self._session.post(url, json=request.to_payload(), timeout=self.timeout)
        except requests.RequestException as e:
            logger.error(f"Generator request failed: POST {url}: {e}")
            raise GeneratorUnavailableError(str(e), details={"url": url}) from e

        if 400 <= response.status_code < 500:
            try:
                body = response.json()
            except ValueError:
                body = None
            if isinstance(body, Mapping) and "error" in body:
                raise translate_generator_error(body["error"])
            raise GeneratorUnavailableError(
                f"unexpected status {response.status_code}", details={"url": url}
            )
        try:
            response.raise_for_status()
            return GeneratedSetup.from_payload(response.json())
        except requests.RequestException as e:
            logger.error(f"Generator request failed: POST {url}: {e}")
            raise GeneratorUnavailableError(str(e), details={"url": url}) from e
        except ValueError as e:
            logger.error(f"Generator returned a malformed setup: {e}")
            raise GeneratorUnavailableError("malformed setup response", details={"url": url}) from e


def import_generator(target: str) -> KingdomGenerator:
    """Import ``package.module:attribute``; classes and factories are called with no args."""
    module_name, sep, attr = target.partition(":")
    if not sep or not module_name or not attr:
        raise GeneratorUnavailableError(
            f"invalid generator import path '{target}' (expected 'module:attribute')"
        )
    try:
        module = importlib.import_module(module_name)
        obj: Any = module
        for part in attr.split("."):
            obj = getattr(obj, part)
    except (ImportError, AttributeError) as e:
        raise GeneratorUnavailableError(f"cannot import '{target}': {e}") from e
    if inspect.isclass(obj) or (callable(obj) and not isinstance(obj, KingdomGenerator)):
        obj = obj()
    if not isinstance(obj, KingdomGenerator):
        raise GeneratorUnavailableError(f"'{target}' does not provide the generator interface")
    return obj


def load_generator(target: Optional[str] = None, url: Optional[str] = None) -> KingdomGenerator:
    """Resolve the configured Generator backend.

    Explicit arguments win over the environment (``KINGDOM_GENERATOR``, then
    ``GENERATOR_URL``).
    """
    target = target or settings.generator_target()
    if target:
        logger.info(f"Using in-process generator {target}")
        return import_generator(target)
    url = url or settings.generator_url()
    if url:
        logger.info(f"Using generator service at {url}")
        return HttpGenerator(url)
    raise GeneratorUnavailableError("no generator configured (set KINGDOM_GENERATOR or GENERATOR_URL)")
