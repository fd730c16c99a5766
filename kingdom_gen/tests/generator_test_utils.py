from __future__ import annotations

from typing import Dict, List, Mapping, Optional, Sequence

from kingdom_gen.exceptions import ConflictError, UnsatisfiableError
from kingdom_gen.services.generator_client import ERROR_MESSAGES
from kingdom_gen.type_definitions import GeneratedSetup, GenerationRequest

# Small slice of the real card list. Militia and Witch sit in both base editions.
SAMPLE_CATALOGUE: Dict[str, List[str]] = {
    "Base1": ["Cellar", "Chapel", "Moat", "Militia", "Witch", "Bureaucrat"],
    "Base2": ["Sentry", "Poacher", "Militia", "Witch", "Bandit", "Harbinger", "Library", "Market", "Vassal", "Gardens"],
    "Cornucopia": ["YoungWitch", "FarmingVillage", "Jester"],
    "Guilds": ["Baker", "Butcher", "MerchantGuild", "Plaza", "Soothsayer"],
    "Hinterlands": ["Stables", "Oasis"],
    "Renaissance": ["Patron", "Villain"],
    "Seaside": ["Lookout", "Warehouse", "Smugglers", "Haven", "Caravan"],
}

PROJECTS = ("Academy", "Barracks", "CityGate")
PROJECT_EXPANSION = "Renaissance"
BANE_VARIANTS = ("Zebra", "SecretPlans", "TreasuryKey")


def _unsatisfiable(kind: str) -> UnsatisfiableError:
    return UnsatisfiableError(kind, ERROR_MESSAGES.get(kind))


class FakeGenerator:
    """Deterministic stand-in for the setup Generator.

    Picks cards in catalogue order instead of at random but follows the same
    rules: includes are forced in, bans and the expansion pool filter the
    rest, Young Witch pulls a bane card and a Zebra variant pulls a second
    zebra card from the leftovers.
    """

    def __init__(
        self,
        catalogue: Optional[Mapping[str, Sequence[str]]] = None,
        project_counts: Sequence[int] = (0, 1, 2),
        bane_counts: Sequence[int] = (0, 1, 2, 3),
        setup: Optional[GeneratedSetup] = None,
        error: Optional[BaseException] = None,
    ):
        source = SAMPLE_CATALOGUE if catalogue is None else catalogue
        self._catalogue = {exp: list(cards) for exp, cards in source.items()}
        self._project_counts = list(project_counts)
        self._bane_counts = list(bane_counts)
        self.setup = setup
        self.error = error
        self.requests: List[GenerationRequest] = []
        self.catalogue_calls = 0

    def catalogue(self) -> Dict[str, List[str]]:
        self.catalogue_calls += 1
        return {exp: list(cards) for exp, cards in self._catalogue.items()}

    def project_count_options(self) -> List[int]:
        return list(self._project_counts)

    def bane_count_options(self) -> List[int]:
        return list(self._bane_counts)

    def generate(self, request: GenerationRequest) -> GeneratedSetup:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        if self.setup is not None:
            return self.setup

        includes = list(request.include_cards or ())
        bans = set(request.ban_cards or ())
        overlap = sorted(set(includes) & bans)
        if overlap:
            raise ConflictError(overlap)
        if len(includes) > 10:
            raise _unsatisfiable("TooManyCardsIncluded")

        expansions = list(request.include_expansions or self._catalogue)
        pool: List[str] = []
        for exp in expansions:
            for card in self._catalogue.get(exp, ()):
                if card not in bans and card not in includes and card not in pool:
                    pool.append(card)

        projects_allowed = PROJECT_EXPANSION in expansions
        if request.project_count is None:
            project_count = 1 if projects_allowed else 0
        else:
            project_count = request.project_count
        if project_count and not projects_allowed:
            raise _unsatisfiable("CouldNotSatisfyProjectsFromExpansions")

        needed = 10 - len(includes)
        kingdom = pool[:needed] + includes
        if len(kingdom) < 10:
            raise _unsatisfiable("CouldNotSatisfyKingdomCards")
        leftovers = iter(pool[needed:])

        bane_card = None
        if "YoungWitch" in kingdom:
            bane_card = next(leftovers, None)
            if bane_card is None:
                raise _unsatisfiable("CouldNotSatisfyBaneCard")

        bane_cards = dict(zip(kingdom[: request.bane_count or 0], BANE_VARIANTS))
        second_zebra = None
        if "Zebra" in bane_cards.values():
            second_zebra = next(leftovers, None)
            if second_zebra is None:
                raise _unsatisfiable("CouldNotSatisfySecondZebra")

        return GeneratedSetup(
            kingdom_cards=tuple(kingdom),
            bane_card=bane_card,
            bane_cards=bane_cards,
            second_zebra=second_zebra,
            project_cards=PROJECTS[:project_count],
        )


def make_generator() -> FakeGenerator:
    """Factory form, for loading through an import path."""
    return FakeGenerator()
