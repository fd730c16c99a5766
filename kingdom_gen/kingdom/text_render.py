"""Plain-text rendering for the headless runner.

Besides the grouped listing this module produces the two extras the
command line can print for a generated setup:

- a random game title built from the setup's cards ("The Witch and the Moat");
- a history record in the play-log notation (``S.standard [...]`` and friends)
  that can be pasted into a game journal.

Randomness comes from an injectable :class:`random.Random` so the output can be
pinned in tests.
"""
from __future__ import annotations

import random
from datetime import datetime
from typing import Callable, List, Optional, Sequence

from kingdom_gen.exceptions import user_message
from kingdom_gen.settings import BANNER_WIDTH, DEFAULT_GAME_NAME, KINGDOM_HEADING, PROJECT_HEADING
from kingdom_gen.type_definitions import DisplayModel, GeneratedSetup

NAME_ENDINGS = (
    "Adventure", "Apprentice", "Bane", "Banishment", "Captivity", "Cleansing", "Coffers",
    "Coins", "Copper", "Crown", "Curse", "Deceit", "Defeat", "Demise", "Destiny", "Dismissal",
    "End", "Enigma", "Entry", "Err", "Execution", "Exit", "Failing", "Fate", "Favor",
    "Fettering", "Flight", "Foresight", "Fortune", "Game", "Gauntlet", "Help", "Incident",
    "Journey", "Killing", "Kinship", "Loss", "Love", "Mystery", "Nocturne", "Overreach",
    "Peace", "Plight", "Poverty", "Prudence", "Punishment", "Quickening", "Relief", "Repose",
    "Sacking", "Screams", "Surrender", "Tell", "Termination", "Treasure", "Triumph", "Turn",
    "Turning", "Unfettering", "Victory", "Wealth", "Winning", "Yearning", "Yells", "Zeal",
)

NAME_PLACES = (
    "Battlefield", "Battlement", "Castle", "Dungeon", "Field", "Forest", "Kingdom",
    "Mountain", "Palace", "Pit", "Sea", "Sky", "Tower", "Town", "Village", "Waste", "Woods",
)


def _banner(title: str) -> List[str]:
    rule = "=" * BANNER_WIDTH
    return [rule, f"=== {title} ===", rule, ""]


def render_text(display: DisplayModel) -> str:
    lines: List[str] = _banner(KINGDOM_HEADING)
    for group in display.groups:
        lines.append(group.expansion_label)
        lines.extend(f" - {card}" for card in group.cards)
    if display.has_projects:
        lines.append("")
        lines.extend(_banner(PROJECT_HEADING))
        lines.extend(f" - {project}" for project in display.project_cards)
    return "\n".join(lines) + "\n"


def render_error(error: BaseException) -> str:
    return f"Error generating kingdom!\n\n{user_message(error)}\n"


def random_game_name(setup: GeneratedSetup, rng: Optional[random.Random] = None) -> str:
    """Pick a title for the game from one of six patterns over the setup's cards.

    Card ids are used raw ("The YoungWitch's Moat"). A setup with fewer than two
    cards only gets the patterns that need no second card.
    """
    rng = rng or random.Random()
    cards = setup.cards()
    picked = rng.sample(cards, min(2, len(cards)))

    def ending() -> str:
        return rng.choice(NAME_ENDINGS)

    def place() -> str:
        return rng.choice(NAME_PLACES)

    patterns: List[Callable[[], str]] = [lambda: f"The {ending()} of the {place()}"]
    if picked:
        first = picked[0]
        patterns += [
            lambda: f"The {first} of the {ending()}",
            lambda: f"The {ending()} of the {first}",
            lambda: f"The {first} of the {place()}",
        ]
    if len(picked) > 1:
        second = picked[1]
        patterns += [
            lambda: f"The {first} and the {second}",
            lambda: f"The {first}'s {second}",
        ]
    return rng.choice(patterns)()


def _card_list(cards: Sequence[str]) -> str:
    return "[" + ", ".join(cards) + "]"


def format_setup_code(setup: GeneratedSetup) -> str:
    """Setup constructor in the play-log notation, chosen by bane/projects presence."""
    kingdom = _card_list(setup.kingdom_cards)
    projects = _card_list(setup.project_cards)
    if setup.bane_card is None:
        if not setup.project_cards:
            return f"S.standard {kingdom}"
        return f"S.standardWithProjects {projects} {kingdom}"
    if not setup.project_cards:
        return f"S.bane {setup.bane_card} {kingdom}"
    return f"S.baneWithProjects {setup.bane_card} {projects} {kingdom}"


def render_history_code(
    setup: GeneratedSetup,
    name: str = DEFAULT_GAME_NAME,
    now: Optional[datetime] = None,
) -> str:
    """A ``Played`` record for the play log, dated ``now`` (local time by default)."""
    now = now or datetime.now().astimezone()
    return (
        f'  , Played {{ name = Just "{name} at {now.isoformat(sep=" ")}"\n'
        f"           , at = Just $ Date {{year={now.year}, month={now.month}, day={now.day}}}\n"
        f"           , setup = {format_setup_code(setup)}\n"
        "           , players = Just []\n"
        "           , rating = Nothing\n"
        "           }\n"
    )
