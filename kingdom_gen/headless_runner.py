from __future__ import annotations

import argparse
import json
import random
import sys
from typing import Dict, List, Optional, Sequence, TextIO

from kingdom_gen.exceptions import InvalidCountChoiceError, KingdomGenError, SelectionTreeError
from kingdom_gen.kingdom.request_builder import build_generation_request, parse_count_choice
from kingdom_gen.kingdom.selection_tree import SelectionTree, TreePurpose, build_selection_trees
from kingdom_gen.kingdom.text_render import random_game_name, render_error, render_history_code, render_text
from kingdom_gen.services import catalogue_loader
from kingdom_gen.services.generator_client import KingdomGenerator, load_generator
from kingdom_gen.settings import DEFAULT_GAME_NAME, OUTPUT_FORMATS
from kingdom_gen.web.services.orchestrator import SubmitOk, generate_display


def _check_nodes(tree: SelectionTree, node_ids: Sequence[str]) -> None:
    """Check each listed node once (repeats on the command line are ignored)."""
    for node_id in dict.fromkeys(node_ids):
        if node_id not in tree:
            raise SelectionTreeError(
                f"Unknown {'expansion' if tree.purpose is TreePurpose.EXPANSIONS else 'card'} '{node_id}'",
                code="UNKNOWN_NODE",
                details={"purpose": tree.purpose.value, "node": node_id},
            )
        already = (
            tree.expansion(node_id).is_checked
            if tree.purpose is TreePurpose.EXPANSIONS
            else tree.card(node_id).is_checked
        )
        if not already:
            tree.toggle(node_id)


def _build_arg_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Generate Dominion kingdoms")
    limiting = p.add_argument_group("Limiting")
    limiting.add_argument("-e", "--include-expansions", metavar="EXPANSION", nargs="+", default=[],
                          help="Expansions from which to take cards")
    limiting.add_argument("-p", "--project-count", metavar="NUMBER", default=None,
                          help="Include a number of projects")
    limiting.add_argument("--bane-count", metavar="NUMBER", default=None,
                          help="Include a number of bane expansion cards (experimental/custom)")
    limiting.add_argument("-b", "--ban-cards", metavar="CARD", nargs="+", default=[],
                          help="Ensure these cards are not included")
    limiting.add_argument("-c", "--include-cards", metavar="CARD", nargs="+", default=[],
                          help="Ensure these cards are included")

    output = p.add_argument_group("Output")
    output.add_argument("--format", choices=OUTPUT_FORMATS, default="pretty",
                        help="pretty: grouped listing; raw: setup JSON; json: display model JSON; code: play-log record")
    output.add_argument("--raw", dest="format", action="store_const", const="raw",
                        help="Shorthand for --format raw")
    output.add_argument("--json", dest="format", action="store_const", const="json",
                        help="Shorthand for --format json")
    output.add_argument("--code", dest="format", action="store_const", const="code",
                        help="Shorthand for --format code: a play-log record with the setup filled out")
    output.add_argument("--name", action="store_true",
                        help="Generate a kingdom name (printed first, reused by --code)")

    backend = p.add_argument_group("Generator")
    backend.add_argument("--generator", metavar="MODULE:ATTR", default=None,
                         help="Import path of an in-process generator (overrides KINGDOM_GENERATOR)")
    backend.add_argument("--generator-url", metavar="URL", default=None,
                         help="Base URL of a generator service (overrides GENERATOR_URL)")
    return p


def run(
    args: argparse.Namespace,
    generator: Optional[KingdomGenerator] = None,
    out: Optional[TextIO] = None,
    err: Optional[TextIO] = None,
    rng: Optional[random.Random] = None,
) -> int:
    """Execute one headless generation; returns the process exit code."""
    out = out or sys.stdout
    err = err or sys.stderr
    try:
        if generator is None:
            generator = load_generator(args.generator, args.generator_url)
        state = catalogue_loader.initialize(generator, force=True)
        trees: Dict[TreePurpose, SelectionTree] = build_selection_trees(state.catalogue)
        _check_nodes(trees[TreePurpose.INCLUDES], args.include_cards)
        _check_nodes(trees[TreePurpose.BANS], args.ban_cards)
        _check_nodes(trees[TreePurpose.EXPANSIONS], args.include_expansions)
        request = build_generation_request(
            trees[TreePurpose.INCLUDES],
            trees[TreePurpose.BANS],
            trees[TreePurpose.EXPANSIONS],
            project_count=parse_count_choice(args.project_count, state.project_count_options, "project_count"),
            bane_count=parse_count_choice(args.bane_count, state.bane_count_options, "bane_count"),
        )
    except KingdomGenError as e:
        err.write(render_error(e))
        return 2 if isinstance(e, (SelectionTreeError, InvalidCountChoiceError)) else 1

    outcome = generate_display(state, request)
    if not isinstance(outcome, SubmitOk):
        err.write(render_error(outcome.error))
        return 1

    name = DEFAULT_GAME_NAME
    if args.name:
        name = random_game_name(outcome.setup, rng)
        out.write(f"== {name} ==\n")

    if args.format == "raw":
        out.write(json.dumps(outcome.setup.to_payload(), indent=2) + "\n")
    elif args.format == "json":
        out.write(json.dumps(outcome.display.to_dict(), indent=2) + "\n")
    elif args.format == "code":
        out.write(render_history_code(outcome.setup, name))
    else:
        out.write(render_text(outcome.display))
    return 0


def _main(argv: Optional[List[str]] = None) -> int:
    parser = _build_arg_parser()
    args = parser.parse_args(argv)
    return run(args)


if __name__ == "__main__":
    raise SystemExit(_main())
