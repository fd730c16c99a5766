"""Services package for the kingdom setup generator."""

from kingdom_gen.services.catalogue_loader import CatalogueState, get_catalogue_state, initialize
from kingdom_gen.services.generator_client import HttpGenerator, KingdomGenerator, load_generator

__all__ = [
    "CatalogueState",
    "HttpGenerator",
    "KingdomGenerator",
    "get_catalogue_state",
    "initialize",
    "load_generator",
]
