from __future__ import annotations

from typing import Dict, List, Optional
from pydantic import BaseModel, Field, field_validator

from kingdom_gen.type_definitions import GenerationRequest


class GenerateRequestBody(BaseModel):
    project_count: Optional[int] = None
    bane_count: Optional[int] = None
    include_expansions: Optional[List[str]] = None
    include_cards: Optional[List[str]] = None
    ban_cards: Optional[List[str]] = None

    @field_validator("include_expansions", "include_cards", "ban_cards")
    @classmethod
    def _empty_is_unconstrained(cls, value: Optional[List[str]]) -> Optional[List[str]]:
        # An empty list means "no constraint" and is sent on as null.
        cleaned = [v.strip() for v in (value or []) if v and v.strip()]
        return cleaned or None

    def to_generation_request(self) -> GenerationRequest:
        def _tuple(values: Optional[List[str]]):
            return tuple(values) if values else None

        return GenerationRequest(
            project_count=self.project_count,
            bane_count=self.bane_count,
            include_expansions=_tuple(self.include_expansions),
            include_cards=_tuple(self.include_cards),
            ban_cards=_tuple(self.ban_cards),
        )


class DisplayGroupOut(BaseModel):
    expansion_label: str
    cards: List[str] = Field(default_factory=list)


class DisplayModelOut(BaseModel):
    groups: List[DisplayGroupOut] = Field(default_factory=list)
    project_cards: List[str] = Field(default_factory=list)


class SetupOut(BaseModel):
    kingdom_cards: List[str] = Field(default_factory=list)
    bane_card: Optional[str] = None
    bane_cards: Dict[str, str] = Field(default_factory=dict)
    second_zebra: Optional[str] = None
    project_cards: List[str] = Field(default_factory=list)


class CatalogueOut(BaseModel):
    expansion_cards: Dict[str, List[str]] = Field(default_factory=dict)
    project_counts: List[int] = Field(default_factory=list)
    bane_counts: List[int] = Field(default_factory=list)
