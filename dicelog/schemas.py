"""Pydantic models for serialised rolls and the HTTP API.

RollRecord is the storage format for a single roll inside an export envelope;
everything else describes request and response bodies.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class RollRecord(BaseModel):
    notation: str = Field(min_length=1, description="The notation that was rolled, e.g. '2d6+3'.")
    rolls: list[list[int | float]] = Field(
        description="Rolled values, one inner list per dice term in the notation.",
    )
    total: int | float | None = Field(
        default=None,
        description="Total as exported. Recomputed from the rolls on import.",
    )


# ---------------------------------------------------------------------------
# HTTP request bodies
# ---------------------------------------------------------------------------


class RollRequest(BaseModel):
    notation: str = Field(min_length=1)


class RollManyRequest(BaseModel):
    notations: list[str]


class ImportRequest(BaseModel):
    data: str | dict[str, Any] | list[Any]


# ---------------------------------------------------------------------------
# HTTP responses
# ---------------------------------------------------------------------------


class ComparePointResponse(BaseModel):
    operator: str
    value: int


class AdditionResponse(BaseModel):
    operator: str
    value: float | str


class DieSpecResponse(BaseModel):
    operator: str
    qty: int
    sides: int | str
    fudge: str | None
    explode: bool
    penetrate: bool
    compound: bool
    compare_point: ComparePointResponse | None
    additions: list[AdditionResponse]


class RollResponse(RollRecord):
    output: str


class LogResponse(BaseModel):
    log: list[RollResponse]
    output: str
