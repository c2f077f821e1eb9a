"""Dice routes: parse notation, roll, and manage the shared roll log."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, Response
from fastapi.responses import PlainTextResponse

from dicelog.config import settings
from dicelog.dependencies import get_roller
from dicelog.dice import DiceError, DiceRoll
from dicelog.notation import parse_notation
from dicelog.roller import DiceRoller, DiceRollerError, ExportFormat, FormatNotImplementedError
from dicelog.schemas import (
    DieSpecResponse,
    ImportRequest,
    LogResponse,
    RollManyRequest,
    RollRequest,
    RollResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def _roll_response(dice_roll: DiceRoll) -> RollResponse:
    return RollResponse(**dice_roll.to_dict(), output=dice_roll.output)


def _log_response(roller: DiceRoller) -> LogResponse:
    return LogResponse(log=[_roll_response(r) for r in roller.log], output=roller.output)


@router.get("/notation")
async def parse(notation: str = Query(..., min_length=1)) -> list[DieSpecResponse]:
    """Parse notation without rolling it. Unrecognised text yields an empty list."""
    return [DieSpecResponse.model_validate(die.to_dict()) for die in parse_notation(notation)]


@router.post("/rolls")
async def roll(body: RollRequest, roller: DiceRoller = Depends(get_roller)) -> RollResponse:
    try:
        dice_roll = roller.roll(body.notation)
    except DiceError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return _roll_response(dice_roll)


@router.post("/rolls/many")
async def roll_many(
    body: RollManyRequest, roller: DiceRoller = Depends(get_roller)
) -> list[RollResponse]:
    """Roll several notations in order. Stops at the first invalid notation."""
    try:
        rolls = roller.roll_many(body.notations)
    except (DiceError, DiceRollerError) as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return [_roll_response(r) for r in rolls]


@router.get("/log")
async def get_log(roller: DiceRoller = Depends(get_roller)) -> LogResponse:
    return _log_response(roller)


@router.delete("/log", status_code=204)
async def clear_log(roller: DiceRoller = Depends(get_roller)) -> Response:
    roller.clear_log()
    return Response(status_code=204)


@router.get("/log/export", response_class=PlainTextResponse)
async def export_log(
    format: str | None = None,
    roller: DiceRoller = Depends(get_roller),
) -> PlainTextResponse:
    """Export the roll log as JSON or base64 text."""
    requested = format or settings.default_export_format
    try:
        text = roller.export(ExportFormat.coerce(requested))
    except FormatNotImplementedError as exc:
        raise HTTPException(status_code=501, detail=str(exc)) from exc
    except DiceRollerError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return PlainTextResponse(text)


@router.post("/log/import")
async def import_log(body: ImportRequest, roller: DiceRoller = Depends(get_roller)) -> LogResponse:
    """Append exported rolls (JSON text, base64 text, or the decoded data) to the log."""
    try:
        roller.import_(body.data)
    except (DiceError, DiceRollerError) as exc:
        logger.debug("Rejected roll log import: %s", exc)
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return _log_response(roller)
