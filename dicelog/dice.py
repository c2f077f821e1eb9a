"""Server-side dice rolling engine.

Rolls parsed dice notation and keeps the rolled values alongside the notation,
so a roll can be displayed, serialised and re-imported without rolling again.

Supported per term: XdY, d%, dF / dF.1 / dF.2, exploding (!), compounding (!!),
penetrating (!p, !!p), dice pools (3d6>=5) and additions (+2, *3, -L, +H).
Examples: 2d6, 1d20+5, 4d6-L, 3d6!!p, 2d20!>=15+1d6.
"""

from __future__ import annotations

import base64
import json
import logging
from collections.abc import Mapping
from typing import Any

from pydantic import ValidationError

from dicelog import utils
from dicelog.config import settings
from dicelog.notation import DieSpec, parse_notation
from dicelog.schemas import RollRecord

logger = logging.getLogger(__name__)

Number = int | float


class DiceError(ValueError):
    """Raised when a dice notation or serialised roll is invalid."""


# ---------------------------------------------------------------------------
# Rolling
# ---------------------------------------------------------------------------


def _highest_face(die: DieSpec) -> int:
    if die.is_fudge:
        return 1
    if die.is_percentile:
        return 100
    return int(die.sides)


def _roll_face(die: DieSpec) -> int:
    """Roll a single die once, without any modifiers."""
    if die.is_fudge:
        if die.fudge_variant == "1":
            # 1 in 6 chance of each extreme
            value = utils.generate_number(1, 6)
            return -1 if value == 1 else (1 if value == 6 else 0)
        return utils.generate_number(-1, 1)
    return utils.generate_number(1, _highest_face(die))


def _explodes(die: DieSpec, value: Number) -> bool:
    cp = die.compare_point
    return cp is not None and utils.compare_numbers(value, cp.value, cp.operator)


def _roll_term(die: DieSpec) -> list[int]:
    """Roll every die in a term, applying explode/penetrate/compound."""
    rolls: list[int] = []
    for _ in range(die.qty):
        chain = [_roll_face(die)]
        if die.explode:
            raw = chain[0]
            while _explodes(die, raw):
                if len(chain) > settings.max_explosions:
                    logger.warning(
                        "Exploding chain for %s hit the limit of %d rerolls",
                        die.to_notation(leading_operator=False),
                        settings.max_explosions,
                    )
                    break
                raw = _roll_face(die)
                chain.append(raw - 1 if die.penetrate else raw)
        if die.compound:
            rolls.append(sum(chain))
        else:
            rolls.extend(chain)
    return rolls


def _check_limits(dice: list[DieSpec]) -> None:
    for die in dice:
        if die.qty > settings.max_dice:
            raise DiceError(f"Too many dice: {die.qty} (max {settings.max_dice})")
        if isinstance(die.sides, int) and die.sides > settings.max_sides:
            raise DiceError(f"Too many sides: {die.sides} (max {settings.max_sides})")


# ---------------------------------------------------------------------------
# Totals and display
# ---------------------------------------------------------------------------


def _is_pool(die: DieSpec) -> bool:
    """A compare point without exploding counts successes instead of summing."""
    return die.compare_point is not None and not die.explode


def _resolve_addition(value: float | str, rolls: list[Number]) -> Number:
    if value == "H":
        return max(rolls, default=0)
    if value == "L":
        return min(rolls, default=0)
    return value


def _term_value(die: DieSpec, rolls: list[Number]) -> Number:
    if _is_pool(die):
        value: Number = sum(1 for r in rolls if _explodes(die, r))
    else:
        value = sum(rolls)
    for addition in die.additions:
        value = utils.equate_numbers(
            value, _resolve_addition(addition.value, rolls), addition.operator
        )
    return value


def _roll_markers(die: DieSpec, rolls: list[Number]) -> list[str]:
    """Work out the marker shown after each rolled value.

    Exploded and penetrated rolls are found by replaying the chain. A
    compounded value is marked when it meets the compare point or lies
    beyond the die's highest face.
    """
    if _is_pool(die):
        return ["*" if _explodes(die, r) else "" for r in rolls]
    if not die.explode:
        return [""] * len(rolls)
    if die.compound:
        marker = "!!p" if die.penetrate else "!!"
        return [
            marker if _explodes(die, r) or r > _highest_face(die) else "" for r in rolls
        ]

    markers = []
    in_chain = False
    for r in rolls:
        raw = r + 1 if die.penetrate and in_chain else r
        in_chain = _explodes(die, raw)
        markers.append(("!p" if die.penetrate else "!") if in_chain else "")
    return markers


def _as_number(value: Number) -> Number:
    return int(value) if float(value).is_integer() else value


class DiceRoll:
    """The result of rolling a dice notation.

    Attributes:
        notation: The notation as given.
        dice: The parsed dice terms.
        rolls: Rolled values, one list per term.
        total: The combined result of all terms.
    """

    def __init__(self, notation: str, rolls: list[list[Number]] | None = None) -> None:
        """Roll notation, or rebuild a roll from previously rolled values.

        Args:
            notation: Dice notation string, e.g. "2d6+3".
            rolls: Existing rolled values, one list per term. Rolled fresh if omitted.

        Raises:
            DiceError: If the notation has no dice, exceeds the configured
                limits, or rolls doesn't have one list per term.
        """
        if not notation or not isinstance(notation, str):
            raise DiceError("No notation specified")

        self.notation = notation.strip()
        self.dice = parse_notation(self.notation)
        if not self.dice:
            raise DiceError(f"Invalid dice notation: {notation!r}")
        _check_limits(self.dice)

        if rolls is None:
            self.rolls = [_roll_term(die) for die in self.dice]
        elif len(rolls) != len(self.dice):
            raise DiceError(
                f"Expected {len(self.dice)} roll lists for {self.notation!r}, got {len(rolls)}"
            )
        else:
            self.rolls = [[_as_number(v) for v in term] for term in rolls]

        self.total = self._compute_total()

    def _compute_total(self) -> Number:
        total: Number = 0
        for die, rolls in zip(self.dice, self.rolls):
            total = utils.equate_numbers(total, _term_value(die, rolls), die.operator)
        return _as_number(round(total, 2))

    def _format_term(self, index: int) -> str:
        die = self.dice[index]
        rolls = self.rolls[index]
        markers = _roll_markers(die, rolls)

        text = die.operator if index > 0 or die.operator != "+" else ""
        text += "[" + ",".join(f"{utils.format_number(r)}{m}" for r, m in zip(rolls, markers)) + "]"
        for addition in die.additions:
            value = _resolve_addition(addition.value, rolls)
            text += f"{addition.operator}{utils.format_number(value)}"
        return text

    @property
    def output(self) -> str:
        """The roll as text, e.g. ``2d20+1d6: [20,2]+[2] = 24``."""
        terms = "".join(self._format_term(i) for i in range(len(self.dice)))
        return f"{self.notation}: {terms} = {utils.format_number(self.total)}"

    def __str__(self) -> str:
        return self.output

    def __repr__(self) -> str:
        return f"DiceRoll({self.notation!r}, rolls={self.rolls!r})"

    def to_dict(self) -> dict[str, Any]:
        return {"notation": self.notation, "rolls": self.rolls, "total": self.total}

    @classmethod
    def from_data(cls, data: Any) -> DiceRoll:
        """Rebuild a roll from serialised data without rolling again.

        Args:
            data: A DiceRoll, a mapping with ``notation`` and ``rolls``, or
                JSON / base64 text of such a mapping.

        Returns:
            The rebuilt DiceRoll. The total is recomputed from the rolls.

        Raises:
            DiceError: If the data can't be interpreted as a roll.
        """
        if isinstance(data, DiceRoll):
            return data
        if utils.is_json(data):
            return cls.from_data(json.loads(data))
        if utils.is_base64(data):
            return cls.from_data(base64.b64decode(data).decode("utf-8", errors="replace"))
        if isinstance(data, Mapping):
            try:
                record = RollRecord.model_validate(data)
            except ValidationError as exc:
                raise DiceError(f"Invalid roll data: {exc}") from exc
            return cls(record.notation, record.rolls)
        raise DiceError(f"Unrecognised roll data: {data!r}")
