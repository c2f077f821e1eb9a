"""Dice notation parser.

Turns notation such as ``2d20!>=15+1d6-L`` into an ordered list of DieSpec
objects, one per dice term. Parsing never raises: text that doesn't match the
grammar simply produces fewer (or no) terms, and callers decide whether an
empty result is an error.

See https://en.wikipedia.org/wiki/Dice_notation
"""

from __future__ import annotations

from dataclasses import dataclass, field

from dicelog import utils
from dicelog.patterns import notation_patterns

SYMBOLIC_ADDITIONS = ("H", "L")


@dataclass(frozen=True)
class ComparePoint:
    """Threshold used for exploding dice and dice pools (e.g. ``>=5``)."""

    operator: str
    value: int

    def __str__(self) -> str:
        return f"{self.operator}{self.value}"


@dataclass(frozen=True)
class Addition:
    """Arithmetic applied to a term's result.

    value is a number, or "H"/"L" for the highest/lowest roll in the term.
    """

    operator: str
    value: float | str

    @property
    def is_symbolic(self) -> bool:
        return self.value in SYMBOLIC_ADDITIONS

    def __str__(self) -> str:
        value = self.value if self.is_symbolic else utils.format_number(self.value)
        return f"{self.operator}{value}"


@dataclass
class DieSpec:
    """A single parsed dice term, e.g. the ``-3d6!!p`` of ``2d4-3d6!!p``."""

    operator: str = "+"
    qty: int = 1
    sides: int | str = 6
    fudge: str | None = None
    explode: bool = False
    penetrate: bool = False
    compound: bool = False
    compare_point: ComparePoint | None = None
    additions: list[Addition] = field(default_factory=list)

    @property
    def is_fudge(self) -> bool:
        return self.fudge is not None

    @property
    def fudge_variant(self) -> str | None:
        """The weighting of a fudge die ("1" or "2"), if one was given."""
        if self.fudge is None:
            return None
        return self.fudge.partition(".")[2] or None

    @property
    def is_percentile(self) -> bool:
        return self.sides == "%"

    @property
    def explode_token(self) -> str:
        if not self.explode:
            return ""
        return "!" + ("!" if self.compound else "") + ("p" if self.penetrate else "")

    def to_notation(self, leading_operator: bool = True) -> str:
        """Render the term back into notation.

        Args:
            leading_operator: Include the operator even when it is "+". Pass
                False for the first term of a notation.
        """
        text = self.operator if leading_operator or self.operator != "+" else ""
        text += f"{self.qty}d{self.sides}{self.explode_token}"
        if self.compare_point is not None:
            text += str(self.compare_point)
        return text + "".join(str(a) for a in self.additions)

    def to_dict(self) -> dict:
        return {
            "operator": self.operator,
            "qty": self.qty,
            "sides": self.sides,
            "fudge": self.fudge,
            "explode": self.explode,
            "penetrate": self.penetrate,
            "compound": self.compound,
            "compare_point": (
                None
                if self.compare_point is None
                else {"operator": self.compare_point.operator, "value": self.compare_point.value}
            ),
            "additions": [{"operator": a.operator, "value": a.value} for a in self.additions],
        }


def _default_compare_point(die: DieSpec) -> ComparePoint:
    """Exploding dice with no explicit compare point explode on their highest face."""
    if die.is_fudge:
        value = 1
    elif die.is_percentile:
        value = 100
    else:
        value = die.sides
    return ComparePoint(operator="=", value=value)


def _parse_additions(text: str) -> list[Addition]:
    additions = []
    for m in notation_patterns.get("addition").finditer(text):
        raw = m.group(2)
        value = float(raw) if utils.is_numeric(raw) else raw
        additions.append(Addition(operator=m.group(1), value=value))
    return additions


def parse_notation(notation: str | None) -> list[DieSpec]:
    """Parse dice notation into its dice terms, in order of appearance.

    Args:
        notation: Dice notation, e.g. "2d20!>=15+1d6".

    Returns:
        One DieSpec per dice term found. Empty if notation is empty or
        contains no recognisable dice.
    """
    parsed: list[DieSpec] = []
    if not notation:
        return parsed

    fudge_pattern = notation_patterns.get("fudge", match_whole=True)

    for m in notation_patterns.get("notation").finditer(str(notation)):
        (
            operator,
            qty,
            sides,
            _fudge_variant,
            explode,
            compare_operator,
            compare_value,
            additions,
        ) = m.groups()[:8]

        die = DieSpec(
            operator=operator or "+",
            qty=int(qty) if qty else 1,
            sides=int(sides) if utils.is_numeric(sides) else sides,
            explode=bool(explode),
            penetrate=explode in ("!p", "!!p"),
            compound=explode in ("!!", "!!p"),
        )

        if isinstance(die.sides, str) and fudge_pattern.match(die.sides):
            die.fudge = die.sides

        if compare_operator:
            die.compare_point = ComparePoint(operator=compare_operator, value=int(compare_value))
        elif die.explode:
            die.compare_point = _default_compare_point(die)

        if additions:
            die.additions = _parse_additions(additions)

        parsed.append(die)

    return parsed


def parse_die(notation: str | None) -> DieSpec | None:
    """Parse notation for a single die, returning only the first term (or None)."""
    dice = parse_notation(notation)
    return dice[0] if dice else None


def format_notation(dice: list[DieSpec]) -> str:
    """Render parsed dice terms back into a single notation string."""
    return "".join(die.to_notation(leading_operator=i > 0) for i, die in enumerate(dice))
