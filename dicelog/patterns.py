"""Regular expression grammar for dice notation.

The grammar is a set of named fragments. Each fragment is a template that
may embed other fragments by name (``${dice}``), so the full notation
pattern is built up from small pieces:

    arithmeticOperator   +, -, *, /
    comparisonOperators  =, <, >, <=, >=, !=, ...
    fudge                F, F.1, F.2
    numberComparison     comparison operator followed by an integer (>=5)
    explode              !, !!, !p, !!p
    dice                 2d6, d10, d%, dF, dF.2
    diceFull             dice + optional explode + optional number comparison
    addition             +4, -10, *2, -L, +H
    notation             optional leading operator + diceFull + additions

Compiled patterns are cached per (name, flags, match_whole) and live for the
lifetime of the process.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from string import Template

logger = logging.getLogger(__name__)


class PatternNameError(ValueError):
    """Raised when a notation pattern name is missing or unknown."""


@dataclass(frozen=True)
class Fragment:
    """A pattern template and the names of the fragments it embeds."""

    template: str
    requires: tuple[str, ...] = ()


# ---------------------------------------------------------------------------
# Fragments
# ---------------------------------------------------------------------------

FRAGMENTS: dict[str, Fragment] = {
    "arithmeticOperator": Fragment(r"[+\-*/]"),
    "comparisonOperators": Fragment(r"[<>!]?={1,3}|[<>]"),
    "fudge": Fragment(r"F(?:\.([12]))?"),
    "numberComparison": Fragment(
        r"(${comparisonOperators})([0-9]+)",
        requires=("comparisonOperators",),
    ),
    "explode": Fragment(r"(!{1,2}p?)"),
    "dice": Fragment(
        r"([1-9][0-9]*)?d([1-9][0-9]*|%|${fudge})",
        requires=("fudge",),
    ),
    "diceFull": Fragment(
        r"${dice}${explode}?(?:${numberComparison})?",
        requires=("dice", "explode", "numberComparison"),
    ),
    # The numeric alternative must not swallow the quantity of a following
    # dice term, e.g. the "1" of "+1d6".
    "addition": Fragment(
        r"(${arithmeticOperator})([1-9]+0?(?![0-9]*d)|H|L)",
        requires=("arithmeticOperator",),
    ),
    "notation": Fragment(
        r"(${arithmeticOperator})?${diceFull}((?:${addition})*)",
        requires=("arithmeticOperator", "diceFull", "addition"),
    ),
}


class NotationPatterns:
    """Resolves fragment names to compiled, cached regular expressions."""

    def __init__(self, fragments: dict[str, Fragment] | None = None) -> None:
        self._fragments = FRAGMENTS if fragments is None else fragments
        self._strings: dict[str, str] = {}
        self._compiled: dict[tuple[str, int, bool], re.Pattern[str]] = {}

    def _check_name(self, name: object) -> str:
        if not name:
            raise PatternNameError("Notation pattern name not defined")
        if not isinstance(name, str) or name not in self._fragments:
            raise PatternNameError(f"Notation pattern name not found: {name}")
        return name

    def _resolve(self, name: str, resolving: tuple[str, ...] = ()) -> str:
        if name in self._strings:
            return self._strings[name]
        if name in resolving:
            chain = " -> ".join((*resolving, name))
            raise PatternNameError(f"Notation pattern cycle: {chain}")

        fragment = self._fragments[self._check_name(name)]
        parts = {dep: self._resolve(dep, (*resolving, name)) for dep in fragment.requires}
        pattern = Template(fragment.template).substitute(parts)

        self._strings[name] = pattern
        return pattern

    def pattern_string(self, name: str) -> str:
        """Return the uncompiled pattern for a fragment, with dependencies expanded."""
        return self._resolve(self._check_name(name))

    def get(self, name: str, flags: int = 0, match_whole: bool = False) -> re.Pattern[str]:
        """Return the compiled pattern for a fragment.

        Args:
            name: Fragment name, e.g. "notation" or "addition".
            flags: ``re`` flags to compile with.
            match_whole: Anchor the pattern to the start and end of the input.

        Returns:
            The compiled pattern. Repeated calls with the same arguments
            return the same object.

        Raises:
            PatternNameError: If name is empty, not a string, or not a fragment.
        """
        name = self._check_name(name)
        key = (name, int(flags), bool(match_whole))
        compiled = self._compiled.get(key)
        if compiled is None:
            pattern = self._resolve(name)
            if match_whole:
                pattern = f"^(?:{pattern})$"
            compiled = re.compile(pattern, flags)
            self._compiled[key] = compiled
            logger.debug("Compiled notation pattern %s (flags=%d, whole=%s)", *key)
        return compiled


notation_patterns = NotationPatterns()
