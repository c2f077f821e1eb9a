"""Roll history: rolls notations, keeps the results in order, and exports/imports them.

Exported data is ``{"log": [roll, ...]}`` as JSON text, optionally base64
encoded. Import accepts either of those, the decoded mapping, or a bare list
of rolls.
"""

from __future__ import annotations

import base64
import enum
import json
import logging
from collections.abc import Callable, Mapping
from typing import Any

from dicelog import utils
from dicelog.dice import DiceRoll

logger = logging.getLogger(__name__)


class DiceRollerError(ValueError):
    """Base class for errors raised by DiceRoller."""


class InvalidLogError(DiceRollerError):
    """Raised when imported data has a ``log`` that isn't a list of rolls."""


class InvalidNotationsError(DiceRollerError):
    """Raised when roll_many is given something other than a list of notations."""


class NoImportDataError(DiceRollerError):
    """Raised when import_ is called with nothing to import."""


class UnrecognisedFormatError(DiceRollerError):
    """Raised when an import or export format can't be handled."""


class FormatNotImplementedError(UnrecognisedFormatError):
    """Raised for export formats that are declared but have no serialiser."""


class ExportFormat(str, enum.Enum):
    """Formats the roll log can be exported as."""

    json = "json"
    base_64 = "base_64"
    object = "object"

    @classmethod
    def coerce(cls, value: ExportFormat | str) -> ExportFormat:
        """Look up a format by value or name, ignoring case ("JSON", "base_64")."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value.lower())
            except ValueError:
                pass
        raise UnrecognisedFormatError(f"Unrecognised export format specified: {value}")


_SEQUENCE_TYPES = (list, tuple)

# Sentinel returned by an import step that doesn't recognise its input.
_NOT_HANDLED = object()


class DiceRoller:
    """Rolls dice notations and keeps an ordered log of the results."""

    def __init__(self, data: Mapping[str, Any] | None = None) -> None:
        """Create a roller, optionally seeded with previously exported rolls.

        Data that isn't a mapping carries no log and is ignored.

        Args:
            data: A mapping whose ``log`` is a list of serialised rolls.

        Raises:
            InvalidLogError: If the data's ``log`` is not a list.
        """
        self._log: list[DiceRoll] = []
        self._import_steps: tuple[Callable[[Any], Any], ...] = (
            self._import_json,
            self._import_base64,
            self._import_mapping,
            self._import_list,
        )

        if isinstance(data, Mapping):
            self._log.extend(self._rolls_from_mapping(data))
        elif data:
            logger.warning("Ignoring roller data without a log: %r", data)

    # ------------------------------------------------------------------
    # History
    # ------------------------------------------------------------------

    @property
    def log(self) -> list[DiceRoll]:
        """A copy of the roll history, oldest first."""
        return list(self._log)

    @property
    def output(self) -> str:
        """Every roll in the history as text, e.g. ``2d20+1d6: [20,2]+[2] = 24; 1d8: [6] = 6``."""
        return "; ".join(str(roll) for roll in self._log)

    def __str__(self) -> str:
        return self.output

    def __len__(self) -> int:
        return len(self._log)

    def roll(self, notation: str) -> DiceRoll:
        """Roll notation, add the result to the history and return it.

        Raises:
            DiceError: If notation can't be rolled.
        """
        dice_roll = DiceRoll(notation)
        self._log.append(dice_roll)
        logger.debug("Rolled %s", dice_roll)
        return dice_roll

    def roll_many(self, notations: list[str]) -> list[DiceRoll]:
        """Roll each notation in turn, adding every result to the history.

        Raises:
            InvalidNotationsError: If notations is missing or not a list.
            DiceError: If a notation can't be rolled. Earlier notations stay rolled.
        """
        if notations is None:
            raise InvalidNotationsError("No notations specified")
        if not isinstance(notations, _SEQUENCE_TYPES):
            raise InvalidNotationsError(f"Notations are not valid: {notations!r}")
        return [self.roll(notation) for notation in notations]

    def clear_log(self) -> None:
        """Empty the roll history."""
        self._log.clear()
        logger.debug("Roll log cleared")

    # ------------------------------------------------------------------
    # Export
    # ------------------------------------------------------------------

    def to_dict(self) -> dict[str, Any]:
        return {"log": [roll.to_dict() for roll in self._log]}

    def export(self, format: ExportFormat | str = ExportFormat.json) -> str:
        """Export the roll history as text.

        Args:
            format: ExportFormat.json or ExportFormat.base_64 (names accepted
                in any case). Defaults to json when empty.

        Returns:
            JSON text, or base64 encoded JSON text.

        Raises:
            FormatNotImplementedError: For ExportFormat.object.
            UnrecognisedFormatError: For any other unknown format.
        """
        export_format = ExportFormat.coerce(format or ExportFormat.json)
        if export_format is ExportFormat.json:
            return json.dumps(self.to_dict())
        if export_format is ExportFormat.base_64:
            text = self.export(ExportFormat.json)
            return base64.b64encode(text.encode("utf-8")).decode("ascii")
        raise FormatNotImplementedError(
            f"Unrecognised export format specified: {export_format.name} (not implemented)"
        )

    # ------------------------------------------------------------------
    # Import
    # ------------------------------------------------------------------

    def _rolls_from_mapping(self, data: Mapping[str, Any]) -> list[DiceRoll]:
        entries = data.get("log")
        if entries is None:
            return []
        if not isinstance(entries, _SEQUENCE_TYPES):
            raise InvalidLogError(f"Roll log must be a sequence, got {type(entries).__name__}")
        return [DiceRoll.from_data(entry) for entry in entries]

    def _import_json(self, data: Any) -> Any:
        if not utils.is_json(data):
            return _NOT_HANDLED
        return self._decode(json.loads(data))

    def _import_base64(self, data: Any) -> Any:
        if not utils.is_base64(data):
            return _NOT_HANDLED
        return self._decode(base64.b64decode(data).decode("utf-8", errors="replace"))

    def _import_mapping(self, data: Any) -> Any:
        if not isinstance(data, Mapping):
            return _NOT_HANDLED
        return self._rolls_from_mapping(data)

    def _import_list(self, data: Any) -> Any:
        if not isinstance(data, _SEQUENCE_TYPES):
            return _NOT_HANDLED
        # A bare list is treated as the log itself
        return self._rolls_from_mapping({"log": data})

    def _decode(self, data: Any) -> list[DiceRoll]:
        """Run data through each import step until one recognises it."""
        for step in self._import_steps:
            rolls = step(data)
            if rolls is not _NOT_HANDLED:
                return rolls
        raise UnrecognisedFormatError(f"Unrecognised import format for data: {data!r}")

    def import_(self, data: Any) -> list[DiceRoll]:
        """Append previously exported rolls to the history.

        Args:
            data: JSON text, base64 encoded JSON text, a mapping with a ``log``
                list, or a bare list of serialised rolls.

        Returns:
            The updated roll history.

        Raises:
            NoImportDataError: If data is None, False, 0 or an empty string.
            InvalidLogError: If the data's ``log`` is not a list.
            UnrecognisedFormatError: If data is in no recognised format.
            DiceError: If an entry can't be rebuilt as a roll. Nothing is
                appended in that case.
        """
        if not data and not isinstance(data, (Mapping, *_SEQUENCE_TYPES)):
            raise NoImportDataError("No data to import")

        rolls = self._decode(data)
        self._log.extend(rolls)
        logger.debug("Imported %d rolls (log now has %d)", len(rolls), len(self._log))
        return self.log

    @classmethod
    def from_data(cls, data: Any) -> DiceRoller:
        """Create a new roller holding the rolls imported from data."""
        roller = cls()
        roller.import_(data)
        return roller
