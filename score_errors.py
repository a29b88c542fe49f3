# -*- coding: utf-8 -*-
########################
# score_errors.py
########################
# Purpose:
# - Error taxonomy for loading and parsing score files.
#
# Design notes:
# - Every parse error is fatal to that load attempt. No partial Scoremap is ever returned.
# - Errors carry the originating line number when one is known, plus a fixed human readable reason.
#
########################
# Interfaces:
# Public exceptions:
# - class ScoremapError(Exception)
# - class ScoremapLoadError(ScoremapError)
# - class ScoremapParseError(ScoremapError)
#   - line_number: Optional[int]
#   - reason: str
#   - with_line_number(line_number: int) -> ScoremapParseError
# - class MalformedTimestampError(ScoremapParseError)
# - class TimingDefinitionError(ScoremapParseError)
# - class CommandError(ScoremapParseError)
# - class StatementDefinitionError(ScoremapParseError)
# - class PropertyDefinitionError(ScoremapParseError)
# - class DurationInvalidError(ScoremapParseError)
#
########################

from __future__ import annotations

from typing import Optional


class ScoremapError(Exception):
    """Base error for score loading and parsing."""


class ScoremapLoadError(ScoremapError):
    """Raised when the score file cannot be read or decoded."""


class ScoremapParseError(ScoremapError):
    """Raised when the score text violates the score grammar."""

    def __init__(self, reason: str, *, line_number: Optional[int] = None) -> None:
        self.reason = str(reason)
        self.line_number = int(line_number) if line_number is not None else None
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        if self.line_number is None:
            return self.reason
        return f"line {self.line_number}: {self.reason}"

    def with_line_number(self, line_number: int) -> "ScoremapParseError":
        return type(self)(self.reason, line_number=line_number)


class MalformedTimestampError(ScoremapParseError):
    """A timing mark could not be parsed as a timestamp."""


class TimingDefinitionError(ScoremapParseError):
    """A timing mark appeared where timing is not allowed."""


class CommandError(ScoremapParseError):
    """An unknown command, or a command used in the wrong block state."""


class StatementDefinitionError(ScoremapParseError):
    """A caption or reading appeared out of place."""


class PropertyDefinitionError(ScoremapParseError):
    """A property appeared inside a lyrics block, or was unsupported or invalid."""


class DurationInvalidError(ScoremapParseError):
    """A duration whose start is not strictly before its end."""
