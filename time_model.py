# -*- coding: utf-8 -*-
########################
# time_model.py
########################
# Purpose:
# - Fixed precision score time.
# - Timestamp is the single representation of a time mark; Duration is a validated [start, end) window.
#
# Design notes:
# - No Qt usage. Keep this module pure and deterministic.
# - Resolution is one millisecond. Float seconds are rounded to the nearest millisecond on the way in.
# - Timestamps are never negative.
#
########################
# Interfaces:
# Public constants:
# - RESOLUTION_SECONDS: float
#
# Public dataclasses:
# - Timestamp(milliseconds: int)
#   - from_seconds(seconds: float) -> Timestamp
#   - parse(text: str) -> Timestamp          # "m:ss.fff" or "ss.fff"
#   - as_seconds() -> float
#   - plus_seconds(seconds: float) -> Timestamp
# - Duration(start: Timestamp, end: Timestamp)
#   - between_seconds(start_seconds: float, end_seconds: float) -> Duration
#   - start_seconds / end_seconds / length_seconds -> float
#   - contains(seconds: float) -> bool
#
# Inputs:
# - Timing mark text from score_lexer.py, float seconds from the game clock.
#
# Outputs:
# - Ordered, hashable time values used by score_parser.py, scoremap.py and game_activity.py.
#
########################

from __future__ import annotations

from dataclasses import dataclass
import re

from score_errors import DurationInvalidError, MalformedTimestampError

RESOLUTION_SECONDS = 0.001

_TIMESTAMP_PATTERN = re.compile(r"^(?:(\d+):)?(\d+(?:\.\d+)?)$")


@dataclass(frozen=True, order=True)
class Timestamp:
    milliseconds: int = 0

    def __post_init__(self) -> None:
        milliseconds = int(self.milliseconds)
        if milliseconds != self.milliseconds:
            raise ValueError(f"Timestamp must be a whole number of milliseconds, got {self.milliseconds!r}")
        if milliseconds < 0:
            raise ValueError(f"Timestamp must be non-negative, got {self.milliseconds!r} ms")
        object.__setattr__(self, "milliseconds", milliseconds)

    @classmethod
    def from_seconds(cls, seconds: float) -> "Timestamp":
        value = float(seconds)
        if value < 0.0:
            raise ValueError(f"Timestamp must be non-negative, got {value!r} s")
        return cls(milliseconds=int(round(value / RESOLUTION_SECONDS)))

    @classmethod
    def parse(cls, text: str) -> "Timestamp":
        """Parse "m:ss.fff" (seconds below 60) or plain "ss.fff"."""
        raw_text = str(text or "").strip()
        match = _TIMESTAMP_PATTERN.match(raw_text)
        if match is None:
            raise MalformedTimestampError(f"Unparsable timestamp: {raw_text!r}")

        minutes_text, seconds_text = match.group(1), match.group(2)
        seconds_value = float(seconds_text)
        if minutes_text is not None:
            if seconds_value >= 60.0:
                raise MalformedTimestampError(f"Seconds must be below 60 in minute form: {raw_text!r}")
            seconds_value += 60.0 * int(minutes_text)
        return cls.from_seconds(seconds_value)

    def as_seconds(self) -> float:
        return float(self.milliseconds) * RESOLUTION_SECONDS

    def plus_seconds(self, seconds: float) -> "Timestamp":
        return Timestamp.from_seconds(self.as_seconds() + float(seconds))

    def __str__(self) -> str:
        minutes, remainder_ms = divmod(int(self.milliseconds), 60_000)
        seconds, millis = divmod(remainder_ms, 1000)
        return f"{minutes}:{seconds:02d}.{millis:03d}"


@dataclass(frozen=True)
class Duration:
    start: Timestamp
    end: Timestamp

    def __post_init__(self) -> None:
        if not self.start < self.end:
            raise DurationInvalidError(f"Duration start must be before end: [{self.start}, {self.end}]")

    @classmethod
    def between_seconds(cls, start_seconds: float, end_seconds: float) -> "Duration":
        return cls(start=Timestamp.from_seconds(start_seconds), end=Timestamp.from_seconds(end_seconds))

    @property
    def start_seconds(self) -> float:
        return self.start.as_seconds()

    @property
    def end_seconds(self) -> float:
        return self.end.as_seconds()

    @property
    def length_seconds(self) -> float:
        return self.end_seconds - self.start_seconds

    def contains(self, seconds: float) -> bool:
        return self.start_seconds <= float(seconds) < self.end_seconds


def _run_unit_tests() -> None:
    stamp = Timestamp.parse("1:02.5")
    assert stamp.milliseconds == 62_500
    assert abs(stamp.as_seconds() - 62.5) < 1e-9
    assert str(stamp) == "1:02.500"
    assert Timestamp.parse("3") == Timestamp.from_seconds(3.0)

    try:
        Timestamp.parse("1:75")
    except MalformedTimestampError:
        pass
    else:
        raise AssertionError("Expected MalformedTimestampError for 1:75")

    duration = Duration.between_seconds(0.0, 3.0)
    assert duration.contains(0.0)
    assert not duration.contains(3.0)

    try:
        Duration.between_seconds(2.0, 2.0)
    except DurationInvalidError:
        pass
    else:
        raise AssertionError("Expected DurationInvalidError for empty duration")


if __name__ == "__main__":
    _run_unit_tests()
    print("time_model.py: ok")
