# -*- coding: utf-8 -*-
########################
# sentence.py
########################
# Purpose:
# - One typable lyric line: native text, its reading, and the ordered PhoneticUnit list built from the reading.
# - Exposes "already typed" / "still to type" splits of the kana and romaji views.
#
# Design notes:
# - No Qt usage. Pure gameplay logic.
# - The kana view and the romaji view advance unit by unit, so they are always index synchronized.
# - The cursor moves past a unit only once that unit is complete.
# - A unit that is complete by a shorter style (ん as "n") is settled only when the next unit takes the keystroke.
# - A sokuon finished with a doubled consonant narrows the next unit to spellings starting with that consonant.
#
########################
# Interfaces:
# Public dataclasses:
# - TypingStr(inputted: str, will_input: str)
#
# Public classes:
# - class Sentence
#   - __init__(origin: str, reading: str)
#   - origin -> str
#   - reading -> str
#   - units -> tuple[PhoneticUnit, ...]
#   - rebuilt() -> Sentence
#   - current_unit() -> Optional[PhoneticUnit]
#   - type_char(character: str) -> bool
#   - is_completed() -> bool
#   - kana() -> TypingStr
#   - roman() -> TypingStr
#
# Inputs:
# - (origin, reading) pairs from score_parser.py, single characters from game_activity.py.
#
# Outputs:
# - Typing state for the presentation layer and completion state for the game engine.
#
########################

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Tuple

import romaji_table
from phonetic_unit import PhoneticUnit


@dataclass(frozen=True)
class TypingStr:
    inputted: str
    will_input: str


class Sentence:
    def __init__(self, origin: str, reading: str) -> None:
        self._origin = str(origin)
        self._reading = str(reading)
        clusters = romaji_table.split_reading(self._reading)
        if not clusters:
            raise romaji_table.UntypableReadingError("Reading has nothing to type")
        self._units: List[PhoneticUnit] = [PhoneticUnit(cluster.kana, cluster.styles) for cluster in clusters]
        self._cursor = 0

    def __repr__(self) -> str:
        roman = self.roman()
        return f"Sentence({self._origin!r}, {roman.inputted!r}|{roman.will_input!r})"

    @property
    def origin(self) -> str:
        return self._origin

    @property
    def reading(self) -> str:
        return self._reading

    @property
    def units(self) -> Tuple[PhoneticUnit, ...]:
        return tuple(self._units)

    def rebuilt(self) -> "Sentence":
        """A fresh copy with no typing progress."""
        return Sentence(self._origin, self._reading)

    def current_unit(self) -> Optional[PhoneticUnit]:
        if self._cursor < len(self._units):
            return self._units[self._cursor]
        return None

    def _next_unit(self) -> Optional[PhoneticUnit]:
        if self._cursor + 1 < len(self._units):
            return self._units[self._cursor + 1]
        return None

    def is_completed(self) -> bool:
        return self._cursor >= len(self._units)

    def _advance_past_completed(self) -> None:
        while self._cursor < len(self._units) and self._units[self._cursor].is_complete():
            finished = self._units[self._cursor]
            self._cursor += 1
            following = self.current_unit()
            if following is None:
                break
            typed = finished.typed()
            if finished.kana() == romaji_table.SOKUON and len(typed) == 1:
                following.narrow_to(typed)

    def type_char(self, character: str) -> bool:
        unit = self.current_unit()
        if unit is None:
            return False

        if unit.accept(character):
            self._advance_past_completed()
            return True

        following = self._next_unit()
        if following is not None and unit.can_settle() and following.would_accept(character):
            unit.settle()
            self._advance_past_completed()
            following.accept(character)
            self._advance_past_completed()
            return True

        return False

    def kana(self) -> TypingStr:
        inputted = "".join(unit.kana() for unit in self._units[:self._cursor])
        will_input = "".join(unit.kana() for unit in self._units[self._cursor:])
        return TypingStr(inputted=inputted, will_input=will_input)

    def roman(self) -> TypingStr:
        inputted_parts: List[str] = [unit.typed() for unit in self._units[:self._cursor]]
        will_input_parts: List[str] = []
        current = self.current_unit()
        if current is not None:
            inputted_parts.append(current.typed())
            will_input_parts.append(current.remaining_style())
            will_input_parts.extend(unit.displayed_style() for unit in self._units[self._cursor + 1:])
        return TypingStr(inputted="".join(inputted_parts), will_input="".join(will_input_parts))


def _run_unit_tests() -> None:
    sentence = Sentence("本当", "ほんとう")
    assert sentence.roman() == TypingStr(inputted="", will_input="honntou")
    for character in "hontou":
        assert sentence.type_char(character), character
    assert sentence.is_completed()
    assert sentence.kana() == TypingStr(inputted="ほんとう", will_input="")

    sentence = Sentence("待った", "まった")
    for character in "matta":
        assert sentence.type_char(character), character
    assert sentence.is_completed()

    sentence = Sentence("茶", "ちゃ")
    assert not sentence.type_char("x")
    assert sentence.roman() == TypingStr(inputted="", will_input="cha")


if __name__ == "__main__":
    _run_unit_tests()
    print("sentence.py: ok")
