# -*- coding: utf-8 -*-
########################
# phonetic_unit.py
########################
# Purpose:
# - One typing cluster of a reading together with every spelling that is valid for it.
# - Resolves single keystrokes against the ambiguous spellings, letter by letter.
#
# Design notes:
# - No Qt usage. Pure gameplay logic.
# - accept() is speculative: the keystroke is committed only when some style still matches.
# - A failed accept() leaves the typed buffer untouched and empties the candidate set for that moment.
#   The next accept() is evaluated against the full style set again, so the unit never needs a restart.
# - narrow_to() discards styles permanently. Candidates are always a subset of styles.
#
########################
# Interfaces:
# Public classes:
# - class PhoneticUnit
#   - __init__(kana: str, styles: Sequence[str])
#   - kana() -> str
#   - styles() -> tuple[str, ...]
#   - typed() -> str
#   - candidate_styles() -> tuple[str, ...]
#   - displayed_style() -> str
#   - remaining_style() -> str
#   - accept(character: str) -> bool
#   - would_accept(character: str) -> bool
#   - is_complete() -> bool
#   - narrow_to(character: str) -> None
#   - can_settle() -> bool
#   - settle() -> bool
#
# Inputs:
# - Styles from romaji_table.py, single characters from the game engine.
#
# Outputs:
# - Typed / still-to-type splits consumed by sentence.py.
#
########################

from __future__ import annotations

from typing import List, Sequence, Tuple


class PhoneticUnit:
    def __init__(self, kana: str, styles: Sequence[str]) -> None:
        style_list = [str(style) for style in styles if str(style)]
        if not style_list:
            raise ValueError(f"PhoneticUnit needs at least one style: {kana!r}")
        self._kana = str(kana)
        self._styles: List[str] = style_list
        self._candidates: List[str] = list(style_list)
        self._typed = ""

    def __repr__(self) -> str:
        return f"PhoneticUnit({self._kana!r}, {self.displayed_style()!r}, typed={self._typed!r})"

    def kana(self) -> str:
        return self._kana

    def styles(self) -> Tuple[str, ...]:
        return tuple(self._styles)

    def typed(self) -> str:
        return self._typed

    def candidate_styles(self) -> Tuple[str, ...]:
        return tuple(self._candidates)

    def displayed_style(self) -> str:
        if self._candidates:
            return self._candidates[0]
        # Right after a mistype: keep showing a spelling that agrees with what was typed.
        for style in self._styles:
            if style.startswith(self._typed):
                return style
        return self._styles[0]

    def remaining_style(self) -> str:
        return self.displayed_style()[len(self._typed):]

    def _matching_styles(self, prefix: str) -> List[str]:
        return [style for style in self._styles if style.startswith(prefix)]

    def accept(self, character: str) -> bool:
        attempt = self._typed + str(character)
        matched = self._matching_styles(attempt)
        if not matched:
            self._candidates = []
            return False
        self._typed = attempt
        self._candidates = matched
        return True

    def would_accept(self, character: str) -> bool:
        return bool(self._matching_styles(self._typed + str(character)))

    def is_complete(self) -> bool:
        return len(self._typed) == len(self.displayed_style())

    def narrow_to(self, character: str) -> None:
        kept = [style for style in self._styles if style.startswith(str(character))]
        if not kept:
            return
        self._styles = kept
        self._candidates = [style for style in kept if style.startswith(self._typed)]

    def can_settle(self) -> bool:
        return bool(self._typed) and self._typed in self._styles

    def settle(self) -> bool:
        """Commit to the style equal to the typed buffer, e.g. a single "n" for ん."""
        if not self.can_settle():
            return False
        self._styles = [self._typed]
        self._candidates = [self._typed]
        return True


def _run_unit_tests() -> None:
    tea = PhoneticUnit("ちゃ", ["cha", "cya", "tya"])
    assert tea.displayed_style() == "cha"
    assert tea.accept("c")
    assert tea.displayed_style() == "cha"
    assert tea.accept("y")
    assert tea.displayed_style() == "cya"

    tea = PhoneticUnit("ちゃ", ["cha", "cya", "tya"])
    assert tea.accept("t")
    assert tea.displayed_style() == "tya"

    tea = PhoneticUnit("ちゃ", ["cha", "cya", "tya"])
    assert tea.accept("c")
    assert not tea.accept("x")
    assert tea.typed() == "c"
    assert tea.candidate_styles() == ()
    assert tea.accept("h")
    assert tea.accept("a")
    assert tea.is_complete()


if __name__ == "__main__":
    _run_unit_tests()
    print("phonetic_unit.py: ok")
