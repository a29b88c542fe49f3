# -*- coding: utf-8 -*-
########################
# romaji_table.py
########################
# Purpose:
# - Kana to romaji spelling table.
# - Splits a reading into typing clusters, each with every accepted spelling ("style").
#
# Design notes:
# - No Qt usage. Pure data and pure functions.
# - The first style of every entry is the one shown to the player before input disambiguates it.
# - Readings are NFKC normalized and katakana is folded to hiragana before lookup.
# - Two clusters depend on their right neighbour:
#   - っ may be typed by doubling the next consonant.
#   - ん may be typed as a single "n" when the next cluster cannot start with a vowel, "y" or "n".
#
########################
# Interfaces:
# Public exceptions:
# - class UntypableReadingError(ValueError)
#
# Public dataclasses:
# - KanaCluster(kana: str, styles: tuple[str, ...])
#
# Public functions:
# - normalize_reading(reading: str) -> str
# - styles_for(kana: str) -> tuple[str, ...]
# - split_reading(reading: str) -> list[KanaCluster]
#
# Inputs:
# - Reading text from the score file.
#
# Outputs:
# - Clusters consumed by sentence.py to build PhoneticUnit objects.
#
########################

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

import unicodedata


class UntypableReadingError(ValueError):
    """Raised when a reading contains a character with no romaji spelling."""


@dataclass(frozen=True)
class KanaCluster:
    kana: str
    styles: Tuple[str, ...]


SOKUON = "っ"
HATSUON = "ん"

_SMALL_KANA = set("ぁぃぅぇぉゃゅょゎ")

_SINGLE_KANA: Dict[str, Tuple[str, ...]] = {
    "あ": ("a",), "い": ("i", "yi"), "う": ("u", "wu", "whu"), "え": ("e",), "お": ("o",),
    "か": ("ka", "ca"), "き": ("ki",), "く": ("ku", "cu", "qu"), "け": ("ke",), "こ": ("ko", "co"),
    "さ": ("sa",), "し": ("shi", "si", "ci"), "す": ("su",), "せ": ("se", "ce"), "そ": ("so",),
    "た": ("ta",), "ち": ("chi", "ti"), "つ": ("tsu", "tu"), "て": ("te",), "と": ("to",),
    "な": ("na",), "に": ("ni",), "ぬ": ("nu",), "ね": ("ne",), "の": ("no",),
    "は": ("ha",), "ひ": ("hi",), "ふ": ("fu", "hu"), "へ": ("he",), "ほ": ("ho",),
    "ま": ("ma",), "み": ("mi",), "む": ("mu",), "め": ("me",), "も": ("mo",),
    "や": ("ya",), "ゆ": ("yu",), "よ": ("yo",),
    "ら": ("ra",), "り": ("ri",), "る": ("ru",), "れ": ("re",), "ろ": ("ro",),
    "わ": ("wa",), "ゐ": ("wi",), "ゑ": ("we",), "を": ("wo",),
    "が": ("ga",), "ぎ": ("gi",), "ぐ": ("gu",), "げ": ("ge",), "ご": ("go",),
    "ざ": ("za",), "じ": ("ji", "zi"), "ず": ("zu",), "ぜ": ("ze",), "ぞ": ("zo",),
    "だ": ("da",), "ぢ": ("di",), "づ": ("du",), "で": ("de",), "ど": ("do",),
    "ば": ("ba",), "び": ("bi",), "ぶ": ("bu",), "べ": ("be",), "ぼ": ("bo",),
    "ぱ": ("pa",), "ぴ": ("pi",), "ぷ": ("pu",), "ぺ": ("pe",), "ぽ": ("po",),
    "ゔ": ("vu",),
    "ぁ": ("la", "xa"), "ぃ": ("li", "xi"), "ぅ": ("lu", "xu"), "ぇ": ("le", "xe"), "ぉ": ("lo", "xo"),
    "ゃ": ("lya", "xya"), "ゅ": ("lyu", "xyu"), "ょ": ("lyo", "xyo"), "ゎ": ("lwa", "xwa"),
    SOKUON: ("ltu", "xtu", "ltsu", "xtsu"),
    HATSUON: ("nn", "xn", "n'"),
    "ー": ("-",),
    "、": (",",),
    "。": (".",),
    "・": ("/",),
    "「": ("[",),
    "」": ("]",),
    "〜": ("~",),
}

# Rows whose i-kana combines with small ya/yu/yo: kana -> consonant spellings, preferred first.
_YOON_ROWS: Dict[str, Tuple[str, ...]] = {
    "き": ("ky",), "ぎ": ("gy",), "に": ("ny",), "ひ": ("hy",), "び": ("by",),
    "ぴ": ("py",), "み": ("my",), "り": ("ry",), "ぢ": ("dy",),
}

_EXPLICIT_DIGRAPHS: Dict[str, Tuple[str, ...]] = {
    "しゃ": ("sha", "sya"), "しぃ": ("syi",), "しゅ": ("shu", "syu"), "しぇ": ("she", "sye"), "しょ": ("sho", "syo"),
    "じゃ": ("ja", "zya", "jya"), "じぃ": ("zyi", "jyi"), "じゅ": ("ju", "zyu", "jyu"),
    "じぇ": ("je", "zye", "jye"), "じょ": ("jo", "zyo", "jyo"),
    "ちゃ": ("cha", "cya", "tya"), "ちぃ": ("cyi", "tyi"), "ちゅ": ("chu", "cyu", "tyu"),
    "ちぇ": ("che", "cye", "tye"), "ちょ": ("cho", "cyo", "tyo"),
    "てぃ": ("thi",), "てゅ": ("thu",), "でぃ": ("dhi",), "でゅ": ("dhu",),
    "とぅ": ("twu",), "どぅ": ("dwu",),
    "ふぁ": ("fa", "fwa"), "ふぃ": ("fi", "fyi"), "ふぇ": ("fe", "fye"), "ふぉ": ("fo", "fwo"), "ふゅ": ("fyu",),
    "うぃ": ("wi", "whi"), "うぇ": ("we", "whe"), "うぉ": ("who",),
    "ゔぁ": ("va",), "ゔぃ": ("vi",), "ゔぇ": ("ve",), "ゔぉ": ("vo",),
    "くぁ": ("qa", "kwa"), "ぐぁ": ("gwa",),
    "つぁ": ("tsa",), "つぃ": ("tsi",), "つぇ": ("tse",), "つぉ": ("tso",),
    "いぇ": ("ye",),
}


def _build_digraph_table() -> Dict[str, Tuple[str, ...]]:
    table: Dict[str, Tuple[str, ...]] = {}
    for kana, consonants in _YOON_ROWS.items():
        for small_kana, vowel in (("ゃ", "a"), ("ぃ", "i"), ("ゅ", "u"), ("ぇ", "e"), ("ょ", "o")):
            table[kana + small_kana] = tuple(consonant + vowel for consonant in consonants)
    table.update(_EXPLICIT_DIGRAPHS)

    # Every digraph may also be typed as its two halves, e.g. "kilya" for きゃ.
    for digraph, styles in list(table.items()):
        head_styles = _SINGLE_KANA[digraph[0]]
        tail_styles = _SINGLE_KANA[digraph[1]]
        split_styles = [head + tail for head in head_styles for tail in tail_styles]
        table[digraph] = tuple(styles) + tuple(style for style in split_styles if style not in styles)
    return table


_DIGRAPHS = _build_digraph_table()

_VOWEL_LIKE_HEADS = set("aiueoyn")
_UNDOUBLABLE_HEADS = set("aiueonlx")


def normalize_reading(reading: str) -> str:
    """NFKC normalize, fold katakana to hiragana and drop whitespace."""
    normalized = unicodedata.normalize("NFKC", str(reading or ""))
    folded_chars: List[str] = []
    for char in normalized:
        if char.isspace():
            continue
        code_point = ord(char)
        if 0x30A1 <= code_point <= 0x30F6:
            folded_chars.append(chr(code_point - 0x60))
        else:
            folded_chars.append(char)
    return "".join(folded_chars)


def styles_for(kana: str) -> Tuple[str, ...]:
    if kana in _DIGRAPHS:
        return _DIGRAPHS[kana]
    if kana in _SINGLE_KANA:
        return _SINGLE_KANA[kana]
    if len(kana) == 1 and kana.isascii() and kana.isprintable():
        return (kana.lower(),)
    raise UntypableReadingError(f"No romaji spelling for {kana!r}")


def _sokuon_styles(next_cluster: Optional[KanaCluster]) -> Tuple[str, ...]:
    doubled: List[str] = []
    if next_cluster is not None:
        for style in next_cluster.styles:
            head = style[0]
            if head.isalpha() and head not in _UNDOUBLABLE_HEADS and head not in doubled:
                doubled.append(head)
    return tuple(doubled) + _SINGLE_KANA[SOKUON]


def _hatsuon_styles(next_cluster: Optional[KanaCluster]) -> Tuple[str, ...]:
    base_styles = _SINGLE_KANA[HATSUON]
    if next_cluster is None:
        return base_styles
    if any(style[0] in _VOWEL_LIKE_HEADS for style in next_cluster.styles):
        return base_styles
    return base_styles + ("n",)


def split_reading(reading: str) -> List[KanaCluster]:
    text = normalize_reading(reading)

    clusters: List[KanaCluster] = []
    index = 0
    while index < len(text):
        pair = text[index:index + 2]
        if len(pair) == 2 and pair[1] in _SMALL_KANA and pair in _DIGRAPHS:
            clusters.append(KanaCluster(kana=pair, styles=_DIGRAPHS[pair]))
            index += 2
            continue
        char = text[index]
        clusters.append(KanaCluster(kana=char, styles=styles_for(char)))
        index += 1

    # Context dependent spellings are resolved right to left so っん and んっ see final neighbours.
    for position in range(len(clusters) - 1, -1, -1):
        cluster = clusters[position]
        next_cluster = clusters[position + 1] if position + 1 < len(clusters) else None
        if cluster.kana == SOKUON:
            clusters[position] = KanaCluster(kana=cluster.kana, styles=_sokuon_styles(next_cluster))
        elif cluster.kana == HATSUON:
            clusters[position] = KanaCluster(kana=cluster.kana, styles=_hatsuon_styles(next_cluster))

    return clusters


def _kana_sequence(clusters: Sequence[KanaCluster]) -> List[str]:
    return [cluster.kana for cluster in clusters]


def _run_unit_tests() -> None:
    clusters = split_reading("ちゃんと")
    assert _kana_sequence(clusters) == ["ちゃ", "ん", "と"]
    assert clusters[0].styles[:3] == ("cha", "cya", "tya")
    assert "n" in clusters[1].styles

    clusters = split_reading("マッチ")
    assert _kana_sequence(clusters) == ["ま", "っ", "ち"]
    assert clusters[1].styles[:2] == ("c", "t")

    clusters = split_reading("ほんや")
    assert "n" not in clusters[1].styles

    try:
        split_reading("漢字")
    except UntypableReadingError:
        pass
    else:
        raise AssertionError("Expected UntypableReadingError for kanji in a reading")


if __name__ == "__main__":
    _run_unit_tests()
    print("romaji_table.py: ok")
