import logging

import pytest

from scoremap import parse_scoremap


ONE_SENTENCE_SCORE = """\
title = Tea Song
[start]
*0:00
茶
:ちゃ
*0:03
[end]
"""

TWO_SENTENCE_SCORE = """\
title = Two Lines
song_author = Someone
score_author = Somebody
bgm = song.ogg
[start]
*0:01
>> intro
*0:02
本当
:ほんとう
*0:05
待った
:まった
*0:08
[end]
"""


@pytest.fixture
def one_sentence_text() -> str:
    return ONE_SENTENCE_SCORE


@pytest.fixture
def two_sentence_text() -> str:
    return TWO_SENTENCE_SCORE


@pytest.fixture
def one_sentence_scoremap():
    return parse_scoremap(ONE_SENTENCE_SCORE)


@pytest.fixture
def two_sentence_scoremap():
    return parse_scoremap(TWO_SENTENCE_SCORE)


@pytest.fixture
def debug_logs(caplog):
    """Capture library logs down to debug level."""
    caplog.set_level(logging.DEBUG)
    return caplog
