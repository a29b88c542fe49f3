# -*- coding: utf-8 -*-
########################
# gameplay_models.py
########################
# Purpose:
# - Core gameplay data models for the runtime typing pipeline.
# - Defines the events GameActivity returns per tick and the score snapshot.
#
# Design notes:
# - Keep these models stable. Prefer extending with new optional fields rather than breaking changes.
# - No Qt usage. These are plain dataclasses.
# - Events are returned as an ordered list per tick. There are no callbacks or observers.
#
########################
# Interfaces:
# Public enums:
# - class TypeResult(enum.Enum): CORRECT | MISSED | VACANT
# - class ActivityState(enum.Enum): IDLE | IN_SECTION | ENDED
#
# Public dataclasses (all events carry time_seconds):
# - GameEvent(time_seconds: float)
# - PlayBgm(bgm: str)
# - UpdateSentence(sentence: Optional[Sentence], caption: Optional[str])
# - Typed(character: str, result: TypeResult)
# - MissedSentence(sentence: Sentence)
# - CompletedSentence(sentence: Sentence)
# - DidPerfectSection(section: Section)
# - EndOfScore()
# - GameScore(score_point: int, correct_count: int, mistyped_count: int, accuracy: float, achievement_rate: float)
#
# Inputs/Outputs:
# - Produced by GameActivity.advance(), consumed by the presentation layer.
#
########################

from __future__ import annotations

from dataclasses import dataclass
import enum
from typing import Optional

from scoremap_models import Section
from sentence import Sentence


class TypeResult(enum.Enum):
    CORRECT = "correct"
    MISSED = "missed"
    VACANT = "vacant"


class ActivityState(enum.Enum):
    IDLE = "idle"
    IN_SECTION = "in_section"
    ENDED = "ended"


@dataclass(frozen=True)
class GameEvent:
    time_seconds: float


@dataclass(frozen=True)
class PlayBgm(GameEvent):
    bgm: str


@dataclass(frozen=True)
class UpdateSentence(GameEvent):
    sentence: Optional[Sentence]
    caption: Optional[str] = None


@dataclass(frozen=True)
class Typed(GameEvent):
    character: str
    result: TypeResult


@dataclass(frozen=True)
class MissedSentence(GameEvent):
    sentence: Sentence


@dataclass(frozen=True)
class CompletedSentence(GameEvent):
    sentence: Sentence


@dataclass(frozen=True)
class DidPerfectSection(GameEvent):
    section: Section


@dataclass(frozen=True)
class EndOfScore(GameEvent):
    pass


@dataclass(frozen=True)
class GameScore:
    score_point: int
    correct_count: int
    mistyped_count: int
    accuracy: float
    achievement_rate: float
