# -*- coding: utf-8 -*-
########################
# game_activity.py
########################
# Purpose:
# - Typing judgement and scoring engine.
# - Owns the section schedule of one Scoremap, the playback clock and the live sentence state.
# - Consumes (typed characters, new time) ticks and returns the ordered list of events they caused.
#
# Design notes:
# - No Qt usage. Pure gameplay logic with no I/O and no blocking.
# - One tick = judge the typed characters at the current clock, then move the clock forward.
# - The clock never goes backwards; an earlier time is clamped to the current one.
# - Every keystroke outside the ended state yields exactly one Typed event (CORRECT, MISSED or VACANT).
# - Points only ever increase. A mistype costs accuracy, never points.
# - Scheduler owns the section list; GameActivity marks section state via the scheduler boundary.
#
########################
# Interfaces:
# Public dataclasses:
# - ScoreState(score_point: int, correct_count: int, mistyped_count: int)
#   - accuracy() -> float
#
# Public classes:
# - class GameActivity
#   - __init__(scoremap: Scoremap, config: Optional[GameConfig] = None)
#   - scoremap() -> Scoremap
#   - state() -> ActivityState
#   - current_time() -> float
#   - current_sentence() -> Optional[Sentence]
#   - current_caption() -> Optional[str]
#   - section_remaining_ratio() -> float
#   - music_info() -> MusicInfo
#   - score() -> GameScore
#   - typing_speed() -> float
#   - is_finished() -> bool
#   - key_press(typed_characters: Iterable[str]) -> list[GameEvent]
#   - set_time(new_time: float) -> list[GameEvent]
#   - advance(typed_characters: Iterable[str], new_time: float) -> list[GameEvent]
#   - reset() -> None
#
# Inputs:
# - Keystroke characters and clock values from the presentation layer (seconds).
#
# Outputs:
# - GameEvent lists for feedback and GameScore snapshots for stats.
#
########################

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
import logging
from typing import Deque, Iterable, List, Optional

import gameplay_models
import section_scheduler
from config import GameConfig
from scoremap import Scoremap
from scoremap_models import MusicInfo
from sentence import Sentence

logger = logging.getLogger(__name__)


@dataclass
class ScoreState:
    score_point: int = 0
    correct_count: int = 0
    mistyped_count: int = 0

    def accuracy(self) -> float:
        judged = self.correct_count + self.mistyped_count
        if judged <= 0:
            return 1.0
        return min(1.0, max(0.0, float(self.correct_count) / float(judged)))


class GameActivity:
    def __init__(self, scoremap: Scoremap, config: Optional[GameConfig] = None) -> None:
        self._scoremap = scoremap
        self._config = config if config is not None else GameConfig()
        self._scheduler = section_scheduler.SectionScheduler(scoremap)
        self._score_state = ScoreState()
        self._clock_seconds = 0.0
        self._started = False
        self._ended = False
        self._active: Optional[section_scheduler.ScheduledSection] = None
        self._correct_times: Deque[float] = deque()

    def scoremap(self) -> Scoremap:
        return self._scoremap

    def reset(self) -> None:
        self._scheduler.reset()
        self._score_state = ScoreState()
        self._clock_seconds = 0.0
        self._started = False
        self._ended = False
        self._active = None
        self._correct_times.clear()

    def state(self) -> gameplay_models.ActivityState:
        if self._ended:
            return gameplay_models.ActivityState.ENDED
        if self._active is not None:
            return gameplay_models.ActivityState.IN_SECTION
        return gameplay_models.ActivityState.IDLE

    def current_time(self) -> float:
        return float(self._clock_seconds)

    def current_sentence(self) -> Optional[Sentence]:
        if self._active is None:
            return None
        return self._active.sentence

    def current_caption(self) -> Optional[str]:
        if self._active is None:
            return None
        return self._active.caption()

    def section_remaining_ratio(self) -> float:
        """Fraction of the active section's window that has elapsed, 0.0 outside sections."""
        if self._active is None:
            return 0.0
        return self._active.elapsed_ratio(self._clock_seconds)

    def music_info(self) -> MusicInfo:
        return self._scoremap.music_info()

    def score(self) -> gameplay_models.GameScore:
        finished = self._scheduler.finished_sections()
        achieved = [item for item in finished if item.is_achieved()]
        achievement_rate = float(len(achieved)) / float(len(finished)) if finished else 0.0
        return gameplay_models.GameScore(
            score_point=int(self._score_state.score_point),
            correct_count=int(self._score_state.correct_count),
            mistyped_count=int(self._score_state.mistyped_count),
            accuracy=self._score_state.accuracy(),
            achievement_rate=achievement_rate,
        )

    def typing_speed(self) -> float:
        """Correct keystrokes per second over the configured sliding window."""
        window_seconds = float(self._config.typing_speed_window_seconds)
        self._expire_correct_times()
        return float(len(self._correct_times)) / window_seconds

    def is_finished(self) -> bool:
        if not self._ended:
            return False
        return self._clock_seconds >= self._scheduler.end_seconds() + float(self._config.end_grace_seconds)

    def advance(self, typed_characters: Iterable[str], new_time: float) -> List[gameplay_models.GameEvent]:
        events = self.key_press(typed_characters)
        events.extend(self.set_time(new_time))
        return events

    def key_press(self, typed_characters: Iterable[str]) -> List[gameplay_models.GameEvent]:
        events = self._start_if_needed()
        for character in "".join(typed_characters):
            if self._ended:
                break
            events.extend(self._judge_character(character.lower()))
        return events

    def set_time(self, new_time: float) -> List[gameplay_models.GameEvent]:
        events = self._start_if_needed()
        target = float(new_time)
        if target < self._clock_seconds:
            logger.debug("clamping clock rewind from %.3f to %.3f", self._clock_seconds, target)
            target = self._clock_seconds
        self._clock_seconds = target
        events.extend(self._sync_sections())
        self._expire_correct_times()
        return events

    def _start_if_needed(self) -> List[gameplay_models.GameEvent]:
        if self._started:
            return []
        self._started = True
        events: List[gameplay_models.GameEvent] = []
        bgm = self.music_info().bgm
        if bgm:
            events.append(gameplay_models.PlayBgm(time_seconds=self._clock_seconds, bgm=bgm))
        events.extend(self._sync_sections())
        return events

    def _sync_sections(self) -> List[gameplay_models.GameEvent]:
        events: List[gameplay_models.GameEvent] = []
        now = self._clock_seconds
        while True:
            if self._active is not None:
                if now < self._active.end_seconds:
                    break
                events.extend(self._leave_section(self._active))
                self._active = None
                continue

            entered = self._scheduler.enter_next_if_started(song_time_seconds=now)
            if entered is None:
                break
            self._active = entered
            events.append(
                gameplay_models.UpdateSentence(
                    time_seconds=now,
                    sentence=entered.sentence,
                    caption=entered.caption(),
                )
            )

        if not self._ended and self._active is None and not self._scheduler.has_pending():
            self._ended = True
            events.append(gameplay_models.EndOfScore(time_seconds=now))
        return events

    def _leave_section(self, scheduled: section_scheduler.ScheduledSection) -> List[gameplay_models.GameEvent]:
        self._scheduler.mark_finished(scheduled)
        if scheduled.sentence is not None and not scheduled.is_completed:
            return [gameplay_models.MissedSentence(time_seconds=self._clock_seconds, sentence=scheduled.sentence)]
        return []

    def _judge_character(self, character: str) -> List[gameplay_models.GameEvent]:
        now = self._clock_seconds
        active = self._active
        sentence = active.sentence if active is not None else None
        if active is None or sentence is None or sentence.is_completed():
            return [gameplay_models.Typed(time_seconds=now, character=character, result=gameplay_models.TypeResult.VACANT)]

        if not sentence.type_char(character):
            self._score_state.mistyped_count += 1
            active.mistyped_count += 1
            return [gameplay_models.Typed(time_seconds=now, character=character, result=gameplay_models.TypeResult.MISSED)]

        self._score_state.correct_count += 1
        self._score_state.score_point += int(self._config.correct_point)
        self._correct_times.append(now)
        events: List[gameplay_models.GameEvent] = [
            gameplay_models.Typed(time_seconds=now, character=character, result=gameplay_models.TypeResult.CORRECT)
        ]

        if sentence.is_completed():
            active.is_completed = True
            self._score_state.score_point += int(self._config.completed_sentence_point)
            events.append(gameplay_models.CompletedSentence(time_seconds=now, sentence=sentence))
            if active.mistyped_count == 0:
                self._score_state.score_point += int(self._config.perfect_section_point)
                events.append(gameplay_models.DidPerfectSection(time_seconds=now, section=active.section))
        return events

    def _expire_correct_times(self) -> None:
        expire_limit = self._clock_seconds - float(self._config.typing_speed_window_seconds)
        while self._correct_times and self._correct_times[0] < expire_limit:
            self._correct_times.popleft()


def _run_unit_tests() -> None:
    import scoremap as scoremap_module

    score_text = "bgm = song.wav\n[start]\n*0:00\n茶\n:ちゃ\n*0:03\n[end]"
    activity = GameActivity(scoremap_module.parse_scoremap(score_text))

    events = activity.advance("cha", 1.0)
    kinds = [type(event).__name__ for event in events]
    assert kinds == ["PlayBgm", "UpdateSentence", "Typed", "Typed", "Typed", "CompletedSentence", "DidPerfectSection"], kinds
    assert activity.score().accuracy == 1.0

    stray = activity.advance("x", 2.0)
    assert isinstance(stray[0], gameplay_models.Typed)
    assert stray[0].result is gameplay_models.TypeResult.VACANT

    ending = activity.advance("", 3.5)
    assert [type(event).__name__ for event in ending] == ["EndOfScore"]
    assert activity.score().achievement_rate == 1.0
    assert activity.advance("", 10.0) == []
    assert activity.is_finished()


if __name__ == "__main__":
    _run_unit_tests()
    print("game_activity.py: ok")
