# -*- coding: utf-8 -*-
"""
クイズの進行（状態遷移）。

    AUTHENTICATING → SETUP → IN_PROGRESS ⇄ REVIEWING_ANSWER → FINISHED
                                  ↑                             │
                                  └──── 間違えた問題を復習 ─────┘

画面側はこのクラスのメソッドを呼ぶだけで、出題リストや解答ログを直接いじらない。
今のフェーズで受け付けないイベントは無視する（ログに残して None / False を返す）。
どのイベントも最初に poll() でタイマーの溜まった tick を処理してから評価する。
"""
from __future__ import annotations

import logging
import random
import time
from dataclasses import dataclass
from typing import Callable, Iterable, Mapping

from .clock import SessionClock
from .config import QuizConfig
from .errors import AuthenticationRejected, EmptyPool, IncompleteSetup, InvalidTransition
from .models import AnswerRecord, DifficultySelection, Phase, QuestionMode, WordItem
from .normalizer import AnswerScript, judge, normalize_id
from .pool import draw, draw_retry, filter_by_tier

logger = logging.getLogger(__name__)

_TRANSITIONS = {
    Phase.AUTHENTICATING: {Phase.SETUP},
    Phase.SETUP: {Phase.IN_PROGRESS, Phase.AUTHENTICATING},
    Phase.IN_PROGRESS: {Phase.REVIEWING_ANSWER, Phase.FINISHED},
    Phase.REVIEWING_ANSWER: {Phase.IN_PROGRESS, Phase.FINISHED},
    Phase.FINISHED: {Phase.IN_PROGRESS, Phase.AUTHENTICATING},
}


def new_session_id() -> str:
    return f"auto-{int(time.time() * 1000)}"


class QuizSession:
    """1回分の出題リストと解答ログ"""

    def __init__(
        self,
        mode: QuestionMode,
        selection: DifficultySelection,
        questions: Iterable[WordItem],
        session_id: str | None = None,
    ):
        self.mode = mode
        self.selection = selection
        self.questions: tuple[WordItem, ...] = tuple(questions)
        self.session_id = session_id or new_session_id()
        self.current_index = 0
        self._answers: list[AnswerRecord] = []

    @property
    def answer_log(self) -> tuple[AnswerRecord, ...]:
        return tuple(self._answers)

    @property
    def current_item(self) -> WordItem:
        return self.questions[self.current_index]

    @property
    def score(self) -> int:
        return sum(1 for r in self._answers if r.is_correct)

    @property
    def is_last_question(self) -> bool:
        return self.current_index + 1 >= len(self.questions)

    def wrong_records(self) -> list[AnswerRecord]:
        return [r for r in self._answers if not r.is_correct]

    def _append(self, record: AnswerRecord) -> None:
        # 1問につき1件、出題順にしか追加できない
        if record.question_index != len(self._answers) or record.question_index >= len(self.questions):
            raise InvalidTransition(f"answer for question {record.question_index} out of order")
        self._answers.append(record)


@dataclass(frozen=True)
class SessionResult:
    learner_name: str
    mode: QuestionMode
    selection: DifficultySelection
    questions: tuple[WordItem, ...]
    answers: tuple[AnswerRecord, ...]
    score: int
    duration_sec: int | None
    session_id: str
    timed_out: bool = False


class QuizEngine:
    def __init__(
        self,
        vocabulary: Iterable[WordItem],
        roster: Mapping[str, str | None],
        config: QuizConfig | None = None,
        rng: random.Random | None = None,
        time_source: Callable[[], float] = time.monotonic,
        on_finish: Callable[[SessionResult], None] | None = None,
    ):
        self.config = config or QuizConfig()
        self.vocabulary: tuple[WordItem, ...] = tuple(vocabulary)
        self.roster = dict(roster)
        self.on_finish = on_finish
        self._rng = rng or random.Random()

        self._phase = Phase.AUTHENTICATING
        self.learner_id: str | None = None
        self.learner_name = ""
        self.mode = QuestionMode.SOURCE_TO_TARGET
        self.selection = DifficultySelection.BEGINNER

        self.session: QuizSession | None = None
        self.pending_input = ""
        self.last_record: AnswerRecord | None = None
        self.correction_attempts = 0
        self.timed_out = False

        self.clock = SessionClock(
            total_sec=self.config.total_time_sec,
            per_question_sec=self.config.per_question_time_sec,
            session_enabled=self.config.session_timer_enabled,
            per_question_enabled=self.config.per_question_timer_enabled,
            on_session_expired=self._on_session_expired,
            on_question_expired=self._on_question_expired,
            time_source=time_source,
        )

    ############################
    # フェーズ
    ############################
    @property
    def phase(self) -> Phase:
        return self._phase

    def _move(self, target: Phase) -> None:
        if target not in _TRANSITIONS[self._phase]:
            raise InvalidTransition(f"{self._phase.name} -> {target.name}")
        logger.debug(f"Phase {self._phase.name} -> {target.name}")
        self._phase = target

    def _ignore(self, event: str) -> None:
        logger.debug(f"Ignored {event} in phase {self._phase.name}")

    def poll(self, now: float | None = None) -> int:
        """溜まった tick を処理する（画面の自動リフレッシュごとに呼ぶ）"""
        return self.clock.poll(now)

    ############################
    # ログイン / 設定
    ############################
    def set_name(self, name: str) -> None:
        if self._phase not in (Phase.AUTHENTICATING, Phase.SETUP):
            return self._ignore("set_name")
        self.learner_name = name or ""

    def authenticate(self, learner_id: str) -> str | None:
        """名簿にあれば SETUP へ。名簿の名前は、名前が未入力のときだけ入れる"""
        if self._phase is not Phase.AUTHENTICATING:
            self._ignore("authenticate")
            return None
        key = normalize_id(learner_id)
        if not key or key not in self.roster:
            logger.info(f"Authentication rejected for {key!r}")
            raise AuthenticationRejected(key)

        display_name = self.roster[key]
        if display_name and not self.learner_name.strip():
            self.learner_name = display_name
        self.learner_id = key
        self._move(Phase.SETUP)
        logger.info(f"Authenticated {key}")
        return display_name

    def choose_mode(self, mode: QuestionMode) -> None:
        if self._phase is not Phase.SETUP:
            return self._ignore("choose_mode")
        self.mode = mode

    def choose_difficulty(self, selection: DifficultySelection) -> None:
        if self._phase is not Phase.SETUP:
            return self._ignore("choose_difficulty")
        self.selection = selection

    def filtered_pool(self) -> list[WordItem]:
        return filter_by_tier(self.vocabulary, self.selection)

    def can_start(self) -> bool:
        return (
            self._phase is Phase.SETUP
            and bool(self.learner_name.strip())
            and len(self.filtered_pool()) >= 1
        )

    ############################
    # 出題
    ############################
    def start(self) -> QuizSession | None:
        if self._phase is not Phase.SETUP:
            self._ignore("start")
            return None
        if not self.learner_name.strip():
            raise IncompleteSetup("名前を入力してください")
        pool = self.filtered_pool()
        if not pool:
            raise EmptyPool(f"{self.selection.label} の単語がありません")
        return self._begin(draw(pool, self.config.question_count, rng=self._rng))

    def _begin(self, questions: list[WordItem]) -> QuizSession:
        self.session = QuizSession(self.mode, self.selection, questions)
        self.pending_input = ""
        self.last_record = None
        self.correction_attempts = 0
        self.timed_out = False
        self._move(Phase.IN_PROGRESS)
        self.clock.start()
        logger.info(
            f"Session {self.session.session_id} started: {len(questions)} questions "
            f"[{self.mode.label} / {self.selection.label}] for {self.learner_id}"
        )
        return self.session

    @property
    def current_prompt(self) -> str | None:
        if self.session is None or self._phase not in (Phase.IN_PROGRESS, Phase.REVIEWING_ANSWER):
            return None
        return self.mode.prompt_for(self.session.current_item)

    def update_input(self, text: str) -> None:
        if self._phase is not Phase.IN_PROGRESS:
            return self._ignore("update_input")
        self.pending_input = text or ""

    def _judge_current(self, raw: str) -> bool:
        item = self.session.current_item
        if self.mode.answers_in_kana:
            return judge(raw, item.target_kana, AnswerScript.KANA)
        return judge(raw, item.source_text, AnswerScript.LATIN)

    def submit(self, raw: str | None = None) -> AnswerRecord | None:
        """答え合わせ。raw を省略すると入力欄の内容で判定する"""
        self.poll()
        if self._phase is not Phase.IN_PROGRESS:
            self._ignore("submit")
            return None
        raw = self.pending_input if raw is None else (raw or "")
        item = self.session.current_item
        record = AnswerRecord(
            question_index=self.session.current_index,
            prompt=self.mode.prompt_for(item),
            user_input=raw,
            expected=self.mode.expected_for(item),
            is_correct=self._judge_current(raw),
        )
        self.session._append(record)
        self.last_record = record
        self.correction_attempts = 0
        self.clock.pause()
        self._move(Phase.REVIEWING_ANSWER)
        return record

    def attempt_correction(self, raw: str) -> bool | None:
        """
        不正解の直後だけ使える言い直し。記録も得点も変えない。
        正しく言い直せたら自動で次の問題へ進む。
        """
        self.poll()
        if self._phase is not Phase.REVIEWING_ANSWER or self.last_record is None or self.last_record.is_correct:
            self._ignore("attempt_correction")
            return None
        self.correction_attempts += 1
        ok = self._judge_current(raw)
        if ok:
            self.next_question()
        return ok

    def next_question(self) -> None:
        self.poll()
        if self._phase is not Phase.REVIEWING_ANSWER:
            return self._ignore("next_question")
        if self.session.is_last_question:
            self._finish("completed")
            return
        self.session.current_index += 1
        self.pending_input = ""
        self.last_record = None
        self.correction_attempts = 0
        self._move(Phase.IN_PROGRESS)
        self.clock.next_question()
        self.clock.resume()

    def stop(self) -> None:
        """途中でやめる（全体タイマー切れと同じ扱い）"""
        self.poll()
        if self._phase not in (Phase.IN_PROGRESS, Phase.REVIEWING_ANSWER):
            return self._ignore("stop")
        self._finish("stopped")

    def _on_question_expired(self) -> None:
        if self._phase is Phase.IN_PROGRESS:
            logger.info(f"Question {self.session.current_index + 1} timed out")
            self.submit("")

    def _on_session_expired(self) -> None:
        if self._phase in (Phase.IN_PROGRESS, Phase.REVIEWING_ANSWER):
            self.timed_out = True
            self._finish("timeout")

    def _finish(self, reason: str) -> None:
        self.clock.cancel()
        self.pending_input = ""
        self._move(Phase.FINISHED)
        logger.info(
            f"Session {self.session.session_id} finished ({reason}): "
            f"{self.session.score}/{len(self.session.answer_log)} answered of {len(self.session.questions)}"
        )
        if self.on_finish is not None:
            self.on_finish(self.result())

    ############################
    # 結果
    ############################
    @property
    def score(self) -> int:
        return self.session.score if self.session else 0

    def result(self) -> SessionResult | None:
        if self._phase is not Phase.FINISHED or self.session is None:
            return None
        s = self.session
        return SessionResult(
            learner_name=self.learner_name,
            mode=s.mode,
            selection=s.selection,
            questions=s.questions,
            answers=s.answer_log,
            score=s.score,
            duration_sec=self.clock.elapsed,
            session_id=s.session_id,
            timed_out=self.timed_out,
        )

    def can_retry_wrong(self) -> bool:
        return self._phase is Phase.FINISHED and self.session is not None and bool(self.session.wrong_records())

    def retry_wrong(self) -> QuizSession | None:
        """間違えた問題だけで新しいセッションを始める（名前・形式・難易度は引き継ぐ）"""
        if not self.can_retry_wrong():
            self._ignore("retry_wrong")
            return None
        questions = draw_retry(
            self.session.questions, self.session.answer_log, self.config.question_count, rng=self._rng
        )
        logger.info(f"Retrying {len(questions)} wrong answers")
        return self._begin(questions)

    def restart(self) -> None:
        """ログイン画面からやり直す"""
        if self._phase not in (Phase.SETUP, Phase.FINISHED):
            return self._ignore("restart")
        self.clock.cancel()
        self.session = None
        self.last_record = None
        self.pending_input = ""
        self.learner_id = None
        self.learner_name = ""
        self._move(Phase.AUTHENTICATING)

    def teardown(self) -> None:
        self.clock.cancel()
