# -*- coding: utf-8 -*-
"""
セッションタイマー。

Ticker はホスト側が poll() するたびに、経過した秒数ぶんだけコールバックを呼ぶ
キャンセル可能な周期コールバック。Streamlit では 1 秒ごとの自動リフレッシュが
poll() を呼ぶ役になる。一時停止中は進まず、1 秒未満の端数は再開後に持ち越す。
"""
from __future__ import annotations

import logging
import time
from typing import Callable

logger = logging.getLogger(__name__)


def format_seconds(sec: int) -> str:
    sec = max(0, int(sec))
    return f"{sec // 60:02d}:{sec % 60:02d}"


def urgency(sec: int) -> str:
    """タイマー表示の演出用: 'urgent'（5秒以下）/ 'warn'（10秒以下）/ ''"""
    if 0 < sec <= 5:
        return "urgent"
    if 0 < sec <= 10:
        return "warn"
    return ""


############################
# カウントダウン
############################
class Countdown:
    def __init__(self, total: int):
        self.total = int(total)
        self.remaining = self.total

    def reset(self, total: int | None = None) -> None:
        if total is not None:
            self.total = int(total)
        self.remaining = self.total

    @property
    def elapsed(self) -> int:
        return self.total - self.remaining

    @property
    def expired(self) -> bool:
        return self.remaining <= 0

    def tick(self) -> bool:
        """1秒減らす。0 になった瞬間だけ True"""
        if self.remaining <= 0:
            return False
        self.remaining -= 1
        return self.remaining == 0


############################
# 周期コールバック
############################
class Ticker:
    def __init__(
        self,
        callback: Callable[[], None],
        interval: float = 1.0,
        time_source: Callable[[], float] = time.monotonic,
    ):
        self._callback = callback
        self.interval = float(interval)
        self._time = time_source
        self._anchor: float | None = None
        self._carry = 0.0
        # poll 中の時刻（コールバックからの再入時に使う）
        self._polling_at: float | None = None

    @property
    def active(self) -> bool:
        return self._anchor is not None

    def _resolve(self, now: float | None) -> float:
        if self._polling_at is not None:
            return self._polling_at
        return self._time() if now is None else now

    def start(self, now: float | None = None) -> bool:
        """動作中なら何もしない（二重起動しない）"""
        if self._anchor is not None:
            return False
        now = self._resolve(now)
        self._anchor = now - self._carry
        self._carry = 0.0
        return True

    def suspend(self, now: float | None = None) -> None:
        """停止して端数を保持。停止中に呼んでも何もしない"""
        if self._anchor is None:
            return
        now = self._resolve(now)
        self.poll(now)
        if self._anchor is not None:
            self._carry = min(max(0.0, now - self._anchor), self.interval)
        self._anchor = None

    def cancel(self) -> None:
        """以降コールバックは一切呼ばれない"""
        self._anchor = None
        self._carry = 0.0

    def poll(self, now: float | None = None) -> int:
        if self._anchor is None or self._polling_at is not None:
            return 0
        now = self._time() if now is None else now
        fired = 0
        self._polling_at = now
        try:
            # コールバック内で停止された場合はそこで打ち切る
            while self._anchor is not None and now - self._anchor >= self.interval:
                self._anchor += self.interval
                fired += 1
                self._callback()
        finally:
            self._polling_at = None
        return fired


############################
# 全体タイマー + 1問タイマー
############################
class SessionClock:
    """
    全体カウントダウンと1問ごとのカウントダウンを1つの Ticker で同時に減らす。
    全体が 0 になったら on_session_expired、1問が 0 になったら on_question_expired。
    同じ tick で両方 0 になった場合は全体の終了だけを通知する。
    """

    def __init__(
        self,
        total_sec: int,
        per_question_sec: int,
        session_enabled: bool = True,
        per_question_enabled: bool = True,
        on_session_expired: Callable[[], None] | None = None,
        on_question_expired: Callable[[], None] | None = None,
        time_source: Callable[[], float] = time.monotonic,
    ):
        self.session = Countdown(total_sec)
        self.question = Countdown(per_question_sec)
        self.session_enabled = session_enabled
        self.per_question_enabled = per_question_enabled
        self.on_session_expired = on_session_expired
        self.on_question_expired = on_question_expired
        self._ticker = Ticker(self._on_tick, time_source=time_source)

    @property
    def running(self) -> bool:
        return self._ticker.active

    @property
    def elapsed(self) -> int | None:
        return self.session.elapsed if self.session_enabled else None

    def start(self, now: float | None = None) -> None:
        self._ticker.cancel()
        self.session.reset()
        self.question.reset()
        if self.session_enabled or self.per_question_enabled:
            self._ticker.start(now)

    def pause(self, now: float | None = None) -> None:
        self._ticker.suspend(now)

    def resume(self, now: float | None = None) -> None:
        if self.session_enabled and self.session.expired:
            return
        if self.session_enabled or self.per_question_enabled:
            self._ticker.start(now)

    def next_question(self) -> None:
        self.question.reset()

    def cancel(self) -> None:
        self._ticker.cancel()

    def poll(self, now: float | None = None) -> int:
        return self._ticker.poll(now)

    def _on_tick(self) -> None:
        session_done = self.session.tick() if self.session_enabled else False
        question_done = self.question.tick() if self.per_question_enabled else False
        if session_done:
            logger.info("Session countdown reached zero")
            self._ticker.cancel()
            if self.on_session_expired:
                self.on_session_expired()
        elif question_done:
            if self.on_question_expired:
                self.on_question_expired()
