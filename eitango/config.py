# -*- coding: utf-8 -*-
"""
設定。既定値はコード側、上書きは環境変数（.env も可）。

  EITANGO_QUESTION_COUNT         出題数（20）
  EITANGO_TOTAL_TIME_SEC         全体の制限時間（300）
  EITANGO_PER_QUESTION_TIME_SEC  1問の制限時間（20）
  EITANGO_USE_TOTAL_TIMER        全体タイマーを使う（true）
  EITANGO_USE_PER_QUESTION_TIMER 1問タイマーを使う（true）
  EITANGO_SKIP_HEADER            単語CSVの先頭行を飛ばす（false）
  EITANGO_REPORT_URL             結果の送信先。未設定なら送信しない
  EITANGO_REPORT_TIMEOUT_SEC     送信のタイムアウト（10）
  EITANGO_AUTO_REPORT            終了時に自動送信する（false）
  EITANGO_VOCAB_PATH / EITANGO_ROSTER_PATH / EITANGO_LOG_DIR
"""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

APP_DIR = Path(__file__).resolve().parent.parent
DATA_DIR = APP_DIR / "data"

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning(f"{name}={raw!r} is not an integer; using {default}")
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        logger.warning(f"{name}={raw!r} is not a number; using {default}")
        return default


def _env_bool(name: str, default: bool) -> bool:
    raw = os.environ.get(name, "").strip().lower()
    if not raw:
        return default
    if raw in _TRUE:
        return True
    if raw in _FALSE:
        return False
    logger.warning(f"{name}={raw!r} is not a boolean; using {default}")
    return default


def _env_path(name: str, default: Path) -> Path:
    raw = os.environ.get(name, "").strip()
    return Path(raw) if raw else default


@dataclass
class QuizConfig:
    question_count: int = 20
    total_time_sec: int = 300
    per_question_time_sec: int = 20
    session_timer_enabled: bool = True
    per_question_timer_enabled: bool = True
    skip_header: bool = False
    report_endpoint: str | None = None
    report_timeout_sec: float = 10.0
    auto_report: bool = False
    vocab_path: Path = field(default_factory=lambda: DATA_DIR / "words.csv")
    roster_path: Path = field(default_factory=lambda: DATA_DIR / "roster.csv")
    log_dir: Path = field(default_factory=lambda: APP_DIR / "logs")
    log_file: str = "eitango.log"

    def __post_init__(self):
        for name in ("question_count", "total_time_sec", "per_question_time_sec"):
            if getattr(self, name) <= 0:
                raise ValueError(f"{name} must be positive")
        if self.report_timeout_sec <= 0:
            raise ValueError("report_timeout_sec must be positive")
        if self.report_endpoint is not None and not self.report_endpoint.strip():
            self.report_endpoint = None

    @property
    def reporting_enabled(self) -> bool:
        return self.report_endpoint is not None

    @classmethod
    def from_env(cls, dotenv: bool = True) -> "QuizConfig":
        if dotenv:
            load_dotenv()
        d = cls()
        return cls(
            question_count=_env_int("EITANGO_QUESTION_COUNT", d.question_count),
            total_time_sec=_env_int("EITANGO_TOTAL_TIME_SEC", d.total_time_sec),
            per_question_time_sec=_env_int("EITANGO_PER_QUESTION_TIME_SEC", d.per_question_time_sec),
            session_timer_enabled=_env_bool("EITANGO_USE_TOTAL_TIMER", d.session_timer_enabled),
            per_question_timer_enabled=_env_bool("EITANGO_USE_PER_QUESTION_TIMER", d.per_question_timer_enabled),
            skip_header=_env_bool("EITANGO_SKIP_HEADER", d.skip_header),
            report_endpoint=os.environ.get("EITANGO_REPORT_URL") or None,
            report_timeout_sec=_env_float("EITANGO_REPORT_TIMEOUT_SEC", d.report_timeout_sec),
            auto_report=_env_bool("EITANGO_AUTO_REPORT", d.auto_report),
            vocab_path=_env_path("EITANGO_VOCAB_PATH", d.vocab_path),
            roster_path=_env_path("EITANGO_ROSTER_PATH", d.roster_path),
            log_dir=_env_path("EITANGO_LOG_DIR", d.log_dir),
        )
