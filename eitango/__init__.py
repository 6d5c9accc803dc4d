# -*- coding: utf-8 -*-
"""eitango: 英単語タイピングクイズ（中学3年向け）"""
from .config import QuizConfig
from .engine import QuizEngine, QuizSession, SessionResult
from .errors import (
    AuthenticationRejected,
    EmptyPool,
    IncompleteSetup,
    InvalidTransition,
    MalformedSourceRecord,
    QuizError,
    ReportingFailure,
)
from .models import AnswerRecord, DifficultySelection, Phase, QuestionMode, WordItem

__version__ = "0.3.0"

__all__ = [
    "AnswerRecord",
    "AuthenticationRejected",
    "DifficultySelection",
    "EmptyPool",
    "IncompleteSetup",
    "InvalidTransition",
    "MalformedSourceRecord",
    "Phase",
    "QuestionMode",
    "QuizConfig",
    "QuizEngine",
    "QuizError",
    "QuizSession",
    "ReportingFailure",
    "SessionResult",
    "WordItem",
]
