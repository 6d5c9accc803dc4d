# -*- coding: utf-8 -*-
"""eitango のデータモデル（単語・解答記録・出題形式・難易度・フェーズ）"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from .normalizer import to_hiragana


############################
# 難易度
############################
BASE_TIERS = ("入門編", "基本編", "標準編")


class DifficultySelection(Enum):
    """UI の難易度選択肢。複合選択は基本難易度の和集合（保存属性ではなくビュー）"""

    BEGINNER = "入門編"
    BASIC = "基本編"
    STANDARD = "標準編"
    BEGINNER_BASIC = "入門＋基本編"
    ALL = "入門＋基本＋標準編"

    @property
    def label(self) -> str:
        return self.value

    @property
    def tiers(self) -> frozenset[str]:
        return _SELECTION_TIERS[self]

    @classmethod
    def from_label(cls, label: str) -> "DifficultySelection":
        for sel in cls:
            if sel.value == label:
                return sel
        raise ValueError(f"unknown difficulty: {label!r}")


_SELECTION_TIERS = {
    DifficultySelection.BEGINNER: frozenset({"入門編"}),
    DifficultySelection.BASIC: frozenset({"基本編"}),
    DifficultySelection.STANDARD: frozenset({"標準編"}),
    DifficultySelection.BEGINNER_BASIC: frozenset({"入門編", "基本編"}),
    DifficultySelection.ALL: frozenset({"入門編", "基本編", "標準編"}),
}


############################
# 出題形式
############################
class QuestionMode(Enum):
    """
    SOURCE_TO_TARGET: 日本語を表示して英単語を答える
    TARGET_TO_SOURCE: 英単語を表示して日本語を答える（かな・複数正解を許容）
    """

    SOURCE_TO_TARGET = "日本語→英単語"
    TARGET_TO_SOURCE = "英単語→日本語"

    @property
    def label(self) -> str:
        return self.value

    @property
    def answers_in_kana(self) -> bool:
        return self is QuestionMode.TARGET_TO_SOURCE

    def prompt_for(self, item: "WordItem") -> str:
        return item.source_text if self is QuestionMode.TARGET_TO_SOURCE else item.target_text

    def expected_for(self, item: "WordItem") -> str:
        return item.target_text if self is QuestionMode.TARGET_TO_SOURCE else item.source_text

    @classmethod
    def from_label(cls, label: str) -> "QuestionMode":
        for mode in cls:
            if mode.value == label:
                return mode
        raise ValueError(f"unknown mode: {label!r}")


############################
# フェーズ
############################
class Phase(Enum):
    AUTHENTICATING = "auth"
    SETUP = "start"
    IN_PROGRESS = "quiz"
    REVIEWING_ANSWER = "review"
    FINISHED = "result"


############################
# 単語 / 解答記録
############################
@dataclass(frozen=True)
class WordItem:
    """
    単語1件。ロード後は不変。
    target_kana は target_text から毎回生成される（dataclasses.replace でも再計算される）。
    """

    id: str
    source_text: str
    target_text: str
    tier: str
    target_kana: str = field(init=False, compare=False)

    def __post_init__(self):
        object.__setattr__(self, "target_kana", to_hiragana(self.target_text.strip()))

    def to_dict(self) -> dict:
        return {"en": self.source_text, "jp": self.target_text, "level": self.tier}


@dataclass(frozen=True)
class AnswerRecord:
    question_index: int
    prompt: str
    user_input: str
    expected: str
    is_correct: bool

    def to_dict(self) -> dict:
        # 送信先（フォーム集計側）の既存キー名に合わせる
        return {
            "qIndex": self.question_index,
            "q": self.prompt,
            "a": self.user_input,
            "correct": self.expected,
            "ok": self.is_correct,
        }
