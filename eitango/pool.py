# -*- coding: utf-8 -*-
"""出題プールの絞り込みと抽選"""
from __future__ import annotations

import random
from typing import Iterable, Sequence

from .models import AnswerRecord, DifficultySelection, WordItem


def filter_by_tier(items: Iterable[WordItem], selection: DifficultySelection) -> list[WordItem]:
    allow = selection.tiers
    return [it for it in items if it.tier in allow]


def draw(pool: Sequence[WordItem], count: int, rng: random.Random | None = None) -> list[WordItem]:
    """
    プールのコピーをシャッフルして先頭 min(count, len) 件を返す。
    プール自体は変更しない。同じ単語が重複して入っていても1回しか出さない。
    """
    rng = rng or random
    candidates = list(dict.fromkeys(pool))
    rng.shuffle(candidates)
    return candidates[: max(0, min(count, len(candidates)))]


def wrong_items(questions: Sequence[WordItem], answer_log: Sequence[AnswerRecord]) -> list[WordItem]:
    """誤答した問題だけを出題順のまま返す（未回答は含めない）"""
    return [questions[r.question_index] for r in answer_log if not r.is_correct]


def draw_retry(
    questions: Sequence[WordItem],
    answer_log: Sequence[AnswerRecord],
    count: int,
    rng: random.Random | None = None,
) -> list[WordItem]:
    return draw(wrong_items(questions, answer_log), count, rng=rng)
