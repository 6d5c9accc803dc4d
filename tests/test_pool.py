"""
Unit tests for tier filtering and question drawing.
"""

import random

import pytest

from eitango.models import AnswerRecord, DifficultySelection
from eitango.pool import draw, draw_retry, filter_by_tier, wrong_items

from conftest import make_word


def record(index: int, ok: bool) -> AnswerRecord:
    return AnswerRecord(question_index=index, prompt="p", user_input="a", expected="e", is_correct=ok)


class TestFilterByTier:
    @pytest.mark.parametrize("selection", list(DifficultySelection))
    def test_filter_when_any_selection_then_only_allowed_tiers(self, words, selection):
        result = filter_by_tier(words, selection)

        assert all(it.tier in selection.tiers for it in result)
        assert [it for it in words if it.tier in selection.tiers] == result

    def test_filter_when_composite_then_union_of_base_tiers(self, words):
        result = filter_by_tier(words, DifficultySelection.BEGINNER_BASIC)

        assert {it.tier for it in result} == {"入門編", "基本編"}
        assert len(result) == 7

    def test_filter_when_unknown_tier_then_excluded(self):
        items = [make_word(1, "run", "はしる", "発展編")]

        assert filter_by_tier(items, DifficultySelection.ALL) == []


class TestDraw:
    def test_draw_when_count_exceeds_pool_then_whole_pool(self, words):
        result = draw(words, 20, rng=random.Random(1))

        assert len(result) == len(words)
        assert set(result) == set(words)

    def test_draw_when_count_smaller_then_distinct_members(self, words):
        result = draw(words, 3, rng=random.Random(7))

        assert len(result) == 3
        assert len(set(result)) == 3
        assert all(it in words for it in result)

    def test_draw_when_called_then_pool_not_mutated(self, words):
        before = list(words)

        draw(words, 5, rng=random.Random(3))

        assert words == before

    def test_draw_when_empty_pool_then_empty(self):
        assert draw([], 20) == []

    def test_draw_when_duplicates_in_pool_then_distinct(self):
        w = make_word(1, "run", "はしる")
        pool = [w, w, make_word(2, "dog", "いぬ")]

        result = draw(pool, 10, rng=random.Random(0))

        assert len(result) == 2
        assert len(set(result)) == 2

    def test_draw_when_single_item_and_count_twenty_then_one_question(self):
        pool = filter_by_tier([make_word(1, "run", "はしる", "入門編")], DifficultySelection.BEGINNER)

        assert len(draw(pool, 20)) == 1


class TestRetry:
    def test_wrong_items_when_mixed_log_then_only_incorrect(self, words):
        questions = words[:5]
        log = [record(0, True), record(1, False), record(2, True), record(3, True), record(4, False)]

        assert wrong_items(questions, log) == [questions[1], questions[4]]

    def test_wrong_items_when_unanswered_then_not_included(self, words):
        questions = words[:5]
        log = [record(0, False)]

        assert wrong_items(questions, log) == [questions[0]]

    def test_draw_retry_when_two_wrong_then_exactly_those_two(self, words):
        questions = words[:5]
        log = [record(0, True), record(1, False), record(2, True), record(3, False), record(4, True)]

        result = draw_retry(questions, log, 20, rng=random.Random(5))

        assert sorted(result, key=lambda w: w.id) == [questions[1], questions[3]]

    def test_draw_retry_when_count_cap_then_truncated(self, words):
        questions = words[:5]
        log = [record(i, False) for i in range(5)]

        assert len(draw_retry(questions, log, 2, rng=random.Random(5))) == 2
