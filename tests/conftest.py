import random
import sys
from pathlib import Path

import pytest

# Add the repo root to sys.path so eitango imports without installation
ROOT = Path(__file__).resolve().parent.parent
if ROOT.as_posix() not in sys.path:
    sys.path.insert(0, ROOT.as_posix())

from eitango.config import QuizConfig  # noqa: E402
from eitango.engine import QuizEngine  # noqa: E402
from eitango.models import WordItem  # noqa: E402


class FakeTime:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def make_word(no: int, en: str, jp: str, tier: str = "入門編") -> WordItem:
    return WordItem(id=str(no), source_text=en, target_text=jp, tier=tier)


@pytest.fixture
def words():
    return [
        make_word(1, "run", "走る／はしる"),
        make_word(2, "dog", "犬／いぬ"),
        make_word(3, "cat", "ねこ／ネコ"),
        make_word(4, "book", "本／ほん"),
        make_word(5, "bread", "パン"),
        make_word(6, "borrow", "借りる／かりる", "基本編"),
        make_word(7, "forget", "忘れる／わすれる", "基本編"),
        make_word(8, "energy", "エネルギー", "標準編"),
    ]


@pytest.fixture
def roster():
    return {"20230001": "Yamada", "20230002": "Suzuki", "20230003": None}


@pytest.fixture
def fake_time():
    return FakeTime()


@pytest.fixture
def make_engine(words, roster, fake_time):
    """Build an engine on the sample words; keyword args override QuizConfig."""

    def _make(vocabulary=None, on_finish=None, **overrides):
        config = QuizConfig(**overrides)
        return QuizEngine(
            words if vocabulary is None else vocabulary,
            roster,
            config=config,
            rng=random.Random(42),
            time_source=fake_time,
            on_finish=on_finish,
        )

    return _make
