# -*- coding: utf-8 -*-
"""
単語リスト / 名簿の読み込み。

単語: [No, 英単語, 日本語, 難易度]（No 列は省略可）
名簿: [ID, 名前]（名前は省略可、先頭行は常にヘッダー）
必須項目が欠けた行は黙って捨てる。
"""
from __future__ import annotations

import io
import logging
from pathlib import Path
from typing import Iterable, Sequence

import numpy as np
import pandas as pd

from .errors import MalformedSourceRecord
from .models import WordItem
from .normalizer import normalize_id

logger = logging.getLogger(__name__)

ENCODINGS = ["utf-8-sig", "utf-8", "cp932", "shift_jis"]


############################
# CSV → レコード
############################
def read_records(path: Path | str) -> list[list[str | None]]:
    """区切りはカンマ。エンコーディングは順に試す。空セルは None"""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(path)

    df = None
    last_err: Exception | None = None
    for enc in ENCODINGS:
        try:
            df = pd.read_csv(
                path,
                header=None,
                dtype=str,
                keep_default_na=False,
                encoding=enc,
                on_bad_lines="skip",
            )
            break
        except UnicodeDecodeError as e:
            last_err = e
        except pd.errors.EmptyDataError:
            return []
    if df is None:
        raise ValueError(f"{path.name} を読み込めませんでした（文字コードを確認してください）") from last_err

    df = df.apply(lambda col: col.str.strip()).replace("", np.nan)
    df = df.dropna(how="all")
    return df.astype(object).where(df.notna(), None).values.tolist()


def _cell(v) -> str:
    if v is None or (isinstance(v, float) and np.isnan(v)):
        return ""
    return str(v).strip()


def _trim(row: Sequence) -> list[str]:
    cells = [_cell(v) for v in row]
    while cells and not cells[-1]:
        cells.pop()
    return cells


############################
# 単語
############################
def parse_word_row(row: Sequence, row_number: int) -> WordItem:
    # 列の並びは空セルを除く前の列数で決める
    cells = [_cell(v) for v in row]
    if len(cells) >= 4:
        no, en, jp, level = cells[:4]
    elif len(cells) == 3:
        no = ""
        en, jp, level = cells
    else:
        raise MalformedSourceRecord(row_number, "英単語・日本語・難易度が必要です")
    missing = [name for name, v in (("english", en), ("japanese", jp), ("tier", level)) if not v]
    if missing:
        raise MalformedSourceRecord(row_number, f"missing {', '.join(missing)}")
    return WordItem(id=no or str(row_number), source_text=en, target_text=jp, tier=level)


def parse_vocabulary(records: Iterable[Sequence], skip_header: bool = False) -> tuple[WordItem, ...]:
    rows = list(records)
    if skip_header and rows:
        rows = rows[1:]

    items = []
    dropped = 0
    for i, row in enumerate(rows, start=1):
        try:
            items.append(parse_word_row(row, i))
        except MalformedSourceRecord as e:
            dropped += 1
            logger.debug(f"Skipped vocabulary {e}")
    logger.info(f"Loaded {len(items)} words ({dropped} rows skipped)")
    return tuple(items)


def load_vocabulary(path: Path | str, skip_header: bool = False) -> tuple[WordItem, ...]:
    return parse_vocabulary(read_records(path), skip_header=skip_header)


############################
# 名簿
############################
def parse_roster(records: Iterable[Sequence]) -> dict[str, str | None]:
    """ID → 表示名。同じ ID が複数あれば後勝ち"""
    roster: dict[str, str | None] = {}
    for i, row in enumerate(list(records)[1:], start=2):
        cells = _trim(row)
        learner_id = normalize_id(cells[0]) if cells else ""
        if not learner_id:
            logger.debug(f"Skipped roster {MalformedSourceRecord(i, 'missing id')}")
            continue
        name = cells[1] if len(cells) > 1 and cells[1] else None
        roster[learner_id] = name
    logger.info(f"Loaded {len(roster)} learner ids")
    return roster


def load_roster(path: Path | str) -> dict[str, str | None]:
    return parse_roster(read_records(path))


############################
# 書き出し
############################
def export_items_csv(items: Sequence[WordItem]) -> str | None:
    """復習用のCSV（Excel で文字化けしないよう BOM 付き）"""
    if not items:
        return None
    out = pd.DataFrame(
        [[it.id, it.source_text, it.target_text, it.tier] for it in items],
        columns=["no", "english", "japanese", "tier"],
    )
    buffer = io.StringIO()
    out.to_csv(buffer, index=False)
    return "\ufeff" + buffer.getvalue()
