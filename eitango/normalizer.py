# -*- coding: utf-8 -*-
"""
解答の正規化と判定。

- 全角/半角ゆれ: NFKC で統一
- 空白: 連続空白を1つにまとめ、前後を除去
- かな: カタカナ→ひらがな（日本語で答えるときだけ）
- 模範解答の区切り（／ / , ， ・）で複数の正解を許容（日本語で答えるときだけ）

正規化は失敗しない。None などは空文字として扱う。
"""
from __future__ import annotations

import re
import unicodedata
from enum import Enum

ALTERNATIVE_DELIMITERS = "／/,，・"
_ALT_SPLIT = re.compile(f"[{re.escape(ALTERNATIVE_DELIMITERS)}]")
_SPACES = re.compile(r"\s+")


class AnswerScript(Enum):
    LATIN = "latin"  # 英単語で答える
    KANA = "kana"    # 日本語で答える（ひらがな・カタカナ同一視）


def _text(s) -> str:
    return "" if s is None else str(s)


def fold_width(s) -> str:
    return unicodedata.normalize("NFKC", _text(s))


def fold_spaces(s) -> str:
    return _SPACES.sub(" ", _text(s)).strip()


def to_hiragana(s) -> str:
    """カタカナ（ァ〜ヶ）をひらがなへ"""
    out = []
    for ch in _text(s):
        code = ord(ch)
        if 0x30A1 <= code <= 0x30F6:
            out.append(chr(code - 0x60))
        else:
            out.append(ch)
    return "".join(out)


def normalize(text, script: AnswerScript = AnswerScript.LATIN) -> str:
    s = fold_width(text)
    if script is AnswerScript.KANA:
        s = to_hiragana(s)
    return fold_spaces(s)


def split_alternatives(reference) -> list[str]:
    """区切り文字で模範解答を分け、正規化して空になった候補は捨てる"""
    out = []
    for part in _ALT_SPLIT.split(fold_width(reference)):
        norm = normalize(part, AnswerScript.KANA)
        if norm and norm not in out:
            out.append(norm)
    return out


def judge(user_input, expected, script: AnswerScript) -> bool:
    user = normalize(user_input, script)
    if not user:
        return False
    if script is AnswerScript.KANA:
        return user in split_alternatives(expected)
    return user == normalize(expected, script)


def normalize_id(s) -> str:
    """ログインID用（全角数字での入力も受け付ける）"""
    return fold_spaces(fold_width(s))
