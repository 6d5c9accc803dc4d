# -*- coding: utf-8 -*-
"""クイズ関連の例外。どれも発生した境界で処理され、アプリを止めない"""


class QuizError(Exception):
    """eitango の例外の基底クラス"""


class AuthenticationRejected(QuizError):
    def __init__(self, learner_id: str):
        super().__init__(f"ID が名簿にありません: {learner_id!r}")
        self.learner_id = learner_id


class IncompleteSetup(QuizError):
    """名前が未入力のまま開始しようとした"""


class EmptyPool(QuizError):
    """選んだ難易度に出題できる単語がない"""


class ReportingFailure(QuizError):
    """結果の送信に失敗した（送信先未設定は失敗扱いしない）"""


class MalformedSourceRecord(QuizError):
    def __init__(self, row_number: int, reason: str):
        super().__init__(f"row {row_number}: {reason}")
        self.row_number = row_number
        self.reason = reason


class InvalidTransition(QuizError):
    """遷移表にない遷移。内部の不整合でのみ発生する"""
