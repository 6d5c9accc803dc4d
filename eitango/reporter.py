# -*- coding: utf-8 -*-
"""
結果の送信（フォーム集計用の Web アプリへ JSON を POST）。

送信はバックグラウンドで行い、画面は結果を待たずに操作できる。
送信先が未設定なら何もしない（エラーにしない）。
"""
from __future__ import annotations

import logging
import platform
from concurrent.futures import Future, ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeout
from datetime import datetime, timezone

import requests

from .engine import SessionResult
from .errors import ReportingFailure

logger = logging.getLogger(__name__)

APP_NAME = "eitango-chu3"


def default_client_info() -> str:
    return f"python/{platform.python_version()} ({platform.platform()})"


def build_result_document(
    result: SessionResult,
    client_info: str | None = None,
    now: datetime | None = None,
) -> dict:
    now = now or datetime.now(timezone.utc)
    return {
        "app": APP_NAME,
        "timestamp": now.isoformat(),
        "user_name": result.learner_name,
        "mode": result.mode.label,
        "difficulty": result.selection.label,
        "score": int(result.score),
        "duration_sec": result.duration_sec,
        "question_set_id": result.session_id,
        "questions": [it.to_dict() for it in result.questions],
        "answers": [r.to_dict() for r in result.answers],
        "device_info": client_info or default_client_info(),
    }


class Delivery:
    """送信1回分の状態: pending / sent / failed"""

    def __init__(self, future: Future):
        self._future = future
        self.dismissed = False

    @property
    def status(self) -> str:
        if not self._future.done():
            return "pending"
        return "failed" if self._future.exception() is not None else "sent"

    @property
    def error(self) -> str | None:
        if not self._future.done():
            return None
        exc = self._future.exception()
        return str(exc) if exc is not None else None

    def wait(self, timeout: float | None = None) -> str:
        """終わるまで最大 timeout 秒待ち、その時点の状態を返す"""
        try:
            self._future.result(timeout=timeout)
        except FutureTimeout:
            return "pending"
        except ReportingFailure:
            pass
        return self.status

    def dismiss(self) -> None:
        self.dismissed = True


class ResultReporter:
    def __init__(
        self,
        endpoint: str | None,
        timeout: float = 10.0,
        executor: ThreadPoolExecutor | None = None,
    ):
        self.endpoint = (endpoint or "").strip() or None
        self.timeout = timeout
        self._executor = executor or ThreadPoolExecutor(max_workers=2, thread_name_prefix="eitango-report")

    @property
    def enabled(self) -> bool:
        return self.endpoint is not None

    def send(self, document: dict) -> None:
        """同期送信。失敗したら ReportingFailure"""
        if not self.enabled:
            return
        try:
            response = requests.post(self.endpoint, json=document, timeout=self.timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            logger.warning(f"Result upload failed for {document.get('question_set_id')}: {e}")
            raise ReportingFailure(f"結果を送信できませんでした: {e}") from e
        logger.info(f"Result {document.get('question_set_id')} sent ({response.status_code})")

    def submit(self, document: dict) -> Delivery | None:
        """送りっぱなし。送信先が未設定なら None"""
        if not self.enabled:
            logger.debug("Reporting disabled; result not sent")
            return None
        return Delivery(self._executor.submit(self.send, document))

    def report(self, result: SessionResult, client_info: str | None = None) -> Delivery | None:
        return self.submit(build_result_document(result, client_info))
