# app.py
# -*- coding: utf-8 -*-
from html import escape

import pandas as pd
import streamlit as st
from streamlit_autorefresh import st_autorefresh

from eitango import (
    AuthenticationRejected,
    DifficultySelection,
    EmptyPool,
    IncompleteSetup,
    Phase,
    QuestionMode,
    QuizConfig,
    QuizEngine,
)
from eitango.clock import format_seconds, urgency
from eitango.logs import setup_logging
from eitango.pool import wrong_items
from eitango.reporter import ResultReporter, default_client_info
from eitango.sources import export_items_csv, load_roster, load_vocabulary

############################
# ページ設定 & スタイル
############################
st.set_page_config(page_title="eitango-chu3", page_icon="📝", layout="centered")

CUSTOM_CSS = """
<style>
main.block-container { max-width: 680px; }

/* 問題を大きく太く */
.big-word {
  font-size: 40px;
  font-weight: 800;
  letter-spacing: 0.5px;
  margin: 0 0 0.25rem 0;
}
.question-box {
  border: 1px solid #ddd; border-radius: 16px; padding: 14px;
  background: #f7f7f7; box-shadow: 0 2px 6px rgba(0,0,0,.05);
  margin-bottom: 8px;
}

/* 答え合わせ */
.review-box {
  border: 1px solid #eee; border-radius: 16px; padding: 14px; margin-top: 12px;
  background: #fff; box-shadow: 0 2px 10px rgba(0,0,0,.04);
}
.correct { color: #0a5a24; font-weight: 700; }
.incorrect { color: #8a1f1f; font-weight: 700; }

/* 完了/時間切れバナー */
.done-banner {
  font-size: 36px; font-weight: 900; text-align: center;
  padding: 20px 12px; border-radius: 16px;
  border: 2px dashed #8ad; background: #f5fbff;
}
.timeout-banner {
  font-size: 36px; font-weight: 900; text-align: center;
  padding: 20px 12px; border-radius: 16px;
  border: 2px dashed #e57373; background: #fff5f5;
}

/* タイマー表示 */
.timer-box {
  display:flex; align-items:center; justify-content:space-between;
  border:1px solid #d0d7de; border-radius:12px; padding:8px 12px; margin:8px 0 6px 0;
  background:#f6f8fa;
  font-weight:700;
  font-family: ui-monospace, SFMono-Regular, Menlo, Consolas, monospace;
}
.timer-warn { background:#fff7e6; border-color:#ffcc80; }
.timer-urgent { background:#fff0f0; border-color:#ff8a80; animation: shake 0.7s infinite; }
@keyframes shake {
  0% { transform: translate(1px, 0); }
  20% { transform: translate(-1px, 0); }
  40% { transform: translate(1px, 0); }
  60% { transform: translate(-1px, 0); }
  80% { transform: translate(1px, 0); }
  100% { transform: translate(-1px, 0); }
}
.subtle { color:#666; font-size: 14px; }
</style>
"""
st.markdown(CUSTOM_CSS, unsafe_allow_html=True)

############################
# 設定 & データ読み込み
############################
CONFIG = QuizConfig.from_env()
setup_logging(CONFIG)


@st.cache_resource(show_spinner=False)
def load_sources(vocab_path: str, roster_path: str, skip_header: bool):
    return load_vocabulary(vocab_path, skip_header=skip_header), load_roster(roster_path)


@st.cache_resource(show_spinner=False)
def get_reporter(endpoint, timeout: float) -> ResultReporter:
    return ResultReporter(endpoint, timeout=timeout)


try:
    VOCAB, ROSTER = load_sources(str(CONFIG.vocab_path), str(CONFIG.roster_path), CONFIG.skip_header)
except FileNotFoundError as e:
    st.error(f"データファイルが見つかりません: `{e}`。`data/words.csv` と `data/roster.csv` を置いてください。")
    st.stop()
except ValueError as e:
    st.error(str(e))
    st.stop()

REPORTER = get_reporter(CONFIG.report_endpoint, CONFIG.report_timeout_sec)


def client_info() -> str:
    ua = st.context.headers.get("User-Agent")
    return ua or default_client_info()


def auto_report(result):
    st.session_state.delivery = REPORTER.report(result, client_info())


############################
# 状態初期化
############################
if "engine" not in st.session_state:
    st.session_state.engine = QuizEngine(
        VOCAB,
        ROSTER,
        config=CONFIG,
        on_finish=auto_report if CONFIG.auto_report else None,
    )
    st.session_state.auth_error = None
    st.session_state.setup_error = None
    st.session_state.delivery = None
    st.session_state.shown_question = None

state = st.session_state
engine: QuizEngine = state.engine

# 溜まったタイマーの tick を先に処理（時間切れ→未回答/終了 がここで反映される）
engine.poll()


def sync_answer_box():
    """問題が変わったら入力欄をエンジンの入力バッファで上書きする"""
    current = (engine.session.session_id, engine.session.current_index)
    if state.shown_question != current:
        state.shown_question = current
        state.answer_input = engine.pending_input


def render_timer(label: str, sec: int):
    klass = "timer-box"
    level = urgency(sec)
    msg = f"{label}: {format_seconds(sec)}"
    if level == "urgent":
        klass += " timer-urgent"
        msg += " ⏰ いそいで！"
    elif level == "warn":
        klass += " timer-warn"
    st.markdown(f'<div class="{klass}">{msg}</div>', unsafe_allow_html=True)


############################
# ログイン
############################
if engine.phase is Phase.AUTHENTICATING:
    st.title("📝 eitango-chu3")
    st.caption("ログイン")

    login_id = st.text_input("ID", key="login_id", placeholder="例：20230001")
    name = st.text_input("あなたの名前（名簿に登録があれば自動で入ります）", value=engine.learner_name, key="login_name")
    engine.set_name(name)

    if st.button("ログイン", key="login", type="primary", use_container_width=True):
        try:
            engine.authenticate(login_id)
            state.auth_error = None
            st.rerun()
        except AuthenticationRejected:
            state.auth_error = "このIDは登録されていません。もう一度確認してください。"

    if state.auth_error:
        st.error(state.auth_error)
    st.stop()

############################
# スタート画面
############################
if engine.phase is Phase.SETUP:
    st.title("📝 eitango-chu3")
    st.caption(f"スタート画面（ID: {engine.learner_id}）")

    name = st.text_input("あなたの名前", value=engine.learner_name, placeholder="例：hira-chan", key="setup_name")
    engine.set_name(name)

    mode_labels = [m.label for m in QuestionMode]
    mode_label = st.selectbox("出題形式", options=mode_labels, index=mode_labels.index(engine.mode.label))
    engine.choose_mode(QuestionMode.from_label(mode_label))

    diff_labels = [d.label for d in DifficultySelection]
    diff_label = st.selectbox("難易度", options=diff_labels, index=diff_labels.index(engine.selection.label))
    engine.choose_difficulty(DifficultySelection.from_label(diff_label))

    pool = engine.filtered_pool()
    st.caption(f"利用可能な単語数：{len(pool)} / {len(VOCAB)}")

    c1, c2 = st.columns([3, 1])
    with c1:
        if st.button(
            f"開始（{CONFIG.question_count}問）",
            key="start",
            type="primary",
            disabled=not engine.can_start(),
            use_container_width=True,
        ):
            try:
                engine.start()
                state.setup_error = None
                state.delivery = None
                st.rerun()
            except (IncompleteSetup, EmptyPool) as e:
                state.setup_error = str(e)
    with c2:
        if st.button("ログアウト", key="logout", use_container_width=True):
            engine.restart()
            st.rerun()

    if state.setup_error:
        st.warning(state.setup_error)
    st.stop()

############################
# 出題中 / 答え合わせ
############################
if engine.phase in (Phase.IN_PROGRESS, Phase.REVIEWING_ANSWER):
    session = engine.session
    reviewing = engine.phase is Phase.REVIEWING_ANSWER

    if not reviewing and engine.clock.running:
        # 1秒ごとに再描画（答え合わせ中やタイマーなしのときは不要）
        st_autorefresh(interval=1000, key="tick_timer")
    sync_answer_box()

    st.markdown(f"**Q {session.current_index + 1} / {len(session.questions)}**")
    if CONFIG.session_timer_enabled:
        render_timer("全体", engine.clock.session.remaining)
    if CONFIG.per_question_timer_enabled:
        render_timer("この問題", engine.clock.question.remaining)

    st.markdown(
        '<div class="question-box"><div class="subtle">問題</div>'
        f'<div class="big-word">{escape(engine.current_prompt)}</div></div>',
        unsafe_allow_html=True,
    )

    kana = engine.mode.answers_in_kana
    with st.form("answer_form", border=False):
        answer = st.text_input(
            "日本語で入力（かなOK）" if kana else "英単語を入力",
            key="answer_input",
            placeholder="例：はしる（カタカナでもOK）" if kana else "example: run",
            disabled=reviewing,
        )
        submitted = st.form_submit_button("答え合わせ", type="primary", disabled=reviewing)
    if submitted:
        engine.submit(answer)
        st.rerun()

    if reviewing and engine.last_record is not None:
        rec = engine.last_record
        verdict = (
            '<span class="correct">✅ 正解</span>' if rec.is_correct else '<span class="incorrect">❌ 不正解</span>'
        )
        st.markdown(
            '<div class="review-box"><b>答え合わせ</b>'
            f"<div>問題：{escape(rec.prompt)}</div>"
            f"<div>あなた：{escape(rec.user_input) or '（無回答）'}</div>"
            f"<div>模範解答：<b>{escape(rec.expected)}</b> {verdict}</div></div>",
            unsafe_allow_html=True,
        )

        if not rec.is_correct:
            # 言い直し（得点には影響しない）
            with st.form("correction_form", clear_on_submit=True, border=False):
                retry = st.text_input("もう一度書いてみよう（得点には入りません）", key="correction_input")
                retried = st.form_submit_button("もう一度")
            if retried:
                if engine.attempt_correction(retry):
                    st.rerun()
                st.info("まだちがうよ。模範解答をよく見てみよう。")

        next_label = "結果を見る" if session.is_last_question else "次の問題へ"
        if st.button(next_label, key="next", type="primary", use_container_width=True):
            engine.next_question()
            st.rerun()

    st.write("---")
    if st.button("終了する", key="stop"):
        engine.stop()
        st.rerun()
    st.stop()

############################
# 結果
############################
result = engine.result()
if engine.timed_out:
    st.markdown('<div class="timeout-banner">⏰ <b>時間切れ！</b></div>', unsafe_allow_html=True)
else:
    st.markdown('<div class="done-banner">🐰 <b>おつかれさま！</b></div>', unsafe_allow_html=True)

st.markdown(f"名前：**{escape(result.learner_name)}** ／ 形式：{result.mode.label} ／ 難易度：{result.selection.label}")
colA, colB, colC = st.columns([1, 1, 1])
with colA:
    st.metric("出題数", len(result.questions))
with colB:
    st.metric("解答数", len(result.answers))
with colC:
    st.metric("得点", f"{result.score} / {len(result.answers)}")

if result.answers:
    table = pd.DataFrame(
        [
            {
                "問題": r.prompt,
                "あなた": r.user_input or "（無回答）",
                "模範解答": r.expected,
                "判定": "✅" if r.is_correct else "❌",
            }
            for r in result.answers
        ]
    )
    st.dataframe(table, hide_index=True, use_container_width=True)

wrong = wrong_items(result.questions, result.answers)
csv_data = export_items_csv(wrong)
if csv_data:
    st.download_button(
        "🗂️ 間違えた単語をCSVで保存",
        data=csv_data,
        file_name=f"review_{result.session_id}.csv",
        mime="text/csv",
    )

# 送信（送信先が未設定なら表示しない）
if REPORTER.enabled:
    delivery = state.delivery
    if delivery is None:
        if st.button("結果を送信", key="send", type="primary"):
            state.delivery = REPORTER.report(result, client_info())
            st.rerun()
    elif delivery.status == "pending":
        st_autorefresh(interval=1000, key="send_poll")
        st.info("送信中...")
    elif delivery.status == "sent":
        st.success("✅ 送信完了！")
    elif not delivery.dismissed:
        st.warning(f"結果を送信できませんでした。あとでもう一度お試しください。（{delivery.error}）")
        c1, c2 = st.columns([1, 1])
        with c1:
            if st.button("もう一度送信", key="resend"):
                state.delivery = REPORTER.report(result, client_info())
                st.rerun()
        with c2:
            if st.button("閉じる", key="dismiss"):
                delivery.dismiss()
                st.rerun()

st.write("---")
c1, c2 = st.columns([1, 1])
with c1:
    if st.button("ホームへ戻る", key="home", use_container_width=True):
        engine.restart()
        state.delivery = None
        state.auth_error = None
        st.rerun()
with c2:
    if engine.can_retry_wrong():
        if st.button("間違えた問題を復習", key="retry_wrong", type="primary", use_container_width=True):
            engine.retry_wrong()
            state.delivery = None
            st.rerun()
