import html
from typing import List, Optional

import streamlit as st

from config import (
    DEFAULT_GROUP_SIZE,
    DRAW_INTERVAL_MS,
    DRAW_TICKS,
    SUPPORTED_LOCALES,
    load_settings,
)
from draw import ANIMATING, DrawEngine
from export import (
    CSV_MIME,
    XLSX_MIME,
    export_file_name,
    groups_to_csv_bytes,
    groups_to_excel_bytes,
)
from grouping import Group, GroupingEngine, planned_group_count
from logging_config import setup_logging
from messages import message
from naming import NamingClient
from roster import (
    Participant,
    deduplicate,
    duplicate_count,
    ingest_text,
    names_to_text,
    read_roster_upload,
    sample_roster,
)

st.set_page_config(page_title="추첨 & 조 편성", layout="wide")

log = setup_logging()
settings = load_settings()

# 재밌는 멘트
QUIPS = [
    "두구두구두구...",
    "오늘의 주인공은?!",
    "운명은 이미 정해져 있었다...",
    "박수 준비해 주세요 👏",
    "환호 부탁드립니다! 🙌",
]


def toast(msg: str) -> None:
    try:
        st.toast(msg)
    except Exception:
        st.caption(msg)


# 전역 스타일(CSS)
st.markdown(
    """
    <style>
    html, body, .stApp{background:#ffffff !important; color:#0f172a !important}
    h1, h2, h3, h4, h5, h6 { color:#0f172a !important }
    .stTabs [data-baseweb="tab"], .stTabs [data-baseweb="tab"] p { color:#0f172a !important }
    .stButton>button { color:#0f172a !important; border-color:#cbd5e1 !important; background:#f8fafc !important }
    .stButton>button:hover { background:#f1f5f9 !important }
    .stDownloadButton>button { color:#0f172a !important; background:#f8fafc !important; border:1px solid #cbd5e1 !important }
    .team-card{background:#ffffff;border:1px solid #e5e7eb;border-radius:12px;padding:12px 14px;margin-bottom:10px}
    .team-header{display:flex;justify-content:space-between;align-items:center;margin-bottom:8px;background:#6366f1;border-radius:8px;padding:6px 10px}
    .team-title{font-weight:700;font-size:18px;white-space:nowrap;overflow:hidden;text-overflow:ellipsis;color:#ffffff !important}
    .count-chip{background:#ffffff;border:1px solid #e5e7eb;border-radius:999px;padding:3px 10px;font-size:12px;color:#0f172a !important;white-space:nowrap;font-weight:600}
    .member-list{display:flex;flex-direction:column;gap:6px}
    .member-item{display:flex;align-items:center;gap:8px}
    .member-no{display:inline-flex;align-items:center;justify-content:center;width:22px;height:22px;border-radius:999px;background:#eef2ff;color:#4f46e5;font-size:11px;font-weight:700}
    .member-name{font-size:16px;color:#0f172a !important}
    .spotlight{background:linear-gradient(135deg,#f0f9ff,#e9d5ff);border:1px solid #e5e7eb;border-radius:14px;padding:28px 18px;margin:8px 0;text-align:center;box-shadow:0 8px 24px rgba(15,23,42,.06)}
    .spotlight .label{font-size:12px;color:#64748b;text-transform:uppercase;letter-spacing:.08em;margin-bottom:6px}
    .spotlight strong{font-size:56px;color:#0f172a}
    .spotlight.spinning strong{color:#4f46e5}
    .congrats{background:#fefce8;border:1px solid #fde68a;color:#854d0e;border-radius:999px;padding:8px 18px;display:inline-block;margin-top:10px}
    .history-item{display:flex;justify-content:space-between;padding:6px 10px;border:1px solid #f1f5f9;border-radius:8px;margin-bottom:6px}
    .history-no{font-size:11px;color:#94a3b8;background:#f1f5f9;border-radius:6px;padding:2px 6px}
    </style>
    """,
    unsafe_allow_html=True,
)


def spotlight_html(name: str, label: str, spinning: bool = False, congrats: str = "") -> str:
    cls = "spotlight spinning" if spinning else "spotlight"
    extra = f"<div class='congrats'>🎁 {html.escape(congrats)}</div>" if congrats else ""
    return (
        f"<div class='{cls}'><div class='label'>{html.escape(label)}</div>"
        f"<strong>{html.escape(name)}</strong><br/>{extra}</div>"
    )


def build_group_card_html(group: Group) -> str:
    members_html = "\n".join(
        f'<div class="member-item"><span class="member-no">{i}</span>'
        f'<span class="member-name">{html.escape(m.name)}</span></div>'
        for i, m in enumerate(group.members, start=1)
    )
    return (
        f'<div class="team-card">'
        f'  <div class="team-header">'
        f'    <div class="team-title">{html.escape(group.name)}</div>'
        f'    <span class="count-chip">{len(group.members)}명</span>'
        f'  </div>'
        f'  <div class="member-list">{members_html}</div>'
        f'</div>'
    )


def build_history_html(history: List[Participant]) -> str:
    if not history:
        return "<div style='color:#94a3b8;font-style:italic'>아직 당첨자가 없습니다.</div>"
    total = len(history)
    return "\n".join(
        f"<div class='history-item'><span>{html.escape(p.name)}</span>"
        f"<span class='history-no'>#{total - i}</span></div>"
        for i, p in enumerate(history)
    )


def current_locale() -> str:
    return st.session_state.get("locale") or settings.locale


def seed_from_text(text: str) -> Optional[int]:
    text = (text or "").strip()
    if not text:
        return None
    try:
        return int(text)
    except ValueError:
        return None


def apply_roster(roster) -> None:
    """명단이 바뀌면 추첨 상태와 조 편성 결과를 모두 초기화."""
    st.session_state["roster"] = roster
    st.session_state["draw_engine"].load_roster(roster)
    st.session_state["grouping_engine"].clear()
    log.info("roster replaced: %d participants", len(roster))


def on_roster_text_change() -> None:
    apply_roster(ingest_text(st.session_state.get("roster_text") or ""))


def set_roster_and_text(roster) -> None:
    st.session_state["roster_text"] = names_to_text(roster)
    apply_roster(roster)


def on_upload_change() -> None:
    uploaded = st.session_state.get("roster_upload")
    if uploaded is None:
        return
    try:
        roster = read_roster_upload(uploaded.name, uploaded.getvalue())
    except Exception as e:
        st.session_state["upload_error"] = str(e)
        return
    st.session_state["upload_error"] = None
    set_roster_and_text(roster)


def on_sample_click() -> None:
    set_roster_and_text(sample_roster())


def on_dedupe_click() -> None:
    set_roster_and_text(deduplicate(st.session_state["roster"]))


def on_clear_click() -> None:
    set_roster_and_text(())


def on_reset_draw_click() -> None:
    st.session_state["draw_engine"].reset()


# 세션 상태 초기화
for _k in ["seed_str", "upload_error", "congrats_pending"]:
    st.session_state.setdefault(_k, None)
st.session_state.setdefault("roster", ())
st.session_state.setdefault("roster_text", "")
st.session_state.setdefault("locale", settings.locale)
st.session_state.setdefault("draw_ticks", DRAW_TICKS)
st.session_state.setdefault("draw_interval_ms", DRAW_INTERVAL_MS)
st.session_state.setdefault("allow_repeat", False)
st.session_state.setdefault("use_ai_names", settings.naming_enabled)
if "naming" not in st.session_state:
    st.session_state["naming"] = NamingClient(settings)
if "draw_engine" not in st.session_state:
    st.session_state["draw_engine"] = DrawEngine(st.session_state["roster"])
if "grouping_engine" not in st.session_state:
    st.session_state["grouping_engine"] = GroupingEngine(st.session_state["naming"])

engine: DrawEngine = st.session_state["draw_engine"]
grouping: GroupingEngine = st.session_state["grouping_engine"]
naming: NamingClient = st.session_state["naming"]
roster = st.session_state["roster"]

st.title("추첨 & 조 편성")

tab_roster, tab_draw, tab_group, tab_settings = st.tabs(["명단", "행운 추첨", "조 편성", "설정"])

with tab_settings:
    st.subheader("설정")
    st.session_state["locale"] = st.selectbox(
        "기본 조 이름/축하 문구 언어",
        SUPPORTED_LOCALES,
        index=SUPPORTED_LOCALES.index(current_locale()),
    )
    st.session_state["seed_str"] = st.text_input(
        "Seed (선택)", value=st.session_state.get("seed_str") or ""
    )
    col_t1, col_t2 = st.columns(2)
    with col_t1:
        st.session_state["draw_ticks"] = st.slider(
            "셔플 횟수", min_value=1, max_value=60,
            value=int(st.session_state.get("draw_ticks") or DRAW_TICKS),
        )
    with col_t2:
        st.session_state["draw_interval_ms"] = st.slider(
            "셔플 간격(ms)", min_value=0, max_value=500,
            value=int(st.session_state.get("draw_interval_ms") or DRAW_INTERVAL_MS), step=10,
        )
    engine.ticks = int(st.session_state["draw_ticks"])
    engine.interval_ms = int(st.session_state["draw_interval_ms"])
    seed_val = seed_from_text(st.session_state.get("seed_str") or "")
    if seed_val is not None and st.session_state.get("applied_seed") != seed_val:
        engine.rng.seed(seed_val)
        grouping.rng.seed(seed_val)
        st.session_state["applied_seed"] = seed_val
    if naming.available:
        st.caption(f"AI 모델: {naming.settings.model}")
    else:
        st.caption("OPENAI_API_KEY 가 없어 AI 문구 대신 기본 문구를 사용합니다.")

with tab_roster:
    st.subheader("명단 관리")
    st.caption("CSV/XLSX 업로드(첫 번째 열 = 이름, 헤더 name 은 무시), 붙여넣기, 또는 샘플 명단 생성")
    col_a, col_b = st.columns([3, 1])
    with col_b:
        st.file_uploader(
            "CSV 업로드", type=["csv", "txt", "xlsx"], key="roster_upload", on_change=on_upload_change
        )
        st.button("샘플 명단 생성", key="sample_roster", on_click=on_sample_click, use_container_width=True)
        st.button("명단 비우기", key="clear_roster", on_click=on_clear_click, use_container_width=True)
    with col_a:
        st.text_area(
            "한 줄에 한 명씩",
            key="roster_text",
            height=360,
            placeholder="홍길동\n김철수\n이영희...",
            on_change=on_roster_text_change,
        )
    if st.session_state.get("upload_error"):
        st.error(st.session_state["upload_error"])

    dup = duplicate_count(roster)
    if dup > 0:
        col_w, col_btn = st.columns([3, 1])
        with col_w:
            st.warning(f"중복된 이름 {dup}건이 있습니다.")
        with col_btn:
            st.button("중복 제거", on_click=on_dedupe_click, type="primary", use_container_width=True)
    st.info(f"총 {len(roster)}명" + (" (중복 포함)" if dup else ""))


def render_empty_roster() -> None:
    st.info(message("empty_roster", current_locale()))


with tab_draw:
    st.subheader("행운 추첨")
    # 명단이 비어도 체크박스는 항상 그려야 세션 값이 유지된다
    st.checkbox("중복 당첨 허용", key="allow_repeat")
    engine.set_allow_repeat(bool(st.session_state["allow_repeat"]))
    if not roster:
        render_empty_roster()
    else:
        col_main, col_hist = st.columns([2, 1])
        with col_main:
            spotlight = st.empty()
            col_btn1, col_btn2 = st.columns([1, 1])
            with col_btn1:
                draw_clicked = st.button("추첨 시작", key="start_draw", type="primary", use_container_width=True)
            with col_btn2:
                st.button("초기화", key="reset_draw", on_click=on_reset_draw_click, use_container_width=True)
            pool_caption = st.empty()

        if draw_clicked:
            if engine.phase == ANIMATING:
                # 이전 실행이 중단된 경우(재실행) 애니메이션 상태를 정리
                engine.abort()
            reason = engine.blocked_reason()
            if reason:
                st.warning(message(reason, current_locale()))
            else:
                winner = engine.run_blocking(
                    on_tick=lambda name: spotlight.markdown(
                        spotlight_html(name, "Who's next?", spinning=True), unsafe_allow_html=True
                    ),
                )
                if winner is not None:
                    st.session_state["congrats_pending"] = engine.congratulation_request()
                    st.balloons()

        state = engine.state
        if state.winner is not None:
            spotlight.markdown(
                spotlight_html(state.winner.name, "Winner", congrats=state.congratulation),
                unsafe_allow_html=True,
            )
        else:
            spotlight.markdown(spotlight_html("???", "대기 중"), unsafe_allow_html=True)
        pool_caption.caption(f"현재 추첨 대상: {engine.pool_size}명")

        pending = st.session_state.get("congrats_pending")
        if pending is not None:
            st.session_state["congrats_pending"] = None
            with st.spinner("축하 메시지 작성 중…"):
                text = naming.generate_congratulation(pending.winner.name, current_locale())
            if engine.attach_congratulation(pending, text):
                spotlight.markdown(
                    spotlight_html(pending.winner.name, "Winner", congrats=text),
                    unsafe_allow_html=True,
                )
                toast(QUIPS[len(engine.state.history) % len(QUIPS)])

        with col_hist:
            st.markdown(f"#### 당첨 기록 ({len(engine.state.history)})")
            st.markdown(build_history_html(list(engine.state.history)), unsafe_allow_html=True)


with tab_group:
    st.subheader("조 편성")
    st.checkbox("AI 조 이름 생성", key="use_ai_names")
    if not roster:
        render_empty_roster()
    else:
        group_size = st.number_input(
            "조별 인원", min_value=1, max_value=max(1, len(roster)),
            value=min(DEFAULT_GROUP_SIZE, max(1, len(roster))), step=1,
        )
        st.caption(
            f"총 {len(roster)}명, 예상 {planned_group_count(len(roster), int(group_size))}개 조"
        )
        status_ph = st.empty()
        if st.button("조 편성 실행", key="run_grouping", type="primary"):
            try:
                status_ph.info("조 편성 중…")
                grouping.run(
                    roster,
                    int(group_size),
                    use_ai_names=bool(st.session_state.get("use_ai_names")),
                    locale=current_locale(),
                )
                status_ph.success("조 편성 완료!")
            except Exception as e:
                status_ph.empty()
                st.error(str(e))

        groups = grouping.groups
        if groups:
            st.divider()
            cols = st.columns(4)
            for i, group in enumerate(groups):
                with cols[i % 4]:
                    st.markdown(build_group_card_html(group), unsafe_allow_html=True)

            st.divider()
            col_d1, col_d2 = st.columns(2)
            with col_d1:
                st.download_button(
                    label="CSV 다운로드",
                    data=groups_to_csv_bytes(groups, current_locale()),
                    file_name=export_file_name("groups", "csv"),
                    mime=CSV_MIME,
                    key="download_groups_csv",
                )
            with col_d2:
                st.download_button(
                    label="엑셀 다운로드",
                    data=groups_to_excel_bytes(groups, current_locale()),
                    file_name=export_file_name("groups", "xlsx"),
                    mime=XLSX_MIME,
                    key="download_groups_xlsx",
                )
        else:
            st.caption("버튼을 눌러 조 편성을 시작하세요.")
