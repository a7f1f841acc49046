from __future__ import annotations

import os
from typing import Dict, List, Optional

import requests
import streamlit as st


DEFAULT_BACKEND_URL = os.getenv("COPILOT_METRICS_BACKEND_URL", "http://localhost:8000")


st.set_page_config(
    page_title="Copilot Metrics Dashboard",
    layout="wide",
)


def get_backend_url() -> str:
    return st.session_state.get("backend_url", DEFAULT_BACKEND_URL)


def initialize_state() -> None:
    st.session_state.setdefault("backend_url", DEFAULT_BACKEND_URL)


def api_get(path: str) -> object:
    response = requests.get(f"{get_backend_url()}{path}", timeout=15)
    response.raise_for_status()
    return response.json()


def api_post(path: str, payload: Optional[Dict[str, object]] = None) -> Dict[str, object]:
    response = requests.post(f"{get_backend_url()}{path}", json=payload, timeout=60)
    if response.status_code == 422:
        raise ValueError(response.json().get("detail", "Failed to load metrics."))
    response.raise_for_status()
    return response.json()


def chart_frame(name: str) -> Dict[str, List[object]]:
    chart = api_get(f"/charts/{name}")
    frame: Dict[str, List[object]] = {"label": chart["labels"]}
    for dataset in chart["datasets"]:
        frame[dataset["label"]] = dataset["data"]
    return frame


def run_action(action, success_message: str) -> None:
    try:
        action()
        st.sidebar.success(success_message)
    except ValueError as exc:
        st.sidebar.error(str(exc))
    except requests.RequestException as exc:
        st.sidebar.error(f"Unable to reach backend: {exc}")


def render_sidebar() -> None:
    st.sidebar.title("Data source")
    backend_url = st.sidebar.text_input("Backend URL", value=get_backend_url())
    if backend_url != get_backend_url():
        st.session_state["backend_url"] = backend_url
    st.sidebar.markdown("---")

    path = st.sidebar.text_input("NDJSON path or URL", value="")
    if st.sidebar.button("Load"):
        run_action(lambda: api_post("/load", {"path": path or None}), "Metrics loaded.")

    upload = st.sidebar.file_uploader("Or upload an export", type=["ndjson", "jsonl", "json", "txt"])
    if upload is not None and st.sidebar.button("Load upload"):
        run_action(
            lambda: api_post("/load-text", {"text": upload.getvalue().decode("utf-8-sig")}),
            "Upload loaded.",
        )

    if st.sidebar.button("Clear"):
        run_action(lambda: api_post("/clear"), "Metrics cleared.")


def render_global(stats: Dict[str, object]) -> None:
    st.caption(f"Report period: {stats['report_start_day']} to {stats['report_end_day']}")
    columns = st.columns(5)
    columns[0].metric("Users", stats["total_users"])
    columns[1].metric("Interactions", stats["total_interactions"])
    columns[2].metric("Code generated", stats["total_code_generated"])
    columns[3].metric("Acceptance rate", f"{stats['average_acceptance_rate']}%")
    columns[4].metric("LOC added", stats["total_loc_added"])


def render_charts() -> None:
    left, right = st.columns(2)
    with left:
        st.subheader("Daily active users")
        st.line_chart(chart_frame("daily-users"), x="label")
        st.subheader("Features")
        st.bar_chart(chart_frame("features"), x="label")
    with right:
        st.subheader("Daily interactions")
        st.line_chart(chart_frame("daily-interactions"), x="label")
        st.subheader("Top languages")
        st.bar_chart(chart_frame("languages"), x="label", horizontal=True)
    st.subheader("Editors")
    st.dataframe(api_get("/ides"), use_container_width=True)


def render_users() -> None:
    users: List[Dict[str, object]] = api_get("/users")
    st.subheader("Users")
    st.dataframe(users, use_container_width=True)
    logins = [user["user_login"] for user in users]
    selected = st.selectbox("User detail", options=[None, *logins], format_func=lambda value: value or "-")
    if selected:
        detail = api_get(f"/users/{selected}")
        summary = detail["summary"]
        st.markdown(
            f"**{summary['user_login']}** - {summary['active_days']} active days, "
            f"last active {summary['last_active_day']}, primary editor {summary['primary_ide']}"
        )
        st.dataframe(
            [
                {
                    "day": record["day"],
                    "interactions": record["user_initiated_interaction_count"],
                    "generated": record["code_generation_activity_count"],
                    "accepted": record["code_acceptance_activity_count"],
                }
                for record in detail["records"]
            ],
            use_container_width=True,
        )


def main() -> None:
    initialize_state()
    render_sidebar()
    st.header("Copilot Metrics Dashboard")
    try:
        status = api_get("/status")
    except requests.RequestException as exc:
        st.error(f"Unable to reach backend: {exc}")
        return
    if status.get("error"):
        st.warning(status["error"])
    if not status.get("is_data_loaded"):
        st.info("Load a metrics export to get started.")
        return

    render_global(api_get("/global"))
    overview, users = st.tabs(["Overview", "Users"])
    with overview:
        render_charts()
    with users:
        render_users()


if __name__ == "__main__":
    main()
