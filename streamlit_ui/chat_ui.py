from typing import Any, Dict, List, Optional

import requests
import streamlit as st
import streamlit.components.v1 as components
from requests.exceptions import RequestException

from core.settings import SETTINGS
from streamlit_ui.i18n import DEFAULT_LANGUAGE, LANGUAGES, translate


st.set_page_config(page_title="Article Chat", layout="wide")

API_BASE_URL = SETTINGS.UI.API_BASE_URL.rstrip("/")
CONVERSATIONS_URL = f"{API_BASE_URL}/api/conversations"
CHAT_URL = f"{API_BASE_URL}/api/chat"
HEADERS = {SETTINGS.AUTH.USER_HEADER: SETTINGS.UI.USER_ID}

if "conversation_id" not in st.session_state:
    st.session_state.conversation_id = None
if "messages" not in st.session_state:
    st.session_state.messages = []
if "language" not in st.session_state:
    st.session_state.language = DEFAULT_LANGUAGE
if "pending_delete" not in st.session_state:
    st.session_state.pending_delete = None


def t(key: str, **params) -> str:
    return translate(st.session_state.language, key, **params)


def api_call(method: str, url: str, **kwargs) -> Optional[requests.Response]:
    """Call the API with the session header; errors are shown, not raised."""
    try:
        resp = requests.request(method, url, headers=HEADERS, timeout=120, **kwargs)
    except RequestException as e:
        st.error(f"Failed to reach API at {url}: {e}")
        return None
    if resp.status_code >= 400:
        try:
            body = resp.json()
            detail = body.get("message") or body.get("detail") or body
        except ValueError:
            detail = resp.text
        st.error(f"API error {resp.status_code}: {detail}")
        return None
    return resp


def list_conversations() -> List[Dict[str, Any]]:
    resp = api_call("GET", CONVERSATIONS_URL)
    return resp.json() if resp is not None else []


def load_conversation(conversation_id: str) -> None:
    resp = api_call("GET", f"{CONVERSATIONS_URL}/{conversation_id}")
    if resp is None:
        return
    data = resp.json()
    st.session_state.conversation_id = data["id"]
    st.session_state.messages = [
        {"role": m["role"], "content": m["content"], "sources": m.get("sources") or []}
        for m in data.get("messages", [])
    ]


def delete_conversation(conversation_id: str) -> None:
    if api_call("DELETE", f"{CONVERSATIONS_URL}/{conversation_id}") is None:
        return
    if st.session_state.conversation_id == conversation_id:
        start_new_conversation()


def start_new_conversation() -> None:
    st.session_state.conversation_id = None
    st.session_state.messages = []


def fetch_report(conversation_id: str) -> Optional[str]:
    try:
        resp = requests.get(
            f"{CONVERSATIONS_URL}/{conversation_id}/report", headers=HEADERS, timeout=60
        )
    except RequestException as e:
        st.error(f"Failed to fetch report: {e}")
        return None
    return resp.text if resp.status_code == 200 else None


def ask(message: str) -> Optional[Dict[str, Any]]:
    payload: Dict[str, Any] = {"message": message}
    if st.session_state.conversation_id:
        payload["conversationId"] = st.session_state.conversation_id
    resp = api_call("POST", CHAT_URL, json=payload)
    return resp.json() if resp is not None else None


def render_sources(sources: List[Dict[str, str]]) -> None:
    if not sources:
        return
    with st.expander(t("messages.sources", count=len(sources))):
        for s in sources:
            st.markdown(f"- [{s.get('title') or s.get('link')}]({s.get('link')})")


# Sidebar: language and conversations
with st.sidebar:
    st.selectbox(
        "Idioma / Language",
        options=list(LANGUAGES),
        format_func=LANGUAGES.get,
        key="language",
    )
    st.subheader(t("sidebar.title"))
    st.caption(t("sidebar.signedInAs", user=SETTINGS.UI.USER_ID))
    if st.button(t("sidebar.newConversation"), use_container_width=True):
        start_new_conversation()
    conversations = list_conversations()
    if not conversations:
        st.caption(t("sidebar.noConversations"))
    for conv in conversations:
        col_open, col_delete = st.columns([5, 1])
        is_current = conv["id"] == st.session_state.conversation_id
        label = ("▶ " if is_current else "") + conv["title"]
        if col_open.button(label, key=f"open-{conv['id']}", use_container_width=True):
            load_conversation(conv["id"])
        if col_delete.button("✕", key=f"delete-{conv['id']}"):
            st.session_state.pending_delete = conv["id"]
        if st.session_state.pending_delete == conv["id"]:
            st.warning(t("sidebar.deleteConfirm"))
            col_yes, col_no = st.columns(2)
            if col_yes.button(t("sidebar.delete"), key=f"confirm-{conv['id']}"):
                st.session_state.pending_delete = None
                delete_conversation(conv["id"])
                st.rerun()
            if col_no.button(t("sidebar.cancel"), key=f"cancel-{conv['id']}"):
                st.session_state.pending_delete = None
                st.rerun()

st.title(t("page.title"))

# Chat history
for msg in st.session_state.messages:
    with st.chat_message(msg["role"]):
        st.markdown(msg["content"])
        render_sources(msg.get("sources") or [])

if prompt := st.chat_input(t("messages.placeholder")):
    st.session_state.messages.append({"role": "user", "content": prompt, "sources": []})
    with st.chat_message("user"):
        st.markdown(prompt)

    with st.chat_message("assistant"):
        with st.spinner(t("messages.searching")):
            result = ask(prompt)
        if result is not None:
            answer = result.get("message", "")
            sources = result.get("sources") or []
            st.markdown(answer)
            render_sources(sources)
            st.session_state.messages.append(
                {"role": "assistant", "content": answer, "sources": sources}
            )
            if result.get("conversationId"):
                st.session_state.conversation_id = result["conversationId"]

# Report of the current conversation
if st.session_state.conversation_id:
    with st.expander(t("report.title")):
        html_report = fetch_report(st.session_state.conversation_id)
        if html_report:
            components.html(html_report, height=600, scrolling=True)
        else:
            st.info(t("report.empty"))
