"""Events page - per-notification log from /v1/upload/events."""

import requests
import streamlit as st

API_BASE = "http://localhost:8000"


def get_api_base() -> str:
    return st.session_state.get("api_base", API_BASE)


st.title("Events")
st.caption("Posts to /v1/upload/events and replays the field / fileBegin / file / end notifications.")

api_base = st.text_input("API Base URL", value=API_BASE, key="api_base")
title = st.text_input("Title field", value="Event demo")
uploaded_files = st.file_uploader("Choose files", accept_multiple_files=True)

if st.button("Upload"):
    base = get_api_base()
    files = [
        ("upload", (f.name, f.getvalue(), f.type or "application/octet-stream"))
        for f in uploaded_files or []
    ]
    with st.spinner("Uploading..."):
        try:
            r = requests.post(
                f"{base}/v1/upload/events",
                data={"title": title},
                files=files or None,
                timeout=60,
            )
        except requests.RequestException as e:
            st.error(f"Upload failed: {e}")
            st.stop()

    data = r.json()
    if not r.ok:
        st.error(f"{r.status_code}: {data.get('detail')} (trace {data.get('trace_id')})")
        st.stop()

    st.subheader("Event log")
    for i, ev in enumerate(data["events"], 1):
        line = f"{i}. `{ev['event']}`"
        if ev.get("name"):
            line += f" **{ev['name']}**"
        if ev["event"] == "field":
            line += f" = {ev['value']!r}"
        elif ev.get("file"):
            f = ev["file"]
            line += f" {f['name']} ({f['type']}, {f['size']} bytes) -> `{f['path']}`"
        st.markdown(line)
