"""Upload page - fields and files through the completion-callback route."""

import requests
import streamlit as st

API_BASE = "http://localhost:8000"


def get_api_base() -> str:
    return st.session_state.get("api_base", API_BASE)


st.title("Upload")
st.caption("Posts multipart/form-data to /v1/upload and shows the parsed fields and files.")

api_base = st.text_input("API Base URL", value=API_BASE, key="api_base")
title = st.text_input("Title field", value="My upload")
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
                f"{base}/v1/upload",
                data={"title": title},
                files=files or None,
                timeout=60,
            )
        except requests.RequestException as e:
            st.error(f"Upload failed: {e}")
            st.stop()

    if not r.ok:
        body = r.json()
        st.error(f"{r.status_code}: {body.get('detail')} (trace {body.get('trace_id')})")
        st.stop()

    data = r.json()
    st.success(f"Parsed {len(data['fields'])} field(s) and {len(data['files'])} file field(s)")
    st.subheader("Fields")
    st.json(data["fields"])
    st.subheader("Files")
    rows = []
    for name, entry in data["files"].items():
        for f in entry if isinstance(entry, list) else [entry]:
            rows.append({"field": name, "name": f["name"], "type": f["type"], "size": f["size"], "path": f["path"]})
    if rows:
        st.dataframe(rows, use_container_width=True)
    else:
        st.info("No files were uploaded.")
