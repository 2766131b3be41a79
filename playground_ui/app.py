"""Streamlit playground - HTTP only, no backend imports."""

import streamlit as st

st.set_page_config(page_title="Form Upload Playground", layout="wide")
st.title("Form Upload Service Playground")
st.markdown("Send multipart uploads to the service and inspect what it parsed. Talks to the backend over HTTP only.")

st.header("How it works")

st.markdown("""
Each request body is parsed by an **IncomingForm**. Non-file parts become *fields*;
file parts are streamed to the upload directory and described by their
`size`, `path`, `name` and `type`.

The service shows the two ways of consuming a form:

1. **Completion callback** - one callback receives `(error, fields, files)` once the body is done.
2. **Notifications** - listeners for `field`, `fileBegin`, `file`, `aborted`, `error` and `end`
   run while the body is still arriving.
""")

st.subheader("Endpoints")

st.markdown("""
Base URL defaults to `http://localhost:8000`.

| Method | Path | Purpose |
|--------|------|---------|
| GET | `/` | HTML upload form |
| POST | `/v1/upload` | Parse with a completion callback |
| POST | `/v1/upload/events` | Parse with per-event listeners, returns the event log |
| GET | `/health` | Service status and upload directory |
""")

st.subheader("POST /v1/upload")

st.markdown("**Request**")
st.code("""
POST /v1/upload
Content-Type: multipart/form-data; boundary=...

title: <text>
upload: <binary>   # one or more files
""", language="text")

st.markdown("**Response**")
st.code("""
{
  "fields": {"title": "Holiday"},
  "files": {
    "upload": {
      "size": 48213,
      "path": "/tmp/formupload/upload_3f2c...",
      "name": "beach.jpg",
      "type": "image/jpeg",
      "field_name": "upload",
      "hash": null,
      "last_modified_date": "2026-10-19T..."
    }
  }
}
""", language="json")

st.subheader("Errors")

st.markdown("""
| Status | When |
|--------|------|
| 400 | Malformed body, truncated upload, client aborted |
| 413 | `max_fields`, `max_fields_size`, `max_file_size` or `max_total_file_size` exceeded |
| 415 | Missing or unsupported Content-Type |
| 422 | Empty file while `allow_empty_files` is off |

Error bodies carry `detail`, `error` (the exception class) and `trace_id`.
""")

st.markdown("---")
st.caption("Use the Upload and Events pages in the sidebar to try it.")
