import os
from pathlib import Path

import requests
import streamlit as st

API_BASE = os.getenv("HEIC_SERVICE_API_BASE", os.getenv("API_BASE", "http://localhost:8080")).rstrip("/")
DEFAULT_QUALITY = int(os.getenv("DEFAULT_QUALITY", "85"))


def _reset_state():
    for key in ["jpeg", "jpeg_name", "error"]:
        if key in st.session_state:
            del st.session_state[key]
    # Bump the uploader key to clear any previously uploaded file widget state
    st.session_state["upload_key"] = st.session_state.get("upload_key", 0) + 1


def _error_message(resp: requests.Response) -> str:
    try:
        detail = resp.json().get("detail")
    except ValueError:
        return f"{resp.status_code} {resp.text}"
    if isinstance(detail, dict):
        return f"{resp.status_code} {detail.get('code', '')}: {detail.get('message', '')}"
    return f"{resp.status_code} {detail}"


def _convert_via_api(name: str, data: bytes, quality: int) -> tuple[bytes | None, str | None]:
    """POST one HEIC file to /convert. Returns (jpeg bytes, None) or (None, error text)."""
    files = {"file": (name, data, "image/heic")}
    try:
        resp = requests.post(f"{API_BASE}/convert", params={"quality": quality}, files=files, timeout=120)
    except requests.RequestException as e:
        return None, f"Failed to connect to API: {e}"
    if resp.status_code != 200:
        return None, f"Conversion failed: {_error_message(resp)}"
    return resp.content, None


def main() -> None:
    st.set_page_config(page_title="HEIC Conversion Service", page_icon="🖼️", layout="centered")
    st.title("🖼️ HEIC to JPEG")
    st.caption(f"API base: {API_BASE}")

    if st.button("Restart", type="secondary"):
        _reset_state()
        st.rerun()

    if "upload_key" not in st.session_state:
        st.session_state["upload_key"] = 0
    uploaded = st.file_uploader(
        "Upload a HEIC photo",
        type=["heic", "heif"],
        key=f"uploader-{st.session_state['upload_key']}",
    )
    quality = st.slider("JPEG quality (recommended 75-95)", min_value=1, max_value=100, value=DEFAULT_QUALITY)

    if uploaded and st.button("Convert", type="primary"):
        with st.spinner("Converting..."):
            jpeg, err = _convert_via_api(uploaded.name, uploaded.getvalue(), quality)
        if jpeg is not None:
            st.session_state["jpeg"] = jpeg
            st.session_state["jpeg_name"] = f"{Path(uploaded.name).stem}.jpg"
            st.session_state.pop("error", None)
        else:
            st.session_state["error"] = err

    if "jpeg" in st.session_state:
        st.success("Conversion complete!")
        st.download_button(
            label="Download JPEG",
            data=st.session_state["jpeg"],
            file_name=st.session_state["jpeg_name"],
            mime="image/jpeg",
        )
        with st.expander("Preview", expanded=True):
            st.image(st.session_state["jpeg"])

    if err := st.session_state.get("error"):
        st.error(err)


if __name__ == "__main__":
    main()
