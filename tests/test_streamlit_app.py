import pytest
import requests

from heic_service import streamlit_app


class FakeResponse:
    def __init__(self, status_code: int, content: bytes = b"", payload=None) -> None:
        self.status_code = status_code
        self.content = content
        self.text = content.decode("latin-1")
        self._payload = payload

    def json(self):
        if self._payload is None:
            raise ValueError("no json body")
        return self._payload


@pytest.fixture
def calls(monkeypatch):
    recorded = []

    def install(response):
        def fake_post(url, **kwargs):
            recorded.append((url, kwargs))
            if isinstance(response, Exception):
                raise response
            return response

        monkeypatch.setattr(streamlit_app.requests, "post", fake_post)
        return recorded

    return install


def test_convert_via_api_success(calls):
    recorded = calls(FakeResponse(200, b"\xff\xd8jpeg"))

    jpeg, err = streamlit_app._convert_via_api("IMG_0001.HEIC", b"heic", 90)

    assert (jpeg, err) == (b"\xff\xd8jpeg", None)
    url, kwargs = recorded[0]
    assert url == f"{streamlit_app.API_BASE}/convert"
    assert kwargs["params"] == {"quality": 90}
    assert kwargs["files"]["file"] == ("IMG_0001.HEIC", b"heic", "image/heic")


def test_convert_via_api_structured_error(calls):
    detail = {"code": "decode_init_failed", "message": "could not read HEIC file"}
    calls(FakeResponse(422, b"{}", {"detail": detail}))

    jpeg, err = streamlit_app._convert_via_api("bad.heic", b"x", 85)

    assert jpeg is None
    assert err == "Conversion failed: 422 decode_init_failed: could not read HEIC file"


def test_convert_via_api_plain_text_error(calls):
    calls(FakeResponse(502, b"Bad Gateway"))

    _, err = streamlit_app._convert_via_api("a.heic", b"x", 85)

    assert err == "Conversion failed: 502 Bad Gateway"


def test_convert_via_api_connection_error(calls):
    calls(requests.ConnectionError("refused"))

    jpeg, err = streamlit_app._convert_via_api("a.heic", b"x", 85)

    assert jpeg is None
    assert err.startswith("Failed to connect to API: ")
