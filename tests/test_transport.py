from __future__ import annotations

import json
import urllib.error
from typing import Any, List, Optional

import pytest

from field_client.services.transport import (
    DocumentTransport,
    SigningRequest,
    TransportError,
    encode_multipart,
)
from field_engine.geometry import Rect


class _FakeResponse:
    def __init__(self, body: bytes) -> None:
        self._body = body

    def read(self) -> bytes:
        return self._body

    def __enter__(self) -> "_FakeResponse":
        return self

    def __exit__(self, *exc_info: Any) -> bool:
        return False


class _FakeOpener:
    def __init__(self, payload: Any = None, *, raw: Optional[bytes] = None, error: Optional[Exception] = None) -> None:
        self._payload = payload
        self._raw = raw
        self._error = error
        self.requests: List[Any] = []
        self.timeouts: List[Optional[float]] = []

    def __call__(self, request, timeout=None):
        self.requests.append(request)
        self.timeouts.append(timeout)
        if self._error is not None:
            raise self._error
        body = self._raw if self._raw is not None else json.dumps(self._payload).encode("utf-8")
        return _FakeResponse(body)


def _signing_request() -> SigningRequest:
    return SigningRequest(
        document_id="doc-42",
        signature_image="data:image/png;base64,AAAA",
        coordinates=Rect(66.67, 742.0, 100.0, 33.33),
    )


def test_encode_multipart_wraps_single_file_part() -> None:
    body, header = encode_multipart("pdf", "contract.pdf", b"%PDF-1.7", "application/pdf")
    boundary = header.split("boundary=", 1)[1]
    assert header.startswith("multipart/form-data; ")
    assert body.startswith(f"--{boundary}\r\n".encode("utf-8"))
    assert body.endswith(f"\r\n--{boundary}--\r\n".encode("utf-8"))
    assert b'name="pdf"; filename="contract.pdf"' in body
    assert b"Content-Type: application/pdf\r\n\r\n%PDF-1.7" in body


def test_upload_posts_multipart_and_returns_document_id() -> None:
    opener = _FakeOpener({"success": True, "pdfId": "doc-42"})
    transport = DocumentTransport("https://signing.example/", timeout=7.5, opener=opener)

    assert transport.upload_document(b"%PDF-1.7 data", "contract.pdf") == "doc-42"

    request = opener.requests[0]
    assert transport.api_url == "https://signing.example"
    assert request.full_url == "https://signing.example/api/upload-pdf"
    assert request.get_method() == "POST"
    assert request.get_header("Content-type").startswith("multipart/form-data; boundary=")
    assert b"%PDF-1.7 data" in request.data
    assert opener.timeouts == [7.5]


@pytest.mark.parametrize(
    "payload",
    [
        {"success": False, "pdfId": "doc-42"},
        {"success": True},
        {"success": True, "pdfId": ""},
    ],
)
def test_upload_rejects_unsuccessful_responses(payload) -> None:
    transport = DocumentTransport("https://signing.example", opener=_FakeOpener(payload))
    with pytest.raises(TransportError):
        transport.upload_document(b"%PDF", "contract.pdf")


def test_sign_posts_json_payload() -> None:
    opener = _FakeOpener(
        {"success": True, "downloadUrl": "https://signing.example/files/doc-42.pdf", "auditTrail": [{"step": "signed"}]}
    )
    transport = DocumentTransport("https://signing.example", opener=opener)

    result = transport.sign_document(_signing_request())

    request = opener.requests[0]
    assert request.full_url == "https://signing.example/api/sign-pdf"
    assert request.get_header("Content-type") == "application/json"
    assert json.loads(request.data.decode("utf-8")) == {
        "pdfId": "doc-42",
        "signatureImage": "data:image/png;base64,AAAA",
        "coordinates": {"x": 66.67, "y": 742.0, "width": 100.0, "height": 33.33},
    }
    assert result.success is True
    assert result.download_url == "https://signing.example/files/doc-42.pdf"
    assert result.audit_trail == [{"step": "signed"}]


def test_sign_wraps_scalar_audit_trail() -> None:
    opener = _FakeOpener({"success": True, "downloadUrl": None, "auditTrail": "hash:abc"})
    result = DocumentTransport("https://signing.example", opener=opener).sign_document(_signing_request())
    assert result.audit_trail == ["hash:abc"]
    assert result.download_url is None


def test_sign_failure_flag_raises() -> None:
    transport = DocumentTransport("https://signing.example", opener=_FakeOpener({"success": False}))
    with pytest.raises(TransportError, match="Failed to sign document"):
        transport.sign_document(_signing_request())


def test_http_error_becomes_transport_error() -> None:
    error = urllib.error.HTTPError("https://signing.example/api/sign-pdf", 500, "boom", None, None)
    transport = DocumentTransport("https://signing.example", opener=_FakeOpener(error=error))
    with pytest.raises(TransportError, match="HTTP 500"):
        transport.sign_document(_signing_request())


def test_unreachable_service_becomes_transport_error() -> None:
    transport = DocumentTransport(
        "https://signing.example",
        opener=_FakeOpener(error=urllib.error.URLError("connection refused")),
    )
    with pytest.raises(TransportError, match="Unable to reach"):
        transport.upload_document(b"%PDF", "contract.pdf")


@pytest.mark.parametrize("raw", [b"<html>oops</html>", b"[1, 2, 3]", b"\xff\xfe"])
def test_malformed_response_becomes_transport_error(raw: bytes) -> None:
    transport = DocumentTransport("https://signing.example", opener=_FakeOpener(raw=raw))
    with pytest.raises(TransportError, match="Malformed"):
        transport.upload_document(b"%PDF", "contract.pdf")
