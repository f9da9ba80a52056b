"""HTTP transport for the document upload and signing backend."""
from __future__ import annotations

import json
import logging
import urllib.error
import urllib.request
import uuid
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

from field_engine.geometry import Rect

LOGGER = logging.getLogger("FieldPlacer.Client")

JsonDict = Dict[str, Any]
OpenFn = Callable[..., Any]

UPLOAD_PATH = "/api/upload-pdf"
SIGN_PATH = "/api/sign-pdf"


class TransportError(RuntimeError):
    """Upload or signing failed; the message is suitable for an alert."""


@dataclass(frozen=True)
class SigningRequest:
    document_id: str
    signature_image: str
    coordinates: Rect

    def as_payload(self) -> JsonDict:
        return {
            "pdfId": self.document_id,
            "signatureImage": self.signature_image,
            "coordinates": self.coordinates.as_dict(),
        }


@dataclass(frozen=True)
class SigningResult:
    success: bool
    download_url: Optional[str] = None
    audit_trail: List[Any] = field(default_factory=list)


def encode_multipart(field_name: str, filename: str, data: bytes, content_type: str) -> tuple[bytes, str]:
    """Return ``(body, content_type_header)`` for a single-file form upload."""

    boundary = f"----FieldPlacer{uuid.uuid4().hex}"
    head = (
        f"--{boundary}\r\n"
        f'Content-Disposition: form-data; name="{field_name}"; filename="{filename}"\r\n'
        f"Content-Type: {content_type}\r\n\r\n"
    ).encode("utf-8")
    tail = f"\r\n--{boundary}--\r\n".encode("utf-8")
    return head + data + tail, f"multipart/form-data; boundary={boundary}"


class DocumentTransport:
    """Thin client for the backend's upload and sign endpoints."""

    def __init__(self, api_url: str, *, timeout: float = 30.0, opener: Optional[OpenFn] = None) -> None:
        self._api_url = api_url.rstrip("/")
        self._timeout = timeout
        self._open = opener or urllib.request.urlopen

    @property
    def api_url(self) -> str:
        return self._api_url

    def upload_document(self, data: bytes, filename: str = "document.pdf") -> str:
        body, content_type = encode_multipart("pdf", filename, data, "application/pdf")
        request = urllib.request.Request(
            self._api_url + UPLOAD_PATH,
            data=body,
            method="POST",
            headers={"Content-Type": content_type},
        )
        response = self._send(request, "upload")
        document_id = response.get("pdfId")
        if not response.get("success") or not document_id:
            raise TransportError("Failed to upload PDF")
        LOGGER.info("Uploaded %s (%d bytes) as %s", filename, len(data), document_id)
        return str(document_id)

    def sign_document(self, signing: SigningRequest) -> SigningResult:
        request = urllib.request.Request(
            self._api_url + SIGN_PATH,
            data=json.dumps(signing.as_payload()).encode("utf-8"),
            method="POST",
            headers={"Content-Type": "application/json"},
        )
        response = self._send(request, "sign")
        if not response.get("success"):
            raise TransportError("Failed to sign document")
        trail = response.get("auditTrail")
        result = SigningResult(
            success=True,
            download_url=response.get("downloadUrl"),
            audit_trail=list(trail) if isinstance(trail, list) else ([] if trail is None else [trail]),
        )
        LOGGER.info("Signed document %s; download=%s", signing.document_id, result.download_url)
        return result

    def _send(self, request: urllib.request.Request, action: str) -> JsonDict:
        try:
            with self._open(request, timeout=self._timeout) as response:
                raw = response.read()
        except urllib.error.HTTPError as exc:
            LOGGER.warning("%s request to %s failed with HTTP %s", action, request.full_url, exc.code)
            raise TransportError(f"Server rejected {action} request (HTTP {exc.code})") from exc
        except (urllib.error.URLError, OSError) as exc:
            LOGGER.warning("%s request to %s failed: %s", action, request.full_url, exc)
            raise TransportError(f"Unable to reach signing service: {exc}") from exc
        try:
            payload = json.loads(raw.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise TransportError(f"Malformed {action} response") from exc
        if not isinstance(payload, dict):
            raise TransportError(f"Malformed {action} response")
        return payload
