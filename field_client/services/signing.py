"""Business-layer checks run before a signing request is sent."""
from __future__ import annotations

import base64
import mimetypes
from pathlib import Path
from typing import Optional

from field_engine.field_kinds import FieldKind
from field_engine.field_store import FieldStore
from field_client.services.transport import SigningRequest

MISSING_SIGNATURE = "Please upload a signature image first"
MISSING_FIELD = "Please place a signature field on the document"
MISSING_DOCUMENT = "Please upload a PDF first"


class SigningPreconditionError(ValueError):
    """A signing precondition is not met; ``str(exc)`` is the user-facing alert."""


def load_signature_payload(path: Path) -> str:
    """Read an image file and encode it as a ``data:`` URL."""

    data = Path(path).read_bytes()
    mime, _ = mimetypes.guess_type(str(path))
    if not mime or not mime.startswith("image/"):
        mime = "image/png"
    encoded = base64.b64encode(data).decode("ascii")
    return f"data:{mime};base64,{encoded}"


def build_signing_request(
    document_id: Optional[str],
    signature_payload: Optional[str],
    store: FieldStore,
) -> SigningRequest:
    """Validate preconditions in the order the user sees them and build the request."""

    if not signature_payload:
        raise SigningPreconditionError(MISSING_SIGNATURE)
    signature_field = store.first_of_kind(FieldKind.SIGNATURE)
    if signature_field is None:
        raise SigningPreconditionError(MISSING_FIELD)
    if not document_id:
        raise SigningPreconditionError(MISSING_DOCUMENT)
    return SigningRequest(
        document_id=document_id,
        signature_image=signature_payload,
        coordinates=signature_field.document_rect,
    )
