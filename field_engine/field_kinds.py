"""Closed set of field kinds and their presentation lookup table."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional


class FieldKind(str, Enum):
    SIGNATURE = "signature"
    TEXT = "text"
    IMAGE = "image"
    DATE = "date"
    RADIO = "radio"


@dataclass(frozen=True)
class FieldKindInfo:
    label: str
    icon: str
    color: str


FIELD_KIND_INFO: Dict[FieldKind, FieldKindInfo] = {
    FieldKind.SIGNATURE: FieldKindInfo(label="Signature", icon="square", color="#3b82f6"),
    FieldKind.TEXT: FieldKindInfo(label="Text Box", icon="type", color="#22c55e"),
    FieldKind.IMAGE: FieldKindInfo(label="Image", icon="image", color="#a855f7"),
    FieldKind.DATE: FieldKindInfo(label="Date", icon="calendar", color="#f97316"),
    FieldKind.RADIO: FieldKindInfo(label="Radio", icon="circle", color="#ec4899"),
}


def kind_info(kind: FieldKind) -> FieldKindInfo:
    return FIELD_KIND_INFO[kind]


def parse_kind(value: object) -> Optional[FieldKind]:
    """Return the matching kind for a token such as ``"Signature"``; None when unknown."""

    if isinstance(value, FieldKind):
        return value
    if value is None:
        return None
    try:
        token = str(value).strip().lower()
    except Exception:
        return None
    try:
        return FieldKind(token)
    except ValueError:
        return None
