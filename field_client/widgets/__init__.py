from .coordinates import CoordinatePanel, document_summary, screen_summary
from .palette import FieldPalette, FieldToken, build_token_mime

__all__ = [
    "CoordinatePanel",
    "FieldPalette",
    "FieldToken",
    "build_token_mime",
    "document_summary",
    "screen_summary",
]
