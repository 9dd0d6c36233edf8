from __future__ import annotations  # Session report package exports

from .pdf import SessionPDF, generate_session_pdf

__all__ = ["SessionPDF", "generate_session_pdf"]
