"""View-model adapters for the rendering layer."""

from .document_viewmodel import (
    build_document_display,
    build_document_model,
    explorer_url,
    truncate_hash,
)

__all__ = [
    "build_document_display",
    "build_document_model",
    "explorer_url",
    "truncate_hash",
]
