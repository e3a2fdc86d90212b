# -*- coding: utf-8 -*-
"""
RU: Иерархия исключений codewallet.
EN: Exception hierarchy for codewallet.

Guidelines:
- GenerationError never escapes BarcodeImageGenerator.render(); callers get a placeholder.
- PersistenceError is recoverable: the caller keeps its draft and may retry.
- Keep messages operational (what failed), the underlying error goes to __cause__.
"""

from __future__ import annotations

from typing import Optional


class CodeWalletError(Exception):
    """Base exception for all codewallet failures."""

    def __init__(
        self, message: str = "", *, cause: Optional[BaseException] = None
    ) -> None:
        super().__init__(message)
        if cause is not None:
            self.__cause__ = cause


# Image generation
class GenerationError(CodeWalletError):
    """Raised when a barcode image cannot be produced (encoding, backend, rasterization)."""


# Storage
class StorageError(CodeWalletError):
    """Base class for record storage failures."""


class StorageReadError(StorageError):
    """Raised when the persisted collection cannot be read or parsed."""


class PersistenceError(StorageError):
    """Raised when a create/delete commit cannot be written."""


# Scanning
class ScanError(CodeWalletError):
    """Raised when a decoder cannot run (missing library, unreadable image)."""


# Draft flow
class InvalidTransitionError(CodeWalletError):
    """Raised when the new-record flow is asked for a transition its state does not allow."""


__all__ = [
    "CodeWalletError",
    "GenerationError",
    "StorageError",
    "StorageReadError",
    "PersistenceError",
    "ScanError",
    "InvalidTransitionError",
]
