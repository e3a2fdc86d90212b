# -*- coding: utf-8 -*-
"""
RU: Параметры генерации изображений и хранилища записей.
EN: Rendering and storage settings as validated frozen dataclasses.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Final, Mapping

DEFAULT_UPSCALE_FACTOR: Final[int] = 10
DEFAULT_PLACEHOLDER_SIZE: Final[int] = 64
DEFAULT_STORAGE_PATH: Final[str] = "codewallet.json"

# Upper bound keeps a 10x QR of version 40 (177 modules + border) well under 5000 px
MAX_UPSCALE_FACTOR: Final[int] = 25

QR_ERROR_LEVELS: Final[frozenset[str]] = frozenset({"L", "M", "Q", "H"})


@dataclass(frozen=True)
class RenderConfig:
    """
    Barcode rendering parameters.

    Attributes:
        upscale_factor: Integer scale applied to the raw one-pixel-per-module image.
        placeholder_size: Side length of the "unavailable" image in pixels.
        qr_error_correction: QR error correction level.

    Examples:
        >>> RenderConfig().upscale_factor
        10

        >>> RenderConfig(upscale_factor=3).upscale_factor
        3
    """

    upscale_factor: int = DEFAULT_UPSCALE_FACTOR
    placeholder_size: int = DEFAULT_PLACEHOLDER_SIZE
    qr_error_correction: str = "M"

    def __post_init__(self) -> None:
        """Validate parameters."""
        if not isinstance(self.upscale_factor, int) or isinstance(
            self.upscale_factor, bool
        ):
            raise ValueError("upscale_factor must be an integer")
        if not 1 <= self.upscale_factor <= MAX_UPSCALE_FACTOR:
            raise ValueError(f"upscale_factor must be between 1 and {MAX_UPSCALE_FACTOR}")
        if self.placeholder_size < 8:
            raise ValueError("placeholder_size must be >= 8")
        if self.qr_error_correction not in QR_ERROR_LEVELS:
            raise ValueError(
                f"qr_error_correction must be one of {sorted(QR_ERROR_LEVELS)}"
            )

    @staticmethod
    def from_mapping(data: Mapping[str, Any]) -> "RenderConfig":
        """Build from a load_config() dict, ignoring unrelated keys."""
        return RenderConfig(
            upscale_factor=int(data.get("upscale_factor", DEFAULT_UPSCALE_FACTOR)),
            placeholder_size=int(data.get("placeholder_size", DEFAULT_PLACEHOLDER_SIZE)),
            qr_error_correction=str(data.get("qr_error_correction", "M")).upper(),
        )


@dataclass(frozen=True)
class StoreConfig:
    """Where the record store keeps its JSON file."""

    storage_path: str = DEFAULT_STORAGE_PATH

    def __post_init__(self) -> None:
        if not isinstance(self.storage_path, str) or not self.storage_path:
            raise ValueError("storage_path must be a non-empty string")

    @staticmethod
    def from_mapping(data: Mapping[str, Any]) -> "StoreConfig":
        return StoreConfig(storage_path=str(data.get("storage_path", DEFAULT_STORAGE_PATH)))


__all__ = [
    "RenderConfig",
    "StoreConfig",
    "DEFAULT_UPSCALE_FACTOR",
    "DEFAULT_PLACEHOLDER_SIZE",
    "DEFAULT_STORAGE_PATH",
    "MAX_UPSCALE_FACTOR",
]
