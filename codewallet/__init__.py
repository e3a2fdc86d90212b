"""
codewallet
==========

Barcode wallet: keep scanned barcodes under a name, list and delete them,
and render a barcode image for every stored entry.

RU: Хранилище отсканированных штрихкодов с генерацией изображений.

The package provides:
    - A registry of the six supported symbologies (Code128, QR, PDF417,
      Aztec, EAN-13, EAN-8) with stable persistence identifiers
    - Barcode image generation with a fixed upscale and a placeholder on failure
    - A record store with push-based list views and JSON file persistence
    - A scan session contract plus a still-image decoder (zbar)
    - A draft record flow: edit name -> scan -> save or discard

Basic usage:
    >>> from codewallet import RecordStore, InMemoryBackend, BarcodeImageGenerator, Symbology
    >>>
    >>> store = RecordStore(InMemoryBackend())
    >>> record_id = store.create(name="Gate 12", payload="012345678905",
    ...                          symbology_id="org.gs1.EAN-13")
    >>> [r.payload for r in store.list()]
    ['012345678905']
    >>>
    >>> result = BarcodeImageGenerator().render("123", Symbology.QR)
    >>> result.available
    True

Configuration:
    >>> import os
    >>> os.environ['CODEWALLET_LOG_LEVEL'] = 'DEBUG'
    >>>
    >>> from codewallet import load_config
    >>> config = load_config()
    >>> config['upscale_factor']
    10

Version: 0.1.0
License: MIT
Python: 3.11+
"""

import json
import logging
import logging.handlers
import os
import sys
from pathlib import Path
from typing import Any, Dict, Optional

# =============================================================================
# VERSION METADATA
# =============================================================================

__version__ = "0.1.0"
__author__ = "codewallet developers"
__description__ = "Barcode wallet: scanned barcode records with image rendering"
__license__ = "MIT"
__python_requires__ = ">=3.11"

VERSION_MAJOR = 0
VERSION_MINOR = 1
VERSION_PATCH = 0

if sys.version_info < (3, 11):
    raise RuntimeError(
        f"codewallet requires Python 3.11 or newer. "
        f"Current version: {sys.version_info.major}."
        f"{sys.version_info.minor}.{sys.version_info.micro}"
    )

# =============================================================================
# LOGGING
# =============================================================================

LOG_LEVEL_ENV = "CODEWALLET_LOG_LEVEL"
LOG_FORMAT = "[%(asctime)s] %(levelname)-8s [%(name)s.%(funcName)s:%(lineno)d] %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def _setup_logging() -> None:
    """
    Configure the package logger once.

    - Console handler (stderr) for WARNING and above
    - Rotating file handler (logs/codewallet.log) for the configured level

    The level comes from the CODEWALLET_LOG_LEVEL environment variable
    (DEBUG, INFO, WARNING, ERROR, CRITICAL; INFO by default).
    Calling this again is a no-op.
    """
    log_level_str = os.environ.get(LOG_LEVEL_ENV, "INFO").upper()
    log_level_map = {
        "DEBUG": logging.DEBUG,
        "INFO": logging.INFO,
        "WARNING": logging.WARNING,
        "ERROR": logging.ERROR,
        "CRITICAL": logging.CRITICAL,
    }
    log_level = log_level_map.get(log_level_str, logging.INFO)

    root_logger = logging.getLogger("codewallet")
    if root_logger.handlers:
        return

    root_logger.setLevel(log_level)
    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=LOG_DATE_FORMAT)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(logging.WARNING)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    try:
        log_dir = Path("logs")
        log_dir.mkdir(exist_ok=True)

        file_handler = logging.handlers.RotatingFileHandler(
            filename=log_dir / "codewallet.log",
            maxBytes=10 * 1024 * 1024,  # 10 MB
            backupCount=5,
            encoding="utf-8",
        )
        file_handler.setLevel(log_level)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)
    except (OSError, PermissionError) as e:
        root_logger.warning(
            "Could not initialise file logging: %s. Falling back to console only.", e
        )

    root_logger.propagate = False


def get_logger(module_name: str) -> logging.Logger:
    """
    Return a logger namespaced under ``codewallet``.

    Args:
        module_name: Usually ``__name__`` of the calling module.

    Returns:
        A logging.Logger inheriting the package handlers.

    Example:
        >>> logger = get_logger("scanner_app")
        >>> logger.name
        'codewallet.scanner_app'
    """
    if module_name.startswith("codewallet"):
        return logging.getLogger(module_name)
    if module_name == "__main__":
        return logging.getLogger("codewallet.main")
    return logging.getLogger(f"codewallet.{module_name.lstrip('.')}")


# =============================================================================
# CONFIGURATION
# =============================================================================

_DEFAULT_CONFIG: Dict[str, Any] = {
    "upscale_factor": 10,
    "placeholder_size": 64,
    "qr_error_correction": "M",
    "storage_path": "codewallet.json",
    "log_level": "INFO",
}


def load_config(config_path: Optional[Path] = None) -> Dict[str, Any]:
    """
    Load application settings from config.json merged over the defaults.

    Keys:
        - upscale_factor: int - integer scale applied to raw barcode images
        - placeholder_size: int - side of the "unavailable" image in pixels
        - qr_error_correction: str - QR error correction level (L, M, Q, H)
        - storage_path: str - JSON file used by the record store
        - log_level: str - informational copy of the log level

    Missing or unreadable files are logged and the defaults are returned.

    Args:
        config_path: Path to the JSON file; ``config.json`` in the current
            directory when None.

    Returns:
        Dict with every default key present.
    """
    logger = get_logger(__name__)

    if config_path is None:
        config_path = Path("config.json")

    config = _DEFAULT_CONFIG.copy()

    if not config_path.exists():
        logger.info("Config file %s not found, using defaults.", config_path)
        return config

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            user_config = json.load(f)
        if not isinstance(user_config, dict):
            raise ValueError(
                f"Config file must contain a JSON object, got {type(user_config).__name__}"
            )
        config.update(user_config)
        logger.info("Config loaded from %s", config_path)
        logger.debug("Config: %s", config)
    except json.JSONDecodeError as e:
        logger.warning(
            "Could not parse %s: invalid JSON at line %d, column %d. Using defaults.",
            config_path,
            e.lineno,
            e.colno,
        )
    except (OSError, PermissionError) as e:
        logger.warning("Could not read %s: %s. Using defaults.", config_path, e)
    except ValueError as e:
        logger.warning("Invalid config format: %s. Using defaults.", e)

    return config


def check_dependencies() -> Dict[str, bool]:
    """
    Report which imaging and decoding libraries can be imported.

    Nothing is raised for missing packages.

    Returns:
        Mapping of distribution name -> availability.

    Example:
        >>> deps = check_dependencies()
        >>> if not deps["treepoem"]:
        ...     print("Aztec codes will render as placeholders.")
    """
    dependencies: Dict[str, bool] = {}
    modules = {
        "pillow": "PIL",
        "python-barcode": "barcode",
        "qrcode": "qrcode",
        "pdf417gen": "pdf417gen",
        "treepoem": "treepoem",
        "pyzbar": "pyzbar.pyzbar",
    }
    for dist_name, module_name in modules.items():
        try:
            __import__(module_name)
            dependencies[dist_name] = True
        except ImportError:
            dependencies[dist_name] = False
    return dependencies


_setup_logging()

# =============================================================================
# PUBLIC API
# =============================================================================

from .exceptions import (  # noqa: E402
    CodeWalletError,
    GenerationError,
    InvalidTransitionError,
    PersistenceError,
    ScanError,
    StorageError,
    StorageReadError,
)
from .model.enums import (  # noqa: E402
    Symbology,
    backend_for,
    identifier_for,
    supported_symbologies,
    symbology_for,
)
from .model.record import BarcodeRecord  # noqa: E402
from .model.draft import DraftRecord, DraftState, NewRecordFlow  # noqa: E402
from .barcodegen import BarcodeImageGenerator, RenderResult  # noqa: E402
from .scanning import ScanResult, ScanSession, SimulatedScanner  # noqa: E402
from .storage import (  # noqa: E402
    InMemoryBackend,
    JsonFileBackend,
    RecordListView,
    RecordStore,
)
from .app_context import AppContext, get_app_context  # noqa: E402

__all__ = [
    "__version__",
    "get_logger",
    "load_config",
    "check_dependencies",
    "CodeWalletError",
    "GenerationError",
    "InvalidTransitionError",
    "PersistenceError",
    "ScanError",
    "StorageError",
    "StorageReadError",
    "Symbology",
    "backend_for",
    "identifier_for",
    "supported_symbologies",
    "symbology_for",
    "BarcodeRecord",
    "DraftRecord",
    "DraftState",
    "NewRecordFlow",
    "BarcodeImageGenerator",
    "RenderResult",
    "ScanResult",
    "ScanSession",
    "SimulatedScanner",
    "InMemoryBackend",
    "JsonFileBackend",
    "RecordListView",
    "RecordStore",
    "AppContext",
    "get_app_context",
]
