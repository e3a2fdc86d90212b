from pathlib import Path
from typing import Any, Dict, Optional

from codewallet import load_config
from codewallet.barcodegen.generator import BarcodeImageGenerator
from codewallet.config import RenderConfig, StoreConfig
from codewallet.model.draft import NewRecordFlow
from codewallet.storage.backends import JsonFileBackend, StorageBackend
from codewallet.storage.record_store import RecordListView, RecordStore


class AppContext:
    """
    Dependency Injection context (singleton) for codewallet.
    Wires configuration, the record store and the image generator in one place.
    """

    def __init__(
        self,
        storage_backend: Optional[StorageBackend] = None,
        config: Optional[Dict[str, Any]] = None,
        config_path: Optional[Path] = None,
    ) -> None:
        self.config: Dict[str, Any] = config if config is not None else load_config(config_path)
        self.render_config = RenderConfig.from_mapping(self.config)
        self.store_config = StoreConfig.from_mapping(self.config)

        # Backend for RecordStore (default: JSON file from config)
        if storage_backend is None:
            storage_backend = JsonFileBackend(self.store_config.storage_path)
        self.store: RecordStore = RecordStore(storage_backend)

        self.generator: BarcodeImageGenerator = BarcodeImageGenerator(self.render_config)

        # Extendable services dictionary (scanner pipelines, exporters, ...)
        self.services: Dict[str, Any] = {}

    def register_service(self, name: str, service: Any) -> None:
        """Register a service by name (extendable)."""
        self.services[name] = service

    def get_service(self, name: str) -> Any:
        """Retrieve a registered service by name."""
        return self.services[name]

    def new_record_flow(self) -> NewRecordFlow:
        return NewRecordFlow()

    def list_view(self) -> RecordListView:
        return RecordListView(self.store)

    def reset_storage(
        self, storage_backend: Optional[StorageBackend] = None, storage_path: Optional[str] = None
    ) -> None:
        """Switch the storage backend (migration/reset/tests)."""
        if storage_backend is None and storage_path is not None:
            storage_backend = JsonFileBackend(storage_path)
        elif storage_backend is None:
            raise ValueError("Either storage_backend or storage_path must be provided")
        self.store = RecordStore(storage_backend)


_ctx: Optional[AppContext] = None


def get_app_context(
    storage_backend: Optional[StorageBackend] = None,
    config: Optional[Dict[str, Any]] = None,
    config_path: Optional[Path] = None,
) -> AppContext:
    """
    Returns global app context (singleton!). Arguments only apply on first call.
    """
    global _ctx
    if _ctx is None:
        _ctx = AppContext(
            storage_backend=storage_backend, config=config, config_path=config_path
        )
    return _ctx


def reset_app_context() -> None:
    global _ctx
    _ctx = None
