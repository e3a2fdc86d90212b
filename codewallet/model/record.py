# RU: Запись кошелька штрихкодов: имя, значение, идентификатор символики.
# EN: Stored barcode record with a synthetic id, tolerant (de)serialization and a deterministic sort key.

import logging
import uuid
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from typing import Any, ClassVar, Dict, Optional, Tuple

from .enums import Symbology, symbology_for

logger = logging.getLogger(__name__)

NOT_AVAILABLE = "N/A"


def new_record_id() -> str:
    return uuid.uuid4().hex


def utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="microseconds")


def _text(value: Any) -> str:
    return "" if value is None else str(value)


@dataclass(frozen=True)
class BarcodeRecord:
    """
    One stored barcode.

    - ``name`` is the user label; ``""`` means "not set" and is never None once saved.
    - ``payload`` is the scanned or entered value.
    - ``symbology_id`` is the persisted identifier (e.g. ``"org.iso.QRCode"``).
      It may be None or unknown; such records still list normally and just
      render without a barcode image.

    Examples:
        rec = BarcodeRecord(name="Gate 12", payload="012345678905",
                            symbology_id="org.gs1.EAN-13")
        rec.symbology      # Symbology.EAN13
        BarcodeRecord.from_dict(rec.to_dict()) == rec
    """

    schema_version: ClassVar[str] = "1.0"

    name: str = ""
    payload: str = ""
    symbology_id: Optional[str] = None
    id: str = field(default_factory=new_record_id)
    created_at: str = field(default_factory=utc_timestamp)

    def __post_init__(self) -> None:
        if self.name is None:
            object.__setattr__(self, "name", "")
        if self.payload is None:
            object.__setattr__(self, "payload", "")

    @property
    def symbology(self) -> Optional[Symbology]:
        return symbology_for(self.symbology_id)

    @property
    def is_renderable(self) -> bool:
        return self.symbology is not None

    @property
    def display_name(self) -> str:
        return self.name or NOT_AVAILABLE

    @property
    def display_payload(self) -> str:
        return self.payload or NOT_AVAILABLE

    def sort_key(self) -> Tuple[str, str, str]:
        return (self.payload, self.created_at, self.id)

    def to_dict(self) -> Dict[str, Any]:
        dct: Dict[str, Any] = asdict(self)
        dct["schema_version"] = self.schema_version
        return dct

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "BarcodeRecord":
        d = dict(d)
        version = d.pop("schema_version", None)
        if version is not None and version != cls.schema_version:
            logger.warning(
                "Schema version mismatch (expected %s, got %s)",
                cls.schema_version,
                version,
            )
        symbology_id = d.get("symbology_id")
        if symbology_id is not None and not isinstance(symbology_id, str):
            logger.warning("Dropping non-string symbology_id %r", symbology_id)
            symbology_id = None
        kwargs: Dict[str, Any] = {
            "name": _text(d.get("name")),
            "payload": _text(d.get("payload")),
            "symbology_id": symbology_id,
        }
        if d.get("id"):
            kwargs["id"] = str(d["id"])
        if d.get("created_at"):
            kwargs["created_at"] = str(d["created_at"])
        return cls(**kwargs)

    def __str__(self) -> str:
        shown = self.payload[:16] + ("..." if len(self.payload) > 16 else "")
        return f"BarcodeRecord({self.display_name!r}, payload={shown or NOT_AVAILABLE}, type={self.symbology_id})"


__all__ = ["BarcodeRecord", "NOT_AVAILABLE", "new_record_id"]
