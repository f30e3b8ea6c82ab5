"""Local key/value persistence for the offline variant.

Each entity group is stored as one JSON blob under a fixed key, one file per
key inside a directory. Reads that fail are logged and treated as empty.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

from pydantic import TypeAdapter
from pydantic import ValidationError as RecordValidationError

from backend.app.core.settings import get_settings
from backend.app.schemas.offline import ClientRecord, FreelancerInfo, InvoiceRecord

logger = logging.getLogger(__name__)

STORAGE_KEYS = {
    "freelancer": "invoice_app_freelancer",
    "clients": "invoice_app_clients",
    "invoices": "invoice_app_invoices",
    "counter": "invoice_app_counter",
}

_clients_adapter = TypeAdapter(List[ClientRecord])
_invoices_adapter = TypeAdapter(List[InvoiceRecord])
_counter_adapter = TypeAdapter(int)


class JsonFileStorage:
    """String key to string value store backed by files in one directory."""

    def __init__(self, directory: str | Path):
        self.directory = Path(directory)

    def _path(self, key: str) -> Path:
        return self.directory / f"{key}.json"

    def get_item(self, key: str) -> Optional[str]:
        path = self._path(key)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    def set_item(self, key: str, value: str) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        path = self._path(key)
        tmp = path.with_suffix(".tmp")
        tmp.write_text(value, encoding="utf-8")
        tmp.replace(path)

    def remove_item(self, key: str) -> None:
        self._path(key).unlink(missing_ok=True)


class LocalStorage:
    def __init__(self, backend: JsonFileStorage):
        self.backend = backend

    # Freelancer

    def get_freelancer(self) -> Optional[FreelancerInfo]:
        try:
            data = self.backend.get_item(STORAGE_KEYS["freelancer"])
            return FreelancerInfo.model_validate_json(data) if data else None
        except (OSError, RecordValidationError) as exc:
            logger.error("Error loading freelancer data: %s", exc)
            return None

    def save_freelancer(self, freelancer: FreelancerInfo) -> None:
        self.backend.set_item(STORAGE_KEYS["freelancer"], freelancer.model_dump_json(by_alias=True))

    # Clients

    def get_clients(self) -> List[ClientRecord]:
        try:
            data = self.backend.get_item(STORAGE_KEYS["clients"])
            return _clients_adapter.validate_json(data) if data else []
        except (OSError, RecordValidationError) as exc:
            logger.error("Error loading clients: %s", exc)
            return []

    def save_clients(self, clients: List[ClientRecord]) -> None:
        self.backend.set_item(STORAGE_KEYS["clients"], _clients_adapter.dump_json(clients, by_alias=True).decode())

    # Invoices

    def get_invoices(self) -> List[InvoiceRecord]:
        try:
            data = self.backend.get_item(STORAGE_KEYS["invoices"])
            return _invoices_adapter.validate_json(data) if data else []
        except (OSError, RecordValidationError) as exc:
            logger.error("Error loading invoices: %s", exc)
            return []

    def save_invoices(self, invoices: List[InvoiceRecord]) -> None:
        self.backend.set_item(STORAGE_KEYS["invoices"], _invoices_adapter.dump_json(invoices, by_alias=True).decode())

    # Invoice counter

    def get_invoice_counter(self) -> int:
        try:
            data = self.backend.get_item(STORAGE_KEYS["counter"])
            return int(data) if data else 1
        except (OSError, ValueError) as exc:
            logger.error("Error loading invoice counter: %s", exc)
            return 1

    def save_invoice_counter(self, counter: int) -> None:
        self.backend.set_item(STORAGE_KEYS["counter"], str(counter))

    # Utility methods

    def clear_all(self) -> None:
        for key in STORAGE_KEYS.values():
            self.backend.remove_item(key)

    def export_data(self) -> str:
        freelancer = self.get_freelancer()
        data = {
            "freelancer": freelancer.model_dump(mode="json", by_alias=True) if freelancer else None,
            "clients": _clients_adapter.dump_python(self.get_clients(), mode="json", by_alias=True),
            "invoices": _invoices_adapter.dump_python(self.get_invoices(), mode="json", by_alias=True),
            "counter": self.get_invoice_counter(),
        }
        return json.dumps(data, indent=2)

    def import_data(self, json_data: str) -> bool:
        """Replace each store named in ``json_data``; keys left out are untouched.

        Every present key is parsed before anything is written, so a bad
        document changes nothing.
        """
        try:
            data = json.loads(json_data)
            if not isinstance(data, dict):
                raise ValueError("Import document must be a JSON object")
            parsed: Dict[str, Any] = {}
            if data.get("freelancer") is not None:
                parsed["freelancer"] = FreelancerInfo.model_validate(data["freelancer"])
            if data.get("clients") is not None:
                parsed["clients"] = _clients_adapter.validate_python(data["clients"])
            if data.get("invoices") is not None:
                parsed["invoices"] = _invoices_adapter.validate_python(data["invoices"])
            if data.get("counter") is not None:
                counter = _counter_adapter.validate_python(data["counter"])
                if counter < 1:
                    raise ValueError("Invoice counter must be positive")
                parsed["counter"] = counter
        except (ValueError, RecordValidationError) as exc:
            logger.error("Error importing data: %s", exc)
            return False

        if "freelancer" in parsed:
            self.save_freelancer(parsed["freelancer"])
        if "clients" in parsed:
            self.save_clients(parsed["clients"])
        if "invoices" in parsed:
            self.save_invoices(parsed["invoices"])
        if "counter" in parsed:
            self.save_invoice_counter(parsed["counter"])
        return True


def get_local_storage(directory: str | Path | None = None) -> LocalStorage:
    """Local storage rooted at ``directory`` or the configured storage dir."""
    return LocalStorage(JsonFileStorage(directory or get_settings().storage_dir))
