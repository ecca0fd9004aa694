from __future__ import annotations

from collections.abc import Iterable
from typing import Protocol

from .models import ClientRecord


class ClientStore(Protocol):
    """Lookup of installed add-on credentials.

    Implementations own persistence; verification only ever reads from it.
    """

    def find(self, client_key: str, app_key: str) -> ClientRecord | None: ...


class InMemoryClientStore:
    def __init__(self, records: Iterable[ClientRecord] = ()) -> None:
        self._records: dict[tuple[str, str], ClientRecord] = {}
        for record in records:
            self.add(record)

    def add(self, record: ClientRecord) -> None:
        self._records[(record.client_key, record.app_key)] = record

    def find(self, client_key: str, app_key: str) -> ClientRecord | None:
        return self._records.get((client_key, app_key))

    def __len__(self) -> int:
        return len(self._records)
