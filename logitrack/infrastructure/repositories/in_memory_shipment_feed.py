"""
Name: In-Memory Shipment Feed

Responsibilities:
  - Serve a fixed list of shipments to integration callers

Notes:
  - Shipment CRUD lives outside the access core; this feed only exists so
    the API-key protected endpoint has something to return
"""

from threading import Lock
from typing import Iterable, List

from ...domain.entities import IntegrationShipment


class InMemoryShipmentFeed:
    def __init__(self, shipments: Iterable[IntegrationShipment] = ()) -> None:
        self._lock = Lock()
        self._shipments: List[IntegrationShipment] = list(shipments)

    def add(self, shipment: IntegrationShipment) -> None:
        with self._lock:
            self._shipments.append(shipment)

    def list_for_integration(self) -> List[IntegrationShipment]:
        with self._lock:
            return list(self._shipments)
