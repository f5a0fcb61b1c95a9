"""
Registry notifications

The registry publishes one notification per successful mutation. Sinks are
append-only: the core emits and forgets, with no retry or buffering.
"""

import csv
import logging
import os
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, List, Optional

from attestation_models import Attestor, format_address

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AttestorAdded:
    address: bytes
    attestor: Attestor

    name = 'AttestorAdded'


@dataclass(frozen=True)
class AttestorRemoved:
    address: bytes

    name = 'AttestorRemoved'


class EventLog:
    """In-memory append-only sink with optional subscribers"""

    def __init__(self):
        self._events = []
        self._subscribers: List[Callable] = []

    def subscribe(self, callback: Callable):
        self._subscribers.append(callback)

    def emit(self, event):
        self._events.append(event)
        logger.info(f"{event.name}: {format_address(event.address)}")
        for callback in self._subscribers:
            callback(event)

    @property
    def events(self) -> list:
        return list(self._events)

    def __len__(self):
        return len(self._events)


class CsvEventSink:
    """Appends each notification as a CSV row: timestamp, event, address, url"""

    HEADER = ['timestamp', 'event', 'address', 'url']

    def __init__(self, path: str):
        self.path = path
        directory = os.path.dirname(path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        if not os.path.exists(path):
            with open(path, 'w', newline='') as f:
                csv.writer(f).writerow(self.HEADER)

    def emit(self, event):
        url: Optional[str] = event.attestor.url if isinstance(event, AttestorAdded) else ''
        with open(self.path, 'a', newline='') as f:
            writer = csv.writer(f)
            writer.writerow([
                datetime.now(timezone.utc).isoformat(),
                event.name,
                format_address(event.address),
                url,
            ])
            f.flush()

    def read_rows(self) -> List[dict]:
        with open(self.path, 'r', newline='') as f:
            return list(csv.DictReader(f))
