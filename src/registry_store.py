"""
Registry store for the attestor CLI.

Persists one AttestorRegistry as a JSON file and serializes mutations with a
lock file, so every create/set/remove is applied all-or-nothing:

- the lock is taken with O_CREAT | O_EXCL and retried with exponential backoff
- the registry is written back (temp file + os.replace) only when the
  transaction block exits cleanly
- notifications raised inside the block reach the sink only after the write
"""

import json
import logging
import os
import random
import time
from contextlib import contextmanager
from typing import Optional

from attestation_errors import RegistryNotInitialized
from attestation_models import AddressLike
from attestor_registry import AttestorRegistry
from registry_events import EventLog

logger = logging.getLogger(__name__)


class RegistryLockError(Exception):
    """Raised when the registry is locked by another process"""
    pass


class RegistryStore:
    def __init__(self, path: str, sink=None, lock_retries: int = 8, lock_base_delay: float = 0.1):
        """
        Args:
            path: registry JSON file
            sink: notification sink that receives events of committed transactions
            lock_retries: attempts to take the lock before giving up
            lock_base_delay: first backoff delay in seconds
        """
        if lock_retries < 1:
            raise ValueError(f"lock_retries must be at least 1, got {lock_retries}")

        self.path = path
        self.lock_path = f"{path}.lock"
        self.sink = sink if sink is not None else EventLog()
        self.lock_retries = lock_retries
        self.lock_base_delay = lock_base_delay

        directory = os.path.dirname(path)
        if directory:
            os.makedirs(directory, exist_ok=True)

    def exists(self) -> bool:
        return os.path.exists(self.path)

    @contextmanager
    def _locked(self):
        """Hold the registry lock file for the duration of the block"""
        for attempt in range(self.lock_retries):
            try:
                fd = os.open(self.lock_path, os.O_CREAT | os.O_EXCL | os.O_WRONLY)
            except FileExistsError:
                if attempt < self.lock_retries - 1:
                    # exponential backoff with jitter
                    delay = self.lock_base_delay * (2 ** attempt) * (1 + random.uniform(-0.1, 0.1))
                    logger.warning(f"Registry locked, retrying in {delay:.1f}s (attempt {attempt + 1}/{self.lock_retries})")
                    time.sleep(delay)
                    continue
                raise RegistryLockError(
                    f"Registry {self.path} locked after {self.lock_retries} attempts "
                    f"(remove {self.lock_path} if no other process is running)"
                )

            try:
                os.write(fd, str(os.getpid()).encode())
                os.close(fd)
                yield
            finally:
                os.remove(self.lock_path)
            return

    def _read(self, sink) -> AttestorRegistry:
        if not self.exists():
            raise RegistryNotInitialized(f"Registry file {self.path} not found; run 'attestor init' first")
        with open(self.path, 'r') as f:
            try:
                data = json.load(f)
            except json.JSONDecodeError as e:
                raise ValueError(f"Invalid JSON in registry file {self.path}: {e}")
        return AttestorRegistry.from_dict(data, sink=sink)

    def _write(self, registry: AttestorRegistry):
        tmp_path = f"{self.path}.tmp"
        with open(tmp_path, 'w') as f:
            json.dump(registry.to_dict(), f, indent=2)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_path, self.path)

    def load(self) -> AttestorRegistry:
        """Read a snapshot of the registry without taking the lock"""
        return self._read(sink=EventLog())

    def initialize(self, owner: str, default_address: AddressLike, default_url: str) -> AttestorRegistry:
        with self._locked():
            if self.exists():
                raise FileExistsError(f"Registry file {self.path} already exists")
            registry = AttestorRegistry.create(owner, default_address, default_url, sink=EventLog())
            self._write(registry)
        logger.info(f"Initialized registry at {self.path}")
        registry.sink = self.sink
        return registry

    @contextmanager
    def transaction(self):
        """
        Yield the registry for mutation and commit it if the block succeeds.

        Events are buffered in a private log during the block and forwarded to
        the store's sink after the commit; a failed block discards both.
        """
        pending = EventLog()
        with self._locked():
            registry = self._read(sink=pending)
            yield registry
            self._write(registry)

        for event in pending.events:
            self.sink.emit(event)
        registry.sink = self.sink

    def reset(self, backup: Optional[bool] = True):
        """Remove the registry file, keeping a timestamped copy unless backup is False"""
        with self._locked():
            if not self.exists():
                return
            if backup:
                backup_path = f"{self.path}.{int(time.time())}.bak"
                os.replace(self.path, backup_path)
                logger.info(f"Registry moved to {backup_path}")
            else:
                os.remove(self.path)
                logger.info(f"Registry {self.path} removed")
