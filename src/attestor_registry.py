"""
Attestor Registry

Owner-controlled set of trusted attestor addresses. Mutations are gated on the
caller identity supplied by the surrounding execution context; the registry
never establishes identity itself.

Attestors are kept in one insertion-ordered dict keyed by address, which
serves both membership checks and enumeration. Callers must serialize
mutations against a given registry (see RegistryStore.transaction).
"""

import logging
from typing import Any, Dict, List, Optional

from attestation_errors import AttestorNotFound, InvalidAddress, NotOwner
from attestation_models import AddressLike, Attestor, format_address, parse_address
from registry_events import AttestorAdded, AttestorRemoved, EventLog

logger = logging.getLogger(__name__)


class AttestorRegistry:
    def __init__(self, owner: str, sink=None):
        """
        Use `create` for a fresh registry; the constructor alone builds an
        empty shell for deserialization.

        Args:
            owner: identity allowed to mutate the registry
            sink: notification sink with an `emit(event)` method
        """
        self.owner = owner
        self.sink = sink if sink is not None else EventLog()
        self._attestors: Dict[bytes, Attestor] = {}

    @classmethod
    def create(cls, owner: str, default_address: AddressLike, default_url: str,
               sink=None) -> 'AttestorRegistry':
        address = parse_address(default_address)
        if not address:
            raise InvalidAddress("Default attestor address must not be empty")

        registry = cls(owner, sink=sink)
        registry._attestors[address] = Attestor(address=address, url=default_url)
        logger.info(f"Created registry for owner {owner} with default attestor {format_address(address)}")
        return registry

    def _require_owner(self, caller: str):
        if caller != self.owner:
            raise NotOwner(f"Caller {caller} is not the registry owner")

    def set_attestor(self, caller: str, attestor: Attestor):
        """Add an attestor, or update the url of one already registered"""
        self._require_owner(caller)
        address = parse_address(attestor.address)
        if not address:
            raise InvalidAddress("Attestor address must not be empty")

        attestor = Attestor(address=address, url=attestor.url)
        if address in self._attestors:
            logger.info(f"Updating attestor {format_address(address)}: url={attestor.url}")
        else:
            logger.info(f"Adding attestor {format_address(address)}: url={attestor.url}")
        # assignment to an existing key keeps its position
        self._attestors[address] = attestor

        self.sink.emit(AttestorAdded(address=address, attestor=attestor))

    def remove_attestor(self, caller: str, address: AddressLike):
        self._require_owner(caller)
        address = parse_address(address)
        if not address:
            raise InvalidAddress("Attestor address must not be empty")
        if address not in self._attestors:
            raise AttestorNotFound(f"Attestor {format_address(address)} is not registered")

        del self._attestors[address]
        logger.info(f"Removed attestor {format_address(address)}")

        self.sink.emit(AttestorRemoved(address=address))

    def contains(self, address: AddressLike) -> bool:
        return parse_address(address) in self._attestors

    def get_attestor(self, address: AddressLike) -> Optional[Attestor]:
        return self._attestors.get(parse_address(address))

    def attestors(self) -> List[Attestor]:
        """Registered attestors in enumeration order"""
        return list(self._attestors.values())

    def __contains__(self, address) -> bool:
        return self.contains(address)

    def __len__(self) -> int:
        return len(self._attestors)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'owner': self.owner,
            'attestors': [a.to_dict() for a in self._attestors.values()],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any], sink=None) -> 'AttestorRegistry':
        registry = cls(data['owner'], sink=sink)
        for item in data.get('attestors', []):
            attestor = Attestor.from_dict(item)
            if not attestor.address:
                raise InvalidAddress("Stored registry contains an empty attestor address")
            registry._attestors[attestor.address] = attestor
        if not registry._attestors:
            logger.warning(f"Loaded registry for owner {registry.owner} has no attestors")
        return registry
