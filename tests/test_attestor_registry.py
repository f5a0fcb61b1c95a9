import pytest

from attestation_errors import AttestorNotFound, InvalidAddress, NotOwner
from attestation_models import Attestor
from attestor_registry import AttestorRegistry
from registry_events import AttestorAdded, AttestorRemoved, EventLog

NEW_ADDRESS = bytes.fromhex('2b5ad5c4795c026514f8317c7a215e218dccd6cf')
THIRD_ADDRESS = b'\x33' * 20


def test_create_registers_default_attestor(registry, attestor_address, owner):
    assert registry.owner == owner
    assert registry.contains(attestor_address)
    assert len(registry) == 1
    assert registry.get_attestor(attestor_address).url == 'https://attestor.example'


def test_create_does_not_notify(owner, attestor_address):
    sink = EventLog()
    AttestorRegistry.create(owner, attestor_address, 'https://attestor.example', sink=sink)
    assert sink.events == []


@pytest.mark.parametrize('address', [b'', '', '0x'])
def test_create_rejects_empty_default(owner, address):
    with pytest.raises(InvalidAddress):
        AttestorRegistry.create(owner, address, 'https://attestor.example')


def test_contains_accepts_hex_text(registry):
    assert registry.contains('0x7E5F4552091A69125d5DfCb7b8C2659029395Bdf')
    assert '0x7e5f4552091a69125d5dfcb7b8c2659029395bdf' in registry
    assert not registry.contains(NEW_ADDRESS)


def test_set_attestor_adds_and_notifies(registry, owner):
    registry.set_attestor(owner, Attestor(address=NEW_ADDRESS, url='https://backup.example'))

    assert registry.contains(NEW_ADDRESS)
    assert len(registry) == 2
    event = registry.sink.events[-1]
    assert isinstance(event, AttestorAdded)
    assert event.address == NEW_ADDRESS
    assert event.attestor.url == 'https://backup.example'


def test_set_attestor_is_upsert(registry, owner, attestor_address):
    registry.set_attestor(owner, Attestor(address=NEW_ADDRESS, url='https://one.example'))
    registry.set_attestor(owner, Attestor(address=NEW_ADDRESS, url='https://two.example'))

    assert len(registry) == 2
    assert registry.get_attestor(NEW_ADDRESS).url == 'https://two.example'
    assert [a.address for a in registry.attestors()] == [attestor_address, NEW_ADDRESS]
    assert len(registry.sink) == 2


def test_update_keeps_enumeration_position(registry, owner, attestor_address):
    registry.set_attestor(owner, Attestor(address=NEW_ADDRESS, url='https://backup.example'))
    registry.set_attestor(owner, Attestor(address=attestor_address, url='https://moved.example'))

    attestors = registry.attestors()
    assert [a.address for a in attestors] == [attestor_address, NEW_ADDRESS]
    assert attestors[0].url == 'https://moved.example'


def test_set_attestor_requires_owner(registry):
    with pytest.raises(NotOwner):
        registry.set_attestor('mallory', Attestor(address=NEW_ADDRESS, url='https://evil.example'))
    assert not registry.contains(NEW_ADDRESS)
    assert registry.sink.events == []


def test_owner_check_precedes_address_check(registry):
    with pytest.raises(NotOwner):
        registry.set_attestor('mallory', Attestor(address=b'', url=''))


def test_set_attestor_rejects_empty_address(registry, owner):
    with pytest.raises(InvalidAddress):
        registry.set_attestor(owner, Attestor(address=b'', url='https://attestor.example'))
    assert len(registry) == 1


def test_remove_attestor(registry, owner):
    registry.set_attestor(owner, Attestor(address=NEW_ADDRESS, url='https://backup.example'))
    registry.remove_attestor(owner, NEW_ADDRESS)

    assert not registry.contains(NEW_ADDRESS)
    assert len(registry) == 1
    event = registry.sink.events[-1]
    assert isinstance(event, AttestorRemoved)
    assert event.address == NEW_ADDRESS


def test_remove_twice_fails(registry, owner):
    registry.set_attestor(owner, Attestor(address=NEW_ADDRESS, url='https://backup.example'))
    registry.remove_attestor(owner, NEW_ADDRESS)
    with pytest.raises(AttestorNotFound):
        registry.remove_attestor(owner, NEW_ADDRESS)
    assert len(registry.sink) == 2


def test_remove_keeps_remaining_order(registry, owner, attestor_address):
    registry.set_attestor(owner, Attestor(address=NEW_ADDRESS, url='https://two.example'))
    registry.set_attestor(owner, Attestor(address=THIRD_ADDRESS, url='https://three.example'))
    registry.remove_attestor(owner, NEW_ADDRESS)

    assert [a.address for a in registry.attestors()] == [attestor_address, THIRD_ADDRESS]


def test_remove_requires_owner(registry, attestor_address):
    with pytest.raises(NotOwner):
        registry.remove_attestor('mallory', attestor_address)
    assert registry.contains(attestor_address)


def test_remove_rejects_empty_address(registry, owner):
    with pytest.raises(InvalidAddress):
        registry.remove_attestor(owner, b'')


def test_registry_can_be_emptied(registry, owner, attestor_address):
    registry.remove_attestor(owner, attestor_address)
    assert len(registry) == 0
    assert registry.attestors() == []


def test_subscribers_receive_events(registry, owner):
    received = []
    registry.sink.subscribe(received.append)
    registry.set_attestor(owner, Attestor(address=NEW_ADDRESS, url='https://backup.example'))
    registry.remove_attestor(owner, NEW_ADDRESS)
    assert [e.name for e in received] == ['AttestorAdded', 'AttestorRemoved']


def test_round_trip_preserves_order(registry, owner):
    registry.set_attestor(owner, Attestor(address=NEW_ADDRESS, url='https://backup.example'))
    restored = AttestorRegistry.from_dict(registry.to_dict())

    assert restored.owner == owner
    assert restored.attestors() == registry.attestors()
    assert [a.url for a in restored.attestors()] == [a.url for a in registry.attestors()]


def test_attestor_equality_is_by_address():
    assert Attestor(address=NEW_ADDRESS, url='a') == Attestor(address=NEW_ADDRESS, url='b')
    assert len({Attestor(address=NEW_ADDRESS, url='a'), Attestor(address=NEW_ADDRESS, url='b')}) == 1
    assert Attestor(address=NEW_ADDRESS) != Attestor(address=THIRD_ADDRESS)


def test_invalid_hex_address(registry):
    with pytest.raises(InvalidAddress):
        registry.contains('0xnothex')
