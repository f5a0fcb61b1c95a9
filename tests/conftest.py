import json

import pytest
from eth_keys import keys

from attestation_models import Attestation, NetworkRequest, ResponseResolve
from attestor_registry import AttestorRegistry

OWNER = 'owner'

# well-known keys 0x...01 and 0x...02 and their addresses
ATTESTOR_KEY = keys.PrivateKey(b'\x00' * 31 + b'\x01')
ATTESTOR_ADDRESS = bytes.fromhex('7e5f4552091a69125d5dfcb7b8c2659029395bdf')
OTHER_KEY = keys.PrivateKey(b'\x00' * 31 + b'\x02')
OTHER_ADDRESS = bytes.fromhex('2b5ad5c4795c026514f8317c7a215e218dccd6cf')


def _sign(private_key, message: bytes, v_offset: int = 27) -> bytes:
    signature = private_key.sign_msg(message)
    return (
        signature.r.to_bytes(32, 'big')
        + signature.s.to_bytes(32, 'big')
        + bytes([signature.v + v_offset])
    )


@pytest.fixture
def sign():
    """sign(private_key, message, v_offset=27) -> r || s || v"""
    return _sign


@pytest.fixture
def attestor_key():
    return ATTESTOR_KEY


@pytest.fixture
def attestor_address():
    return ATTESTOR_ADDRESS


@pytest.fixture
def other_key():
    return OTHER_KEY


@pytest.fixture
def other_address():
    return OTHER_ADDRESS


@pytest.fixture
def owner():
    return OWNER


@pytest.fixture
def registry():
    return AttestorRegistry.create(OWNER, ATTESTOR_ADDRESS, 'https://attestor.example')


@pytest.fixture
def attestation():
    return Attestation(
        recipient=ATTESTOR_ADDRESS,
        request=NetworkRequest(url='url', header='header', method='method', body='body'),
        responses=[
            ResponseResolve(key_name='keyName', parse_type='parseType', parse_path='parsePath'),
            ResponseResolve(key_name='keyName', parse_type='parseType', parse_path='parsePath'),
        ],
        data='data',
        att_conditions='attConditions',
        timestamp=1700000000000,
        addition_params='additionParams',
    )


@pytest.fixture
def config_file(tmp_path):
    """Config with one profile whose data lives under tmp_path"""
    data_dir = tmp_path / 'data'
    path = tmp_path / 'config.json'
    path.write_text(json.dumps({
        'configs': {
            'test': {
                'display_name': 'Test registry',
                'data_dir': str(data_dir),
                'owner': OWNER,
                'default_attestor_address': '0x7E5F4552091A69125d5DfCb7b8C2659029395Bdf',
                'default_attestor_url': 'https://attestor.example',
            },
        },
        'store': {'lock_retries': 2, 'lock_base_delay': 0.001},
    }))
    return path


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    for name in ('ACTIVE_CONFIG', 'ATTESTOR_CALLER', 'ATTESTOR_CONFIG_FILE'):
        monkeypatch.delenv(name, raising=False)
    # drop the process-wide config manager between tests
    import config_manager
    monkeypatch.setattr(config_manager, '_config_manager_instance', None)
