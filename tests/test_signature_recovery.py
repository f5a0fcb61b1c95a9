import pytest
from web3 import Web3

from attestation_errors import InvalidSignatureLength, RecoveryError
from signature_recovery import Secp256k1Recovery, normalize_v, recover_address

MESSAGE = b'attested payload'


@pytest.mark.parametrize('v, expected', [
    (27, 0),
    (28, 1),
    (37, 0),   # chain id 1, recovery id 0
    (38, 1),   # chain id 1, recovery id 1
    (36, 1),
    (0, 0),
    (1, 1),
    (29, 29),  # passed through unchanged
    (35, 35),
])
def test_normalize_v(v, expected):
    assert normalize_v(v) == expected


@pytest.mark.parametrize('v_offset', [27, 0])
def test_recovers_signer_address(sign, attestor_key, attestor_address, v_offset):
    signature = sign(attestor_key, MESSAGE, v_offset=v_offset)
    assert recover_address(signature, MESSAGE) == attestor_address


def test_recovers_with_eip155_v(sign, other_key, other_address):
    # v = recovery id + chain_id * 2 + 35 with chain id 1
    signature = sign(other_key, MESSAGE, v_offset=37)
    assert recover_address(signature, MESSAGE) == other_address


def test_address_matches_public_key_derivation(sign, attestor_key):
    signature = sign(attestor_key, MESSAGE)
    expected = Web3.keccak(attestor_key.public_key.to_bytes())[-20:]
    assert recover_address(signature, MESSAGE) == bytes(expected)


def test_different_message_recovers_different_address(sign, attestor_key, attestor_address):
    signature = sign(attestor_key, MESSAGE)
    assert recover_address(signature, MESSAGE + b'!') != attestor_address


def test_unnormalized_v_fails_recovery(sign, attestor_key):
    signature = bytearray(sign(attestor_key, MESSAGE))
    signature[64] = 29
    with pytest.raises(RecoveryError):
        recover_address(bytes(signature), MESSAGE)


def test_zero_signature_fails_recovery():
    with pytest.raises(RecoveryError):
        recover_address(b'\x00' * 64 + bytes([27]), MESSAGE)


def test_out_of_range_r_fails_recovery():
    with pytest.raises(RecoveryError):
        recover_address(b'\xff' * 64 + bytes([27]), MESSAGE)


@pytest.mark.parametrize('length', [0, 64, 66])
def test_wrong_signature_length(length):
    with pytest.raises(InvalidSignatureLength):
        recover_address(b'\x01' * length, MESSAGE)


def test_digest_is_keccak():
    assert Secp256k1Recovery().digest(MESSAGE) == bytes(Web3.keccak(MESSAGE))
