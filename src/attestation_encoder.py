"""
Canonical Attestation Encoder

Builds the byte strings that attestors sign and that independent verifiers
hash. The encoding is the Solidity abi.encodePacked layout: fields are
concatenated with no length prefixes or delimiters, so

    payload = recipient (20 bytes)
            ++ keccak256(url ++ header ++ method ++ body)
            ++ keccak256(keyName ++ parseType ++ parsePath, for each response in order)
            ++ data ++ attConditions
            ++ timestamp (uint64, 8 bytes big-endian)
            ++ additionParams

All digests are keccak256 (32 bytes). The byte layout is a cross-system
contract and must not change.
"""

import logging
from typing import List, Sequence

from eth_abi.exceptions import EncodingError as AbiEncodingError
from eth_abi.packed import encode_packed
from web3 import Web3

from attestation_errors import EncodingError
from attestation_models import Attestation, NetworkRequest, ResponseResolve

logger = logging.getLogger(__name__)

DIGEST_SIZE = 32


def digest(data: bytes) -> bytes:
    """keccak256 over a fully materialized byte string"""
    return bytes(Web3.keccak(data))


def _packed(types: List[str], values: List) -> bytes:
    try:
        return encode_packed(types, values)
    except (AbiEncodingError, UnicodeEncodeError) as e:
        raise EncodingError(f"Cannot encode {types}: {e}") from e


def encode_request(request: NetworkRequest) -> bytes:
    """Digest of url ++ header ++ method ++ body"""
    encoded = _packed(
        ['string', 'string', 'string', 'string'],
        [request.url, request.header, request.method, request.body],
    )
    return digest(encoded)


def encode_response(responses: Sequence[ResponseResolve]) -> bytes:
    """Digest of every response's keyName ++ parseType ++ parsePath, in sequence order"""
    if not responses:
        return digest(b'')
    types = []
    values = []
    for response in responses:
        types.extend(['string', 'string', 'string'])
        values.extend([response.key_name, response.parse_type, response.parse_path])
    return digest(_packed(types, values))


def encode_attestation_payload(attestation: Attestation) -> bytes:
    """
    Unhashed canonical payload of an attestation.

    This is the message handed to signature recovery. The attestors and
    signatures fields are metadata about the signer and are not included.
    """
    # non-standard recipient widths are packed as raw bytes
    recipient_type = 'address' if len(attestation.recipient) == 20 else 'bytes'

    payload = _packed(
        [recipient_type, 'bytes32', 'bytes32', 'string', 'string', 'uint64', 'string'],
        [
            attestation.recipient,
            encode_request(attestation.request),
            encode_response(attestation.responses),
            attestation.data,
            attestation.att_conditions,
            attestation.timestamp,
            attestation.addition_params,
        ],
    )
    logger.debug(f"Encoded attestation payload: {len(payload)} bytes, timestamp={attestation.timestamp}")
    return payload


def encode_attestation(attestation: Attestation) -> bytes:
    """Digest of the canonical attestation payload"""
    return digest(encode_attestation_payload(attestation))
