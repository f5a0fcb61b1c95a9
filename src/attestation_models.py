"""
Attestation record types

An attestation captures a network request made by an attestor, the rules used
to pull fields out of the response, and the attestor's signature over the
canonical encoding of that content. The records here are plain values; they
are built by a caller, encoded or verified once, and never stored by the core.

JSON interchange uses the wire field names (keyName, attConditions, ...) with
addresses and signatures as 0x-prefixed hex.
"""

import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Union

from eth_utils import decode_hex, to_checksum_address

from attestation_errors import InvalidAddress, InvalidSignatureLength

AddressLike = Union[bytes, str]


def parse_address(value: AddressLike) -> bytes:
    """Convert hex text or raw bytes to a raw address; empty input stays empty"""
    if value is None:
        return b''
    if isinstance(value, (bytes, bytearray)):
        return bytes(value)
    text = value.strip()
    if text in ('', '0x'):
        return b''
    try:
        return decode_hex(text)
    except ValueError as e:
        raise InvalidAddress(f"Address is not valid hex: {value!r}") from e


def format_address(address: bytes) -> str:
    """Render an address for humans (EIP-55 checksum when it is 20 bytes)"""
    if len(address) == 20:
        return to_checksum_address(address)
    return '0x' + address.hex()


def parse_signature(value: Any) -> bytes:
    """
    Accept a signature either as 0x hex (r || s || v) or as a dict with
    'r', 's' (hex or int) and 'v' entries.
    """
    if isinstance(value, (bytes, bytearray)):
        return bytes(value)
    if isinstance(value, dict):
        r = decode_hex(value['r']) if isinstance(value['r'], str) else int(value['r']).to_bytes(32, 'big')
        s = decode_hex(value['s']) if isinstance(value['s'], str) else int(value['s']).to_bytes(32, 'big')
        v = value['v']
        try:
            # text v may be decimal or 0x-prefixed hex
            v = bytes([int(v, 0) if isinstance(v, str) else int(v)])
        except ValueError as e:
            raise InvalidSignatureLength(f"Signature v is not a single byte: {value['v']!r}") from e
        return r.rjust(32, b'\x00') + s.rjust(32, b'\x00') + v
    return decode_hex(value)


@dataclass(eq=False)
class Attestor:
    """A trusted signer; two attestors are the same attestor if their addresses match"""
    address: bytes
    url: str = ''

    def __eq__(self, other):
        if not isinstance(other, Attestor):
            return NotImplemented
        return self.address == other.address

    def __hash__(self):
        return hash(self.address)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Attestor':
        return cls(address=parse_address(data.get('address', data.get('attestorAddr'))),
                   url=data.get('url', ''))

    def to_dict(self) -> Dict[str, Any]:
        return {'address': format_address(self.address), 'url': self.url}


@dataclass
class NetworkRequest:
    url: str = ''
    header: str = ''
    method: str = ''
    body: str = ''

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'NetworkRequest':
        return cls(
            url=data.get('url', ''),
            header=data.get('header', ''),
            method=data.get('method', ''),
            body=data.get('body', ''),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {'url': self.url, 'header': self.header, 'method': self.method, 'body': self.body}


@dataclass
class ResponseResolve:
    key_name: str = ''
    parse_type: str = ''
    parse_path: str = ''

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ResponseResolve':
        return cls(
            key_name=data.get('keyName', ''),
            parse_type=data.get('parseType', ''),
            parse_path=data.get('parsePath', ''),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {'keyName': self.key_name, 'parseType': self.parse_type, 'parsePath': self.parse_path}


@dataclass
class Attestation:
    """
    A signed record of one network interaction.

    `attestors` and `signatures` describe who signed, not what was signed, so
    they take no part in the canonical encoding.
    """
    recipient: bytes
    request: NetworkRequest
    responses: List[ResponseResolve] = field(default_factory=list)
    data: str = ''
    att_conditions: str = ''
    timestamp: int = 0
    addition_params: str = ''
    attestors: List[Attestor] = field(default_factory=list)
    signatures: List[bytes] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Attestation':
        # some producers emit the misspelled 'reponseResolve' key
        responses = data.get('responseResolve', data.get('reponseResolve', data.get('responses', [])))
        return cls(
            recipient=parse_address(data.get('recipient', '')),
            request=NetworkRequest.from_dict(data.get('request', {})),
            responses=[ResponseResolve.from_dict(r) for r in responses],
            data=data.get('data', ''),
            att_conditions=data.get('attConditions', ''),
            timestamp=int(data.get('timestamp', 0)),
            addition_params=data.get('additionParams', ''),
            attestors=[Attestor.from_dict(a) for a in data.get('attestors', [])],
            signatures=[parse_signature(s) for s in data.get('signatures', [])],
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'recipient': format_address(self.recipient),
            'request': self.request.to_dict(),
            'responseResolve': [r.to_dict() for r in self.responses],
            'data': self.data,
            'attConditions': self.att_conditions,
            'timestamp': self.timestamp,
            'additionParams': self.addition_params,
            'attestors': [a.to_dict() for a in self.attestors],
            'signatures': ['0x' + s.hex() for s in self.signatures],
        }

    @classmethod
    def from_json_file(cls, path: str) -> List['Attestation']:
        """Load one attestation or a list of attestations from a JSON file"""
        with open(path, 'r') as f:
            content = json.load(f)
        if isinstance(content, list):
            return [cls.from_dict(item) for item in content]
        return [cls.from_dict(content)]
