"""
Signature Recovery

Recovers the Ethereum-style address of whoever signed a message:

1. split the 65-byte signature into r (32), s (32), v (1) and normalize v
2. recover the secp256k1 public key from keccak256(message)
3. address = last 20 bytes of keccak256(X || Y) of the uncompressed key

The message is passed unhashed; hashing it is part of this component's
contract. Recovery failures are raised as RecoveryError, never turned into a
wrong address.
"""

import logging

from eth_keys import keys
from eth_keys.exceptions import BadSignature, ValidationError

from attestation_encoder import digest
from attestation_errors import InvalidSignatureLength, RecoveryError
from attestation_models import format_address

logger = logging.getLogger(__name__)

SIGNATURE_LENGTH = 65
ADDRESS_LENGTH = 20


def normalize_v(v: int) -> int:
    """
    Map a signature's v byte onto the 0/1 recovery id eth_keys expects.

    27/28 are the legacy values, anything above 35 is treated as an EIP-155
    chain-encoded id. Other values are returned unchanged and left for the
    curve library to reject.
    """
    if v == 27:
        return 0
    if v == 28:
        return 1
    if v > 35:
        return (v - 1) % 2
    return v


class Secp256k1Recovery:
    """keccak256 digest plus secp256k1 public key recovery"""

    def digest(self, data: bytes) -> bytes:
        return digest(data)

    def recover_address(self, signature: bytes, message: bytes) -> bytes:
        """Recover the 20-byte signer address of `message` from an r || s || v signature"""
        if len(signature) != SIGNATURE_LENGTH:
            raise InvalidSignatureLength(
                f"Signature must be {SIGNATURE_LENGTH} bytes, got {len(signature)}"
            )

        r = int.from_bytes(signature[0:32], byteorder='big')
        s = int.from_bytes(signature[32:64], byteorder='big')
        v = normalize_v(signature[64])
        message_hash = self.digest(message)

        try:
            signature_obj = keys.Signature(vrs=(v, r, s))
            public_key = signature_obj.recover_public_key_from_msg_hash(message_hash)
        except (BadSignature, ValidationError) as e:
            logger.debug(f"Failed to recover with v={signature[64]} (normalized {v}): {e}")
            raise RecoveryError(f"Cannot recover signer: {e}") from e

        # eth_keys keeps the uncompressed point without its 0x04 prefix
        address = self.digest(public_key.to_bytes())[-ADDRESS_LENGTH:]
        logger.debug(f"Recovered signer {format_address(address)} for message hash 0x{message_hash.hex()}")
        return address


_default_recovery = Secp256k1Recovery()


def recover_address(signature: bytes, message: bytes) -> bytes:
    return _default_recovery.recover_address(signature, message)
