#!/usr/bin/env python3
"""
Attestation Verifier

This component validates attestations by:
1. Checking the attestation carries exactly one 65-byte signature
2. Building the canonical payload of the attestation content
3. Recovering the signer's address from the signature and payload
4. Checking the signer against the attestor registry

`verify` raises on the first failure; `check` runs the same steps and reports
the outcome as a result dict for batch runs and the CLI.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from attestation_encoder import encode_attestation, encode_attestation_payload
from attestation_errors import (
    AttestationError,
    InvalidSignatureCount,
    InvalidSignatureLength,
    UnknownSigner,
)
from attestation_models import Attestation, format_address
from attestor_registry import AttestorRegistry
from signature_recovery import SIGNATURE_LENGTH, Secp256k1Recovery

logger = logging.getLogger(__name__)


class AttestationVerifier:
    def __init__(self, registry: AttestorRegistry, recovery=None):
        """
        Args:
            registry: trusted attestors to check signers against
            recovery: object exposing `recover_address(signature, message)`;
                defaults to keccak256 + secp256k1
        """
        self.registry = registry
        self.recovery = recovery if recovery is not None else Secp256k1Recovery()

    def recover_signer(self, attestation: Attestation) -> bytes:
        """Recover the address that signed the attestation content"""
        if len(attestation.signatures) != 1:
            raise InvalidSignatureCount(
                f"Expected exactly one signature, got {len(attestation.signatures)}"
            )

        signature = attestation.signatures[0]
        if len(signature) != SIGNATURE_LENGTH:
            raise InvalidSignatureLength(
                f"Signature must be {SIGNATURE_LENGTH} bytes, got {len(signature)}"
            )

        message = encode_attestation_payload(attestation)
        return self.recovery.recover_address(signature, message)

    def _require_registered(self, signer: bytes):
        if not self.registry.contains(signer):
            raise UnknownSigner(f"Signer {format_address(signer)} is not a registered attestor")

    def verify(self, attestation: Attestation):
        """Return normally if a registered attestor signed the attestation, raise otherwise"""
        signer = self.recover_signer(attestation)
        self._require_registered(signer)
        logger.debug(f"Attestation signed by registered attestor {format_address(signer)}")

    def check(self, attestation: Attestation) -> Dict[str, Any]:
        """Verify one attestation and describe the outcome instead of raising"""
        result = {
            'validation_timestamp': datetime.now(timezone.utc).isoformat(),
            'recipient': format_address(attestation.recipient) if attestation.recipient else '',
            'timestamp': attestation.timestamp,
            'attestation_hash': None,
            'signer': None,
            'valid': False,
            'status': 'unknown',
            'error_details': None,
        }

        try:
            result['attestation_hash'] = '0x' + encode_attestation(attestation).hex()
            signer = self.recover_signer(attestation)
            result['signer'] = format_address(signer)
            self._require_registered(signer)

            result['valid'] = True
            result['status'] = 'valid'
            logger.info(f"Valid attestation {result['attestation_hash']} signed by {result['signer']}")

        except AttestationError as e:
            result['status'] = type(e).__name__
            result['error_details'] = str(e)
            logger.warning(f"Rejected attestation {result['attestation_hash'] or '(unencodable)'}: "
                           f"{result['status']}: {e}")

        return result

    def check_all(self, attestations: List[Attestation]) -> List[Dict[str, Any]]:
        results = [self.check(attestation) for attestation in attestations]

        valid_count = sum(1 for r in results if r['valid'])
        logger.info(f"Verification complete: {valid_count}/{len(results)} valid")
        for status in sorted({r['status'] for r in results if not r['valid']}):
            count = sum(1 for r in results if r['status'] == status)
            logger.info(f"  {status}: {count}")

        return results


def verify_attestation(registry: AttestorRegistry, attestation: Attestation,
                       recovery: Optional[Any] = None):
    """Raise unless `attestation` was signed by an attestor in `registry`"""
    AttestationVerifier(registry, recovery=recovery).verify(attestation)
