"""
Failure kinds raised by the attestation core.

Every failure is a distinct exception class so callers can tell them apart;
the verifier's reporting wrapper and the CLI use the class name as the status.
"""


class AttestationError(Exception):
    """Base class for all attestation and registry failures"""
    pass


class InvalidAddress(AttestationError):
    """Raised when an attestor address is empty or not valid hex"""
    pass


class NotOwner(AttestationError):
    """Raised when a mutating registry call comes from a non-owner identity"""
    pass


class AttestorNotFound(AttestationError):
    """Raised when removing an address that is not registered"""
    pass


class InvalidSignatureCount(AttestationError):
    """Raised when an attestation does not carry exactly one signature"""
    pass


class InvalidSignatureLength(AttestationError):
    """Raised when the signature is not 65 bytes (r || s || v)"""
    pass


class RecoveryError(AttestationError):
    """Raised when the signer's public key cannot be recovered"""
    pass


class UnknownSigner(AttestationError):
    """Raised when the recovered address is not a registered attestor"""
    pass


class EncodingError(AttestationError):
    """Raised when a record cannot be canonically encoded"""
    pass


class RegistryNotInitialized(AttestationError):
    """Raised when a registry file is read before `init` created it"""
    pass
