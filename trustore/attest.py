"""X.509 attestation certificate structures and their DER encoding."""

from __future__ import annotations

from dataclasses import dataclass

from trustore.der import (
    ED255_OID_ENCODING,
    P256_PUB_ENCODING,
    TAG_BIT_STRING,
    TAG_INTEGER,
    TAG_SEQUENCE,
    BigEndianInteger,
    Name,
    SignatureAlgorithm,
    Validity,
    Version,
    encode_tlv,
)
from trustore.types import KeyId

ED255_ATTN_KEY = KeyId.from_special(1)
"""Special id of the Ed25519 attestation key."""

P256_ATTN_KEY = KeyId.from_special(2)
"""Special id of the P-256 attestation key."""

# EXPLICIT [0]: constructed, context-specific, number 0
_TAG_EXPLICIT_0 = 0xA0

_ED255_PUBLIC_KEY_LENGTH = 32
_P256_PUBLIC_KEY_LENGTH = 33
_ED255_SIGNATURE_LENGTH = 64
_P256_MAX_SIGNATURE_LENGTH = 72

# A BIT STRING starts with the number of unused bits; there are none.
_NO_UNUSED_BITS = b"\x00"


@dataclass(frozen=True)
class SerializedSubjectPublicKey:
    """A subject public key: 32 bytes for Ed25519, 33 bytes for P-256."""

    algorithm: SignatureAlgorithm
    key: bytes

    def __post_init__(self) -> None:
        expected = (
            _ED255_PUBLIC_KEY_LENGTH
            if self.algorithm is SignatureAlgorithm.ED255
            else _P256_PUBLIC_KEY_LENGTH
        )
        if len(self.key) != expected:
            raise ValueError(
                f"a {self.algorithm.name} public key has {expected} bytes, got {len(self.key)}"
            )
        object.__setattr__(self, "key", bytes(self.key))

    def encode(self) -> bytes:
        """Algorithm identifier and BIT STRING key (no outer SEQUENCE)."""
        identifier = (
            ED255_OID_ENCODING
            if self.algorithm is SignatureAlgorithm.ED255
            else P256_PUB_ENCODING
        )
        return encode_tlv(TAG_SEQUENCE, identifier) + encode_tlv(
            TAG_BIT_STRING, _NO_UNUSED_BITS + self.key
        )


@dataclass(frozen=True)
class SerializedSignature:
    """A signature: 64 raw bytes for Ed25519, up to 72 DER bytes for P-256."""

    algorithm: SignatureAlgorithm
    signature: bytes

    def __post_init__(self) -> None:
        length = len(self.signature)
        if self.algorithm is SignatureAlgorithm.ED255:
            if length != _ED255_SIGNATURE_LENGTH:
                raise ValueError(
                    f"an ED255 signature has {_ED255_SIGNATURE_LENGTH} bytes, got {length}"
                )
        elif length > _P256_MAX_SIGNATURE_LENGTH:
            raise ValueError(
                f"a P256 signature has at most {_P256_MAX_SIGNATURE_LENGTH} bytes, got {length}"
            )
        object.__setattr__(self, "signature", bytes(self.signature))

    def to_bytes(self) -> bytes:
        """The signature bytes."""
        return self.signature


@dataclass(frozen=True)
class TbsCertificate:
    """The to-be-signed part of an X.509 v3 certificate."""

    serial: BigEndianInteger
    signature_algorithm: SignatureAlgorithm
    issuer: Name
    validity: Validity
    subject: Name
    subject_public_key_info: SerializedSubjectPublicKey
    version: Version = Version.V3

    def encode(self) -> bytes:
        """The certificate fields in order (no outer SEQUENCE)."""
        return b"".join(
            (
                encode_tlv(_TAG_EXPLICIT_0, self.version.encode()),
                encode_tlv(TAG_INTEGER, self.serial.encode()),
                encode_tlv(TAG_SEQUENCE, self.signature_algorithm.encode()),
                encode_tlv(TAG_SEQUENCE, self.issuer.encode()),
                encode_tlv(TAG_SEQUENCE, self.validity.encode()),
                encode_tlv(TAG_SEQUENCE, self.subject.encode()),
                encode_tlv(TAG_SEQUENCE, self.subject_public_key_info.encode()),
            )
        )


@dataclass(frozen=True)
class Certificate:
    """A signed X.509 certificate."""

    tbs_certificate: TbsCertificate
    signature_algorithm: SignatureAlgorithm
    signature: SerializedSignature

    def encode(self) -> bytes:
        """The complete DER-encoded certificate."""
        body = (
            encode_tlv(TAG_SEQUENCE, self.tbs_certificate.encode())
            + encode_tlv(TAG_SEQUENCE, self.signature_algorithm.encode())
            + encode_tlv(TAG_BIT_STRING, _NO_UNUSED_BITS + self.signature.to_bytes())
        )
        return encode_tlv(TAG_SEQUENCE, body)