"""DER building blocks for the X.509 attestation certificate."""

from __future__ import annotations

import enum
from dataclasses import dataclass, replace

from trustore.types import ErrorKind, Mechanism, TrussedError

TAG_INTEGER = 0x02
TAG_BIT_STRING = 0x03
TAG_OCTET_STRING = 0x04
TAG_OBJECT_IDENTIFIER = 0x06
TAG_UTF8_STRING = 0x0C
TAG_PRINTABLE_STRING = 0x13
TAG_UTC_TIME = 0x17
TAG_GENERALIZED_TIME = 0x18
TAG_SEQUENCE = 0x30
TAG_SET = 0x31

# 1.2.840.10045.4.3.2 ecdsaWithSHA256
P256_OID_ENCODING = bytes.fromhex("06 08 2A 86 48 CE 3D 04 03 02")
# 1.2.840.10045.2.1 ecPublicKey, 1.2.840.10045.3.1.7 prime256v1
P256_PUB_ENCODING = bytes.fromhex(
    "06 07 2A 86 48 CE 3D 02 01 06 08 2A 86 48 CE 3D 03 01 07"
)
# 1.3.101.112 curveEd25519
ED255_OID_ENCODING = bytes.fromhex("06 03 2B 65 70")

_OID_COUNTRY = bytes.fromhex("55 04 06")
_OID_STATE = bytes.fromhex("55 04 08")
_OID_ORGANIZATION = bytes.fromhex("55 04 0A")

_DEFAULT_END = b"99991231235959Z"
_GENERALIZED_TIME_FROM = b"2050"


def _encode_length(length: int) -> bytes:
    if length < 0:
        raise ValueError("a length cannot be negative")
    if length < 0x80:
        return bytes([length])
    octets = length.to_bytes((length.bit_length() + 7) // 8, "big")
    if len(octets) > 0x7E:
        raise ValueError("length too large for DER")
    return bytes([0x80 | len(octets)]) + octets


def encode_tlv(tag: int, value: bytes) -> bytes:
    """Encode a tag, a DER definite length and the value."""
    if not 0 <= tag <= 0xFF:
        raise ValueError("a tag must fit in one byte")
    value = bytes(value)
    return bytes([tag]) + _encode_length(len(value)) + value


class SignatureAlgorithm(enum.Enum):
    """Algorithms the attestation keys sign with."""

    ED255 = enum.auto()
    P256 = enum.auto()

    @classmethod
    def from_mechanism(cls, mechanism: Mechanism) -> SignatureAlgorithm:
        """Map a signing mechanism to its algorithm, if it has one."""
        if mechanism is Mechanism.ED255:
            return cls.ED255
        if mechanism is Mechanism.P256:
            return cls.P256
        raise TrussedError(ErrorKind.MECHANISM_NOT_AVAILABLE)

    def encode(self) -> bytes:
        """The algorithm identifier's contents (the OID, untagged by SEQUENCE)."""
        if self is SignatureAlgorithm.ED255:
            return ED255_OID_ENCODING
        return P256_OID_ENCODING


class Version(enum.Enum):
    """Certificate version; only v3 is supported."""

    V3 = 2

    def encode(self) -> bytes:
        """The version as a tagged INTEGER."""
        return encode_tlv(TAG_INTEGER, bytes([self.value]))


@dataclass(frozen=True)
class BigEndianInteger:
    """Contents of an unsigned INTEGER given as big-endian bytes (tag not included)."""

    data: bytes

    def encode(self) -> bytes:
        """Minimal two's-complement contents of the non-negative number."""
        number = bytes(self.data).lstrip(b"\x00")
        if not number or number[0] >= 0x80:
            return b"\x00" + number
        return number


def _encoded_part(oid: bytes, text: str) -> bytes:
    part = encode_tlv(TAG_OBJECT_IDENTIFIER, oid) + encode_tlv(
        TAG_UTF8_STRING, text.encode("utf-8")
    )
    return encode_tlv(TAG_SET, encode_tlv(TAG_SEQUENCE, part))


@dataclass(frozen=True)
class Name:
    """A distinguished name with optional country, organization and state."""

    country: bytes | None = None
    organization: str | None = None
    state: str | None = None

    def with_country(self, country: bytes) -> Name:
        """Return a copy with a two-letter country code."""
        country = bytes(country)
        if len(country) != 2:
            raise ValueError("a country code has exactly two bytes")
        return replace(self, country=country)

    def with_organization(self, organization: str) -> Name:
        """Return a copy with the given organization."""
        return replace(self, organization=organization)

    def with_state(self, state: str) -> Name:
        """Return a copy with the given state."""
        return replace(self, state=state)

    def encode(self) -> bytes:
        """The relative distinguished names, ordered by OID (no outer SEQUENCE)."""
        encoded = b""
        if self.country is not None:
            attribute = encode_tlv(TAG_OBJECT_IDENTIFIER, _OID_COUNTRY) + encode_tlv(
                TAG_PRINTABLE_STRING, self.country
            )
            encoded += encode_tlv(TAG_SET, encode_tlv(TAG_SEQUENCE, attribute))
        if self.state is not None:
            encoded += _encoded_part(_OID_STATE, self.state)
        if self.organization is not None:
            encoded += _encoded_part(_OID_ORGANIZATION, self.organization)
        return encoded


class ParsedDatetime:
    """A validated calendar timestamp in the years 2000 to 9999."""

    def __init__(
        self, year: int, month: int, day: int, hour: int, minute: int, second: int
    ) -> None:
        valid = (
            2000 <= year <= 9999
            and 1 <= month <= 12
            and 1 <= day <= 31
            and 0 <= hour <= 23
            and 0 <= minute <= 59
            and 0 <= second <= 59
        )
        if not valid:
            raise ValueError("datetime out of range")
        self.year = year
        self.month = month
        self.day = day
        self.hour = hour
        self.minute = minute
        self.second = second

    def to_bytes(self) -> bytes:
        """Format as the 15 bytes ``YYYYMMDDHHMMSSZ``."""
        return (
            f"{self.year}{self.month:02}{self.day:02}"
            f"{self.hour:02}{self.minute:02}{self.second:02}Z"
        ).encode("ascii")


@dataclass(frozen=True)
class Datetime:
    """A ``YYYYMMDDHHMMSSZ`` timestamp, encoded as UTCTime before 2050."""

    value: bytes

    def encode(self) -> bytes:
        """Tagged UTCTime (year truncated to two digits) or GeneralizedTime."""
        value = bytes(self.value)
        if value[:4] < _GENERALIZED_TIME_FROM:
            return encode_tlv(TAG_UTC_TIME, value[2:])
        return encode_tlv(TAG_GENERALIZED_TIME, value)


@dataclass(frozen=True)
class Validity:
    """A validity period; the end defaults to 9999-12-31T23:59:59Z."""

    start: Datetime
    end: Datetime | None = None

    def encode(self) -> bytes:
        """The two timestamps (no outer SEQUENCE)."""
        end = self.end if self.end is not None else Datetime(_DEFAULT_END)
        return self.start.encode() + end.encode()