"""Core value types: object identifiers, enumerations and attribute records."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field, replace
from typing import Literal, Protocol

_ID_BITS = 128
_ID_BYTES = _ID_BITS // 8
_ID_LIMIT = 1 << _ID_BITS
_SPECIAL_LIMIT = 256


class ErrorKind(enum.Enum):
    """Reasons an operation on the store or a mechanism can fail."""

    ENTROPY_MALFUNCTION = enum.auto()
    FILESYSTEM_READ_FAILURE = enum.auto()
    FILESYSTEM_WRITE_FAILURE = enum.auto()
    IMPLEMENTATION_ERROR = enum.auto()
    INTERNAL_ERROR = enum.auto()
    INVALID_SERIALIZED_KEY = enum.auto()
    MECHANISM_NOT_AVAILABLE = enum.auto()
    NO_SUCH_CERTIFICATE = enum.auto()
    NO_SUCH_KEY = enum.auto()
    NOT_JUST_LETTERS = enum.auto()
    REQUEST_NOT_AVAILABLE = enum.auto()
    WRONG_KEY_KIND = enum.auto()
    WRONG_SIGNATURE_LENGTH = enum.auto()


class TrussedError(Exception):
    """An error carrying an :class:`ErrorKind`."""

    def __init__(self, kind: ErrorKind) -> None:
        super().__init__(kind.name)
        self.kind = kind


class _RandomSource(Protocol):
    def randbytes(self, n: int) -> bytes: ...


@dataclass(frozen=True, order=True)
class Id:
    """A 128-bit object identifier.

    Values below 256 are "special", constructible IDs; all others are drawn
    from a random number generator and hence globally unique.
    """

    value: int

    def __post_init__(self) -> None:
        if not isinstance(self.value, int) or isinstance(self.value, bool):
            raise TypeError("an id value must be an integer")
        if not 0 <= self.value < _ID_LIMIT:
            raise ValueError("an id value must fit in 128 unsigned bits")

    @classmethod
    def generate(cls, rng: _RandomSource):
        """Draw a fresh id from ``rng`` (any object with ``randbytes``)."""
        return cls(int.from_bytes(rng.randbytes(_ID_BYTES), "big"))

    @classmethod
    def from_special(cls, special_id: int):
        """Build one of the 256 non-random ids."""
        if not 0 <= special_id < _SPECIAL_LIMIT:
            raise ValueError("a special id must be in the range 0..255")
        return cls(special_id)

    @classmethod
    def from_bytes(cls, data: bytes):
        """Decode the 16-byte big-endian serialization."""
        if len(data) != _ID_BYTES:
            raise ValueError(f"expected {_ID_BYTES} bytes, got {len(data)}")
        return cls(int.from_bytes(data, "big"))

    def to_bytes(self) -> bytes:
        """Encode as 16 big-endian bytes."""
        return self.value.to_bytes(_ID_BYTES, "big")

    def is_special(self) -> bool:
        """Whether this is a non-random, constructible id."""
        return self.value < _SPECIAL_LIMIT

    def hex(self) -> str:
        """Lower-case hex of the big-endian bytes, dropping zero bytes.

        Every zero byte except the final one is skipped, so the result is
        never empty.
        """
        raw = self.to_bytes()
        last = len(raw) - 1
        return "".join(
            f"{byte:02x}" for index, byte in enumerate(raw) if byte != 0 or index == last
        )

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.hex()})"


@dataclass(frozen=True, order=True, repr=False)
class CertId(Id):
    """Identifier of a stored certificate."""


@dataclass(frozen=True, order=True, repr=False)
class CounterId(Id):
    """Identifier of a stored counter."""


@dataclass(frozen=True, order=True, repr=False)
class KeyId(Id):
    """Identifier of a stored key."""


class Status(enum.Enum):
    """User-interface status indication."""

    IDLE = enum.auto()
    WAITING_FOR_USER_PRESENCE = enum.auto()
    PROCESSING = enum.auto()
    ERROR = enum.auto()


class RebootTo(enum.Enum):
    """Reboot target."""

    APPLICATION = enum.auto()
    APPLICATION_UPDATE = enum.auto()


class ConsentLevel(enum.Enum):
    """Strength of a user-presence indication."""

    NONE = enum.auto()
    NORMAL = enum.auto()
    STRONG = enum.auto()


class ConsentUrgency(enum.Enum):
    """How a consent request treats other pending requests."""

    INTERRUPT_OTHERS = enum.auto()
    FAIL_IF_OTHERS = enum.auto()


class ConsentError(enum.Enum):
    """Ways a consent request can fail."""

    FAILED_TO_INTERRUPT = enum.auto()
    INTERRUPTED = enum.auto()
    TIMED_OUT = enum.auto()
    TIMEOUT_NOT_IMPLEMENTED = enum.auto()
    DECLINED = enum.auto()


class CertificateType(enum.Enum):
    """Kind of certificate: identity or attribute."""

    PUBLIC_KEY = enum.auto()
    ATTRIBUTE = enum.auto()


class Location(enum.Enum):
    """Which backing filesystem an object lives on."""

    VOLATILE = enum.auto()
    INTERNAL = enum.auto()
    EXTERNAL = enum.auto()


class Mechanism(enum.Enum):
    """Cryptographic mechanisms."""

    AES256_CBC = enum.auto()
    CHACHA8_POLY1305 = enum.auto()
    ED255 = enum.auto()
    HMAC_BLAKE2S = enum.auto()
    HMAC_SHA1 = enum.auto()
    HMAC_SHA256 = enum.auto()
    HMAC_SHA512 = enum.auto()
    P256 = enum.auto()
    P256_PREHASHED = enum.auto()
    SHA256 = enum.auto()
    TDES = enum.auto()
    TOTP = enum.auto()
    TRNG = enum.auto()
    X255 = enum.auto()


class KeySerialization(enum.Enum):
    """Formats a key can be serialized in."""

    COSE = enum.auto()
    ECDH_ES_HKDF256 = enum.auto()
    RAW = enum.auto()
    SEC1 = enum.auto()


class SignatureSerialization(enum.Enum):
    """Formats a signature can be serialized in."""

    ASN1_DER = enum.auto()
    RAW = enum.auto()


def _check_u8(value: int) -> None:
    if not 0 <= value <= 0xFF:
        raise ValueError("value must fit in one unsigned byte")


@dataclass(frozen=True)
class GUIControlCommand:
    """A display control command: set an orientation or rotate by a step."""

    operation: Literal["set_orientation", "rotate"]
    value: int

    def __post_init__(self) -> None:
        if self.operation not in ("set_orientation", "rotate"):
            raise ValueError(f"unknown GUI control operation {self.operation!r}")
        _check_u8(self.value)


@dataclass(frozen=True)
class GUIControlResponse:
    """Response to a display control command: the current orientation."""

    orientation: int

    def __post_init__(self) -> None:
        _check_u8(self.orientation)


@dataclass
class DataAttributes:
    """Attributes of a data object."""

    kind: bytes = b""
    value: bytes = b""


@dataclass(frozen=True)
class KeyAttributes:
    """Attributes of a key object."""

    sensitive: bool = True
    extractable: bool = False
    persistent: bool = False


@dataclass(frozen=True)
class StorageAttributes:
    """Where a newly created object is stored."""

    persistence: Location = Location.VOLATILE

    def set_persistence(self, persistence: Location) -> StorageAttributes:
        """Return a copy with the given persistence."""
        return replace(self, persistence=persistence)


@dataclass(frozen=True)
class Letters:
    """Bytes restricted to lower-case ASCII letters."""

    data: bytes = field(default=b"")

    def __post_init__(self) -> None:
        if not all(ord("a") <= byte <= ord("z") for byte in self.data):
            raise TrussedError(ErrorKind.NOT_JUST_LETTERS)