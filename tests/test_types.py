import random

import pytest

from trustore.types import (
    CertId,
    CounterId,
    ErrorKind,
    GUIControlCommand,
    GUIControlResponse,
    Id,
    KeyAttributes,
    KeyId,
    Letters,
    Location,
    StorageAttributes,
    TrussedError,
)


def test_hex_keeps_final_zero_byte():
    assert Id(0).hex() == "00"


def test_hex_of_max_value():
    assert Id((1 << 128) - 1).hex() == "ff" * 16


def test_hex_without_zero_bytes_round_trips():
    value = int.from_bytes(bytes(range(1, 17)), "big")
    h = Id(value).hex()
    assert len(h) == 32
    assert int(h, 16) == value


def test_hex_skips_every_non_final_zero_byte():
    assert Id(0x010001).hex() == Id(0x0101).hex()
    assert Id(0x0100).hex().endswith("00")


def test_hex_of_special_matches_byte_format():
    for special in (1, 2, 255):
        assert KeyId.from_special(special).hex() == f"{special:02x}"


def test_bytes_round_trip():
    ident = Id.generate(random.Random(7))
    data = ident.to_bytes()
    assert len(data) == 16
    assert Id.from_bytes(data) == ident


def test_from_bytes_wrong_length():
    with pytest.raises(ValueError):
        Id.from_bytes(b"\x00" * 15)


def test_value_range_checked():
    with pytest.raises(ValueError):
        Id(-1)
    with pytest.raises(ValueError):
        Id(1 << 128)


def test_from_special_range():
    with pytest.raises(ValueError):
        CertId.from_special(256)


def test_is_special():
    assert Id(255).is_special()
    assert not Id(256).is_special()


def test_generate_is_deterministic_per_seed():
    a = CounterId.generate(random.Random(42))
    b = CounterId.generate(random.Random(42))
    c = CounterId.generate(random.Random(43))
    assert a == b
    assert a.value != c.value
    assert isinstance(a, CounterId)


def test_subclass_types_are_distinct():
    assert CertId(5) != KeyId(5)
    assert KeyId(5) == KeyId(5)
    assert hash(KeyId(5)) == hash(KeyId(5))


def test_repr_contains_hex():
    assert repr(KeyId(0x1234)) == f"KeyId({KeyId(0x1234).hex()})"


def test_storage_attributes_default_and_set():
    default = StorageAttributes()
    assert default.persistence is Location.VOLATILE
    changed = default.set_persistence(Location.INTERNAL)
    assert changed.persistence is Location.INTERNAL
    assert default.persistence is Location.VOLATILE


def test_key_attributes_defaults():
    attrs = KeyAttributes()
    assert attrs.sensitive is True
    assert attrs.extractable is False
    assert attrs.persistent is False


def test_letters_accepts_lowercase():
    assert Letters(b"abcxyz").data == b"abcxyz"


@pytest.mark.parametrize("data", [b"abC", b"a1", b"a b", b"\xff"])
def test_letters_rejects_other(data):
    with pytest.raises(TrussedError) as info:
        Letters(data)
    assert info.value.kind is ErrorKind.NOT_JUST_LETTERS


def test_gui_control_validation():
    command = GUIControlCommand("rotate", 3)
    assert command.value == 3
    with pytest.raises(ValueError):
        GUIControlCommand("flip", 1)
    with pytest.raises(ValueError):
        GUIControlCommand("set_orientation", 256)
    with pytest.raises(ValueError):
        GUIControlResponse(-1)


def test_trussed_error_message():
    err = TrussedError(ErrorKind.NO_SUCH_KEY)
    assert err.kind is ErrorKind.NO_SUCH_KEY
    assert str(err) == ErrorKind.NO_SUCH_KEY.name