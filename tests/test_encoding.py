import pytest

from credhash.auth.encoding import (
    ALGORITHM,
    b64decode_unpadded,
    b64encode_unpadded,
    decode,
    encode,
)
from credhash.auth.errors import (
    HashError,
    InvalidEncodingError,
    InvalidParameterError,
    MalformedHashError,
    UnsupportedAlgorithmError,
    UnsupportedVersionError,
)

SALT = bytes(range(16))
KEY = bytes(range(100, 132))
GOOD = encode(ALGORITHM, 19, 19456, 2, 1, SALT, KEY)


def test_encode_layout():
    parts = GOOD.split("$")
    assert len(parts) == 6
    assert parts[0] == ""
    assert parts[1] == "argon2id"
    assert parts[2] == "v=19"
    assert parts[3] == "m=19456,t=2,p=1"
    assert len(parts[4]) == 22
    assert len(parts[5]) == 43
    assert "=" not in parts[4] + parts[5]


def test_decode_fields():
    d = decode(GOOD)
    assert d.algorithm == "argon2id"
    assert d.version == 19
    assert (d.memory_cost_kb, d.iterations, d.parallelism) == (19456, 2, 1)
    assert d.salt == SALT
    assert d.key == KEY


def test_b64_uses_standard_alphabet():
    raw = b"\xfb\xff\xfe"
    assert b64encode_unpadded(raw) == "+//+"
    assert b64decode_unpadded("+//+") == raw


@pytest.mark.parametrize(
    "value, exc",
    [
        ("garbage", MalformedHashError),
        ("", MalformedHashError),
        ("$argon2id$v=19$m=1,t=1,p=1$abc", MalformedHashError),
        ("$argon2id$v=19$m=1,t=1,p=1$abc$def$ghi", MalformedHashError),
        ("x$argon2id$v=19$m=19456,t=2,p=1$AAAAAAAAAAAAAAAAAAAAAA$AAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAA", MalformedHashError),
        ("$argon2i$v=19$m=19456,t=2,p=1$AAAAAAAAAAAAAAAAAAAAAA$AAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAA", UnsupportedAlgorithmError),
        ("$bcrypt$v=19$m=19456,t=2,p=1$AAAAAAAAAAAAAAAAAAAAAA$AAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAA", UnsupportedAlgorithmError),
        ("$argon2id$v=16$m=19456,t=2,p=1$AAAAAAAAAAAAAAAAAAAAAA$AAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAA", UnsupportedVersionError),
        ("$argon2id$v=x$m=19456,t=2,p=1$AAAAAAAAAAAAAAAAAAAAAA$AAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAA", InvalidParameterError),
        ("$argon2id$19$m=19456,t=2,p=1$AAAAAAAAAAAAAAAAAAAAAA$AAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAA", InvalidParameterError),
        ("$argon2id$v=19$t=2,m=19456,p=1$AAAAAAAAAAAAAAAAAAAAAA$AAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAA", InvalidParameterError),
        ("$argon2id$v=19$m=19456,t=2$AAAAAAAAAAAAAAAAAAAAAA$AAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAA", InvalidParameterError),
        ("$argon2id$v=19$m=abc,t=2,p=1$AAAAAAAAAAAAAAAAAAAAAA$AAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAA", InvalidParameterError),
        ("$argon2id$v=19$m=19456,t=0,p=1$AAAAAAAAAAAAAAAAAAAAAA$AAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAA", InvalidParameterError),
        ("$argon2id$v=19$m=19456,t=2,p=1$AAAA!AAAAAAAAAAAAAAAAA$AAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAA", InvalidEncodingError),
        ("$argon2id$v=19$m=19456,t=2,p=1$AAAAAAAAAAAAAAAAAAAAAA==$AAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAA", InvalidEncodingError),
        ("$argon2id$v=19$m=19456,t=2,p=1$AAAAAAAAAAAAAAAAAAAAAA$", InvalidEncodingError),
        ("$argon2id$v=19$m=19456,t=2,p=1$AAAAA$AAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAA", InvalidEncodingError),
        ("$argon2id$v=19\n$m=19456,t=2,p=1$AAAAAAAAAAAAAAAAAAAAAA$AAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAA", InvalidParameterError),
        ("$argon2id$v=19$m=19456,t=2,p=1\n$AAAAAAAAAAAAAAAAAAAAAA$AAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAA", InvalidParameterError),
        ("$argon2id$v=19$m=19456,t=2,p=1$AAAAAAAAAAAAAAAAAAAAAA\n$AAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAA", InvalidEncodingError),
        ("$argon2id$v=19$m=19456,t=2,p=1$AAAAAAAAAAAAAAAAAAAAAA$AAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAA\n", InvalidEncodingError),
    ],
)
def test_decode_errors(value, exc):
    with pytest.raises(exc) as info:
        decode(value)
    assert isinstance(info.value, HashError)


def test_decode_rejects_non_canonical_trailing_bits():
    # 16 bytes -> 22 chars; the last char carries 4 unused bits which must be zero.
    with pytest.raises(InvalidEncodingError):
        b64decode_unpadded("AAAAAAAAAAAAAAAAAAAAAB")


def test_decode_rejects_non_string():
    with pytest.raises(MalformedHashError):
        decode(None)
