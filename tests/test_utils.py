import pytest

from petlib.bn import Bn

from zkcp.exceptions import InvalidArgument, ProtocolError
from zkcp.secret import SecretValue, reveal
from zkcp.utils import RandomSource, ensure_bn, get_random_source, parse_bn, to_radix


def test_ensure_bn_big_integers():
    n = 2 ** 200 + 12345
    assert int(ensure_bn(n)) == n
    assert ensure_bn(-(2 ** 70)) == Bn.from_decimal("-1180591620717411303424")


@pytest.mark.parametrize("value", [1.5, 2.0, True, "7", None])
def test_ensure_bn_rejects_non_integers(value):
    with pytest.raises(InvalidArgument):
        ensure_bn(value)


@pytest.mark.parametrize(
    "value,radix,expected",
    [
        ("ff", 16, 255),
        ("FF", 16, 255),
        ("0xff", 16, 255),
        (" 42 ", 10, 42),
        ("-7", 10, -7),
        (12, 10, 12),
        (Bn(9), 16, 9),
        (str(2 ** 100), 10, 2 ** 100),
    ],
)
def test_parse_bn(value, radix, expected):
    assert parse_bn(value, radix=radix) == ensure_bn(expected)


@pytest.mark.parametrize(
    "value,radix",
    [("", 10), ("12a", 10), ("0x12", 10), ("xyz", 16), ("1.5", 10), (1.5, 10), (None, 10), (True, 10), ([1], 10), ("1", 8)],
)
def test_parse_bn_rejects(value, radix):
    with pytest.raises(InvalidArgument):
        parse_bn(value, radix=radix)


def test_parse_bn_names_value():
    with pytest.raises(InvalidArgument, match="^s is not"):
        parse_bn("abc", name="s")


def test_to_radix():
    n = 2 ** 100 + 1
    assert to_radix(n, 16) == format(n, "x")
    assert to_radix(n, 10) == str(n)
    assert parse_bn(to_radix(n, 16), radix=16) == ensure_bn(n)
    with pytest.raises(InvalidArgument):
        to_radix(n, 2)


def test_random_between():
    rng = RandomSource()
    seen = {int(rng.between(2, 5)) for _ in range(200)}
    assert seen == {2, 3, 4, 5}
    assert rng.between(7, 7) == 7


def test_random_between_big():
    rng = RandomSource()
    low, high = 2, 2 ** 255
    for _ in range(20):
        assert low <= rng.between(low, high) <= high


def test_random_between_empty():
    with pytest.raises(InvalidArgument):
        RandomSource().between(5, 4)


def test_random_tokens():
    rng = RandomSource()
    tokens = {rng.token() for _ in range(100)}
    assert len(tokens) == 100
    assert all(isinstance(t, str) for t in tokens)


def test_get_random_source():
    rng = RandomSource()
    assert get_random_source(rng) is rng
    assert isinstance(get_random_source(), RandomSource)


def test_secret_value():
    secret = SecretValue(42, name="x")
    assert secret.value == 42
    assert reveal(secret) == 42
    assert repr(secret) == "SecretValue(<hidden>, 'x')"
    assert "42" not in repr(secret)

    secret.clear()
    assert secret.cleared
    assert repr(secret) == "SecretValue(<cleared>, 'x')"
    with pytest.raises(ProtocolError, match="x"):
        secret.value


def test_secret_value_context_on_error():
    with pytest.raises(RuntimeError):
        with SecretValue(42) as secret:
            raise RuntimeError("boom")
    assert secret.cleared


def test_reveal_plain_numbers():
    assert reveal(2 ** 80) == ensure_bn(2 ** 80)
