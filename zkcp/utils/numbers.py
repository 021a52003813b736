import re
import uuid

from petlib.bn import Bn

from zkcp.consts import MATERIAL_RADIX
from zkcp.exceptions import InvalidArgument


_DIGITS = {
    10: re.compile(r"^-?[0-9]+$"),
    16: re.compile(r"^-?[0-9a-fA-F]+$"),
}


def ensure_bn(x):
    """
    Ensure that value is big number.

    Python integers of any size are accepted, anything else raises
    :py:class:`zkcp.exceptions.InvalidArgument`.

    >>> isinstance(ensure_bn(42), Bn)
    True
    >>> isinstance(ensure_bn(Bn(42)), Bn)
    True
    >>> ensure_bn(2 ** 80)
    1208925819614629174706176
    """
    if isinstance(x, Bn):
        return x
    if isinstance(x, bool) or not isinstance(x, int):
        raise InvalidArgument(
            "Expected an integer, got {}".format(type(x).__name__)
        )
    # Bn(int) is limited to machine words.
    return Bn.from_decimal(str(x))


def parse_bn(value, radix=10, name="value"):
    """
    Parse a protocol value into a big number.

    Accepts big numbers, integers and strings of digits in the given radix. Anything else raises
    :py:class:`zkcp.exceptions.InvalidArgument`.

    >>> parse_bn("ff", radix=16)
    255
    >>> parse_bn("0x1F", radix=16)
    31
    >>> parse_bn(12)
    12

    Args:
        value: Value to parse.
        radix: 10 or 16, used for strings only.
        name: Name of the value in error messages.
    """
    if isinstance(value, Bn):
        return value
    if isinstance(value, bool):
        raise InvalidArgument("{} must be an integer, got a boolean".format(name))
    if isinstance(value, int):
        return ensure_bn(value)
    if not isinstance(value, str):
        raise InvalidArgument(
            "{} must be an integer, got {}".format(name, type(value).__name__)
        )
    if radix not in _DIGITS:
        raise InvalidArgument("Unsupported radix {}".format(radix))

    digits = value.strip()
    if radix == 16 and digits.lower().startswith(("0x", "-0x")):
        digits = digits.replace("0x", "", 1).replace("0X", "", 1)
    if not _DIGITS[radix].match(digits):
        raise InvalidArgument(
            "{} is not a radix-{} integer: {!r}".format(name, radix, value)
        )
    if radix == 16:
        return Bn.from_hex(digits)
    return Bn.from_decimal(digits)


def to_radix(value, radix=MATERIAL_RADIX):
    """
    Format a big number as a string of digits.

    >>> to_radix(Bn(255))
    'ff'
    >>> to_radix(Bn(255), radix=10)
    '255'
    """
    value = ensure_bn(value)
    if radix == 16:
        return format(int(value), "x")
    if radix == 10:
        return repr(value)
    raise InvalidArgument("Unsupported radix {}".format(radix))


class RandomSource:
    """
    Source of protocol randomness.

    Numbers are drawn by OpenSSL through :py:meth:`petlib.bn.Bn.random`, identifiers are version 4
    UUIDs. Pass a subclass wherever an ``rng`` argument is accepted to make runs reproducible.
    """

    def between(self, low, high):
        """
        Draw a number uniformly from :math:`[low, high]`, both ends included.

        >>> 2 <= RandomSource().between(2, 9) <= 9
        True
        """
        low, high = ensure_bn(low), ensure_bn(high)
        if high < low:
            raise InvalidArgument("Empty range [{}, {}]".format(low, high))
        return low + (high - low + 1).random()

    def token(self):
        """Mint a fresh opaque identifier."""
        return str(uuid.uuid4())


DEFAULT_RANDOM_SOURCE = RandomSource()


def get_random_source(rng=None):
    if rng is None:
        return DEFAULT_RANDOM_SOURCE
    return rng
