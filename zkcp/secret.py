"""
Scoped holders for secret exponents.

The secret ``x`` of a prover and the commitment randomness ``k`` of a round must not outlive their
use. Big numbers are freed with ``BN_clear_free`` by petlib, so the memory is wiped once the last
reference is gone; :py:class:`SecretValue` makes sure that reference is dropped on every exit path.

>>> with SecretValue(42) as x:
...     x.value
42
>>> x.cleared
True
"""

from zkcp.exceptions import ProtocolError
from zkcp.utils import ensure_bn


class SecretValue:
    """
    A secret big number that can be cleared.

    Use it as a context manager, or call :py:meth:`clear` explicitly. Reading a cleared secret raises
    :py:class:`zkcp.exceptions.ProtocolError`.

    Args:
        value: The secret, as an integer or a big number.
        name: Label used in error messages. Never the value.
    """

    def __init__(self, value, name="secret"):
        self.name = name
        self._value = None
        self._value = ensure_bn(value)

    @property
    def value(self):
        if self._value is None:
            raise ProtocolError("Secret {} has already been cleared".format(self.name))
        return self._value

    @property
    def cleared(self):
        return self._value is None

    def clear(self):
        self._value = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        self.clear()

    def __del__(self):
        self.clear()

    def __repr__(self):
        if self.cleared:
            return "SecretValue(<cleared>, {})".format(repr(self.name))
        return "SecretValue(<hidden>, {})".format(repr(self.name))


def reveal(secret):
    """
    Get the big number behind a secret.

    >>> reveal(SecretValue(7))
    7
    >>> reveal(7)
    7
    """
    if isinstance(secret, SecretValue):
        return secret.value
    return ensure_bn(secret)
