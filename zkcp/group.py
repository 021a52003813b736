r"""
Group parameters: a safe prime :math:`p = 2q + 1` and two generators :math:`g, h` of the subgroup
of order :math:`q` of the integers modulo :math:`p`.

Parameters are shared by the prover and the verifier of a user, so they are immutable and come with
an exchange format: every number is written as a string of digits (radix 16 by default) next to
the user the parameters belong to.

>>> params = GroupParameters(p=23, q=11, g=4, h=9)
>>> params.validate()
>>> sorted(params.to_dict("alice").items())
[('g', '4'), ('h', '9'), ('p', '17'), ('q', 'b'), ('user', 'alice')]
"""

import json

import attr
import msgpack
from petlib.bn import Bn

from zkcp.consts import MATERIAL_RADIX, MIN_GROUP_ORDER
from zkcp.exceptions import InvalidArgument, InvalidParameters
from zkcp.utils import ensure_bn, parse_bn, to_radix


def verify_prime(n, name="order"):
    """
    Raise :py:class:`zkcp.exceptions.InvalidParameters` if ``n`` is not prime.

    >>> verify_prime(23)
    >>> verify_prime(21)
    Traceback (most recent call last):
    ...
    zkcp.exceptions.InvalidParameters: Order 21 is not prime
    """
    n = ensure_bn(n)
    if n < 2 or not n.is_prime():
        raise InvalidParameters("{} {} is not prime".format(name.capitalize(), n))


def is_generator(element, q, p):
    """
    Check that ``element`` generates the subgroup of order ``q`` modulo ``p``.

    As :math:`q` is prime, the order of an element of that subgroup is either 1 or :math:`q`. An
    element other than 1 whose :math:`q`-th power is 1 therefore has order exactly :math:`q`.

    >>> is_generator(4, 11, 23)
    True
    >>> is_generator(5, 11, 23)
    False
    >>> is_generator(1, 11, 23)
    False
    """
    element, q, p = ensure_bn(element), ensure_bn(q), ensure_bn(p)
    if not 1 < element < p:
        return False
    return element.mod_pow(q, p) == 1


def check_orders(q, p):
    """
    Check that (q, p) describe a safe-prime subgroup.

    >>> check_orders(11, 23)
    >>> check_orders(11, 29)
    Traceback (most recent call last):
    ...
    zkcp.exceptions.InvalidParameters: p = 29 is not the safe prime 2q + 1 for q = 11

    Raises:
        InvalidParameters: If q equals p, either is not prime, p is not 2q + 1 or q is too small.
    """
    q, p = ensure_bn(q), ensure_bn(p)
    if q == p:
        raise InvalidParameters("q and p cannot be the same")
    verify_prime(q, "order")
    verify_prime(p, "modulus")
    if p != 2 * q + 1:
        raise InvalidParameters(
            "p = {} is not the safe prime 2q + 1 for q = {}".format(p, q)
        )
    if q < MIN_GROUP_ORDER:
        raise InvalidParameters(
            "Order {} is too small, need at least {}".format(q, MIN_GROUP_ORDER)
        )


@attr.s(frozen=True)
class GroupParameters:
    """
    Public group description shared by a prover and a verifier.

    Args:
        p: Safe prime modulus.
        q: Prime order of the subgroup, :math:`(p - 1) / 2`.
        g: First generator of the subgroup.
        h: Second generator of the subgroup.
    """

    p = attr.ib(converter=ensure_bn)
    q = attr.ib(converter=ensure_bn)
    g = attr.ib(converter=ensure_bn)
    h = attr.ib(converter=ensure_bn)

    def validate(self):
        """
        Check every invariant of the group.

        Raises:
            InvalidParameters: If the primes, their relation or the generators are wrong.
        """
        check_orders(self.q, self.p)
        for name in ("g", "h"):
            if not is_generator(getattr(self, name), self.q, self.p):
                raise InvalidParameters(
                    "{} = {} does not generate the subgroup of order {}".format(
                        name, getattr(self, name), self.q
                    )
                )
        if self.g == self.h:
            raise InvalidParameters("g and h must be distinct")

    def is_element(self, value):
        """Whether ``value`` is a non-zero residue modulo :math:`p`."""
        return 1 <= value < self.p

    def in_subgroup(self, value):
        """Whether ``value`` lies in the subgroup of order :math:`q`."""
        return self.is_element(value) and value.mod_pow(self.q, self.p) == 1

    def to_dict(self, user, radix=MATERIAL_RADIX):
        """Exchange-format record of the parameters of ``user``."""
        return {
            "user": user,
            "g": to_radix(self.g, radix),
            "h": to_radix(self.h, radix),
            "q": to_radix(self.q, radix),
            "p": to_radix(self.p, radix),
        }

    @classmethod
    def from_dict(cls, data, radix=MATERIAL_RADIX):
        """
        Read parameters from an exchange-format record. The ``user`` key is ignored.

        Raises:
            InvalidParameters: If a value is missing or is not a number.
        """
        values = {}
        for name in ("p", "q", "g", "h"):
            if name not in data:
                raise InvalidParameters("Missing {} in material record".format(name))
            try:
                values[name] = parse_bn(data[name], radix=radix, name=name)
            except InvalidArgument as e:
                raise InvalidParameters(str(e)) from e
        return cls(**values)

    def to_bytes(self):
        """Compact binary encoding."""
        return msgpack.packb(
            [self.p.binary(), self.q.binary(), self.g.binary(), self.h.binary()],
            use_bin_type=True,
        )

    @classmethod
    def from_bytes(cls, data):
        try:
            p, q, g, h = msgpack.unpackb(data, raw=False)
            values = [Bn.from_binary(x) for x in (p, q, g, h)]
        except (ValueError, TypeError, msgpack.UnpackException) as e:
            raise InvalidParameters("Malformed packed material: {}".format(e)) from e
        return cls(*values)


def load_materials(path, radix=MATERIAL_RADIX):
    """
    Read a JSON material file.

    The file holds either a single record or a list of records, each record being the output of
    :py:meth:`GroupParameters.to_dict`.

    Returns:
        dict: Mapping from users to :py:class:`GroupParameters`.
    """
    with open(path) as f:
        data = json.load(f)
    if isinstance(data, dict):
        data = [data]

    materials = {}
    for record in data:
        if "user" not in record:
            raise InvalidParameters("Material record without a user in {}".format(path))
        materials[record["user"]] = GroupParameters.from_dict(record, radix=radix)
    return materials


def dump_materials(path, materials, radix=MATERIAL_RADIX):
    """Write a mapping from users to parameters as a JSON material file."""
    records = [params.to_dict(user, radix=radix) for user, params in materials.items()]
    with open(path, "w") as f:
        json.dump(records, f, indent=2)
