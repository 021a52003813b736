r"""
Chaum-Pedersen protocol as a sequence of typed steps.

A prover knowing :math:`x` with :math:`y_1 = g^x` and :math:`y_2 = h^x` (modulo :math:`p`) convinces
a verifier without revealing :math:`x`:

1. Register: the prover publishes :math:`(y_1, y_2)`.
2. Commit: the prover draws :math:`k` and sends :math:`r_1 = g^k, r_2 = h^k`.
3. Challenge: the verifier draws :math:`c`.
4. Respond: the prover sends :math:`s = k - c x \mod q`.
5. Verify: the verifier checks :math:`r_1 = g^s y_1^c` and :math:`r_2 = h^s y_2^c`.

Each step is a class and each step type has exactly one transition to its successor, applied
through :py:class:`ProtocolState`:

>>> from zkcp.group import GroupParameters
>>> material = GroupParameters(p=23, q=11, g=4, h=9)
>>> registered = ProtocolState(Register(material, 3)).change().into_inner()
>>> (registered.y1, registered.y2)
(18, 16)

See Chaum and Pedersen, "Wallet Databases with Observers", Crypto 1992.
"""

import enum
import hmac
import logging

import attr

from zkcp.exceptions import InvalidArgument, ProtocolError
from zkcp.group import GroupParameters
from zkcp.secret import SecretValue, reveal
from zkcp.utils import get_random_source, parse_bn


logger = logging.getLogger(__name__)


@attr.s
class Register:
    """Prover holding the material and the secret :math:`x`."""

    material = attr.ib()
    x = attr.ib(repr=False)


@attr.s
class Registered:
    """Public values :math:`y_1 = g^x, y_2 = h^x` of a prover."""

    material = attr.ib()
    y1 = attr.ib()
    y2 = attr.ib()


@attr.s
class Commitment:
    """
    First message of a round. Only :math:`r_1, r_2` leave the prover, :math:`k` is kept in a
    :py:class:`zkcp.secret.SecretValue`.
    """

    material = attr.ib()
    r1 = attr.ib()
    r2 = attr.ib()
    k = attr.ib(repr=False)


@attr.s
class Challenge:
    """Challenge :math:`c` issued by the verifier under a fresh authentication id."""

    auth_id = attr.ib()
    c = attr.ib()


@attr.s
class ChallengeResponse:
    """Everything the prover needs to answer a challenge."""

    challenge = attr.ib()
    material = attr.ib()
    x = attr.ib(repr=False)
    k = attr.ib(repr=False)


@attr.s
class Answer:
    """Response :math:`s` of the prover to the challenge ``auth_id``."""

    auth_id = attr.ib()
    s = attr.ib()


@attr.s
class Verification:
    """Everything the verifier needs to check a response."""

    material = attr.ib()
    y1 = attr.ib()
    y2 = attr.ib()
    r1 = attr.ib()
    r2 = attr.ib()
    c = attr.ib()
    s = attr.ib()


class VerificationResult(enum.Enum):
    """Terminal step of the protocol."""

    VERIFIED = "verified"
    FAILED = "failed"


_TRANSITIONS = {}


def transition(step_cls):
    """Register the transition out of ``step_cls``."""

    def register(f):
        if step_cls in _TRANSITIONS:
            raise ProtocolError(
                "A transition out of {} already exists".format(step_cls.__name__)
            )
        _TRANSITIONS[step_cls] = f
        return f

    return register


PROTOCOL_STEPS = (
    Register,
    Registered,
    Commitment,
    GroupParameters,
    Challenge,
    ChallengeResponse,
    Answer,
    Verification,
    VerificationResult,
)


class ProtocolState:
    """
    Wrapper around a protocol step allowing only the transition defined for that step.

    Args:
        state: One of the protocol steps.

    Raises:
        ProtocolError: If ``state`` is not a protocol step.
    """

    def __init__(self, state):
        if not isinstance(state, PROTOCOL_STEPS):
            raise ProtocolError(
                "{} is not a protocol step".format(type(state).__name__)
            )
        self.state = state

    def change(self, rng=None):
        """
        Apply the transition out of the current step.

        Args:
            rng: Optional :py:class:`zkcp.utils.RandomSource` for the randomized transitions.

        Returns:
            ProtocolState: The successor step.

        Raises:
            ProtocolError: If the current step is terminal.
        """
        step = _TRANSITIONS.get(type(self.state))
        if step is None:
            raise ProtocolError(
                "No transition out of {}".format(type(self.state).__name__)
            )
        return ProtocolState(step(self.state, get_random_source(rng)))

    def into_inner(self):
        return self.state

    def __repr__(self):
        return "ProtocolState({!r})".format(self.state)


def check_element(material, value, name):
    """
    Parse ``value`` and check it is a non-zero residue modulo :math:`p`.

    Raises:
        InvalidArgument: If the value is not a number or is out of range.
    """
    value = parse_bn(value, name=name)
    if not material.is_element(value):
        raise InvalidArgument("{} is not an element of the group".format(name))
    return value


def check_exponent(material, value, name):
    """
    Parse ``value`` and check it lies in :math:`[0, q)`.

    Raises:
        InvalidArgument: If the value is not a number or is out of range.
    """
    value = parse_bn(value, name=name)
    if not 0 <= value < material.q:
        raise InvalidArgument("{} is out of range [0, q)".format(name))
    return value


def check_response(value, name="s"):
    """
    Parse a response. Responses of :math:`q` or more are well formed and simply fail verification.

    Raises:
        InvalidArgument: If the value is not a number or is negative.
    """
    value = parse_bn(value, name=name)
    if value < 0:
        raise InvalidArgument("{} must not be negative".format(name))
    return value


def _constant_time_equal(a, b, width):
    return hmac.compare_digest(
        a.binary().rjust(width, b"\x00"), b.binary().rjust(width, b"\x00")
    )


@transition(Register)
def _register(state, rng):
    material = state.material
    x = reveal(state.x)
    if not 0 < x < material.q:
        raise InvalidArgument("x is out of range (0, q)")
    return Registered(
        material=material,
        y1=material.g.mod_pow(x, material.p),
        y2=material.h.mod_pow(x, material.p),
    )


@transition(Registered)
def _commit(state, rng):
    material = state.material
    k = SecretValue(rng.between(2, material.q - 2), name="k")
    return Commitment(
        material=material,
        r1=material.g.mod_pow(k.value, material.p),
        r2=material.h.mod_pow(k.value, material.p),
        k=k,
    )


@transition(GroupParameters)
def _challenge(state, rng):
    return Challenge(auth_id=rng.token(), c=rng.between(2, state.q - 1))


@transition(ChallengeResponse)
def _respond(state, rng):
    q = state.material.q
    try:
        c = check_exponent(state.material, state.challenge.c, "c")
        cx = c.mod_mul(reveal(state.x), q)
        s = reveal(state.k).mod_sub(cx, q)
    finally:
        # The commitment randomness is single use.
        if isinstance(state.k, SecretValue):
            state.k.clear()
    return Answer(auth_id=state.challenge.auth_id, s=s)


@transition(Verification)
def _verify(state, rng):
    material = state.material
    p = material.p
    y1 = check_element(material, state.y1, "y1")
    y2 = check_element(material, state.y2, "y2")
    r1 = check_element(material, state.r1, "r1")
    r2 = check_element(material, state.r2, "r2")
    c = check_exponent(material, state.c, "c")
    s = check_response(state.s)
    in_range = s < material.q

    r1_prime = material.g.mod_pow(s, p).mod_mul(y1.mod_pow(c, p), p)
    r2_prime = material.h.mod_pow(s, p).mod_mul(y2.mod_pow(c, p), p)

    # Both sides are always compared.
    width = len(p.binary())
    first = _constant_time_equal(r1, r1_prime, width)
    second = _constant_time_equal(r2, r2_prime, width)
    if first and second and in_range:
        logger.info("Challenge verified successfully")
        return VerificationResult.VERIFIED

    logger.info("Challenge verification failed due to mismatch")
    return VerificationResult.FAILED
