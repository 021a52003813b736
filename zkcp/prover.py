"""
Prover side of the authentication.
"""

import logging

from zkcp.exceptions import ProtocolError
from zkcp.protocol import Challenge, ChallengeResponse, ProtocolState, Register
from zkcp.secret import SecretValue
from zkcp.utils import get_random_source


logger = logging.getLogger(__name__)


class Prover:
    """
    A user proving knowledge of its secret :math:`x`.

    The secret is held in a :py:class:`zkcp.secret.SecretValue` and cleared by :py:meth:`close` or
    when leaving a ``with`` block. At most one round is in flight at a time.

    >>> from zkcp.group import GroupParameters
    >>> material = GroupParameters(p=23, q=11, g=4, h=9)
    >>> with Prover("alice", material, 3) as prover:
    ...     registered = prover.registration()
    >>> prover.x.cleared
    True

    Args:
        user: User identifier.
        material: The :py:class:`zkcp.group.GroupParameters` of the user.
        x: The secret, as a number or a :py:class:`zkcp.secret.SecretValue`.
        rng: Optional :py:class:`zkcp.utils.RandomSource`.
    """

    def __init__(self, user, material, x, rng=None):
        self.user = user
        self.material = material
        if not isinstance(x, SecretValue):
            x = SecretValue(x, name="x")
        self.x = x
        self.rng = get_random_source(rng)
        self.commitment = None

    def registration(self):
        """Compute the public values :math:`(y_1, y_2)` to register."""
        return ProtocolState(Register(self.material, self.x)).change(self.rng).into_inner()

    def commit(self):
        """
        Open a round.

        Returns:
            Commitment: The commitment, whose :math:`r_1, r_2` are sent to the verifier.
        """
        self.discard()
        registered = self.registration()
        self.commitment = ProtocolState(registered).change(self.rng).into_inner()
        return self.commitment

    def respond(self, auth_id, c):
        """
        Answer the challenge ``c`` of the round in flight, which closes it.

        Returns:
            Answer: The authentication id and the response :math:`s`.
        """
        if self.commitment is None:
            raise ProtocolError("No commitment in flight")
        commitment, self.commitment = self.commitment, None

        response = ChallengeResponse(
            challenge=Challenge(auth_id=auth_id, c=c),
            material=self.material,
            x=self.x,
            k=commitment.k,
        )
        return ProtocolState(response).change(self.rng).into_inner()

    def discard(self):
        """Drop the round in flight, if any."""
        if self.commitment is not None:
            self.commitment.k.clear()
            self.commitment = None

    async def authenticate(self, service):
        """
        Run one round against an authentication service.

        Args:
            service: Object with the coroutines ``create_challenge(user, r1, r2)`` and
                ``verify(auth_id, s)``, such as :py:class:`zkcp.verifier.VerifierApplication`.

        Returns:
            The outcome returned by ``service.verify``.
        """
        commitment = self.commit()
        try:
            logger.info("Sending commitment of user %r", self.user)
            started = await service.create_challenge(
                self.user, commitment.r1, commitment.r2
            )
            answer = self.respond(started.auth_id, started.c)
        finally:
            self.discard()

        logger.info("Answering challenge %s", answer.auth_id)
        return await service.verify(answer.auth_id, answer.s)

    def close(self):
        self.discard()
        self.x.clear()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        self.close()
