"""
Verifier side of the authentication: registration, challenge issuance and verification.

The verifier keeps no state of its own. Group parameters come from a :py:class:`MaterialRegistry`,
registrations and in-flight challenges live in a :py:class:`VerifierStorage`. Both collaborators
are asynchronous and their errors are propagated as they are.
"""

import abc
import asyncio
import logging

import attr

from zkcp.exceptions import (
    ChallengeNotFound,
    InvalidArgument,
    MaterialNotFound,
    UserNotFound,
)
from zkcp.protocol import (
    Answer,
    ProtocolState,
    Verification,
    VerificationResult,
    check_element,
    check_response,
)
from zkcp.utils import get_random_source


logger = logging.getLogger(__name__)


@attr.s
class Registration:
    """Public values registered by ``user``."""

    user = attr.ib()
    y1 = attr.ib()
    y2 = attr.ib()


@attr.s
class ChallengeRequest:
    """Commitment sent by ``user`` to open a challenge."""

    user = attr.ib()
    r1 = attr.ib()
    r2 = attr.ib()


@attr.s
class ChallengeRecord:
    """Commitment paired with the challenge issued for it."""

    challenge = attr.ib()
    c = attr.ib()


@attr.s
class ChallengeStarted:
    """What the prover receives when a challenge is opened."""

    auth_id = attr.ib()
    c = attr.ib()


class AnswerResult:
    """Outcome of a verification. Truthy on success."""

    success = False

    def __bool__(self):
        return self.success


@attr.s
class Verified(AnswerResult):
    """The proof verified, ``session_id`` identifies the authenticated session."""

    session_id = attr.ib()
    success = True


@attr.s
class Failed(AnswerResult):
    """The proof did not verify."""


class MaterialRegistry(metaclass=abc.ABCMeta):
    """Lookup of the group parameters of a user."""

    @abc.abstractmethod
    async def query(self, user):
        """
        Returns:
            GroupParameters or None: Parameters of ``user`` if provisioned.
        """


class VerifierStorage(metaclass=abc.ABCMeta):
    """Storage of registrations and of in-flight challenges."""

    @abc.abstractmethod
    async def store_user(self, registration):
        """Store a registration, replacing any previous one of the same user."""

    @abc.abstractmethod
    async def get_user(self, user):
        """Registration of ``user``, or None."""

    @abc.abstractmethod
    async def store_challenge(self, auth_id, record):
        """Store a challenge record under ``auth_id``."""

    @abc.abstractmethod
    async def get_challenge(self, auth_id):
        """Challenge record of ``auth_id``, or None."""

    @abc.abstractmethod
    async def take_challenge(self, auth_id):
        """Remove and return the challenge record of ``auth_id``, or None."""


class VerifierApplication:
    """
    Authentication service.

    Args:
        registry: A :py:class:`MaterialRegistry`.
        storage: A :py:class:`VerifierStorage`.
        rng: Optional :py:class:`zkcp.utils.RandomSource` for challenges and identifiers.
        timeout: Optional bound, in seconds, on every call to a collaborator.
    """

    def __init__(self, registry, storage, rng=None, timeout=None):
        self.registry = registry
        self.storage = storage
        self.rng = get_random_source(rng)
        self.timeout = timeout

    async def _call(self, awaitable):
        if self.timeout is None:
            return await awaitable
        return await asyncio.wait_for(awaitable, self.timeout)

    async def _material(self, user):
        material = await self._call(self.registry.query(user))
        if material is None:
            raise MaterialNotFound(
                "User material not found. You should generate material first."
            )
        return material

    def _subgroup_element(self, material, value, name):
        value = check_element(material, value, name)
        if not material.in_subgroup(value):
            raise InvalidArgument("{} is not in the subgroup of order q".format(name))
        return value

    async def register(self, user, y1, y2):
        """
        Register the public values of ``user``.

        Raises:
            MaterialNotFound: If no parameters are provisioned for ``user``.
            InvalidArgument: If a value is not an element of the subgroup.
        """
        logger.info("Registering user %r", user)
        material = await self._material(user)
        registration = Registration(
            user=user,
            y1=self._subgroup_element(material, y1, "y1"),
            y2=self._subgroup_element(material, y2, "y2"),
        )

        logger.info("User material found. Registering user %r", user)
        await self._call(self.storage.store_user(registration))

    async def create_challenge(self, user, r1, r2):
        """
        Open a challenge for the commitment :math:`(r_1, r_2)` of ``user``.

        Returns:
            ChallengeStarted: The authentication id and the challenge :math:`c`.

        Raises:
            MaterialNotFound: If no parameters are provisioned for ``user``.
            InvalidArgument: If a value is not an element of the group.
        """
        material = await self._material(user)
        request = ChallengeRequest(
            user=user,
            r1=check_element(material, r1, "r1"),
            r2=check_element(material, r2, "r2"),
        )

        challenge = ProtocolState(material).change(self.rng).into_inner()
        record = ChallengeRecord(challenge=request, c=challenge.c)
        await self._call(self.storage.store_challenge(challenge.auth_id, record))

        logger.info("Challenge %s issued to user %r", challenge.auth_id, user)
        return ChallengeStarted(auth_id=challenge.auth_id, c=challenge.c)

    async def verify(self, auth_id, s):
        """
        Check the answer ``s`` to the challenge ``auth_id``.

        The challenge is consumed by the first well-formed attempt, whatever its outcome.

        Returns:
            Verified or Failed

        Raises:
            InvalidArgument: If ``s`` is malformed or negative, the challenge is then kept.
            ChallengeNotFound: If ``auth_id`` is unknown or already used.
            MaterialNotFound: If the parameters of the user are gone.
            UserNotFound: If the user has not registered.
        """
        answer = Answer(auth_id=auth_id, s=check_response(s))

        record = await self._call(self.storage.take_challenge(answer.auth_id))
        if record is None:
            raise ChallengeNotFound("Challenge {} not found".format(answer.auth_id))

        user = record.challenge.user
        material = await self._material(user)
        registration = await self._call(self.storage.get_user(user))
        if registration is None:
            raise UserNotFound("User {!r} is not registered".format(user))

        verification = Verification(
            material=material,
            y1=registration.y1,
            y2=registration.y2,
            r1=record.challenge.r1,
            r2=record.challenge.r2,
            c=record.c,
            s=answer.s,
        )
        result = ProtocolState(verification).change().into_inner()
        if result is VerificationResult.VERIFIED:
            logger.info("User %r authenticated with challenge %s", user, auth_id)
            return Verified(session_id=self.rng.token())

        logger.info("User %r failed challenge %s", user, auth_id)
        return Failed()
