"""
Generation of group parameters within a bounded time.

The modulus is a safe prime :math:`p = 2q + 1`. Generators of the subgroup of order :math:`q` are
found by rejection sampling: random candidates are drawn until two distinct ones have order
exactly :math:`q`. The search runs as a coroutine raced against a timer and is cancelled when the
timer fires first.
"""

import asyncio
import logging

from petlib.bn import Bn

from zkcp.consts import DEFAULT_PRIME_BITS, GENERATION_TIMEOUT
from zkcp.exceptions import GenerationTimeout, InvalidParameters
from zkcp.group import GroupParameters, check_orders, is_generator
from zkcp.utils import ensure_bn, get_random_source


logger = logging.getLogger(__name__)

# Safe primes shorter than this cannot hold a large enough subgroup.
MIN_PRIME_BITS = 8


def resolve_orders(q=None, p=None):
    """
    Work out the subgroup order and the modulus from hints.

    A single hint determines the other value through :math:`p = 2q + 1`. Two hints are returned as
    given and checked later.

    >>> resolve_orders(q=11)
    (11, 23)
    >>> resolve_orders(p=23)
    (11, 23)

    Returns:
        tuple: ``(q, p)``
    """
    if q is None and p is None:
        raise InvalidParameters("Need q or p to resolve the orders")
    if q is None:
        p = ensure_bn(p)
        q = (p - 1) // 2
    elif p is None:
        q = ensure_bn(q)
        p = 2 * q + 1
    return ensure_bn(q), ensure_bn(p)


async def search_safe_prime(bits=DEFAULT_PRIME_BITS):
    """
    Draw a safe prime :math:`p = 2q + 1` of ``bits`` bits.

    Random primes are drawn until :math:`(p - 1) / 2` is prime as well. The search yields to the
    loop between candidates, so a caller can bound it with :py:func:`asyncio.wait_for`.

    Returns:
        tuple: ``(q, p)``
    """
    if bits < MIN_PRIME_BITS:
        raise InvalidParameters(
            "Cannot generate a safe prime of {} bits, need at least {}".format(
                bits, MIN_PRIME_BITS
            )
        )
    attempts = 0
    while True:
        # Yield so that the timer can cancel the search.
        await asyncio.sleep(0)
        attempts += 1
        p = Bn.get_prime(bits, safe=0)
        q = (p - 1) // 2
        if q.is_prime():
            logger.debug("Found a %d-bit safe prime after %d attempts", bits, attempts)
            return q, p


async def _search_generators(q, p, rng):
    limit = q
    attempts = 0
    while True:
        await asyncio.sleep(0)
        attempts += 1
        g = rng.between(2, limit - 1)
        h = rng.between(2, limit - 1)
        if g != h and is_generator(g, q, p) and is_generator(h, q, p):
            logger.debug("Found generators of order %s after %d attempts", q, attempts)
            return g, h


async def _search_group(q, p, bits, rng):
    if q is None and p is None:
        q, p = await search_safe_prime(bits)
    else:
        q, p = resolve_orders(q, p)
    check_orders(q, p)

    logger.debug("Searching generators for p=%s, q=%s", p, q)
    g, h = await _search_generators(q, p, rng)
    return GroupParameters(p=p, q=q, g=g, h=h)


async def generate(
    q=None, p=None, bits=DEFAULT_PRIME_BITS, timeout=GENERATION_TIMEOUT, rng=None
):
    """
    Generate verified group parameters.

    The whole search, safe prime included, runs within ``timeout``.

    Args:
        q: Optional prime order of the subgroup.
        p: Optional safe prime modulus.
        bits: Bit length of the modulus drawn when neither hint is given.
        timeout: Time budget of the search, in seconds.
        rng: Optional :py:class:`zkcp.utils.RandomSource`.

    Returns:
        GroupParameters: Parameters with two distinct generators of order :math:`q`.

    Raises:
        InvalidParameters: If the hints do not describe a safe-prime subgroup.
        GenerationTimeout: If no group was found in time.
    """
    rng = get_random_source(rng)
    try:
        return await asyncio.wait_for(_search_group(q, p, bits, rng), timeout)
    except asyncio.TimeoutError as e:
        raise GenerationTimeout(
            "Timeout in generating group after {}s".format(timeout)
        ) from e


class MaterialApplication:
    """
    Provisioning of per-user group parameters.

    Args:
        storage: Material storage, see :py:class:`zkcp.storage.MemMaterialStorage`.
        bits: Bit length of generated moduli.
        timeout: Time budget of a generation, in seconds.
        rng: Optional :py:class:`zkcp.utils.RandomSource`.
    """

    def __init__(
        self, storage, bits=DEFAULT_PRIME_BITS, timeout=GENERATION_TIMEOUT, rng=None
    ):
        self.storage = storage
        self.bits = bits
        self.timeout = timeout
        self.rng = rng

    async def create_material(self, user, q=None, p=None):
        """
        Get the parameters of ``user``, generating and storing them on first use.

        Parameters already stored for the user are returned as they are and the hints are ignored.
        """
        logger.info("Creating material for user %r", user)
        material = await self.storage.get(user)
        if material is not None:
            logger.warning(
                "Material already exists for user %r. Returning existing", user
            )
            return material

        logger.info("Generating material for user %r", user)
        material = await generate(
            q, p, bits=self.bits, timeout=self.timeout, rng=self.rng
        )

        logger.info("Storing material %r for user %r", material, user)
        await self.storage.store(user, material)
        return material

    async def get_material(self, user):
        """Parameters of ``user``, or None."""
        logger.info("Getting material for user %r", user)
        return await self.storage.get(user)
