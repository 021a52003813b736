"""
Utils that can be useful for debugging.
"""

import logging


logger = logging.getLogger(__name__)


class AuthenticationRun:
    """
    Runner of a whole authentication: registration, then one challenge round.

    Args:
        service: Authentication service, such as :py:class:`zkcp.verifier.VerifierApplication`.
        prover: :py:class:`zkcp.prover.Prover` object
    """

    def __init__(self, service, prover):
        self.service = service
        self.prover = prover

    async def run(self, register=True, verbose=True):
        """Run the authentication and return the outcome of the verification."""

        # Funky names.
        victor = self.service
        peggy = self.prover

        if register:
            registered = peggy.registration()
            await victor.register(peggy.user, registered.y1, registered.y2)
        result = await peggy.authenticate(victor)

        if verbose:
            if result:
                logger.info("Verified for %s", peggy.user)
            else:
                logger.info("Not verified for %s", peggy.user)

        return result
