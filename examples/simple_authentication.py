"""
Password-less authentication of one user against an in-memory verifier.

WARNING: if you update this file, update the README.
"""

import asyncio

from zkcp import MaterialApplication, Prover, VerifierApplication
from zkcp.storage import MemMaterialStorage, MemStorage


async def main():
    # The group of the user is generated once and shared with the verifier.
    materials = MemMaterialStorage()
    material = await MaterialApplication(materials).create_material("alice")

    service = VerifierApplication(materials, MemStorage())

    # In practice, the secret should be a big integer (petlib.bn.Bn) derived from a password.
    with Prover("alice", material, 1234) as prover:
        registered = prover.registration()
        await service.register("alice", registered.y1, registered.y2)

        result = await prover.authenticate(service)
        assert result
        print("Authenticated, session", result.session_id)


asyncio.run(main())
