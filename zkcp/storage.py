"""
In-memory storages and a file-backed material registry.

The in-memory storages never await between reading and writing a dict, so every call is atomic on
the event loop and concurrent writes to the same key resolve to the last one.
"""

import logging

from zkcp.consts import MATERIAL_RADIX
from zkcp.group import load_materials
from zkcp.verifier import MaterialRegistry, VerifierStorage


logger = logging.getLogger(__name__)


class MemStorage(VerifierStorage):
    """In-memory storage of registrations and challenges."""

    def __init__(self):
        self.users = {}
        self.challenges = {}

    async def store_user(self, registration):
        self.users[registration.user] = registration

    async def get_user(self, user):
        return self.users.get(user)

    async def store_challenge(self, auth_id, record):
        self.challenges[auth_id] = record

    async def get_challenge(self, auth_id):
        return self.challenges.get(auth_id)

    async def take_challenge(self, auth_id):
        return self.challenges.pop(auth_id, None)


class MemMaterialStorage(MaterialRegistry):
    """
    In-memory storage of group parameters.

    Serves both as the storage of a :py:class:`zkcp.generator.MaterialApplication` and as the
    registry of a :py:class:`zkcp.verifier.VerifierApplication`.
    """

    def __init__(self, materials=None):
        self.materials = dict(materials or {})

    async def store(self, user, material):
        self.materials[user] = material

    async def get(self, user):
        return self.materials.get(user)

    async def query(self, user):
        return self.materials.get(user)


class FileParams(MaterialRegistry):
    """
    Registry of group parameters provisioned out of band in a JSON material file.

    Every loaded group is validated, a file with an invalid group is rejected as a whole.

    Args:
        path: Path of a file written by :py:func:`zkcp.group.dump_materials`.
        radix: Radix of the numbers in the file.
    """

    def __init__(self, path, radix=MATERIAL_RADIX):
        logger.info("Loading materials from %s", path)
        self.materials = load_materials(path, radix=radix)
        for material in self.materials.values():
            material.validate()
        logger.info("Loaded materials of %d users", len(self.materials))

    async def query(self, user):
        logger.info("Querying material for user %r", user)
        return self.materials.get(user)
