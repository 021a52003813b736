"""
Configuration of the services and logging setup.

Settings are read, in order of precedence, from ``ZK_VERIFIER_<FIELD>`` environment variables, an
optional JSON file, and the defaults of :py:mod:`zkcp.consts`.
"""

import json
import logging
import os

import attr

from zkcp.consts import DEFAULT_PRIME_BITS, GENERATION_TIMEOUT, RESPONSE_TIMEOUT
from zkcp.generator import MaterialApplication
from zkcp.storage import FileParams, MemMaterialStorage, MemStorage
from zkcp.verifier import VerifierApplication


ENV_PREFIX = "ZK_VERIFIER_"

LOG_FORMAT = "%(asctime)s [%(levelname)s] [%(name)s:%(lineno)d] %(message)s"


@attr.s
class VerifierConfig:
    response_timeout_in_secs = attr.ib(default=RESPONSE_TIMEOUT, converter=float)
    material_path = attr.ib(default="./config/users.json", converter=str)
    prime_bits = attr.ib(default=DEFAULT_PRIME_BITS, converter=int)
    generation_timeout = attr.ib(default=GENERATION_TIMEOUT, converter=float)
    log_level = attr.ib(default="INFO", converter=str)


def load_config(path=None, environ=None):
    """
    Build a :py:class:`VerifierConfig`.

    Args:
        path: Optional JSON file with some of the settings.
        environ: Environment mapping, defaults to ``os.environ``.

    Raises:
        ValueError: On unknown settings or values that cannot be converted.
    """
    if environ is None:
        environ = os.environ

    fields = {a.name for a in attr.fields(VerifierConfig)}
    settings = {}
    if path is not None:
        with open(path) as f:
            settings.update(json.load(f))

    for key, value in environ.items():
        if key.startswith(ENV_PREFIX):
            name = key[len(ENV_PREFIX):].lower()
            if name in fields:
                settings[name] = value

    unknown = set(settings) - fields
    if unknown:
        raise ValueError("Unknown settings: {}".format(", ".join(sorted(unknown))))
    return VerifierConfig(**settings)


def init_logging(level="INFO"):
    """Log to the standard error stream."""
    logging.basicConfig(level=level, format=LOG_FORMAT)


def build_verifier(config, storage=None, rng=None):
    """
    Authentication service backed by the material file of ``config``.

    Args:
        config: A :py:class:`VerifierConfig`.
        storage: Optional storage, an empty :py:class:`zkcp.storage.MemStorage` by default.
        rng: Optional :py:class:`zkcp.utils.RandomSource`.
    """
    return VerifierApplication(
        FileParams(config.material_path),
        storage if storage is not None else MemStorage(),
        rng=rng,
        timeout=config.response_timeout_in_secs,
    )


def build_material_service(config, storage=None, rng=None):
    """Material service generating groups as set in ``config``."""
    return MaterialApplication(
        storage if storage is not None else MemMaterialStorage(),
        bits=config.prime_bits,
        timeout=config.generation_timeout,
        rng=rng,
    )
