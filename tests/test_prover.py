import logging

import pytest

from zkcp.exceptions import ProtocolError
from zkcp.prover import Prover
from zkcp.secret import SecretValue
from zkcp.utils.debug import AuthenticationRun
from zkcp.verifier import Failed, Verified


def test_registration(group):
    prover = Prover("alice", group, 5)
    registered = prover.registration()
    assert registered.y1 == group.g.mod_pow(5, group.p)
    assert registered.y2 == group.h.mod_pow(5, group.p)


def test_commit_replaces_round(small_group):
    prover = Prover("alice", small_group, 3)
    first = prover.commit()
    second = prover.commit()
    assert first.k.cleared
    assert not second.k.cleared
    assert prover.commitment is second


def test_respond_closes_round(small_group, scripted_random):
    prover = Prover("alice", small_group, 3, rng=scripted_random(draws=[5]))
    commitment = prover.commit()
    answer = prover.respond("auth", 7)

    assert answer.auth_id == "auth"
    assert answer.s == 6
    assert commitment.k.cleared
    assert prover.commitment is None
    with pytest.raises(ProtocolError):
        prover.respond("auth", 7)


def test_respond_without_commitment(small_group):
    with pytest.raises(ProtocolError):
        Prover("alice", small_group, 3).respond("auth", 7)


def test_discard(small_group):
    prover = Prover("alice", small_group, 3)
    commitment = prover.commit()
    prover.discard()
    prover.discard()
    assert commitment.k.cleared
    assert prover.commitment is None


def test_close_clears_secret(small_group):
    with Prover("alice", small_group, 3) as prover:
        commitment = prover.commit()
    assert prover.x.cleared
    assert commitment.k.cleared
    with pytest.raises(ProtocolError):
        prover.registration()


def test_accepts_secret_value(small_group):
    x = SecretValue(3, name="x")
    prover = Prover("alice", small_group, x)
    assert prover.x is x
    assert "3" not in repr(prover.x)


@pytest.mark.asyncio
async def test_authenticate(service, group):
    prover = Prover("alice", group, 5)
    registered = prover.registration()
    await service.register("alice", registered.y1, registered.y2)

    result = await prover.authenticate(service)
    assert isinstance(result, Verified)
    assert prover.commitment is None


class RefusingService:
    async def create_challenge(self, user, r1, r2):
        raise ConnectionError("verifier unreachable")

    async def verify(self, auth_id, s):
        raise AssertionError("not reached")


@pytest.mark.asyncio
async def test_authenticate_discards_round_on_error(small_group):
    prover = Prover("alice", small_group, 3)
    with pytest.raises(ConnectionError):
        await prover.authenticate(RefusingService())
    assert prover.commitment is None


@pytest.mark.asyncio
async def test_authentication_run(service, group, caplog):
    run = AuthenticationRun(service, Prover("alice", group, 5))
    with caplog.at_level(logging.INFO, logger="zkcp.utils.debug"):
        result = await run.run()
    assert result
    assert "Verified for alice" in caplog.text


@pytest.mark.asyncio
async def test_authentication_run_impostor(service, group, caplog):
    await AuthenticationRun(service, Prover("alice", group, 5)).run(verbose=False)

    run = AuthenticationRun(service, Prover("alice", group, 6))
    with caplog.at_level(logging.INFO, logger="zkcp.utils.debug"):
        result = await run.run(register=False)
    assert isinstance(result, Failed)
    assert "Not verified for alice" in caplog.text
