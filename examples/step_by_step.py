"""
The five protocol messages, transition by transition, in a fixed small group.

PK{ (x): y1 = g^x mod p and y2 = h^x mod p }
"""

from zkcp.group import GroupParameters
from zkcp.protocol import (
    Challenge,
    ChallengeResponse,
    ProtocolState,
    Register,
    Verification,
    VerificationResult,
)
from zkcp.secret import SecretValue

# p = 2q + 1, and 4 = 2^2, 9 = 3^2 are squares, hence of order q.
material = GroupParameters(p=23, q=11, g=4, h=9)
material.validate()

with SecretValue(3, name="x") as x:
    # Prover: registration and commitment.
    registered = ProtocolState(Register(material, x)).change().into_inner()
    commitment = ProtocolState(registered).change().into_inner()

    # Verifier: challenge.
    challenge = ProtocolState(material).change().into_inner()

    # Prover: response.
    answer = ProtocolState(
        ChallengeResponse(challenge=challenge, material=material, x=x, k=commitment.k)
    ).change().into_inner()

# Verifier: verification.
verification = Verification(
    material=material,
    y1=registered.y1,
    y2=registered.y2,
    r1=commitment.r1,
    r2=commitment.r2,
    c=challenge.c,
    s=answer.s,
)
result = ProtocolState(verification).change().into_inner()
assert result is VerificationResult.VERIFIED
