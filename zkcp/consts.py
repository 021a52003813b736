"""
Numeric defaults shared by the generator, the protocol and the services.
"""

# Bit length of generated safe primes. Fine for tests, far too small for real use.
DEFAULT_PRIME_BITS = 32

# Wall-clock budget for the generator search, in seconds.
GENERATION_TIMEOUT = 10

# Budget for a single storage or registry call, in seconds.
RESPONSE_TIMEOUT = 60

# Radix of the serialized material exchange format.
MATERIAL_RADIX = 16

# Smallest subgroup order with two distinct generators in [2, q - 1].
MIN_GROUP_ORDER = 5
