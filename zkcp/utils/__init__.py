from zkcp.utils.numbers import (
    ensure_bn,
    parse_bn,
    to_radix,
    RandomSource,
    get_random_source,
)
