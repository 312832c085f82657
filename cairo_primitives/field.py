"""Cairo prime field GF(p), p = 2^251 + 17 * 2^192 + 1.

Uses galois for field arithmetic. FF is the field type; elements are lifted
from canonical integers with to_field(), which reduces first so that callers
never hand galois an out-of-range value.

The on-chain verifier keeps field elements in Montgomery form with radix
R = 2^256. Values drawn from its keccak PRNG are Montgomery residues and must
be scaled by R^-1 before they can be compared with canonical values.
"""

import galois

# --- Field Construction ---

CAIRO_PRIME = 2**251 + 17 * 2**192 + 1

# 3 generates the multiplicative group of the Stark field.
FF = galois.GF(CAIRO_PRIME, primitive_element=3, verify=False)
"""Base field GF(p) - Cairo/Stark prime field."""


# --- Montgomery Constants ---
# Values from the verifier's PrimeFieldElement0 contract.

MONTGOMERY_R = 2**256 % CAIRO_PRIME
MONTGOMERY_R_INV = 0x40000000000001100000000000012100000000000000000000000000000000

# Largest multiple of p below 2^256 used by the PRNG rejection sampler.
PRNG_BOUND = 31 * CAIRO_PRIME


def to_field(value: int) -> FF:
    """Lift an arbitrary integer into FF, reducing modulo p."""
    return FF(int(value) % CAIRO_PRIME)


def from_montgomery(value: int) -> int:
    """Return value * R^-1 mod p as a canonical integer."""
    return int(to_field(value) * FF(MONTGOMERY_R_INV))
