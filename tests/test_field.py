"""Cairo prime field and Montgomery constants."""

from cairo_primitives.field import (
    CAIRO_PRIME,
    FF,
    MONTGOMERY_R,
    MONTGOMERY_R_INV,
    PRNG_BOUND,
    from_montgomery,
    to_field,
)


class TestConstants:

    def test_prime_literal(self):
        assert CAIRO_PRIME == 0x800000000000011000000000000000000000000000000000000000000000001

    def test_r_times_r_inv_is_one(self):
        assert (MONTGOMERY_R * MONTGOMERY_R_INV) % CAIRO_PRIME == 1

    def test_prng_bound_fits_a_word(self):
        assert PRNG_BOUND < 2**256
        assert PRNG_BOUND + CAIRO_PRIME >= 2**256

    def test_field_order(self):
        assert FF.order == CAIRO_PRIME


class TestConversions:

    def test_to_field_reduces(self):
        assert int(to_field(CAIRO_PRIME + 5)) == 5
        assert int(to_field(-1)) == CAIRO_PRIME - 1

    def test_from_montgomery_of_r_is_one(self):
        assert from_montgomery(MONTGOMERY_R) == 1

    def test_from_montgomery_scales_by_r_inv(self):
        x = 0x1234567890ABCDEF
        assert from_montgomery(x) == x * MONTGOMERY_R_INV % CAIRO_PRIME

    def test_from_montgomery_accepts_values_above_p(self):
        x = 30 * CAIRO_PRIME + 7
        assert from_montgomery(x) == 7 * MONTGOMERY_R_INV % CAIRO_PRIME
