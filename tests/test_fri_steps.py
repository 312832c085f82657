"""FRI step list computation."""

import pytest

from verifier_input.errors import MalformedInput
from verifier_input.fri_steps import calculate_fri_step_list, fri_degree, read_n_steps


class TestFriStepList:

    @pytest.mark.parametrize(
        "n_steps,degree_bound,expected",
        [
            (32768, 64, [0, 4, 4, 4, 1]),
            (1024, 64, [0, 4, 4]),
            (16, 64, [0, 2]),
            (4, 64, [0]),
        ],
    )
    def test_step_list(self, n_steps, degree_bound, expected):
        assert calculate_fri_step_list(n_steps, degree_bound) == expected

    def test_steps_sum_to_degree(self):
        assert sum(calculate_fri_step_list(2**20, 128)) == fri_degree(2**20, 128)

    def test_non_positive(self):
        with pytest.raises(ValueError):
            fri_degree(0, 64)


class TestReadNSteps:

    def test_n_steps(self):
        assert read_n_steps({"n_steps": 512}) == 512

    def test_trace_length_fallback(self):
        assert read_n_steps({"trace_length": 256}) == 256
        assert read_n_steps({"public_memory": {"trace_length": 128}}) == 128

    def test_missing(self):
        with pytest.raises(MalformedInput):
            read_n_steps({"layout": "starknet"})

    def test_invalid(self):
        with pytest.raises(MalformedInput):
            read_n_steps({"n_steps": "16"})
