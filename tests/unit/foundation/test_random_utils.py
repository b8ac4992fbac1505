"""Tests for randomness helpers."""

from unittest.mock import patch

import pytest

from reelguess.foundation.utils import pick, random_index, random_int_inclusive


class TestRandomHelpers:
    def test_random_index_bounds(self) -> None:
        with patch("reelguess.foundation.utils.random.random", return_value=0.0):
            assert random_index(5) == 0
        with patch("reelguess.foundation.utils.random.random", return_value=0.9999):
            assert random_index(5) == 4

    def test_random_int_inclusive_rounds_inward(self) -> None:
        values = {random_int_inclusive(1.2, 3.8) for _ in range(200)}
        assert values <= {2, 3}

    def test_random_int_inclusive_single_value(self) -> None:
        assert random_int_inclusive(7, 7) == 7

    def test_random_int_inclusive_empty_range(self) -> None:
        with pytest.raises(ValueError):
            random_int_inclusive(1.5, 1.7)

    def test_pick(self) -> None:
        assert pick([]) is None
        assert pick(["only"]) == "only"
        assert pick(["a", "b", "c"]) in {"a", "b", "c"}
