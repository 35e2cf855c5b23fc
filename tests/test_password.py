import pytest

from ybbs.password import LETTERS, rand_string


@pytest.mark.parametrize("n", [1, 8, 64])
def test_length_and_charset(n):
    value = rand_string(n)
    assert len(value) == n
    assert set(value) <= set(LETTERS)


@pytest.mark.parametrize("n", [0, -5])
def test_non_positive_is_empty(n):
    assert rand_string(n) == ""


def test_values_differ():
    assert len({rand_string(32) for _ in range(20)}) > 1