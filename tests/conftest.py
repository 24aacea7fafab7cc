"""Shared fixtures for the accumulator tests."""

from typing import Iterator

import pytest

from mmr_accumulator.core import Accumulator


@pytest.fixture
def acc() -> Iterator[Accumulator]:
    with Accumulator() as accumulator:
        yield accumulator


@pytest.fixture
def abcd_acc(acc: Accumulator) -> Accumulator:
    """An accumulator holding "a", "b", "c" and "d" (one root of weight 4)."""
    for element in (b"a", b"b", b"c", b"d"):
        assert acc.add(element)
    return acc
