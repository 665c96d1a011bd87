from __future__ import annotations

import pytest

pytest.importorskip("hypothesis")
from hypothesis import given
from hypothesis import strategies as st

from provider_race.race import order_providers

from tests.helpers.fakes import make_provider

_priorities = st.lists(
    st.one_of(st.none(), st.integers(min_value=0, max_value=6)),
    max_size=8,
)


@given(_priorities)
def test_order_matches_positional_insertion(priorities: list[int | None]) -> None:
    providers = [
        make_provider(f"p{index}", priority=priority) for index, priority in enumerate(priorities)
    ]
    expected: list[str] = []
    for index, priority in enumerate(priorities):
        if priority is None:
            expected.append(f"p{index}")
        else:
            expected.insert(priority, f"p{index}")

    ordered = [provider.name for provider in order_providers(providers)]

    assert ordered == expected


@given(_priorities)
def test_order_is_a_permutation_of_the_input(priorities: list[int | None]) -> None:
    providers = [
        make_provider(f"p{index}", priority=priority) for index, priority in enumerate(priorities)
    ]

    ordered = order_providers(providers)

    assert sorted(provider.name for provider in ordered) == sorted(
        provider.name for provider in providers
    )
    assert len(ordered) == len(providers)
