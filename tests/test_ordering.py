from __future__ import annotations

from provider_race.race import ApiRace, order_providers, PrioritizedProvider

from tests.helpers.fakes import make_provider


def _names(providers: object) -> list[str]:
    return [provider.name for provider in providers]  # type: ignore[attr-defined]


def test_providers_without_priority_keep_original_order() -> None:
    providers = [make_provider(name) for name in ("a", "b", "c")]

    assert _names(order_providers(providers)) == ["a", "b", "c"]


def test_priority_zero_inserts_at_front() -> None:
    providers = [make_provider("a"), make_provider("b"), make_provider("c", priority=0)]

    assert _names(order_providers(providers)) == ["c", "a", "b"]


def test_colliding_priorities_stack_in_encounter_order() -> None:
    providers = [
        make_provider("a"),
        make_provider("b"),
        make_provider("x", priority=1),
        make_provider("y", priority=1),
    ]

    assert _names(order_providers(providers)) == ["a", "y", "x", "b"]


def test_sparse_priority_beyond_length_appends() -> None:
    providers = [make_provider("a", priority=5), make_provider("b"), make_provider("c", priority=1)]

    assert _names(order_providers(providers)) == ["a", "c", "b"]


def test_unprioritized_provider_is_appended_after_earlier_insertions() -> None:
    providers = [
        make_provider("a", priority=0),
        make_provider("b"),
        make_provider("c", priority=0),
        make_provider("d"),
    ]

    assert _names(order_providers(providers)) == ["c", "a", "b", "d"]


def test_positional_insertion_differs_from_sorting() -> None:
    providers = [make_provider("low", priority=2), make_provider("high", priority=0), make_provider("z")]

    ordered = _names(order_providers(providers))

    assert ordered == ["high", "low", "z"]
    providers = [make_provider("a"), make_provider("p3", priority=3), make_provider("p1", priority=1)]
    assert _names(order_providers(providers)) == ["a", "p1", "p3"]


def test_mapping_input_writes_priorities_into_descriptors() -> None:
    first = make_provider("first")
    second = make_provider("second")
    third = make_provider("third", priority=9)

    race = ApiRace(
        {
            "first": PrioritizedProvider(first, 2),
            "second": {"provider": second, "priority": 0},
            "third": {"provider": third},
        }
    )

    assert first.priority == 2
    assert second.priority == 0
    assert third.priority == 9
    assert _names(race.providers) == ["first", "second", "third"]
    assert _names(race.ordered_providers()) == ["second", "first", "third"]


def test_ordering_is_recomputed_after_priority_changes() -> None:
    first = make_provider("first")
    second = make_provider("second")
    race = ApiRace([first, second])

    assert _names(race.ordered_providers()) == ["first", "second"]

    second.priority = 0
    assert _names(race.ordered_providers()) == ["second", "first"]

    second.remove_priority()
    assert _names(race.ordered_providers()) == ["first", "second"]

