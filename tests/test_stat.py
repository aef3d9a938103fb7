#!/usr/bin/env python3
import logging

import pytest

from game_stat import CapacityExceededError, Stat, StatModifier


@pytest.fixture(params=[3, None], ids=["bounded", "growable"])
def capacity(request):
    return request.param


def test_base_value(capacity):
    stat = Stat(8, capacity=capacity)
    assert stat.value() == 8.0


def test_default_stat_is_zero():
    assert Stat().value() == 0.0


def test_flat_modifier(capacity):
    stat = Stat(8, capacity=capacity)
    handle = stat.add_modifier(StatModifier.flat(7))
    assert stat.value() == 15.0
    del handle
    assert stat.value() == 8.0


def test_percent_add_modifier(capacity):
    stat = Stat(10, capacity=capacity)
    handle = stat.add_modifier(StatModifier.percent_add(0.5))
    assert stat.value() == 15.0
    del handle
    assert stat.value() == 10.0


def test_percent_multiply_modifier(capacity):
    stat = Stat(10, capacity=capacity)
    handle = stat.add_modifier(StatModifier.percent_multiply(0.5))
    assert stat.value() == 5.0
    del handle
    assert stat.value() == 10.0


def test_all_modifiers_default_order(capacity):
    stat = Stat(10, capacity=capacity)
    flat = stat.add_modifier(StatModifier.flat(90))
    percent_add = stat.add_modifier(StatModifier.percent_add(-0.5))
    percent_multiply = stat.add_modifier(StatModifier.percent_multiply(0.5))
    assert stat.value() == 25.0
    del flat, percent_add, percent_multiply
    assert stat.value() == 10.0


def test_default_order_ignores_insertion_order(capacity):
    stat = Stat(10, capacity=capacity)
    percent_multiply = stat.add_modifier(StatModifier.percent_multiply(0.5))
    percent_add = stat.add_modifier(StatModifier.percent_add(-0.5))
    flat = stat.add_modifier(StatModifier.flat(90))
    assert stat.value() == 25.0


def test_explicit_order_overrides_default(capacity):
    stat = Stat(10, capacity=capacity)
    percent_multiply = stat.add_modifier_with_order(StatModifier.percent_multiply(0.5), 0)
    percent_add = stat.add_modifier_with_order(StatModifier.percent_add(0.5), 1)
    flat = stat.add_modifier_with_order(StatModifier.flat(2.5), 2)
    # ((10 * 0.5) * 1.5) + 2.5
    assert stat.value() == 10.0


def test_equal_orders_apply_in_insertion_order(capacity):
    stat = Stat(0, capacity=capacity)
    flat = stat.add_modifier_with_order(StatModifier.flat(1), 0)
    double = stat.add_modifier_with_order(StatModifier.percent_multiply(2), 0)
    assert stat.value() == 2.0

    other = Stat(0, capacity=capacity)
    double_first = other.add_modifier_with_order(StatModifier.percent_multiply(2), 0)
    flat_second = other.add_modifier_with_order(StatModifier.flat(1), 0)
    assert other.value() == 1.0


def test_too_many_modifiers():
    # only 2 flat modifiers should be applied
    stat = Stat(0, capacity=2)
    modifier_1 = stat.add_modifier(StatModifier.flat(1))
    modifier_2 = stat.add_modifier_with_order(StatModifier.flat(1), 0)
    with pytest.raises(CapacityExceededError) as excinfo:
        stat.add_modifier_with_order(StatModifier.flat(1), 0)
    assert excinfo.value.capacity == 2
    assert stat.value() == 2.0
    assert stat.occupied_slots == 2


def test_zero_capacity_rejects_everything():
    stat = Stat(4, capacity=0)
    with pytest.raises(CapacityExceededError):
        stat.add_modifier(StatModifier.flat(1))
    assert stat.value() == 4.0


@pytest.mark.parametrize("bad_capacity", [-1, True, 2.0, "2"])
def test_invalid_capacity_rejected(bad_capacity):
    with pytest.raises(ValueError):
        Stat(0, capacity=bad_capacity)


def test_growable_never_fills():
    stat = Stat(0)
    handles = [stat.add_modifier(StatModifier.flat(1)) for _ in range(100)]
    assert stat.value() == 100.0
    assert stat.occupied_slots == 100


def test_dropped_slot_is_reused():
    stat = Stat(0, capacity=1)
    stat.add_modifier(StatModifier.flat(1))  # handle discarded right away
    modifier = stat.add_modifier(StatModifier.flat(1))
    assert stat.value() == 1.0


def test_all():
    stat = Stat(0, capacity=2)
    modifier_1 = stat.add_modifier(StatModifier.flat(1))
    assert stat.value() == 1.0
    modifier_2 = stat.add_modifier(StatModifier.percent_multiply(2))
    assert stat.value() == 2.0
    del modifier_1, modifier_2
    assert stat.value() == 0.0

    modifier_1 = stat.add_modifier(StatModifier.flat(5))
    assert stat.value() == 5.0
    modifier_2 = stat.add_modifier(StatModifier.flat(9))
    assert stat.value() == 14.0
    with pytest.raises(CapacityExceededError):
        stat.add_modifier(StatModifier.flat(9))


def test_rebinding_a_name_releases_the_earlier_handle():
    stat = Stat(0, capacity=2)
    modifier = stat.add_modifier(StatModifier.flat(1))
    modifier = stat.add_modifier(StatModifier.flat(1))
    assert stat.value() == 1.0
    del modifier
    assert stat.value() == 0.0


def test_modifier_lives_until_last_reference():
    stat = Stat(0, capacity=2)
    handle = stat.add_modifier(StatModifier.flat(3))
    equipped = {"ring": handle}
    backup = [handle]
    del handle
    assert stat.value() == 3.0
    equipped.clear()
    assert stat.value() == 3.0
    backup.pop()
    assert stat.value() == 0.0


def test_returned_value_is_not_changed_by_a_later_drop():
    stat = Stat(8)
    handle = stat.add_modifier(StatModifier.flat(7))
    before = stat.value()
    del handle
    assert before == 15.0
    assert stat.value() == 8.0


def test_stale_slots_are_reclaimed_on_next_read():
    stat = Stat(0, capacity=2)
    keep = stat.add_modifier(StatModifier.flat(1))
    drop = stat.add_modifier(StatModifier.flat(2))
    del drop
    # nothing has looked at the stat yet
    assert stat.occupied_slots == 2
    assert stat.value() == 1.0
    assert stat.occupied_slots == 1


def test_base_value_is_mutable(capacity):
    stat = Stat(10, capacity=capacity)
    handle = stat.add_modifier(StatModifier.flat(5))
    assert stat.value() == 15.0
    stat.base_value = 20
    assert stat.base_value == 20.0
    assert stat.value() == 25.0


def test_value_with_base(capacity):
    stat = Stat(10, capacity=capacity)
    flat = stat.add_modifier(StatModifier.flat(5))
    double = stat.add_modifier(StatModifier.percent_multiply(2))
    assert stat.value_with_base(1) == 12.0
    # the stat's own value is untouched
    assert stat.value() == 30.0


def test_value_with_base_skips_stale_without_reclaiming():
    stat = Stat(10, capacity=2)
    flat = stat.add_modifier(StatModifier.flat(5))
    double = stat.add_modifier(StatModifier.percent_multiply(2))
    del double
    assert stat.value_with_base(1) == 6.0
    assert stat.occupied_slots == 2
    assert stat.value() == 15.0
    assert stat.occupied_slots == 1


def test_highest_order(capacity):
    stat = Stat(0, capacity=capacity)
    assert stat.highest_order() == 0
    low = stat.add_modifier_with_order(StatModifier.flat(1), -1)
    assert stat.highest_order() == -1
    high = stat.add_modifier_with_order(StatModifier.flat(1), 3)
    assert stat.highest_order() == 3
    del high
    assert stat.highest_order() == -1
    del low
    assert stat.highest_order() == 0


def test_integrated_modifiers(capacity):
    stat = Stat(10, capacity=capacity)
    own = stat.add_modifier(StatModifier.flat(10))
    assert stat.value() == 20.0

    other = Stat(5, capacity=capacity)
    borrowed = other.add_modifier(StatModifier.percent_multiply(2))

    assert stat.value_with_integrated_modifiers(other) == 40.0
    assert stat.value() == 20.0
    assert other.value() == 10.0
    assert other.base_value == 5.0


def test_integrated_modifiers_apply_after_own():
    stat = Stat(10)
    double = stat.add_modifier(StatModifier.percent_multiply(2))
    other = Stat(1000)
    flat = other.add_modifier(StatModifier.flat(5))
    # a flat modifier would normally go first: (10 + 5) * 2 == 30
    assert stat.value_with_integrated_modifiers(other) == 25.0


def test_integrated_slots_are_reclaimed_lazily():
    stat = Stat(10, capacity=3)
    own = stat.add_modifier(StatModifier.flat(10))
    other = Stat(5, capacity=3)
    first = other.add_modifier(StatModifier.percent_multiply(2))
    second = other.add_modifier(StatModifier.flat(1))

    # (10 + 10 + 1) * 2
    assert stat.value_with_integrated_modifiers(other) == 42.0
    # the borrowed slots are stale but still occupy space
    assert stat.occupied_slots == 3
    assert stat.value() == 20.0
    assert stat.occupied_slots == 1


def test_integration_skips_modifiers_that_do_not_fit(caplog):
    stat = Stat(10, capacity=1)
    own = stat.add_modifier(StatModifier.flat(10))
    other = Stat(0)
    borrowed = other.add_modifier(StatModifier.percent_multiply(2))

    with caplog.at_level(logging.WARNING):
        assert stat.value_with_integrated_modifiers(other) == 20.0
    assert any("Could not integrate" in rec.message for rec in caplog.records)


def test_integration_ignores_stale_modifiers_on_other():
    stat = Stat(10)
    other = Stat(5)
    kept = other.add_modifier(StatModifier.flat(1))
    gone = other.add_modifier(StatModifier.percent_multiply(3))
    del gone
    slots_before = other.occupied_slots
    cached_before = other._value

    assert stat.value_with_integrated_modifiers(other) == 11.0
    # other is left exactly as it was, stale slot included
    assert other.occupied_slots == slots_before == 2
    assert other._value == cached_before
    assert other.base_value == 5.0

    assert other.value() == 6.0
    assert other.occupied_slots == 1


def test_copy_shares_handles():
    stat = Stat(1, capacity=2)
    handle = stat.add_modifier(StatModifier.flat(1))
    clone = stat.copy()
    assert clone.value() == 2.0
    assert clone.capacity == 2

    del handle
    assert stat.value() == 1.0
    assert clone.value() == 1.0


def test_serialization_keeps_only_base_value():
    stat = Stat(12.5, capacity=2)
    handle = stat.add_modifier(StatModifier.flat(1))
    data = stat.to_dict()
    assert data == {"base_value": 12.5}

    restored = Stat.from_dict(data, capacity=2)
    assert restored.value() == 12.5
    assert restored.occupied_slots == 0


def test_repr_mentions_occupancy():
    stat = Stat(1, capacity=2)
    handle = stat.add_modifier(StatModifier.flat(1))
    assert "modifiers=1/2" in repr(stat)
