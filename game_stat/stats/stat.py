"""
A value that can be modified through StatModifiers.

A modifier is valid for as long as the StatModifierHandle returned from
Stat.add_modifier() is referenced somewhere. Once the last reference goes
away the modifier stops applying. The stat only notices this the next time
it is read or written, at which point the stale slot is reclaimed.

Example:
    armor = Stat(10.0, capacity=2)
    handle = armor.add_modifier(StatModifier.flat(5.0))
    armor.value()   # 15.0
    del handle
    armor.value()   # 10.0
"""

import threading
import weakref
from contextlib import ExitStack, contextmanager, nullcontext
from dataclasses import dataclass
from typing import Any, Dict, Iterator, List, Optional

from game_stat.stats.modifier import StatModifier
from game_stat.utils.logging_config import get_logger


logger = get_logger(__name__)


class StatModifierHandle:
    """
    Ownership token for a modifier added to a Stat.

    Keep a reference to it for as long as the modifier should apply. It can be
    stored in several places; the modifier stays active until the last
    reference is released.
    """

    def __repr__(self) -> str:
        return f"<StatModifierHandle at {id(self):#x}>"


class CapacityExceededError(Exception):
    """A bounded Stat has no empty or stale slot left for a new modifier."""

    def __init__(self, capacity: int):
        super().__init__(f"Stat can't hold more than {capacity} modifiers")
        self.capacity = capacity


@dataclass
class ModifierSlot:
    """A modifier stored in a Stat, with its order and a weak view of its handle."""
    modifier: StatModifier
    order: int
    owner: 'weakref.ReferenceType[StatModifierHandle]'

    def is_alive(self) -> bool:
        return self.owner() is not None


class Stat:
    """
    A base value plus the modifiers currently attached to it.

    Args:
        base_value: The unmodified value.
        capacity: Maximum number of modifiers. ``None`` lets the store grow
            without limit; an int fixes the number of slots and makes
            ``add_modifier*`` raise CapacityExceededError when they are all
            taken by live modifiers.
        shared: Guard every operation with a lock so the stat can be used from
            several threads.
    """

    def __init__(self, base_value: float = 0.0, capacity: Optional[int] = None, shared: bool = False):
        if capacity is not None and (isinstance(capacity, bool) or not isinstance(capacity, int) or capacity < 0):
            raise ValueError(f"Stat capacity must be None or a non-negative int, got {capacity!r}")

        self._base_value = float(base_value)
        # calculated from base_value and modifiers
        self._value = self._base_value
        self._dirty = False
        self._capacity = capacity
        self._shared = shared
        self._lock = threading.RLock() if shared else None

        # None marks an empty slot in a bounded stat
        self._slots: List[Optional[ModifierSlot]] = [] if capacity is None else [None] * capacity

    @property
    def base_value(self) -> float:
        return self._base_value

    @base_value.setter
    def base_value(self, value: float) -> None:
        with self._guard():
            self._base_value = float(value)
            self._dirty = True

    @property
    def capacity(self) -> Optional[int]:
        return self._capacity

    @property
    def shared(self) -> bool:
        return self._shared

    @property
    def occupied_slots(self) -> int:
        """Number of slots holding a modifier, including stale ones not yet reclaimed."""
        with self._guard():
            return sum(1 for slot in self._slots if slot is not None)

    def add_modifier(self, modifier: StatModifier) -> StatModifierHandle:
        """
        Add a modifier using its default order.

        Args:
            modifier: The modifier to add.

        Returns:
            The handle that keeps the modifier active.

        Raises:
            CapacityExceededError: If the stat is bounded and full.
        """
        return self.add_modifier_with_order(modifier, modifier.default_order())

    def add_modifier_with_order(self, modifier: StatModifier, order: int) -> StatModifierHandle:
        """
        Add a modifier that applies at ``order`` (lower orders apply first).

        Raises:
            CapacityExceededError: If the stat is bounded and full.
        """
        with self._guard():
            # A dropped handle frees its slot, so reclaim before looking for space
            self._update_modifiers()

            index = None
            if self._capacity is not None:
                index = next((i for i, s in enumerate(self._slots) if s is None), None)
                if index is None:
                    logger.debug(f"Rejected modifier {modifier}: all {self._capacity} slots in use")
                    raise CapacityExceededError(self._capacity)

            handle = StatModifierHandle()
            slot = ModifierSlot(modifier=modifier, order=order, owner=weakref.ref(handle))
            if index is None:
                self._slots.append(slot)
            else:
                self._slots[index] = slot

            self._calculate_internal_value()
            logger.debug(f"Added modifier {modifier} with order {order}")
            return handle

    def value(self) -> float:
        """Returns the base value with the live modifiers applied."""
        with self._guard():
            self._update_modifiers()
            return self._value

    def value_with_base(self, base_value: float) -> float:
        """
        Returns ``base_value`` with the live modifiers applied.

        Does not touch the cached value or reclaim stale slots.
        """
        with self._guard():
            value = float(base_value)
            for slot in self._live_slots():
                value = slot.modifier.apply(value)
            return value

    def highest_order(self) -> int:
        """Returns the highest order of all live modifiers, or 0 if there are none."""
        with self._guard():
            self._update_modifiers()
            return max((slot.order for slot in self._slots if slot is not None and slot.is_alive()), default=0)

    def value_with_integrated_modifiers(self, other: 'Stat') -> float:
        """
        Returns the value of this stat with ``other``'s live modifiers applied too.

        Modifiers from ``other`` are applied after all of this stat's own
        modifiers; ``other.base_value`` is not used and ``other`` is left
        untouched. The borrowed modifiers are only held for the duration of
        the call. Their slots are reclaimed on the next read or write.
        """
        with self._locked_with(other):
            highest_order = self.highest_order()
            # temporarily hold handles
            handles: List[StatModifierHandle] = []
            try:
                for slot in other._live_slots():
                    try:
                        handles.append(self.add_modifier_with_order(slot.modifier, highest_order + 1 + slot.order))
                    except CapacityExceededError as e:
                        logger.warning(f"Could not integrate modifier {slot.modifier}: {e}")
                return self.value()
            finally:
                # Released while both stats are still locked; the slots stay
                # behind as stale until the next read or write of this stat
                handles.clear()

    def copy(self) -> 'Stat':
        """
        Clone this stat.

        The clone observes the same handles, so releasing a handle deactivates
        its modifier on both stats.
        """
        with self._guard():
            clone = Stat(self._base_value, capacity=self._capacity, shared=self._shared)
            clone._value = self._value
            clone._dirty = self._dirty
            clone._slots = [
                None if slot is None else ModifierSlot(slot.modifier, slot.order, slot.owner)
                for slot in self._slots
            ]
            return clone

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a dictionary for serialization. Modifiers are not included."""
        return {"base_value": self._base_value}

    @classmethod
    def from_dict(cls, data: Dict[str, Any], capacity: Optional[int] = None, shared: bool = False) -> 'Stat':
        """Create a Stat with no modifiers from a dictionary."""
        return cls(data.get("base_value", 0.0), capacity=capacity, shared=shared)

    def __repr__(self) -> str:
        capacity = "unbounded" if self._capacity is None else self._capacity
        return (f"Stat(base_value={self._base_value}, value={self._value}, "
                f"modifiers={self.occupied_slots}/{capacity})")

    def _guard(self):
        return self._lock if self._lock is not None else nullcontext()

    @contextmanager
    def _locked_with(self, other: 'Stat') -> Iterator[None]:
        # Lock both stats in ascending id() order so two threads integrating
        # the same pair in opposite directions can't deadlock
        stats = {id(self): self, id(other): other}
        with ExitStack() as stack:
            for key in sorted(stats):
                stack.enter_context(stats[key]._guard())
            yield

    def _live_slots(self) -> List[ModifierSlot]:
        """Live slots in application order, without reclaiming anything."""
        slots = [slot for slot in self._slots if slot is not None and slot.is_alive()]
        slots.sort(key=lambda slot: slot.order)
        return slots

    def _update_modifiers(self) -> None:
        # check if any modifiers have been dropped, and update the value + slots
        any_modifier_dropped = any(slot is not None and not slot.is_alive() for slot in self._slots)
        if any_modifier_dropped or self._dirty:
            self._calculate_internal_value()

    def _calculate_internal_value(self) -> None:
        """Order the modifiers, apply them to the base value and reclaim stale slots."""
        # list.sort is stable; empty slots go last
        self._slots.sort(key=lambda slot: (slot is None, 0 if slot is None else slot.order))

        value = self._base_value
        reclaimed = 0
        for index, slot in enumerate(self._slots):
            if slot is None:
                continue
            if slot.is_alive():
                value = slot.modifier.apply(value)
            else:
                # owner has dropped the modifier, make this slot available again
                self._slots[index] = None
                reclaimed += 1

        if self._capacity is None and reclaimed:
            self._slots = [slot for slot in self._slots if slot is not None]

        self._value = value
        self._dirty = False
        if reclaimed:
            logger.debug(f"Reclaimed {reclaimed} stale modifier slot(s)")
