"""
game_stat gives you the power to modify some base value through modifiers.

A modifier stays active for as long as the handle returned when it was added
is referenced. Drop the handle and the stat goes back to its base value:

    from game_stat import Stat, StatModifier

    armor = Stat(10.0, capacity=2)
    handle = armor.add_modifier(StatModifier.flat(5.0))
    armor.value()  # 15.0
    del handle
    armor.value()  # 10.0
"""

from game_stat.stats.modifier import ModifierKind, StatModifier
from game_stat.stats.stat import (
    Stat, StatModifierHandle, ModifierSlot, CapacityExceededError
)

__version__ = "0.1.0"
