"""
Stats module.

This module contains the Stat value container, its modifiers, and the
StatSheet that groups a character's stats.
"""

from game_stat.stats.modifier import ModifierKind, StatModifier
from game_stat.stats.stat import (
    Stat, StatModifierHandle, ModifierSlot, CapacityExceededError
)
