"""
A named collection of stats belonging to one character.
"""

from typing import Any, Dict, Optional

from PySide6.QtCore import QObject, Signal

from game_stat.base.config import StatConfig, get_config
from game_stat.stats.modifier import StatModifier
from game_stat.stats.stat import Stat, StatModifierHandle
from game_stat.utils.json_utils import load_json, save_json
from game_stat.utils.logging_config import get_logger


logger = get_logger(__name__)


class StatSheet(QObject):
    """
    Owns a character's stats and reports their values.

    Handles returned by add_modifier() belong to the caller (an equipped item,
    an active effect). Releasing one is not observed synchronously; call
    refresh() to pick up such changes and emit stats_changed.
    """

    # Emitted with get_all_stats() whenever a value may have changed
    stats_changed = Signal(dict)

    def __init__(self, config: Optional[StatConfig] = None):
        """
        Initialize the stat sheet.

        Args:
            config: Configuration to read defaults from. Uses the process-wide
                configuration if not given.

        Raises:
            ValueError: If the configuration does not validate.
        """
        super().__init__()

        self.config = config if config is not None else get_config()
        is_valid, errors = self.config.validate()
        if not is_valid:
            raise ValueError(f"Invalid stats configuration: {'; '.join(errors)}")

        self.default_base_value = float(self.config.get("stats.default_base_value", 0.0))
        self.capacity: Optional[int] = self.config.get("stats.capacity", None)
        self.shared: bool = bool(self.config.get("stats.shared", False))

        self.stats: Dict[str, Stat] = {}
        self._last_values: Dict[str, float] = {}

        for name, base_value in self.config.get("stats.base_values", {}).items():
            self._create_stat(name, base_value)

    @staticmethod
    def _normalize(name: str) -> str:
        return name.strip().lower()

    def add_stat(self, name: str, base_value: Optional[float] = None) -> Stat:
        """
        Create a stat on this sheet and emit stats_changed.

        Args:
            name: The stat name (case-insensitive).
            base_value: Its base value, or the configured default.

        Raises:
            ValueError: If a stat with this name already exists.
        """
        stat = self._create_stat(name, base_value)
        self._emit_changed()
        return stat

    def _create_stat(self, name: str, base_value: Optional[float]) -> Stat:
        key = self._normalize(name)
        if key in self.stats:
            raise ValueError(f"Stat already exists: {name}")

        if base_value is None:
            base_value = self.default_base_value

        stat = Stat(base_value, capacity=self.capacity, shared=self.shared)
        self.stats[key] = stat
        self._last_values[key] = stat.value()
        logger.debug(f"Added stat '{key}' with base value {base_value}")
        return stat

    def get_stat(self, name: str) -> Optional[Stat]:
        """Get a stat by name, or None if it doesn't exist."""
        return self.stats.get(self._normalize(name))

    def _require_stat(self, name: str) -> Stat:
        stat = self.get_stat(name)
        if stat is None:
            raise ValueError(f"Stat not found: {name}")
        return stat

    def get_stat_value(self, name: str) -> float:
        """
        Get the current value of a stat.

        Raises:
            ValueError: If the stat is not found.
        """
        return self._require_stat(name).value()

    def set_base_stat(self, name: str, value: float) -> None:
        """
        Set the base value of a stat.

        Raises:
            ValueError: If the stat is not found.
        """
        self._require_stat(name).base_value = value
        logger.debug(f"Set base value of {name} to {value}")
        self._emit_changed()

    def add_modifier(self, name: str, modifier: StatModifier, order: Optional[int] = None) -> StatModifierHandle:
        """
        Attach a modifier to a stat.

        Args:
            name: The stat to modify.
            modifier: The modifier to add.
            order: Explicit application order; the modifier's default if None.

        Returns:
            The handle that keeps the modifier active.

        Raises:
            ValueError: If the stat is not found.
            CapacityExceededError: If the stat is bounded and full.
        """
        stat = self._require_stat(name)
        if order is None:
            handle = stat.add_modifier(modifier)
        else:
            handle = stat.add_modifier_with_order(modifier, order)
        logger.debug(f"Added modifier {modifier} to {name}")
        self._emit_changed()
        return handle

    def refresh(self) -> bool:
        """
        Re-read every stat and emit stats_changed if any value changed.

        Returns:
            True if at least one value changed since the last emission.
        """
        current = {key: stat.value() for key, stat in self.stats.items()}
        if current == self._last_values:
            return False

        changed = sorted(key for key in current if current[key] != self._last_values.get(key))
        logger.debug(f"Stat values changed on refresh: {changed}")
        self._emit_changed()
        return True

    def get_all_stats(self) -> Dict[str, Dict[str, float]]:
        """Get base and current values for every stat."""
        return {
            key: {"base_value": stat.base_value, "value": stat.value()}
            for key, stat in self.stats.items()
        }

    def _emit_changed(self) -> None:
        all_stats = self.get_all_stats()
        self._last_values = {key: data["value"] for key, data in all_stats.items()}
        self.stats_changed.emit(all_stats)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a dictionary for serialization. Only base values are stored."""
        return {"stats": {key: stat.to_dict() for key, stat in self.stats.items()}}

    @classmethod
    def from_dict(cls, data: Dict[str, Any], config: Optional[StatConfig] = None) -> 'StatSheet':
        """
        Create a StatSheet from a dictionary.

        Stats start without modifiers; owners re-issue their handles.
        """
        sheet = cls(config)
        for name, stat_data in data.get("stats", {}).items():
            base_value = stat_data.get("base_value", sheet.default_base_value)
            stat = sheet.get_stat(name)
            if stat is None:
                sheet._create_stat(name, base_value)
            else:
                stat.base_value = base_value
        sheet._last_values = {key: stat.value() for key, stat in sheet.stats.items()}
        return sheet

    def save(self, file_path: str) -> None:
        """Save base values to a JSON file."""
        save_json(self.to_dict(), file_path)
        logger.info(f"Saved stat sheet to {file_path}")

    @classmethod
    def load(cls, file_path: str, config: Optional[StatConfig] = None) -> 'StatSheet':
        """Load a StatSheet from a JSON file written by save()."""
        sheet = cls.from_dict(load_json(file_path), config)
        logger.info(f"Loaded stat sheet from {file_path}")
        return sheet
