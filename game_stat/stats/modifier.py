"""
Value transforms that can be attached to a stat.
"""

from enum import Enum, auto
from dataclasses import dataclass
from typing import Dict, Any


class ModifierKind(Enum):
    """The operation a modifier performs on the running value."""
    FLAT = auto()              # v + x
    PERCENT_ADD = auto()       # v * (1 + x)
    PERCENT_MULTIPLY = auto()  # v * x

    @classmethod
    def from_string(cls, kind_name: str) -> 'ModifierKind':
        """Convert a string to a ModifierKind enum."""
        normalized = kind_name.strip().upper().replace(" ", "_")
        for kind in cls:
            if kind.name == normalized:
                return kind
        raise ValueError(f"Unknown modifier kind: {kind_name}")


# Sensible application sequence when the caller gives no explicit order
_DEFAULT_ORDERS = {
    ModifierKind.FLAT: 0,
    ModifierKind.PERCENT_ADD: 1,
    ModifierKind.PERCENT_MULTIPLY: 2,
}


@dataclass(frozen=True)
class StatModifier:
    """
    A single value transform.

    Attributes:
        kind: Which operation to perform.
        value: The operand. For PERCENT_ADD it is a fraction (0.5 means +50%),
            for PERCENT_MULTIPLY it is the raw factor (0.5 halves the value).
    """
    kind: ModifierKind
    value: float

    @classmethod
    def flat(cls, value: float) -> 'StatModifier':
        return cls(ModifierKind.FLAT, float(value))

    @classmethod
    def percent_add(cls, value: float) -> 'StatModifier':
        return cls(ModifierKind.PERCENT_ADD, float(value))

    @classmethod
    def percent_multiply(cls, value: float) -> 'StatModifier':
        return cls(ModifierKind.PERCENT_MULTIPLY, float(value))

    def apply(self, value: float) -> float:
        """Return ``value`` with this modifier applied."""
        if self.kind is ModifierKind.FLAT:
            return value + self.value
        if self.kind is ModifierKind.PERCENT_ADD:
            return value * (1.0 + self.value)
        # Direct multiply, not 1 + x
        return value * self.value

    def default_order(self) -> int:
        return _DEFAULT_ORDERS[self.kind]

    def __str__(self) -> str:
        """Human-readable representation."""
        if self.kind is ModifierKind.FLAT:
            prefix = "+" if self.value >= 0 else ""
            return f"{prefix}{self.value:g}"
        if self.kind is ModifierKind.PERCENT_ADD:
            prefix = "+" if self.value >= 0 else ""
            return f"{prefix}{self.value * 100:g}%"
        return f"x{self.value:g}"

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a dictionary for serialization."""
        return {
            "kind": self.kind.name,
            "value": self.value,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'StatModifier':
        """Create a StatModifier from a dictionary."""
        return cls(
            kind=ModifierKind.from_string(data["kind"]),
            value=float(data["value"]),
        )
