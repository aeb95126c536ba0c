"""Time units whose single length defines one admission window."""

from __future__ import annotations

from enum import Enum


class TimeUnit(Enum):
    """Supported window units, valued by their length in seconds."""

    MILLISECONDS = 0.001
    SECONDS = 1.0
    MINUTES = 60.0
    HOURS = 3600.0
    DAYS = 86400.0

    @property
    def seconds(self) -> float:
        """Return the length of one unit in seconds."""

        return float(self.value)

    @classmethod
    def parse(cls, value: TimeUnit | str) -> TimeUnit:
        """Parse a unit name such as `seconds` or `MINUTES`.

        Raises:
            ValueError: If the name does not match a supported unit.
        """

        if isinstance(value, TimeUnit):
            return value
        token = str(value).strip().upper()
        try:
            return cls[token]
        except KeyError:
            supported = ", ".join(unit.name.lower() for unit in cls)
            raise ValueError(
                f"Unsupported time unit `{value}`; supported: {supported}."
            ) from None
