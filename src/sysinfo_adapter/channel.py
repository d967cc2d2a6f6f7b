"""Published observable values and their schemas."""

from __future__ import annotations

import enum
import logging
import math
from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, Any, Union

if TYPE_CHECKING:
    from .sources.base import MetricSource

logger = logging.getLogger(__name__)

Primitive = Union[str, int, float, bool]


class ValueType(str, enum.Enum):
    NUMBER = "number"
    INTEGER = "integer"
    BOOLEAN = "boolean"


class ChannelValueError(ValueError):
    """A sampled value cannot be interpreted as the channel's value type."""


@dataclass(frozen=True)
class ChannelSchema:
    """Description of a channel's value: type, unit, bounds and metadata.

    ``extensions`` carries additional primitive fields (e.g. ``multipleOf``)
    that are rendered alongside the fixed ones.
    """

    value_type: ValueType
    unit: str | None = None
    title: str = ""
    description: str = ""
    minimum: float | None = None
    maximum: float | None = None
    read_only: bool = True
    semantic_kind: str | None = None
    extensions: dict[str, Primitive] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if self.minimum is not None and self.maximum is not None and self.minimum > self.maximum:
            raise ValueError(f"minimum {self.minimum} exceeds maximum {self.maximum}")

    def replace(self, **changes: Any) -> ChannelSchema:
        """Return a copy of this schema with *changes* applied."""
        return replace(self, **changes)

    def coerce(self, value: Any) -> int | float | bool:
        """Convert *value* to this schema's value type.

        Raises:
            ChannelValueError: If *value* has no sensible interpretation.
        """
        if self.value_type is ValueType.BOOLEAN:
            if isinstance(value, bool):
                return value
            raise ChannelValueError(f"expected boolean, got {value!r}")

        if isinstance(value, bool) or value is None:
            raise ChannelValueError(f"expected {self.value_type.value}, got {value!r}")
        try:
            number = float(value)
        except (TypeError, ValueError) as exc:
            raise ChannelValueError(f"expected {self.value_type.value}, got {value!r}") from exc
        if not math.isfinite(number):
            raise ChannelValueError(f"expected finite {self.value_type.value}, got {value!r}")
        if self.value_type is ValueType.INTEGER:
            return int(number)
        return number

    def to_dict(self) -> dict[str, Any]:
        """Render as a Web Thing property description."""
        out: dict[str, Any] = {"type": self.value_type.value}
        if self.unit is not None:
            out["unit"] = self.unit
        if self.title:
            out["title"] = self.title
        if self.description:
            out["description"] = self.description
        if self.minimum is not None:
            out["minimum"] = self.minimum
        if self.maximum is not None:
            out["maximum"] = self.maximum
        out["readOnly"] = self.read_only
        if self.semantic_kind is not None:
            out["@type"] = self.semantic_kind
        out.update(self.extensions)
        return out


class MetricChannel:
    """One named, cached observable value owned by a :class:`MetricSource`.

    Every :meth:`update` notifies the owner, even when the value did not
    change.
    """

    def __init__(self, owner: MetricSource, name: str, schema: ChannelSchema) -> None:
        self._owner = owner
        self._name = name
        self._schema = schema
        self._cached_value: int | float | bool | None = None

    @property
    def name(self) -> str:
        return self._name

    @property
    def owner(self) -> MetricSource:
        return self._owner

    @property
    def schema(self) -> ChannelSchema:
        return self._schema

    @property
    def cached_value(self) -> int | float | bool | None:
        """Last sampled value, ``None`` before the first sample."""
        return self._cached_value

    def update(self, value: Any) -> None:
        """Store *value* and notify the owning source."""
        self._cached_value = self._schema.coerce(value)
        self._owner.notify_channel_changed(self)

    def rebind(self, schema: ChannelSchema) -> None:
        """Replace the schema; the owner must re-announce itself afterwards."""
        logger.debug("Rebinding %s/%s: %s", self._owner.identity, self._name, schema.to_dict())
        self._schema = schema

    def __repr__(self) -> str:
        return f"MetricChannel({self._owner.identity!r}, {self._name!r}, value={self._cached_value!r})"
