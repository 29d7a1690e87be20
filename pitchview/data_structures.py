"""
Core data structures for tracked entities, position samples, and engine outputs.

All positions are expressed as percentages of the field (``0`` to ``100`` on
both axes, origin at the top-left corner of the rendered pitch). Samples are
supplied fresh by the host for every draw and are not guaranteed to be sorted
by time; consuming operations sort when they need to.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

# (x, y) in field-percent coordinates.
FieldPoint = Tuple[float, float]

FIELD_MIN = 0.0
FIELD_MAX = 100.0


@dataclass
class PositionSample:
    """
    Single observed position of an entity.

    Attributes:
        x: Horizontal position as a percentage of field width.
        y: Vertical position as a percentage of field height.
        t: Timestamp in seconds (playback time).
        confidence: Upstream detection confidence in ``[0, 1]``.
        intensity: Heat contribution; defaults to ``confidence`` when omitted.
        action_tag: Optional label from upstream analysis (e.g. "pass").
    """

    x: float
    y: float
    t: float
    confidence: float = 0.8
    intensity: Optional[float] = None
    action_tag: Optional[str] = None

    def __post_init__(self) -> None:
        if self.intensity is None:
            self.intensity = self.confidence

    @property
    def in_bounds(self) -> bool:
        """
        True when both coordinates are finite and inside ``[0, 100]``.
        """
        if not (math.isfinite(self.x) and math.isfinite(self.y)):
            return False
        return FIELD_MIN <= self.x <= FIELD_MAX and FIELD_MIN <= self.y <= FIELD_MAX

    @property
    def point(self) -> FieldPoint:
        return self.x, self.y


@dataclass
class TrackedEntity:
    """
    A player (or any tracked object) with its recorded samples.

    Attributes:
        entity_id: Stable identifier supplied by the host.
        display_name: Human-readable name.
        role_label: Playing role, e.g. "CB" or "ST".
        samples: Observations in arbitrary order.
        numeric_label: Optional jersey number.
    """

    entity_id: str
    display_name: str
    role_label: str = ""
    samples: List[PositionSample] = field(default_factory=list)
    numeric_label: Optional[int] = None

    @property
    def label(self) -> str:
        """
        Marker label: ``#<number>`` when known, otherwise the first name word.
        """
        if self.numeric_label is not None:
            return f"#{self.numeric_label}"
        parts = self.display_name.split()
        return parts[0] if parts else self.entity_id


@dataclass
class GridCell:
    """
    Transient heat-grid bucket, produced while rendering heat zones.
    """

    row: int
    col: int
    accumulated: float


@dataclass(frozen=True)
class FormationSlot:
    """
    Canonical slot of a formation scheme in field-percent coordinates.
    """

    role_label: str
    x: float
    y: float


@dataclass
class SlotAssignment:
    """
    An entity placed on a formation slot.

    Attributes:
        entity: The roster entry placed on the slot.
        slot: Canonical slot from the scheme layout.
        x: Display x position (slot position, measured position, or jittered).
        y: Display y position.
        synthetic: True when the position is presentation-only and was not
            measured. Hosts must never present these as tracking data.
    """

    entity: TrackedEntity
    slot: FormationSlot
    x: float
    y: float
    synthetic: bool = False


@dataclass
class HeatmapStats:
    """
    Summary statistics returned by every render.

    Attributes:
        total_samples: Samples of all entities in scope.
        window_samples: Samples of those entities inside the time window.
        average_intensity: Mean intensity over all samples in scope.
        max_intensity: Maximum intensity over all samples in scope.
        coverage_percent: Share of a fixed reference grid touched by samples.
    """

    total_samples: int = 0
    window_samples: int = 0
    average_intensity: float = 0.0
    max_intensity: float = 0.0
    coverage_percent: float = 0.0


@dataclass
class EntitySummary:
    """
    Per-entity movement summary in field-percent units.
    """

    entity_id: str
    sample_count: int
    path_length: float
    average_intensity: float
    first_seen: Optional[float]
    last_seen: Optional[float]
