"""
Formation layouts and roster-to-slot mapping.

A formation scheme is a fixed, ordered list of 11 canonical slots in
field-percent coordinates, goalkeeper first, attacking towards larger ``y``.
Rosters are mapped onto slots positionally: the i-th entity takes the i-th
slot regardless of its own ``role_label``.

When no measured formation exists, :func:`synthesize_formation` produces a
presentation-only layout (slot positions with a small deterministic wobble).
Every assignment it returns carries ``synthetic=True``.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Sequence, Tuple, Union

from .data_structures import FieldPoint, FormationSlot, SlotAssignment, TrackedEntity
from .nearest import nearest_by_time
from .utils.geometry import clamp

logger = logging.getLogger(__name__)


class FormationScheme(str, Enum):
    F_4_4_2 = "4-4-2"
    F_4_3_3 = "4-3-3"
    F_3_5_2 = "3-5-2"
    F_4_2_3_1 = "4-2-3-1"


DEFAULT_SCHEME = FormationScheme.F_4_4_2

_GK = FormationSlot("GK", 50, 10)
_BACK_FOUR = (
    FormationSlot("LB", 15, 30),
    FormationSlot("CB", 38, 28),
    FormationSlot("CB", 62, 28),
    FormationSlot("RB", 85, 30),
)

FORMATION_LAYOUTS: Dict[FormationScheme, Tuple[FormationSlot, ...]] = {
    FormationScheme.F_4_4_2: (
        _GK,
        *_BACK_FOUR,
        FormationSlot("LM", 15, 55),
        FormationSlot("CM", 38, 52),
        FormationSlot("CM", 62, 52),
        FormationSlot("RM", 85, 55),
        FormationSlot("ST", 38, 80),
        FormationSlot("ST", 62, 80),
    ),
    FormationScheme.F_4_3_3: (
        _GK,
        *_BACK_FOUR,
        FormationSlot("CM", 25, 55),
        FormationSlot("CM", 50, 50),
        FormationSlot("CM", 75, 55),
        FormationSlot("LW", 20, 80),
        FormationSlot("ST", 50, 85),
        FormationSlot("RW", 80, 80),
    ),
    FormationScheme.F_3_5_2: (
        _GK,
        FormationSlot("CB", 25, 30),
        FormationSlot("CB", 50, 28),
        FormationSlot("CB", 75, 30),
        FormationSlot("LWB", 10, 55),
        FormationSlot("CM", 30, 52),
        FormationSlot("CDM", 50, 45),
        FormationSlot("CM", 70, 52),
        FormationSlot("RWB", 90, 55),
        FormationSlot("ST", 38, 80),
        FormationSlot("ST", 62, 80),
    ),
    FormationScheme.F_4_2_3_1: (
        _GK,
        *_BACK_FOUR,
        FormationSlot("CDM", 38, 45),
        FormationSlot("CDM", 62, 45),
        FormationSlot("LM", 20, 65),
        FormationSlot("CAM", 50, 65),
        FormationSlot("RM", 80, 65),
        FormationSlot("ST", 50, 85),
    ),
}

SYNTHETIC_BOUNDS = (10.0, 90.0)


def resolve_scheme(value: Union[str, FormationScheme, None]) -> FormationScheme:
    """
    Resolve a scheme name; unknown or missing values fall back to ``4-4-2``.
    """
    if isinstance(value, FormationScheme):
        return value
    if value is not None:
        try:
            return FormationScheme(str(value).strip())
        except ValueError:
            pass
    logger.debug("Unknown formation scheme %r; using %s", value, DEFAULT_SCHEME.value)
    return DEFAULT_SCHEME


def get_layout(scheme: Union[str, FormationScheme, None]) -> Tuple[FormationSlot, ...]:
    return FORMATION_LAYOUTS[resolve_scheme(scheme)]


def map_formation(
    scheme: Union[str, FormationScheme, None],
    roster: Sequence[TrackedEntity],
) -> List[SlotAssignment]:
    """
    Assign roster entries to scheme slots by position in the roster.

    Shorter rosters leave trailing slots empty; extra entities are dropped.
    """
    slots = get_layout(scheme)
    return [
        SlotAssignment(entity=entity, slot=slot, x=slot.x, y=slot.y)
        for entity, slot in zip(roster, slots)
    ]


def synthetic_jitter(current_time: float, entity_index: int, amplitude: float = 3.0) -> float:
    """
    Bounded deterministic offset used to animate synthetic layouts.
    """
    return math.sin(current_time * 0.1 + entity_index) * amplitude


def synthesize_formation(
    scheme: Union[str, FormationScheme, None],
    roster: Sequence[TrackedEntity],
    current_time: float,
    amplitude: float = 3.0,
) -> List[SlotAssignment]:
    """
    Presentation-only layout for when no measured formation data exists.

    Each entity sits at its slot position plus :func:`synthetic_jitter` on
    both axes, clamped to ``[10, 90]``. The output is tagged ``synthetic``.
    """
    lo, hi = SYNTHETIC_BOUNDS
    assignments = map_formation(scheme, roster)
    for index, assignment in enumerate(assignments):
        offset = synthetic_jitter(current_time, index, amplitude)
        assignment.x = clamp(assignment.slot.x + offset, lo, hi)
        assignment.y = clamp(assignment.slot.y + offset, lo, hi)
        assignment.synthetic = True
    return assignments


def infer_formation_label(points: Sequence[FieldPoint], line_gap: float = 8.0) -> str:
    """
    Guess a formation label such as ``"4-4-2"`` from outfield positions.

    Points are sorted by ``y``; with 11 points the deepest one is taken as the
    goalkeeper and left out. The rest are split into lines wherever two
    consecutive players are more than ``line_gap`` apart in ``y``.
    """
    ordered = sorted(points, key=lambda p: p[1])
    if len(ordered) >= 11:
        ordered = ordered[1:]
    if not ordered:
        return ""
    counts: List[int] = [1]
    for prev, cur in zip(ordered[:-1], ordered[1:]):
        if cur[1] - prev[1] > line_gap:
            counts.append(1)
        else:
            counts[-1] += 1
    return "-".join(str(c) for c in counts)


@dataclass
class FormationSnapshot:
    """
    Measured formation at a point in time.

    Attributes:
        label: Inferred formation label (may not be one of the known schemes).
        assignments: Entities at their measured positions, mapped to slots.
        timestamp: Playback time the snapshot describes.
        confidence: Mean confidence of the samples used.
    """

    label: str
    assignments: List[SlotAssignment]
    timestamp: float
    confidence: float


def formation_at_time(
    entities: Sequence[TrackedEntity],
    current_time: float,
    scheme: Union[str, FormationScheme, None] = None,
) -> Optional[FormationSnapshot]:
    """
    Place each entity at its sample nearest to ``current_time``.

    Entities without samples are skipped. Returns None when no entity has any
    sample, in which case callers may fall back to :func:`synthesize_formation`.
    """
    tracked = [e for e in entities if e.samples]
    if not tracked:
        return None
    assignments = map_formation(scheme, tracked)
    confidences: List[float] = []
    for assignment in assignments:
        sample = nearest_by_time(assignment.entity.samples, current_time)
        assignment.x = sample.x
        assignment.y = sample.y
        confidences.append(sample.confidence)
    label = infer_formation_label([(a.x, a.y) for a in assignments])
    return FormationSnapshot(
        label=label,
        assignments=assignments,
        timestamp=current_time,
        confidence=sum(confidences) / len(confidences),
    )


@dataclass
class FormationHistory:
    """
    Rolling record of distinct formations seen during playback.

    A snapshot is kept when its label differs from the last one or when more
    than ``min_gap_seconds`` of playback passed since the last entry.
    """

    max_entries: int = 20
    min_gap_seconds: float = 30.0
    entries: List[FormationSnapshot] = field(default_factory=list)

    def __post_init__(self) -> None:
        if self.max_entries < 1:
            raise ValueError("max_entries must be >= 1")

    def record(self, snapshot: FormationSnapshot) -> bool:
        last = self.entries[-1] if self.entries else None
        if (
            last is not None
            and last.label == snapshot.label
            and abs(last.timestamp - snapshot.timestamp) <= self.min_gap_seconds
        ):
            return False
        self.entries.append(snapshot)
        del self.entries[:-self.max_entries]
        return True


def formation_lines(points: Sequence[FieldPoint]) -> List[List[FieldPoint]]:
    """
    Defensive and midfield lines for drawing, each ordered left to right.

    The defensive line is the (up to) four points with the lowest ``y``; the
    midfield line is the 30%-70% band of points sorted by ``y``. Lines with
    fewer than two points are omitted; fewer than three points yield nothing.
    """
    if len(points) < 3:
        return []
    ordered = sorted(points, key=lambda p: p[1])
    n = len(ordered)
    defenders = ordered[: min(4, n)]
    midfielders = ordered[int(n * 0.3): int(n * 0.7)]
    return [sorted(line) for line in (defenders, midfielders) if len(line) > 1]
