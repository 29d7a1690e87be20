"""
Test Configuration
==================

Pytest fixtures shared by the pitchview test suite.
"""

import pytest

from pitchview.config import RenderConfig
from pitchview.data_structures import PositionSample, TrackedEntity
from pitchview.surface import RecordingSurface


def make_samples(points):
    """Build samples from (x, y, t[, intensity]) tuples."""
    samples = []
    for p in points:
        if len(p) == 4:
            x, y, t, intensity = p
            samples.append(PositionSample(x=x, y=y, t=t, confidence=intensity))
        else:
            x, y, t = p
            samples.append(PositionSample(x=x, y=y, t=t))
    return samples


@pytest.fixture
def sample_factory():
    """Provide make_samples to tests."""
    return make_samples


@pytest.fixture
def timeline_samples():
    """One sample per second from t=0 to t=60, walking diagonally."""
    return [PositionSample(x=t, y=t, t=float(t), confidence=0.5) for t in range(61)]


@pytest.fixture
def striker():
    """Entity with five samples inside the last ten seconds before t=30, shuffled."""
    return TrackedEntity(
        entity_id="p9",
        display_name="Alex Striker",
        role_label="ST",
        numeric_label=9,
        samples=make_samples(
            [
                (50, 50, 28.0, 1.0),
                (20, 20, 5.0),
                (40, 40, 22.0),
                (45, 45, 25.0),
                (60, 60, 35.0),
                (42, 42, 23.0),
                (48, 48, 27.0),
            ]
        ),
    )


@pytest.fixture
def keeper():
    """Entity without a jersey number and with samples far from the striker."""
    return TrackedEntity(
        entity_id="gk1",
        display_name="Jordan Keeper",
        role_label="GK",
        samples=make_samples([(50, 8, 10.0, 0.0), (52, 9, 29.0, 0.0)]),
    )


@pytest.fixture
def squad(striker, keeper):
    return [striker, keeper]


@pytest.fixture
def render_config():
    return RenderConfig(window_seconds=10, trail_length=20, opacity=0.8)


@pytest.fixture
def surface():
    return RecordingSurface(width=600, height=400)
