"""
Shared fixtures: deterministic clock, a scene pre-populated with the
anchor/wrapper objects the engine expects, a status sink and a sensor.
"""

import os
import sys

import pytest

project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
sys.path.append(project_root)

from tests.fakes import ORIGIN, FakeClock
from scene.memory import InMemoryScene, RecordingStatusSink
from sensors.sim import SimulatedLocationProvider


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def scene():
    return InMemoryScene(["SceneAnchor", "Wrapper", "Target", "Foo", "SpinY"])


@pytest.fixture
def status():
    return RecordingStatusSink()


@pytest.fixture
def sensor(clock):
    return SimulatedLocationProvider(origin=ORIGIN, heading_deg=90.0, clock=clock)
