"""
Pytest configuration and fixtures
"""

import pytest
import sys
from pathlib import Path

# Add repo root to path
sys.path.insert(0, str(Path(__file__).parent.parent))


@pytest.fixture
def surface():
    """In-memory drawing surface"""
    from src.overlay import RecordingSurface
    return RecordingSurface()


@pytest.fixture
def config():
    """Default configuration (no YAML, no environment)"""
    from src.config import Config
    return Config()


@pytest.fixture
def session(surface, config):
    """Map session drawing on the recording surface"""
    from src.overlay import MapSession
    return MapSession(surface, config)


@pytest.fixture
def dispatcher(session):
    """Event dispatcher bound to the session"""
    from src.overlay import Dispatcher
    return Dispatcher(session)


@pytest.fixture
def vehicle_a(session):
    """Quadrotor 'A' registered, no fix yet"""
    return session.vehicles.up("A", "QUADROTOR")


@pytest.fixture
def sample_waypoints():
    """Mission items with an unset slot first"""
    return [
        {"lat": 0, "lng": 0},
        {"lat": 37.4120, "lng": -121.9940},
        {"lat": 37.4125, "lng": -121.9950},
        {"lat": 37.4130, "lng": -121.9945},
    ]
