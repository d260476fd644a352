"""
Pytest configuration and shared fixtures for arena tests.
"""

import pytest
import sys
import os

# Add src to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from arena_sim.config import GameConfig
from arena_sim.core.ecs import EntityManager
from arena_sim.data.loader import DATA_LOADER
from arena_sim.entities.entities import EntityFactory
from arena_sim.world.persistence import MemoryStore, PersistenceGateway
from arena_sim.world.world import World


@pytest.fixture
def config():
    """Deterministic config: fixed seed, no walls, no jitter, no drops."""
    return GameConfig(seed=1234, wall_count=0, ai_jitter=0.0, pickup_drop_chance=0.0)


@pytest.fixture
def world(config):
    """A World with an empty wall layout and the player centred."""
    return World(config, walls=[])


@pytest.fixture
def entity_manager():
    """Create a fresh EntityManager for testing."""
    return EntityManager()


@pytest.fixture
def factory(entity_manager):
    """Create an EntityFactory tied to the entity_manager fixture."""
    return EntityFactory(entity_manager)


@pytest.fixture
def data_loader():
    """Get the shared DATA_LOADER instance."""
    return DATA_LOADER


@pytest.fixture
def memory_store():
    return MemoryStore()


@pytest.fixture
def gateway(memory_store):
    """A gateway over an in-memory store, shut down after the test."""
    gw = PersistenceGateway(memory_store)
    yield gw
    gw.close()
