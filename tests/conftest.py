"""Shared pytest fixtures and markers for all tests."""

import pytest


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line(
        "markers", "storage: marks tests that touch the filesystem or SQLite"
    )


@pytest.fixture
def sample_context():
    """Provide a fresh idle simulation context."""
    from cmosim.models.state import SimulationContext
    return SimulationContext()


@pytest.fixture
def machine():
    """Provide an idle machine with a fixed seed."""
    from cmosim.engine.machine import SimulationMachine
    return SimulationMachine(random_seed=42)


@pytest.fixture
def started_machine(machine):
    """Provide a machine that has finished the strategy session (phase Q1).

    Budget is 500,000, so each quarter gets 125,000.
    """
    machine.start("user-1", total_budget=500_000)
    machine.set_strategy(
        target_audience="Young professionals",
        brand_positioning="Premium",
        primary_channels=["digital"],
        company_name="Acme",
        industry="Retail",
        strategy_type="Growth",
    )
    machine.complete_strategy_session()
    return machine
