"""
Configuration for pytest to set up the import path and shared fixtures.
"""

import sys
from pathlib import Path
import pytest


# Add the repository root to Python path so we can import lazy_chain, chain_utils, etc.
parent_dir = Path(__file__).parent.parent
sys.path.insert(0, str(parent_dir))

# Import after path setup
from chain_models import BenchmarkConfig
from chain_utils import clear_performance_metrics


@pytest.fixture
def six_numbers():
    return [1, 2, 3, 4, 5, 6]


@pytest.fixture
def ten_numbers():
    return list(range(1, 11))


@pytest.fixture
def call_log():
    """Records every value a tracked callback sees."""
    return []


@pytest.fixture
def tracked_double(call_log):
    def _double(x):
        call_log.append(x)
        return x * 2
    return _double


@pytest.fixture
def small_config():
    """Harness config small enough for the test suite."""
    return BenchmarkConfig(
        size=300,
        object_size=60,
        long_chain_size=200,
        chain_length=5,
        iterations=2,
        memory_size=3000,
        settle_seconds=0.0,
    )


@pytest.fixture(autouse=True)
def reset_metrics():
    clear_performance_metrics()
    yield
    clear_performance_metrics()
