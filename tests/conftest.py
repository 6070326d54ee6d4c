"""
Shared test fixtures for the provider-kernel suite.
"""

from pathlib import Path

import pytest

# Import fixtures so pytest can discover them
from provider_kernel.testing.fixtures import (  # noqa: F401
    isolated_container,
    recording_activator,
)

FIXTURES = Path(__file__).parent / "fixtures"


@pytest.fixture
def fixtures_dir() -> Path:
    return FIXTURES
