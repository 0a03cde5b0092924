"""
Shared fixtures for the test suite.
"""
import json
from unittest.mock import MagicMock

import pytest

from tests.helpers import SAMPLE_ANALYSIS


@pytest.fixture
def sample_analysis():
    return json.loads(json.dumps(SAMPLE_ANALYSIS))


@pytest.fixture
def fake_client():
    """Transport double with a send_prompt mock."""
    client = MagicMock()
    client.send_prompt.return_value = json.dumps(SAMPLE_ANALYSIS)
    return client
