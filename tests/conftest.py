"""Shared fixtures."""
from datetime import date

import pytest

from kvcompose.compose.engine import CompositionEngine

@pytest.fixture
def base_config():
    """Minimal valid configuration with every optional feature off."""
    return {
        "location": "eastus",
        "locationShort": "eus",
        "resourceGroupName": "rg-security-prod",
        "tenantId": "00000000-0000-0000-0000-000000000001",
        "environment": "prod",
        "projectName": "payments",
        "createdBy": "platform-team",
        "nameSuffix": "01"
    }

@pytest.fixture
def engine():
    """Engine with a pinned composition date."""
    return CompositionEngine(today=date(2024, 5, 17))
