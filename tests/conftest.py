"""
Shared pytest fixtures for report-runner tests.

This module provides:
- Isolated settings rooted in a temporary folder
- Location provider / coordinator fixtures
- structlog and settings-cache reset between tests
"""

import os
import sys
from pathlib import Path

import pytest
import structlog

# Ensure report_runner package is importable
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from report_runner.core.logging import clear_context
from report_runner.core.settings import ReportRunnerSettings, clear_settings_cache
from report_runner.reporting.concurrency import ConcurrencyCoordinator
from report_runner.reporting.locations import FolderReportLocationProvider


# =============================================================================
# Test Markers Configuration
# =============================================================================


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Mark all tests without explicit markers as unit tests."""
    for item in items:
        markers = {mark.name for mark in item.iter_markers()}
        if not markers.intersection({"unit", "integration"}):
            item.add_marker(pytest.mark.unit)


# =============================================================================
# Isolation Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def _isolate_environment(monkeypatch, tmp_path):
    """Keep REPORT_RUNNER_* variables, cached settings and log config per test."""
    for key in list(os.environ):
        if key.startswith("REPORT_RUNNER_"):
            monkeypatch.delenv(key)
    monkeypatch.chdir(tmp_path)
    clear_settings_cache()
    clear_context()
    yield
    clear_settings_cache()
    clear_context()
    structlog.reset_defaults()


# =============================================================================
# Component Fixtures
# =============================================================================


@pytest.fixture
def root_folder(tmp_path) -> Path:
    folder = tmp_path / "reports"
    folder.mkdir()
    return folder


@pytest.fixture
def settings(root_folder) -> ReportRunnerSettings:
    return ReportRunnerSettings(root_folder=root_folder)


@pytest.fixture
def locations(root_folder) -> FolderReportLocationProvider:
    return FolderReportLocationProvider(root_folder)


@pytest.fixture
def coordinator(locations) -> ConcurrencyCoordinator:
    return ConcurrencyCoordinator(locations)
