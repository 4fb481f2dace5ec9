"""Shared fixtures for the pipeline tests."""
from unittest.mock import Mock

import pytest

from texocr.config import PipelineConfig


@pytest.fixture
def pipeline_config(tmp_path):
    return PipelineConfig(
        api_key="test_key",
        model="gemini-2.5-flash",
        output_dir=tmp_path / "output",
        max_attempts=3,
        default_quota_delay=20.0,
        title="Test Document",
        author="Tester",
    )


@pytest.fixture
def notifier():
    mock = Mock()
    mock.notify.return_value = True
    return mock
