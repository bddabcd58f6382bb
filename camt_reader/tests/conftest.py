"""
camt_reader - Pytest Configuration and Fixtures
"""

import pytest

from camt_reader.core import config as config_module
from camt_reader.core.config import ReaderConfig
from camt_reader.tests.xml_samples import SAMPLE_STATEMENT


@pytest.fixture(autouse=True)
def reset_global_config(monkeypatch):
    """Isolate tests from the cached global configuration and the environment."""
    monkeypatch.setattr(config_module, "_config", None)
    for key in ("LOG_LEVEL", "EXPECTED_NAMESPACE", "ASSUME_UTC", "JSON_INDENT"):
        monkeypatch.delenv(f"CAMT_READER_{key}", raising=False)


@pytest.fixture
def reader_config():
    """Default reader configuration."""
    return ReaderConfig()


@pytest.fixture
def sample_statement_xml():
    return SAMPLE_STATEMENT


@pytest.fixture
def sample_statement_file(tmp_path):
    path = tmp_path / "statement.xml"
    path.write_text(SAMPLE_STATEMENT, encoding="utf-8")
    return path
