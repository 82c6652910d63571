import sys
from pathlib import Path

# Ensure the application package root is on sys.path so importing application
# modules (e.g. `core.config`) works during pytest collection regardless of
# the directory pytest is invoked from.
project_root = str(Path(__file__).resolve().parents[1])
if project_root not in sys.path:
    sys.path.insert(0, project_root)

import pytest
from i18n_engine import I18nService
from tests.factories.i18n import make_engine, make_language_definitions


@pytest.fixture
def languages():
    """English (default) and French language definitions."""
    return make_language_definitions()


@pytest.fixture
def engine(languages):
    """Empty engine over English and French, English as fallback."""
    return make_engine(languages=languages)


@pytest.fixture
def service():
    """Empty I18nService using the "default" instance key."""
    return I18nService(default_instance_key="default")
