"""Feature-level fixtures for i18n engine tests.

Provides registered components, YAML string table directories and enums
shared across the engine test modules.
"""

import pytest
import yaml

from tests.factories.i18n import make_component, make_engine


@pytest.fixture
def app_component():
    """The "app" component in English and French."""
    return make_component()


@pytest.fixture
def auth_component():
    """The "authentication" component with the "auth" alias."""
    return make_component(
        "authentication",
        {
            "en": {"login": "Log in", "logout": "Log out"},
            "fr": {"login": "Se connecter", "logout": "Se déconnecter"},
        },
        aliases=["auth"],
    )


@pytest.fixture
def populated_engine(languages, app_component, auth_component):
    """Engine with the app and authentication components registered."""
    return make_engine(languages=languages, components=[app_component, auth_component])


@pytest.fixture
def priority_translations():
    """Priority translations keyed by numeric value in English, by name in French."""
    return {
        "en": {1: "Low", 2: "High"},
        "fr": {"LOW": "Basse", "HIGH": "Haute"},
    }


@pytest.fixture
def temp_translations_dir(tmp_path):
    """Create temporary directory with sample YAML string tables.

    Returns a directory structure like:
    - app.en.yml
    - app.fr.yml
    - auth.en.yml
    - auth.fr.yml
    """
    en_app = {
        "app": {
            "welcome": "Hi",
            "greetingTemplate": "Hello, {name}",
        }
    }
    with open(tmp_path / "app.en.yml", "w") as f:
        yaml.dump(en_app, f)

    fr_app = {
        "app": {
            "welcome": "Salut",
        }
    }
    with open(tmp_path / "app.fr.yml", "w") as f:
        yaml.dump(fr_app, f, allow_unicode=True)

    en_auth = {
        "authentication": {
            "_aliases": ["auth"],
            "login": "Log in",
        }
    }
    with open(tmp_path / "auth.en.yml", "w") as f:
        yaml.dump(en_auth, f)

    fr_auth = {
        "authentication": {
            "login": "Se connecter",
        }
    }
    with open(tmp_path / "auth.fr.yml", "w") as f:
        yaml.dump(fr_auth, f, allow_unicode=True)

    return tmp_path
