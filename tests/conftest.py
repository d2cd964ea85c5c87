"""
Pytest fixtures and configuration for QuestLog tests
"""
import pytest
import yaml
from unittest.mock import MagicMock

from igdb_fakes import FakeIGDBClient, responder_for


@pytest.fixture
def mock_logger():
    """Create a mock logger for testing"""
    logger = MagicMock()
    logger.info = MagicMock()
    logger.error = MagicMock()
    logger.warning = MagicMock()
    logger.debug = MagicMock()
    return logger


@pytest.fixture
def config_file(tmp_path):
    """Settings file with IGDB credentials"""
    path = tmp_path / "settings.yaml"
    path.write_text(yaml.dump({
        "igdb": {"client_id": "test-client", "client_secret": "test-secret"},
        "catalog": {"cache_ttl": 300},
    }))
    return str(path)


@pytest.fixture
def app_config(config_file):
    """App configuration for tests"""
    return {
        'TESTING': True,
        'SECRET_KEY': 'test-secret-key',
        'SQLALCHEMY_DATABASE_URI': 'sqlite://',
        'RATELIMIT_ENABLED': False,
        'QUESTLOG_CONFIG_FILE': config_file,
    }


@pytest.fixture
def app(app_config):
    from questlog.app import create_app

    _app = create_app(app_config)
    yield _app

    from questlog.db import db
    with _app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    with app.test_client() as client:
        yield client


@pytest.fixture
def user_token(app):
    """A user with a valid API token"""
    from questlog.auth import create_user_with_token

    with app.app_context():
        _, token = create_user_with_token("player-one", display_name="Player One")
    return token


@pytest.fixture
def auth_headers(user_token):
    return {"Authorization": f"Bearer {user_token}"}


@pytest.fixture
def raw_games():
    """IGDB-shaped records covering main games, editions, DLCs and mature content"""
    return [
        {
            "id": 1,
            "name": "Elden Ring",
            "summary": "An action RPG set in the Lands Between.",
            "first_release_date": 1645747200,
            "total_rating": 95.0,
            "total_rating_count": 5000,
            "aggregated_rating": 96.0,
            "aggregated_rating_count": 80,
            "rating": 94.0,
            "rating_count": 4920,
            "cover": {"id": 11, "image_id": "co4jni"},
            "genres": [{"id": 12, "name": "Role-playing (RPG)"}, {"id": 31, "name": "Adventure"}],
            "themes": [{"id": 17, "name": "Fantasy"}],
            "game_modes": [{"id": 1, "name": "Single player"}, {"id": 2, "name": "Multiplayer"}],
            "player_perspectives": [{"id": 2, "name": "Third person"}],
        },
        {
            "id": 2,
            "name": "Tiny Gem",
            "summary": "A short puzzle adventure.",
            "first_release_date": 1700000000,
            "total_rating": 99.0,
            "total_rating_count": 10,
            "genres": [{"id": 12, "name": "Role-playing (RPG)"}, {"id": 9, "name": "Puzzle"}],
        },
        {
            "id": 3,
            "name": "Space Shooter X",
            "summary": "Blast everything.",
            "first_release_date": 1600000000,
            "total_rating": 85.0,
            "total_rating_count": 3000,
            "genres": [{"id": 5, "name": "Shooter"}],
        },
        {
            "id": 4,
            "name": "Elden Ring: Deluxe Edition",
            "version_parent": 1,
            "total_rating": 97.0,
            "total_rating_count": 100,
            "genres": [{"id": 12, "name": "Role-playing (RPG)"}],
        },
        {
            "id": 5,
            "name": "Shadow of the Erdtree",
            "parent_game": 1,
            "total_rating": 96.0,
            "total_rating_count": 900,
            "genres": [{"id": 12, "name": "Role-playing (RPG)"}],
        },
        {
            "id": 6,
            "name": "Naughty Nights",
            "summary": "An adult dating sim.",
            "first_release_date": 1650000000,
            "total_rating": 90.0,
            "total_rating_count": 4000,
            "genres": [{"id": 12, "name": "Role-playing (RPG)"}, {"id": 13, "name": "Simulator"}],
        },
        {
            "id": 7,
            "name": "Sussex Farm",
            "summary": "Farming in the English countryside.",
            "first_release_date": 1690000000,
            "total_rating": 82.0,
            "total_rating_count": 2500,
            "genres": [{"id": 13, "name": "Simulator"}, {"id": 12, "name": "Role-playing (RPG)"}],
        },
    ]


@pytest.fixture
def fake_client(raw_games):
    """Fake IGDB client answering every query from raw_games"""
    return FakeIGDBClient(responder_for(raw_games))
