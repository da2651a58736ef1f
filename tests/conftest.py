"""
Pytest fixtures and configuration for GamerBoy tests
"""
import os
import sys
import tempfile
import pytest
from unittest.mock import MagicMock

# Settings are read from this directory; it must be set before app modules are imported
os.environ['GAMERBOY_CONFIG_DIR'] = tempfile.mkdtemp(prefix='gamerboy-tests-')
for _var in ('DATABASE_URL', 'REDIS_URL', 'RATELIMIT_STORAGE_URI', 'SITE_URL', 'LOG_FORMAT', 'LOG_LEVEL'):
    os.environ.pop(_var, None)

# Add app directory to path
sys.path.insert(0, os.path.join(os.path.dirname(os.path.abspath(__file__)), '..', 'app'))

SITE_URL = 'https://gamerboy.test'

# id -> (name, slug)
CATEGORIES = {
    1: ('Action', 'action'),
    2: ('Arcade', 'arcade'),
    3: ('Puzzle', 'puzzle'),
    4: ('Strategy', 'strategy'),
}

# id -> (title, slug, category ids)
GAMES = {
    1: ('Super Runner', 'super-runner', [1]),
    2: ('Super Puzzle', 'super-puzzle', [3]),
    3: ('Runner Dash', 'runner-dash', [1, 2]),
    4: ('Tower Defense', 'tower-defense', [4]),
    5: ('Block Puzzle', 'block-puzzle', [3, 2]),
    6: ('Space Shooter', 'space-shooter', [1, 2]),
    7: ('100% Fun', 'hundred-percent-fun', []),
    8: ('Snake_Game', 'snake-game', []),
    9: ('Puzzle Fighter', 'puzzle-fighter', [1, 3]),
}


def make_app(tmp_path, **overrides):
    from app import create_app

    config = {
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': f"sqlite:///{tmp_path / 'gamerboy-test.db'}",
        'RATELIMIT_ENABLED': False,
        'RATELIMIT_STORAGE_URI': 'memory://',
        'REDIS_URL': None,
        'SITE_URL': SITE_URL,
    }
    config.update(overrides)
    return create_app(config)


def seed_catalog():
    """Insert the CATEGORIES / GAMES fixture data (with one duplicated link)"""
    from db import db
    from models import Category, Game, GameCategory

    for category_id, (name, slug) in CATEGORIES.items():
        db.session.add(Category(id=category_id, name=name, slug=slug))

    for game_id, (title, slug, _) in GAMES.items():
        db.session.add(Game(
            id=game_id,
            title=title,
            slug=slug,
            description=f'{title} description',
            thumbnail=f'https://img.gamerboy.test/{slug}.jpg',
            game_id=f'gd{1000 + game_id}',
        ))
    db.session.flush()

    for game_id, (_, _, category_ids) in GAMES.items():
        for category_id in category_ids:
            db.session.add(GameCategory(game_id=game_id, category_id=category_id))

    # Duplicate link, tolerated by the schema
    db.session.add(GameCategory(game_id=1, category_id=1))
    db.session.commit()


@pytest.fixture
def app(tmp_path):
    """Application on a temporary SQLite file with the sample catalog"""
    from db import db

    application = make_app(tmp_path)
    with application.app_context():
        seed_catalog()
        yield application
        db.session.remove()
        db.engine.dispose()


@pytest.fixture
def client(app):
    with app.test_client() as client:
        yield client


@pytest.fixture
def query_counter(app):
    """Counts SQL statements executed while the fixture is active"""
    from sqlalchemy import event
    from db import db

    statements = []

    def before_cursor_execute(conn, cursor, statement, parameters, context, executemany):
        statements.append(statement)

    engine = db.engine
    event.listen(engine, 'before_cursor_execute', before_cursor_execute)
    yield statements
    event.remove(engine, 'before_cursor_execute', before_cursor_execute)


@pytest.fixture
def mock_redis(app, monkeypatch):
    """Replace the Redis client with a mock (cache enabled, always a miss)"""
    import redis_cache

    client = MagicMock()
    client.get.return_value = None
    client.scan_iter.return_value = iter([])
    monkeypatch.setattr(redis_cache, 'redis_client', client)
    redis_cache.reset_cache_stats()
    return client

