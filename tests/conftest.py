import pytest

from santapool import create_app
from santapool.extensions import db


@pytest.fixture
def app():
    app = create_app({
        "TESTING": True,
        "SECRET_KEY": "test-secret",
        "SQLALCHEMY_DATABASE_URI": "sqlite:///:memory:",
        "WTF_CSRF_ENABLED": False,
        "SANTA_DRAW_MAX_ATTEMPTS": 100,
    })
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def make_pool(app):
    """Builds a pool from a list of group sizes; returns (pool, [[participant]])."""
    from santapool.services.pools import create_group, create_participant, create_pool

    def _make(sizes, name="Family"):
        pool = create_pool(name)
        groups = []
        counter = 0
        for size in sizes:
            group = create_group(pool.id)
            members = []
            for _ in range(size):
                counter += 1
                members.append(create_participant(group.id, f"Person {counter}"))
            groups.append(members)
        return pool, groups

    return _make
