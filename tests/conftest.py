"""Shared fixtures.

Service tests run inside ``app_ctx``. API tests use ``client`` without a
pushed context so every request gets its own ``g`` and login state; they
seed data inside ``with app.app_context()`` blocks.
"""

import pytest

from kitchen import create_app
from kitchen.extensions import db


@pytest.fixture()
def app(tmp_path):
    app = create_app('testing')
    app.config['UPLOAD_FOLDER'] = str(tmp_path)
    with app.app_context():
        db.create_all()
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def app_ctx(app):
    with app.app_context():
        yield app


@pytest.fixture()
def client(app):
    return app.test_client()
