from types import SimpleNamespace

import pytest

from lpb import create_app
from lpb.config import TestConfig
from lpb.extensions import db
from lpb.models import Role, User
from lpb.services.tokens import issue_access_token


@pytest.fixture()
def app():
    app = create_app(TestConfig)

    with app.app_context():
        db.create_all()

    yield app

    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(app):
    return app.test_client()


@pytest.fixture()
def make_user(app):
    """Create a user and return a detached handle carrying a bearer token."""

    def _make_user(email, role=Role.ADMIN, password='password123', name=None, active=True):
        with app.app_context():
            user = User(email=email, name=name or email.split('@')[0], role=role, active=active)
            user.set_password(password)
            db.session.add(user)
            db.session.commit()
            token = issue_access_token(user)
            return SimpleNamespace(
                id=user.id,
                email=user.email,
                role=role,
                password=password,
                token=token,
                headers={'Authorization': f'Bearer {token}'},
            )

    return _make_user


@pytest.fixture()
def admin(make_user):
    return make_user('owner@example.com', Role.ADMIN)


@pytest.fixture()
def other_admin(make_user):
    return make_user('other@example.com', Role.ADMIN)


@pytest.fixture()
def super_admin(make_user):
    return make_user('root@example.com', Role.SUPER_ADMIN)


@pytest.fixture()
def plain_user(make_user):
    return make_user('viewer@example.com', Role.USER)


@pytest.fixture()
def create_page(client):
    """POST a page and return its JSON body."""

    def _create_page(owner, name='Launch', slug='launch', **extra):
        payload = {'name': name, 'slug': slug, **extra}
        response = client.post('/api/pages', json=payload, headers=owner.headers)
        assert response.status_code == 201, response.get_json()
        return response.get_json()['data']

    return _create_page
