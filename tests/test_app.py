from lpb import create_app
from lpb.config import TestConfig
from lpb.extensions import db


def test_health(client):
    response = client.get('/api/health')
    assert response.status_code == 200
    assert response.get_json() == {'status': 'ok'}


def test_security_headers(client):
    response = client.get('/api/health')
    assert response.headers['X-Content-Type-Options'] == 'nosniff'
    assert response.headers['X-Frame-Options'] == 'DENY'
    assert "frame-ancestors 'none'" in response.headers['Content-Security-Policy']
    assert 'Strict-Transport-Security' not in response.headers


def test_unknown_route_is_json(client):
    response = client.get('/api/nope')
    assert response.status_code == 404
    body = response.get_json()
    assert body['success'] is False
    assert body['code'] == 'not_found'


def test_oversized_body_is_rejected(client, admin):
    payload = {'name': 'Big', 'slug': 'big', 'seoDescription': 'x' * (1024 * 1024 + 1)}
    response = client.post('/api/pages', json=payload, headers=admin.headers)
    assert response.status_code == 413


def test_unhandled_errors_are_opaque(client, monkeypatch):
    from lpb.services.pages import PageService

    def explode(slug):
        raise RuntimeError('secret internals')

    monkeypatch.setattr(PageService, 'get_published_by_slug', staticmethod(explode))

    app = client.application
    app.config['PROPAGATE_EXCEPTIONS'] = False
    response = client.get('/api/public/pages/anything')
    assert response.status_code == 500
    body = response.get_json()
    assert body == {'success': False, 'error': 'Internal server error', 'code': 'internal_error'}


def test_app_factory_uses_given_config():
    app = create_app(TestConfig)
    assert app.config['TESTING'] is True
    assert app.config['SQLALCHEMY_DATABASE_URI'] == 'sqlite:///:memory:'
    assert 'template_service' in app.extensions
    with app.app_context():
        assert db.engine.url.database == ':memory:'
