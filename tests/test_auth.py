from lpb.extensions import db
from lpb.models import AuditLog, RefreshToken, Role, User


def _register(client, email='new@example.com', password='password123', name='New Person'):
    return client.post('/api/auth/register', json={'email': email, 'password': password, 'name': name})


def _login(client, email, password='password123'):
    return client.post('/api/auth/login', json={'email': email, 'password': password})


class TestRegistration:

    def test_register_issues_tokens(self, client):
        response = _register(client)
        assert response.status_code == 201
        body = response.get_json()
        assert body['user']['email'] == 'new@example.com'
        assert body['user']['role'] == 'ADMIN'
        assert set(body['tokens']) == {'accessToken', 'refreshToken'}

        headers = {'Authorization': f"Bearer {body['tokens']['accessToken']}"}
        created = client.post('/api/pages', json={'name': 'Mine', 'slug': 'mine'}, headers=headers)
        assert created.status_code == 201

    def test_duplicate_email(self, client):
        _register(client)
        response = _register(client, email='NEW@example.com')
        assert response.status_code == 409

    def test_short_password(self, client):
        response = _register(client, password='short')
        assert response.status_code == 400
        assert 'password' in response.get_json()['details']


class TestLogin:

    def test_login_success(self, app, client, admin):
        response = _login(client, admin.email)
        assert response.status_code == 200
        body = response.get_json()
        assert body['message'] == 'Login successful'
        assert body['user']['lastLoginAt'] is not None

        with app.app_context():
            actions = [a.action for a in db.session.query(AuditLog).filter_by(user_id=admin.id)]
        assert 'login_success' in actions

    def test_wrong_password(self, client, admin):
        response = _login(client, admin.email, 'wrong-password')
        assert response.status_code == 401
        assert response.get_json()['error'] == 'Invalid email or password'

    def test_unknown_user(self, client):
        assert _login(client, 'ghost@example.com').status_code == 401

    def test_inactive_user(self, client, make_user):
        user = make_user('sleepy@example.com', active=False)
        response = _login(client, user.email)
        assert response.status_code == 403
        assert response.get_json()['error'] == 'Account is deactivated'


class TestBearerTokens:

    def test_me(self, client, admin):
        response = client.get('/api/auth/me', headers=admin.headers)
        assert response.status_code == 200
        assert response.get_json()['user']['id'] == admin.id

    def test_garbage_token(self, client):
        response = client.get('/api/auth/me', headers={'Authorization': 'Bearer not-a-token'})
        assert response.status_code == 401
        assert response.get_json()['code'] == 'INVALID_TOKEN'

    def test_wrong_scheme(self, client, admin):
        response = client.get('/api/auth/me', headers={'Authorization': f'Token {admin.token}'})
        assert response.status_code == 401
        assert response.get_json()['code'] == 'unauthenticated'

    def test_expired_token(self, app, client, admin):
        app.config['ACCESS_TOKEN_TTL'] = -1
        response = client.get('/api/auth/me', headers=admin.headers)
        assert response.status_code == 401
        assert response.get_json()['code'] == 'TOKEN_EXPIRED'

    def test_refresh_token_is_not_an_access_token(self, client, admin):
        tokens = _login(client, admin.email).get_json()['tokens']
        response = client.get('/api/auth/me', headers={'Authorization': f"Bearer {tokens['refreshToken']}"})
        assert response.status_code == 401


class TestRefreshAndLogout:

    def test_refresh_rotates(self, client, admin):
        tokens = _login(client, admin.email).get_json()['tokens']

        response = client.post('/api/auth/refresh', json={'refreshToken': tokens['refreshToken']})
        assert response.status_code == 200
        rotated = response.get_json()['tokens']
        assert rotated['refreshToken'] != tokens['refreshToken']

        reused = client.post('/api/auth/refresh', json={'refreshToken': tokens['refreshToken']})
        assert reused.status_code == 401
        assert reused.get_json()['error'] == 'Invalid refresh token'

        again = client.post('/api/auth/refresh', json={'refreshToken': rotated['refreshToken']})
        assert again.status_code == 200

    def test_logout_revokes_refresh_token(self, client, admin):
        tokens = _login(client, admin.email).get_json()['tokens']

        response = client.post('/api/auth/logout', json={'refreshToken': tokens['refreshToken']})
        assert response.status_code == 200
        assert client.post('/api/auth/refresh', json={'refreshToken': tokens['refreshToken']}).status_code == 401

    def test_logout_without_token_still_succeeds(self, client):
        assert client.post('/api/auth/logout', json={}).status_code == 200

    def test_logout_all(self, app, client, admin):
        _login(client, admin.email)
        _login(client, admin.email)

        response = client.post('/api/auth/logout-all', headers=admin.headers)
        assert response.status_code == 200
        with app.app_context():
            assert db.session.query(RefreshToken).filter_by(user_id=admin.id).count() == 0

    def test_deactivated_user_cannot_refresh(self, app, client, admin):
        tokens = _login(client, admin.email).get_json()['tokens']
        with app.app_context():
            user = db.session.get(User, admin.id)
            user.active = False
            db.session.commit()

        response = client.post('/api/auth/refresh', json={'refreshToken': tokens['refreshToken']})
        assert response.status_code == 401


class TestRoleGuards:

    def test_me_reports_role(self, client, plain_user):
        response = client.get('/api/auth/me', headers=plain_user.headers)
        assert response.get_json()['user']['role'] == Role.USER.value
