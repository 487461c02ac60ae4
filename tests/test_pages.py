from lpb.extensions import db
from lpb.models import Customization, CustomizationVersion, Page, Section


class TestLaunchScenario:
    """Create, publish and unpublish a page with no sections."""

    def test_publish_then_unpublish(self, client, admin, create_page):
        page = create_page(admin, name='Launch', slug='launch')
        assert page['status'] == 'DRAFT'
        assert page['isPublished'] is False
        assert page['sections'] == []

        response = client.post(f"/api/pages/{page['id']}/publish", headers=admin.headers)
        assert response.status_code == 200

        fetched = client.get(f"/api/pages/{page['id']}", headers=admin.headers).get_json()['data']
        assert fetched['status'] == 'PUBLISHED'
        assert fetched['isPublished'] is True
        assert fetched['publishedAt'] is not None

        response = client.post(f"/api/pages/{page['id']}/unpublish", headers=admin.headers)
        data = response.get_json()['data']
        assert data['status'] == 'DRAFT'
        assert data['isPublished'] is False
        assert data['publishedAt'] is None

    def test_publish_twice_stays_published(self, client, admin, create_page):
        page = create_page(admin)
        for _ in range(2):
            response = client.post(f"/api/pages/{page['id']}/publish", headers=admin.headers)
            assert response.status_code == 200
            data = response.get_json()['data']
            assert data['status'] == 'PUBLISHED'
            assert data['isPublished'] is True


class TestPageCreation:

    def test_user_role_cannot_create_pages(self, client, plain_user):
        response = client.post('/api/pages', json={'name': 'X', 'slug': 'x'}, headers=plain_user.headers)
        assert response.status_code == 403
        assert response.get_json()['code'] == 'forbidden'

    def test_anonymous_is_rejected(self, client):
        response = client.get('/api/pages')
        assert response.status_code == 401
        body = response.get_json()
        assert body['success'] is False
        assert body['code'] == 'unauthenticated'

    def test_invalid_slug_is_a_field_error(self, client, admin):
        response = client.post('/api/pages', json={'name': 'Bad', 'slug': 'Bad Slug'}, headers=admin.headers)
        assert response.status_code == 400
        body = response.get_json()
        assert body['code'] == 'validation_error'
        assert 'slug' in body['details']

    def test_slug_is_unique_per_owner(self, client, admin, other_admin, create_page):
        create_page(admin, slug='launch')

        response = client.post('/api/pages', json={'name': 'Again', 'slug': 'launch'}, headers=admin.headers)
        assert response.status_code == 409
        assert response.get_json()['code'] == 'conflict'

        # Another owner may reuse it
        create_page(other_admin, slug='launch')

    def test_template_sections_are_instantiated(self, admin, create_page):
        page = create_page(admin, templateId='modern-saas')

        assert page['templateId'] == 'modern-saas'
        assert [s['type'] for s in page['sections']] == ['hero', 'features', 'pricing']
        assert [s['order'] for s in page['sections']] == [0, 1, 2]
        hero = page['sections'][0]
        assert hero['templateSectionId'] == 'hero'
        headline = next(f for f in hero['fields'] if f['id'] == 'headline')
        assert headline['value'] == 'Build Something Amazing'

    def test_explicit_sections_win_over_template(self, admin, create_page):
        page = create_page(
            admin,
            templateId='modern-saas',
            sections=[{'type': 'hero', 'name': 'Only Hero', 'fields': {'headline': 'Hi'}}],
        )
        assert [s['name'] for s in page['sections']] == ['Only Hero']

    def test_unknown_template_is_rejected(self, client, admin):
        response = client.post(
            '/api/pages',
            json={'name': 'X', 'slug': 'x', 'templateId': 'does-not-exist'},
            headers=admin.headers,
        )
        assert response.status_code == 400
        assert 'templateId' in response.get_json()['details']


class TestOwnership:

    def test_non_owner_sees_not_found(self, client, admin, other_admin, create_page):
        page = create_page(admin)
        url = f"/api/pages/{page['id']}"

        assert client.get(url, headers=other_admin.headers).status_code == 404
        assert client.put(url, json={'name': 'Hijacked'}, headers=other_admin.headers).status_code == 404
        assert client.delete(url, headers=other_admin.headers).status_code == 404
        assert client.post(f"{url}/publish", headers=other_admin.headers).status_code == 404

        response = client.get(url, headers=admin.headers)
        assert response.get_json()['data']['name'] == 'Launch'

    def test_super_admin_reads_and_deletes_but_cannot_edit(self, client, admin, super_admin, create_page):
        page = create_page(admin)
        url = f"/api/pages/{page['id']}"

        assert client.get(url, headers=super_admin.headers).status_code == 200
        assert client.put(url, json={'name': 'Edited'}, headers=super_admin.headers).status_code == 404
        assert client.delete(url, headers=super_admin.headers).status_code == 200
        assert client.get(url, headers=admin.headers).status_code == 404

    def test_list_is_scoped_to_owner(self, client, admin, other_admin, super_admin, create_page):
        create_page(admin, slug='mine')
        create_page(other_admin, slug='theirs')

        mine = client.get('/api/pages', headers=admin.headers).get_json()['data']
        assert [p['slug'] for p in mine] == ['mine']

        everything = client.get('/api/pages', headers=super_admin.headers).get_json()['data']
        assert sorted(p['slug'] for p in everything) == ['mine', 'theirs']


class TestPageUpdate:

    def test_update_fields(self, client, admin, create_page):
        page = create_page(admin)
        response = client.put(
            f"/api/pages/{page['id']}",
            json={'name': 'Launch Day', 'seoTitle': 'Launch!'},
            headers=admin.headers,
        )
        data = response.get_json()['data']
        assert data['name'] == 'Launch Day'
        assert data['seoTitle'] == 'Launch!'
        assert data['slug'] == 'launch'

    def test_null_clears_seo_fields(self, client, admin, create_page):
        page = create_page(admin, seoTitle='Launch!', seoDescription='All about it', ogImage='https://x.test/og.png')
        url = f"/api/pages/{page['id']}"

        data = client.put(url, json={'seoTitle': None, 'ogImage': None}, headers=admin.headers).get_json()['data']
        assert data['seoTitle'] is None
        assert data['ogImage'] is None
        assert data['seoDescription'] == 'All about it'

        data = client.put(url, json={'name': None}, headers=admin.headers).get_json()['data']
        assert data['name'] == 'Launch'

    def test_status_update_keeps_flags_consistent(self, client, admin, create_page):
        page = create_page(admin)
        url = f"/api/pages/{page['id']}"

        data = client.put(url, json={'status': 'PUBLISHED'}, headers=admin.headers).get_json()['data']
        assert data['isPublished'] is True
        assert data['publishedAt'] is not None

        data = client.put(url, json={'status': 'ARCHIVED'}, headers=admin.headers).get_json()['data']
        assert data['status'] == 'ARCHIVED'
        assert data['isPublished'] is False
        assert data['publishedAt'] is None

    def test_slug_change_to_taken_slug_conflicts(self, client, admin, create_page):
        create_page(admin, slug='first')
        second = create_page(admin, name='Second', slug='second')

        response = client.put(f"/api/pages/{second['id']}", json={'slug': 'first'}, headers=admin.headers)
        assert response.status_code == 409


class TestDeletion:

    def test_delete_cascades(self, app, client, admin, create_page):
        page = create_page(admin, templateId='modern-saas')

        response = client.delete(f"/api/pages/{page['id']}", headers=admin.headers)
        assert response.status_code == 200

        with app.app_context():
            assert db.session.get(Page, page['id']) is None
            assert db.session.query(Section).count() == 0
            assert db.session.query(Customization).count() == 0
            assert db.session.query(CustomizationVersion).count() == 0


class TestPublicPages:

    def test_only_published_pages_are_served(self, client, admin, create_page):
        page = create_page(admin)

        assert client.get('/api/public/pages/launch').status_code == 404

        client.post(f"/api/pages/{page['id']}/publish", headers=admin.headers)
        response = client.get('/api/public/pages/launch')
        assert response.status_code == 200
        data = response.get_json()['data']
        assert data['slug'] == 'launch'
        assert 'userId' not in data
