import pytest

from lpb.extensions import db
from lpb.models import Page, User
from lpb.serializers import ordered_sections
from lpb.services import pages as pages_module
from lpb.services.pages import PageService


def _sections(*names):
    return [{'type': 'content', 'name': name, 'fields': {'text': name}} for name in names]


@pytest.fixture()
def page_abc(client, admin, create_page):
    page = create_page(admin, sections=_sections('A', 'B', 'C'))
    assert [s['name'] for s in page['sections']] == ['A', 'B', 'C']
    return page


class TestAddSection:

    def test_order_defaults_to_next_slot(self, client, admin, create_page):
        page = create_page(admin)
        url = f"/api/pages/{page['id']}/sections"

        first = client.post(url, json={'type': 'hero', 'name': 'Hero'}, headers=admin.headers)
        assert first.status_code == 201
        assert first.get_json()['data']['order'] == 0

        second = client.post(url, json={'type': 'cta', 'name': 'CTA'}, headers=admin.headers)
        assert second.get_json()['data']['order'] == 1

        explicit = client.post(url, json={'type': 'footer', 'name': 'Footer', 'order': 7}, headers=admin.headers)
        assert explicit.get_json()['data']['order'] == 7

    def test_non_owner_cannot_add(self, client, other_admin, page_abc):
        response = client.post(
            f"/api/pages/{page_abc['id']}/sections",
            json={'type': 'hero', 'name': 'Hero'},
            headers=other_admin.headers,
        )
        assert response.status_code == 404

    def test_missing_type_is_rejected(self, client, admin, page_abc):
        response = client.post(
            f"/api/pages/{page_abc['id']}/sections",
            json={'name': 'No type'},
            headers=admin.headers,
        )
        assert response.status_code == 400
        assert 'type' in response.get_json()['details']


class TestSaveSections:

    def test_bulk_replace(self, app, client, admin, page_abc):
        response = client.put(
            f"/api/pages/{page_abc['id']}/sections",
            json={'sections': _sections('X', 'Y')},
            headers=admin.headers,
        )
        assert response.status_code == 200
        data = response.get_json()['data']
        assert [s['name'] for s in data] == ['X', 'Y']
        assert [s['order'] for s in data] == [0, 1]

        with app.app_context():
            page = db.session.get(Page, page_abc['id'])
            assert [s.name for s in page.sections] == ['X', 'Y']

    def test_failure_keeps_previous_sections(self, app, admin, page_abc, monkeypatch):
        original = pages_module._build_section
        calls = {'count': 0}

        def flaky_build(data, index, seq=None):
            calls['count'] += 1
            if calls['count'] == 2:
                raise RuntimeError('store went away')
            return original(data, index, seq)

        monkeypatch.setattr(pages_module, '_build_section', flaky_build)

        with app.app_context():
            user = db.session.get(User, admin.id)
            with pytest.raises(RuntimeError):
                PageService.save_sections(page_abc['id'], user, _sections('X', 'Y'))

        with app.app_context():
            page = db.session.get(Page, page_abc['id'])
            assert [s.name for s in ordered_sections(page)] == ['A', 'B', 'C']

    def test_equal_orders_keep_insertion_order(self, client, admin, page_abc):
        sections = [
            {'type': 'content', 'name': 'Z', 'order': 2},
            {'type': 'content', 'name': 'X', 'order': 1},
            {'type': 'content', 'name': 'Y', 'order': 1},
        ]
        client.put(f"/api/pages/{page_abc['id']}/sections", json={'sections': sections}, headers=admin.headers)

        page = client.get(f"/api/pages/{page_abc['id']}", headers=admin.headers).get_json()['data']
        assert [s['name'] for s in page['sections']] == ['X', 'Y', 'Z']


class TestUpdateAndDeleteSection:

    def test_update_section(self, client, admin, page_abc):
        section = page_abc['sections'][1]
        response = client.put(
            f"/api/pages/{page_abc['id']}/sections/{section['id']}",
            json={'name': 'B2', 'fields': {'text': 'changed'}, 'styles': {'padding': '2rem'}},
            headers=admin.headers,
        )
        assert response.status_code == 200
        data = response.get_json()['data']
        assert data['name'] == 'B2'
        assert data['fields'] == {'text': 'changed'}
        assert data['styles'] == {'padding': '2rem'}

    def test_section_under_wrong_page_is_not_found(self, client, admin, create_page, page_abc):
        other_page = create_page(admin, name='Other', slug='other')
        section = page_abc['sections'][0]

        response = client.put(
            f"/api/pages/{other_page['id']}/sections/{section['id']}",
            json={'name': 'Moved'},
            headers=admin.headers,
        )
        assert response.status_code == 404
        assert response.get_json()['error'] == 'Section not found'

    def test_foreign_section_is_not_found(self, client, other_admin, page_abc):
        section = page_abc['sections'][0]
        url = f"/api/pages/{page_abc['id']}/sections/{section['id']}"

        assert client.put(url, json={'name': 'Nope'}, headers=other_admin.headers).status_code == 404
        assert client.delete(url, headers=other_admin.headers).status_code == 404

    def test_delete_section(self, client, admin, page_abc):
        section = page_abc['sections'][0]
        response = client.delete(f"/api/pages/{page_abc['id']}/sections/{section['id']}", headers=admin.headers)
        assert response.status_code == 200

        page = client.get(f"/api/pages/{page_abc['id']}", headers=admin.headers).get_json()['data']
        assert [s['name'] for s in page['sections']] == ['B', 'C']


class TestReorder:

    def test_reorder(self, client, admin, page_abc):
        ids = {s['name']: s['id'] for s in page_abc['sections']}
        response = client.put(
            f"/api/pages/{page_abc['id']}/sections/order",
            json={'sectionIds': [ids['C'], ids['A'], ids['B']]},
            headers=admin.headers,
        )
        assert response.status_code == 200
        data = response.get_json()['data']
        assert [s['name'] for s in data] == ['C', 'A', 'B']
        assert [s['order'] for s in data] == [0, 1, 2]

    def test_unknown_section_id_is_rejected(self, client, admin, page_abc):
        response = client.put(
            f"/api/pages/{page_abc['id']}/sections/order",
            json={'sectionIds': ['not-a-section']},
            headers=admin.headers,
        )
        assert response.status_code == 400
        assert 'sectionIds' in response.get_json()['details']
