import pytest

from lpb.errors import (
    AuthenticationError,
    ForbiddenError,
    NotFoundError,
    SelfModificationForbidden,
    SuperAdminAssignmentForbidden,
)
from lpb.models import Customization, Page, Role, Section, Template, User
from lpb.security import (
    Action,
    authorize,
    check_active_change,
    check_invite_role,
    check_role_change,
    decide,
    resolve_owner,
)


@pytest.fixture()
def people(app):
    return {
        'owner': User(id='owner', email='owner@example.com', role=Role.ADMIN),
        'stranger': User(id='stranger', email='stranger@example.com', role=Role.ADMIN),
        'user': User(id='user', email='user@example.com', role=Role.USER),
        'root': User(id='root', email='root@example.com', role=Role.SUPER_ADMIN),
        'root2': User(id='root2', email='root2@example.com', role=Role.SUPER_ADMIN),
    }


@pytest.fixture()
def page(app):
    return Page(id='p1', name='Launch', slug='launch', user_id='owner')


class TestOwnershipResolution:

    def test_children_resolve_through_page(self, page):
        section = Section(id='s1', type='hero', name='Hero', page=page)
        customization = Customization(id='c1', page=page)

        assert resolve_owner(page) == 'owner'
        assert resolve_owner(section) == 'owner'
        assert resolve_owner(customization) == 'owner'

    def test_section_follows_page_owner(self, people, page):
        section = Section(id='s1', type='hero', name='Hero', page=page)

        assert decide(people['owner'], Action.UPDATE, section)
        assert decide(people['stranger'], Action.UPDATE, section).reason == 'not_found'
        assert decide(people['root'], Action.UPDATE, section).reason == 'not_found'
        assert decide(people['root'], Action.READ, section)


class TestPages:

    def test_create_needs_admin(self, people):
        assert decide(people['owner'], Action.CREATE, kind='page')
        assert decide(people['root'], Action.CREATE, kind='page')
        assert decide(people['user'], Action.CREATE, kind='page').reason == 'forbidden'

    def test_non_owner_mutations_are_not_found(self, people, page):
        for action in (Action.READ, Action.UPDATE, Action.PUBLISH, Action.DELETE):
            assert decide(people['stranger'], action, page).reason == 'not_found'

    def test_super_admin_may_delete_but_not_update(self, people, page):
        assert decide(people['root'], Action.DELETE, page)
        assert decide(people['root'], Action.UPDATE, page).reason == 'not_found'
        assert decide(people['root'], Action.PUBLISH, page).reason == 'not_found'

    def test_owner_with_user_role_may_still_edit(self, people):
        own = Page(id='p2', name='Mine', slug='mine', user_id='user')
        assert decide(people['user'], Action.UPDATE, own)

    def test_anonymous(self, page):
        assert decide(None, Action.READ, page).reason == 'unauthenticated'
        with pytest.raises(AuthenticationError):
            authorize(None, Action.UPDATE, page)

    def test_authorize_raises_not_found_with_message(self, people, page):
        with pytest.raises(NotFoundError) as excinfo:
            authorize(people['stranger'], Action.READ, page)
        assert excinfo.value.message == 'Page not found'


class TestTemplates:

    def test_public_template_is_readable_by_anyone(self, people):
        template = Template(id='t1', name='Shared', is_public=True, user_id='root')
        assert decide(None, Action.READ, template)
        assert decide(people['user'], Action.READ, template)

    def test_private_template(self, people):
        template = Template(id='t1', name='Private', is_public=False, user_id='root')
        assert decide(None, Action.READ, template).reason == 'not_found'
        assert decide(people['owner'], Action.READ, template).reason == 'not_found'
        assert decide(people['root2'], Action.READ, template)

    def test_writes_are_super_admin_and_owner(self, people):
        template = Template(id='t1', name='Private', is_public=False, user_id='root')

        assert decide(people['root'], Action.CREATE, kind='template')
        assert decide(people['owner'], Action.CREATE, kind='template').reason == 'forbidden'

        assert decide(people['root'], Action.UPDATE, template)
        assert decide(people['root2'], Action.UPDATE, template).reason == 'not_found'
        assert decide(people['owner'], Action.UPDATE, template).reason == 'forbidden'

        assert decide(people['root'], Action.DELETE, template)
        assert decide(people['root2'], Action.DELETE, template).reason == 'not_found'
        with pytest.raises(ForbiddenError):
            authorize(people['owner'], Action.DELETE, template)

    def test_system_template_has_no_owner(self, people):
        template = Template(id='modern-saas', name='Modern SaaS', is_public=True, user_id=None)
        assert decide(people['root'], Action.UPDATE, template).reason == 'not_found'


class TestEscalationGuards:

    def test_role_change(self, people):
        with pytest.raises(SuperAdminAssignmentForbidden):
            check_role_change(people['root'], 'owner', Role.SUPER_ADMIN)
        with pytest.raises(SuperAdminAssignmentForbidden):
            check_role_change(people['root'], 'root', Role.SUPER_ADMIN)
        with pytest.raises(SelfModificationForbidden):
            check_role_change(people['root'], 'root', Role.ADMIN)
        check_role_change(people['root'], 'owner', Role.USER)

    def test_active_change(self, people):
        with pytest.raises(SelfModificationForbidden):
            check_active_change(people['root'], 'root')
        check_active_change(people['root'], 'owner')

    def test_invite_roles(self, people):
        check_invite_role(people['owner'], Role.USER)
        check_invite_role(people['root'], Role.ADMIN)
        with pytest.raises(ForbiddenError):
            check_invite_role(people['owner'], Role.ADMIN)
        with pytest.raises(SuperAdminAssignmentForbidden):
            check_invite_role(people['root'], Role.SUPER_ADMIN)
