from lpb.extensions import db
from lpb.models import Role, Template, User


def test_seed_defaults_is_repeatable(app):
    runner = app.test_cli_runner()
    args = ['seed', 'defaults', '--admin-email', 'Owner@Example.com', '--admin-password', 'password123']

    result = runner.invoke(args=args)
    assert result.exit_code == 0, result.output
    assert 'Created SUPER_ADMIN owner@example.com' in result.output
    assert 'Templates: 3 created, 0 updated' in result.output

    result = runner.invoke(args=args)
    assert result.exit_code == 0, result.output
    assert 'already exists' in result.output
    assert 'Templates: 0 created, 3 updated' in result.output

    with app.app_context():
        admin = db.session.query(User).filter_by(email='owner@example.com').one()
        assert admin.role is Role.SUPER_ADMIN
        assert admin.check_password('password123')
        templates = db.session.query(Template).all()
        assert {t.id for t in templates} == {'modern-saas', 'creative-portfolio', 'business-landing'}
        assert all(t.user_id is None and t.is_public for t in templates)


def test_user_create_and_set_password(app):
    runner = app.test_cli_runner()

    result = runner.invoke(args=['user', 'create', '--email', 'cli@example.com', '--password', 'short'])
    assert 'at least 8 characters' in result.output

    result = runner.invoke(args=[
        'user', 'create', '--email', 'cli@example.com', '--password', 'password123', '--role', 'USER',
    ])
    assert result.exit_code == 0, result.output
    assert 'User created successfully!' in result.output

    result = runner.invoke(args=['user', 'create', '--email', 'cli@example.com', '--password', 'password123'])
    assert 'already exists' in result.output

    result = runner.invoke(args=['user', 'set-password', '--email', 'cli@example.com', '--password', 'newpassword1'])
    assert result.exit_code == 0, result.output

    result = runner.invoke(args=['user', 'list'])
    assert 'cli@example.com' in result.output
    assert 'USER' in result.output

    with app.app_context():
        user = db.session.query(User).filter_by(email='cli@example.com').one()
        assert user.check_password('newpassword1')
