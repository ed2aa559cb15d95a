import click
from flask.cli import AppGroup, with_appcontext

from seo_manager.extensions import db
from seo_manager.models import ContentItem, User
from seo_manager.services import lifecycle
from seo_manager.settings_store import get_settings_store


seo_cli = AppGroup('seo', help='Manage SEO & Open Graph settings.')


@seo_cli.command('activate')
def activate_command() -> None:
    """Create the settings table and store default settings."""
    lifecycle.activate(get_settings_store())
    click.echo('SEO settings initialized.')


@seo_cli.command('deactivate')
def deactivate_command() -> None:
    """Clear cached settings. Stored data is kept."""
    lifecycle.deactivate(get_settings_store())
    click.echo('SEO settings deactivated.')


@seo_cli.command('uninstall')
def uninstall_command() -> None:
    """Remove all SEO data if cleanup_on_uninstall is enabled."""
    if lifecycle.uninstall(get_settings_store()):
        click.echo('SEO settings and content overrides removed.')
    else:
        click.echo('cleanup_on_uninstall is off; nothing removed.')


@click.command('create-admin')
@click.option('--username', prompt=True, help='Admin username')
@click.option(
    '--password',
    prompt=True,
    hide_input=True,
    confirmation_prompt=True,
    help='Admin password (will not be echoed)'
)
@click.option('--email', default=None, help='Admin email')
@with_appcontext
def create_admin_command(username: str, password: str, email: str) -> None:
    """Create (or update) an admin user."""
    username = (username or '').strip()

    if not username:
        raise click.ClickException('Username is required.')

    user = User.query.filter_by(username=username).first()
    if user is None:
        user = User(username=username, email=(email or None), role=User.ROLE_ADMIN, is_active=True)
        user.set_password(password)
        db.session.add(user)
        db.session.commit()
        click.echo(f"Created admin user '{user.username}'.")
        return

    if email:
        user.email = email
    user.role = User.ROLE_ADMIN
    user.is_active = True
    user.set_password(password)
    db.session.commit()
    click.echo(f"Updated admin user '{user.username}'.")


@click.command('seed-demo-content')
@with_appcontext
def seed_demo_content_command() -> None:
    """Seed an author, a few posts and an about page."""
    author = User.query.filter_by(username='editor').first()
    if author is None:
        author = User(username='editor', display_name='Site Editor', role=User.ROLE_AUTHOR, is_active=True)
        author.set_password('change-me')
        db.session.add(author)
        db.session.flush()

    samples = [
        {
            'title': 'Welcome to the blog',
            'content_type': ContentItem.TYPE_POST,
            'excerpt': 'A short introduction to what this site is about.',
            'content': '<p>This is the first post on the site. It explains what readers can expect.</p>',
        },
        {
            'title': 'Writing good meta descriptions',
            'content_type': ContentItem.TYPE_POST,
            'content': (
                '<p>A meta description is the short summary search engines may show under your link. '
                'Keep it specific, keep it honest, and make every word count for the reader who is '
                'deciding whether to click.</p>'
            ),
        },
        {
            'title': 'About',
            'content_type': ContentItem.TYPE_PAGE,
            'content': '<p>Who we are and how to reach us.</p>',
        },
    ]

    created_count = 0
    for data in samples:
        item = ContentItem(status=ContentItem.STATUS_PUBLISHED, author_id=author.id, **data)
        exists = ContentItem.query.filter_by(content_type=item.content_type, slug=item.slug).first()
        if exists:
            continue
        db.session.add(item)
        created_count += 1

    db.session.commit()
    click.echo(f"Seeded {created_count} content items. Total items: {ContentItem.query.count()}")
