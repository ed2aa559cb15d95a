"""
WSGI Entry Point for the SEO & Open Graph Manager

This module serves as the entry point for WSGI servers (like Gunicorn)
to run the Flask application in production environments.

All environment variables must be set BEFORE this module is imported.
"""

import os
import sys

from dotenv import load_dotenv

# Load .env ONLY for local development. In production, environment
# variables must be provided by the platform.
if os.environ.get('FLASK_ENV', '').lower() != 'production' and os.environ.get('FLASK_CONFIG', '').lower() != 'production':
    load_dotenv(override=False)

from seo_manager import create_app  # noqa: E402

config_name = (os.getenv('FLASK_CONFIG') or os.getenv('FLASK_ENV') or 'development').lower()

print(f'Initializing Flask application with config: {config_name}', file=sys.stderr)

if config_name == 'production':
    required_vars = {
        'SECRET_KEY': 'Required for session encryption and CSRF protection',
        'DATABASE_URL': 'Required for the database connection',
        'SITE_URL': 'Required for canonical URLs, og:url and sitemap entries',
    }

    missing_vars = [
        f"  - {var_name}: {description}"
        for var_name, description in required_vars.items()
        if not os.getenv(var_name)
    ]

    if missing_vars:
        print(
            "\nDEPLOYMENT FAILED: Missing required environment variables\n\n"
            + "\n".join(missing_vars) + "\n",
            file=sys.stderr,
        )
        raise RuntimeError('Missing required environment variables in production')

try:
    app = create_app(config_name)
except Exception as exc:
    print(f'\nFATAL: Application initialization failed: {exc}', file=sys.stderr)
    print('Common causes:', file=sys.stderr)
    print('  1. Database connection failure (check DATABASE_URL)', file=sys.stderr)
    print('  2. Missing database tables (run: flask db upgrade)', file=sys.stderr)
    raise
