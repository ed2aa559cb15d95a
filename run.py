"""Local development server.

Creates the settings table and default settings, then serves the app.
Schema for content tables is owned by migrations (``flask db upgrade``).
"""

import os

from wsgi import app
from seo_manager.services.lifecycle import activate
from seo_manager.settings_store import get_settings_store


if __name__ == '__main__':
    with app.app_context():
        activate(get_settings_store())

    host = os.environ.get('HOST', '0.0.0.0')
    port = int(os.environ.get('PORT', 5000))
    app.run(host=host, port=port)
