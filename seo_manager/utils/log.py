from __future__ import annotations

import sys

from flask import current_app, has_app_context


def safe_log(level: str, message: str, *args, **kwargs) -> None:
    """Log through the app logger without ever raising.

    Outside an app context the message goes to stderr.
    """
    try:
        if has_app_context():
            getattr(current_app.logger, level)(message, *args, **kwargs)
            return
    except Exception:
        pass
    try:
        print(f"[{level.upper()}] {message % args if args else message}", file=sys.stderr)
    except Exception:
        pass
