from __future__ import annotations

import os

# Safe defaults so importing config.settings never needs a real environment
# during type checking.
os.environ.setdefault("DJANGO_SECRET_KEY", "mypy-only-not-for-prod")
os.environ.setdefault("WINDY_API_KEY", "mypy-only-key")

from .settings import *  # noqa: E402,F401,F403

DEBUG = False
USE_TZ = True
