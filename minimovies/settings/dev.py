# minimovies/settings/dev.py
# export DJANGO_SETTINGS_MODULE=minimovies.settings.dev

from .base import *

DEBUG = True

ALLOWED_HOSTS = [
    "127.0.0.1",
    "localhost",
    "testserver",
    ".ngrok.io", ".ngrok-free.app",
]
CSRF_TRUSTED_ORIGINS = [
    "http://127.0.0.1:8000", "http://localhost:8000",
    "https://*.ngrok.io", "https://*.ngrok-free.app",
]

# Dev: pas de redirection SSL forcée
SECURE_SSL_REDIRECT = False
SECURE_HSTS_SECONDS = 0
SESSION_COOKIE_SECURE = False
CSRF_COOKIE_SECURE = False

# Dev: upserts inline unless a worker is running
WATCH_PROGRESS_ASYNC = env_flag("WATCH_PROGRESS_ASYNC", default=False)
