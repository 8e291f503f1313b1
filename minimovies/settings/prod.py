# minimovies/settings/prod.py
from .base import *

DEBUG = False

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.postgresql",
        "NAME": os.getenv("DB_NAME", "minimovies"),
        "USER": os.getenv("DB_USER", "minimovies"),
        "PASSWORD": os.getenv("DB_PASSWORD"),
        "HOST": os.getenv("DB_HOST", "127.0.0.1"),
        "PORT": os.getenv("DB_PORT", "5432"),
        "CONN_MAX_AGE": int(os.getenv("DB_CONN_MAX_AGE", "60")),
    }
}

SITE_DOMAIN = os.getenv("SITE_DOMAIN")
SITE_ALIASES = os.getenv("SITE_ALIASES", "")
if not SITE_DOMAIN:
    raise RuntimeError("SITE_DOMAIN is not set in production.")

ALIASES = [h.strip() for h in SITE_ALIASES.split(",") if h.strip()]
ALLOWED_HOSTS = [SITE_DOMAIN] + ALIASES
CSRF_TRUSTED_ORIGINS = [f"https://{SITE_DOMAIN}"] + [f"https://{h}" for h in ALIASES]

if SECRET_KEY == "CHANGE_ME_DEV_ONLY":
    raise RuntimeError("SECRET_KEY must be set in production.")
