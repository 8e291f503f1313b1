from .admin import GenreAdmin, MovieAdmin  # noqa: F401
