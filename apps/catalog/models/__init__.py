from .models import Genre, Movie, MovieQuerySet

__all__ = ["Genre", "Movie", "MovieQuerySet"]
