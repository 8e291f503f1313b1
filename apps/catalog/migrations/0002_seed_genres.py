from django.db import migrations

GENRES = (
    "Action",
    "Adventure",
    "Animation",
    "Comedy",
    "Crime",
    "Documentary",
    "Drama",
    "Family",
    "Fantasy",
    "Horror",
    "Mystery",
    "Romance",
    "Sci-Fi",
    "Thriller",
    "Western",
)


def seed_genres(apps, schema_editor):
    Genre = apps.get_model("catalog", "Genre")
    for name in GENRES:
        Genre.objects.get_or_create(name=name)


class Migration(migrations.Migration):

    dependencies = [
        ("catalog", "0001_initial"),
    ]

    operations = [
        migrations.RunPython(seed_genres, migrations.RunPython.noop),
    ]
