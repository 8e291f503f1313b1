from django.apps import AppConfig


class CommonConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "apps.common"
    verbose_name = "Common"

    backend = None

    def ready(self) -> None:
        from .backend import Backend

        # Single owner of the store instances for the whole process.
        self.backend = Backend.from_settings()
