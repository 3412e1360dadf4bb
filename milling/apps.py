from django.apps import AppConfig


class MillingConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "milling"
    verbose_name = "Milling and rice stock"

    def ready(self) -> None:  # pragma: no cover - import side effects
        from . import signals  # noqa: F401
