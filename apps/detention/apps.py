from django.apps import AppConfig


class DetentionConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'apps.detention'
    verbose_name = 'Detention'

    def ready(self):
        from . import signals  # noqa: F401
