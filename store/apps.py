from django.apps import AppConfig


class StoreConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "store"

    def ready(self):
        """
        Register signal handlers when the app is ready.
        This enables cascade audit logging.
        """
        import store.signals  # noqa
