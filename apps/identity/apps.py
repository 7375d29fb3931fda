from django.apps import AppConfig


class IdentityConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'apps.identity'
    verbose_name = 'Identity'

    verifier = None

    def ready(self):
        # One verifier per process, shared by every request.
        from .verifier import build_verifier
        self.verifier = build_verifier()
