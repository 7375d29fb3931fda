"""
ASGI config for the Task Manager project.

Django is initialized at module load, so the identity verifier is built
once per worker process before the first request.
"""
import os

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'config.settings')

from django.core.asgi import get_asgi_application

application = get_asgi_application()
