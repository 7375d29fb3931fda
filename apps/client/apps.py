from django.apps import AppConfig


class ClientConfig(AppConfig):
    name = 'apps.client'
    verbose_name = 'Task Manager Client'
