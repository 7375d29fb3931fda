import uuid
from django.db import models


class Task(models.Model):
    """
    A single to-do item.

    owner is the identity provider's subject id (Firebase uid). Owners are
    not modeled here, so there is no FK.
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    owner = models.CharField(max_length=128, db_index=True, editable=False)
    title = models.TextField(blank=True, default='')
    completed = models.BooleanField(default=False)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['created_at']

    def __str__(self):
        return self.title or str(self.id)
