"""Database models for the core app.

Dashboard state itself lives in memory (`core.dashboard.DashboardStore`).
The database only backs the key-value blob store used to persist template
documents between sessions.
"""

from __future__ import annotations

from django.db import models


class TemplateBlob(models.Model):
    """One persisted value of the key-value store.

    Attributes:
        key: Namespaced key (e.g. `dashboard_template_<name>`).
        value: Stored document text (JSON for templates).
        created_at: Time the key was first written.
        updated_at: Time of the latest write.
    """

    key = models.CharField(max_length=255, unique=True)
    value = models.TextField()
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["key"]
        verbose_name = "Template blob"

    def __str__(self) -> str:
        """Return the key for admin/debug display."""

        return self.key
