"""Admin registrations for the core app."""

from __future__ import annotations

from django.contrib import admin

from core.models import TemplateBlob


@admin.register(TemplateBlob)
class TemplateBlobAdmin(admin.ModelAdmin):
    """Admin configuration for stored template blobs."""

    list_display = ("key", "updated_at", "created_at")
    search_fields = ("key",)
    readonly_fields = ("created_at", "updated_at")
