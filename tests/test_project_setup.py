"""Smoke tests for project wiring: settings, migrations, and admin."""

from __future__ import annotations

import pytest
from django.conf import settings
from django.contrib import admin
from django.db import connections
from django.db.migrations.loader import MigrationLoader

from core.models import TemplateBlob

pytestmark = pytest.mark.integration


def test_django_project_loads() -> None:
    assert "core.apps.CoreConfig" in settings.INSTALLED_APPS
    assert settings.DASHBOARD_UPLOAD_MAX_MB > 0
    assert settings.DASHBOARD_HISTORY_SIZE > 0


@pytest.mark.django_db
def test_core_migrations_have_single_leaf() -> None:
    """Divergent migration branches would need a merge migration."""

    loader = MigrationLoader(connections["default"])
    leaves = [node for node in loader.graph.leaf_nodes() if node[0] == "core"]

    assert leaves == [("core", "0001_initial")]


def test_template_blob_is_registered_in_admin() -> None:
    assert admin.site.is_registered(TemplateBlob)
