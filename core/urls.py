"""URL configuration for core views."""

from __future__ import annotations

from django.urls import path

from core import views

app_name = "core"

urlpatterns = [
    path("api/datasets/upload/", views.upload_dataset, name="upload_dataset"),
    path("api/widgets/options/", views.widget_options, name="widget_options"),
    path("api/templates/", views.template_list, name="template_list"),
    path("api/templates/import/", views.template_import, name="template_import"),
    path("api/templates/<str:name>/", views.template_detail, name="template_detail"),
]
