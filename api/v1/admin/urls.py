"""
URL configuration for admin API endpoints.
"""

from django.urls import path

from api.v1.admin import views

urlpatterns = [
    path(
        "keys",
        views.LicenseKeysView.as_view(),
        name="license-keys",
    ),
    path(
        "keys/<uuid:license_key_id>/<str:action>",
        views.ManageKeyView.as_view(),
        name="manage-license-key",
    ),
    path(
        "logs",
        views.AuditLogView.as_view(),
        name="audit-log",
    ),
    path(
        "stats",
        views.LicenseStatsView.as_view(),
        name="license-stats",
    ),
]
