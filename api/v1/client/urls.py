"""
URL configuration for client license endpoints.
"""

from django.urls import path

from api.v1.client import views

urlpatterns = [
    path(
        "activate",
        views.ActivateLicenseView.as_view(),
        name="activate-license",
    ),
    path(
        "validate",
        views.ValidateLicenseView.as_view(),
        name="validate-license",
    ),
    path(
        "deactivate",
        views.DeactivateLicenseView.as_view(),
        name="deactivate-license",
    ),
]
