"""API URL configuration."""
from __future__ import annotations

from django.urls import path

from backend.api.views import BiowetterView

urlpatterns = [
    path("biowetter", BiowetterView.as_view(), name="biowetter"),
]
