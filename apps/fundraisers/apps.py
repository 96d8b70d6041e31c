"""Fundraisers app configuration."""

from django.apps import AppConfig


class FundraisersConfig(AppConfig):
    """Configuration for fundraisers app."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "apps.fundraisers"
