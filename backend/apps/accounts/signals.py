"""Signals for the accounts app."""
from django.db.models.signals import post_save
from django.dispatch import receiver


@receiver(post_save, sender="accounts.User")
def create_profile(sender, instance, created, **kwargs):
    """Give every new user an empty profile with default invoice settings."""
    if not created:
        return

    from apps.accounts.models import Profile

    Profile.objects.get_or_create(user=instance)
