from django.conf import settings
from django.db.models.signals import post_save
from django.dispatch import receiver

from .models import Profile


@receiver(post_save, sender=settings.AUTH_USER_MODEL)
def ensure_profile(sender, instance, created, **kwargs):
    if not created:
        return
    full_name = instance.get_full_name() if hasattr(instance, "get_full_name") else ""
    Profile.objects.get_or_create(user=instance, defaults={"full_name": full_name or ""})
