from django.contrib.auth.models import User
from django.db.models.signals import post_save
from django.dispatch import receiver

from .models import Profile, FreelancerProfile


@receiver(post_save, sender=User)
def create_user_profile(sender, instance, created, **kwargs):
    """
    Creates the Profile of a freshly created User.

    New users start as clients; registration switches the type afterwards when the
    account is meant to sell services.
    """
    if created:
        Profile.objects.get_or_create(user=instance)


@receiver(post_save, sender=Profile)
def create_freelancer_profile(sender, instance, **kwargs):
    """Every freelancer gets exactly one FreelancerProfile."""
    if instance.type == Profile.UserType.FREELANCER:
        FreelancerProfile.objects.get_or_create(user=instance.user)
