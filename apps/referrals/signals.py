from django.db.models.signals import post_save
from django.dispatch import receiver
from django.contrib.auth import get_user_model
from .services import ReferralService

User = get_user_model()


@receiver(post_save, sender=User)
def assign_referral_code_to_new_user(sender, instance, created, **kwargs):
    """Every new customer gets a shareable referral code"""
    if created and not instance.referral_code:
        ReferralService.get_or_create_referral_code(instance)
