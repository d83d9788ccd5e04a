from django.conf import settings
from django.db import models


class MilestoneAward(models.Model):
    """One row per (customer, milestone level); the unique pair is what makes awards one-time"""

    customer = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='milestone_awards'
    )
    level = models.PositiveSmallIntegerField()
    name = models.CharField(max_length=100)
    referrals_required = models.PositiveIntegerField()
    bonus = models.DecimalField(max_digits=10, decimal_places=2)
    transaction = models.OneToOneField(
        'wallet.WalletTransaction',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='milestone_award'
    )
    awarded_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'milestone_awards'
        ordering = ['customer', 'level']
        constraints = [
            models.UniqueConstraint(fields=['customer', 'level'], name='unique_milestone_award_per_level'),
        ]

    def __str__(self):
        return f"{self.customer} - {self.name}"
