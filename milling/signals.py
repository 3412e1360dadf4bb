from __future__ import annotations

from django.db.models.signals import post_delete, post_save
from django.dispatch import receiver

from .models import ByProduct, Outturn
from .services.outturns import recalculate_yield


@receiver(post_save, sender=ByProduct)
def refresh_yield_on_save(sender, instance: ByProduct, **kwargs) -> None:
    recalculate_yield(instance.outturn)


@receiver(post_delete, sender=ByProduct)
def refresh_yield_on_delete(sender, instance: ByProduct, **kwargs) -> None:
    outturn = Outturn.objects.filter(pk=instance.outturn_id).first()
    if outturn is not None:
        recalculate_yield(outturn)
