"""Persistence for sweets, kept behind a small interface so services can be given a fake store"""
from django.db.models import F
from django.utils import timezone
from rest_framework.exceptions import ValidationError
from .filters import SweetFilter
from .models import MAX_QUANTITY, Sweet


class SweetRepository:
    """ORM-backed sweet store"""

    def list(self, filters=None):
        """Return the sweets matching ``filters``, newest first"""
        filterset = SweetFilter(filters or {}, queryset=Sweet.objects.all())
        if not filterset.is_valid():
            raise ValidationError(filterset.errors)
        return list(filterset.qs.order_by('-created_at', '-id'))

    def get(self, pk):
        return Sweet.objects.filter(pk=pk).first()

    def create(self, **fields):
        return Sweet.objects.create(**fields)

    def update(self, sweet, fields):
        for attr, value in fields.items():
            setattr(sweet, attr, value)
        sweet.save()
        return sweet

    def delete(self, sweet):
        sweet.delete()

    def decrement_quantity(self, pk, amount):
        """
        Subtract ``amount`` only while at least that much is on hand.

        Returns False when no row was changed (missing sweet or not enough stock).
        """
        updated = Sweet.objects.filter(pk=pk, quantity__gte=amount).update(
            quantity=F('quantity') - amount,
            updated_at=timezone.now(),
        )
        return updated == 1

    def increment_quantity(self, pk, amount):
        """
        Add ``amount`` only while the result stays within MAX_QUANTITY.

        Returns False when no row was changed (missing sweet or limit reached).
        """
        updated = Sweet.objects.filter(pk=pk, quantity__lte=MAX_QUANTITY - amount).update(
            quantity=F('quantity') + amount,
            updated_at=timezone.now(),
        )
        return updated == 1
