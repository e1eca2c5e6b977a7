from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models
from decimal import Decimal

# Largest quantity the integer column holds on every supported backend
MAX_QUANTITY = 2147483647


class Sweet(models.Model):
    """Catalog item with its on-hand stock quantity"""
    name = models.CharField(max_length=200, db_index=True)
    category = models.CharField(max_length=100, db_index=True)
    price = models.DecimalField(max_digits=10, decimal_places=2, validators=[MinValueValidator(Decimal('0.01'))])
    quantity = models.PositiveIntegerField(default=0, validators=[MaxValueValidator(MAX_QUANTITY)])
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.name

    class Meta:
        db_table = 'sweets'
        ordering = ['-created_at', '-id']
        constraints = [
            models.CheckConstraint(condition=models.Q(quantity__gte=0), name='sweet_quantity_non_negative'),
        ]
