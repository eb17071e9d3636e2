from django.db import models
from authentication.models import TimeStampedModel


class MenuCategory(TimeStampedModel):
    name = models.CharField(max_length=100, unique=True)

    def __str__(self):
        return str(self.name)

    class Meta:
        verbose_name_plural = "Menu Categories"
        ordering = ['name']


class MenuItem(TimeStampedModel):
    # A category can only be removed once no item points at it
    category = models.ForeignKey(
        MenuCategory, on_delete=models.PROTECT, related_name="items", null=True, blank=True
    )
    name = models.CharField(max_length=150)
    image_url = models.URLField(null=True, blank=True)

    # Smallest currency unit, no decimals
    price = models.PositiveIntegerField()
    stock = models.PositiveIntegerField(default=0)

    is_available = models.BooleanField(default=True)
    is_archived = models.BooleanField(default=False)

    def __str__(self):
        return self.name

    @property
    def is_orderable(self):
        return self.is_available and not self.is_archived

    class Meta:
        ordering = ['-created_at']
        constraints = [
            models.CheckConstraint(condition=models.Q(stock__gte=0), name='menu_item_stock_non_negative'),
        ]
