from django.db import models
from django.utils import timezone

from inventory.models import MenuItem
from authentication.models import TimeStampedModel
from .qr import build_table_payload


class Tables(models.Model):
    table_number = models.PositiveIntegerField(unique=True)
    qr_code = models.CharField(max_length=500, blank=True)
    is_active = models.BooleanField(default=True)
    date_added = models.DateField(auto_now_add=True)

    def save(self, *args, **kwargs):
        # The QR payload always encodes the current table number
        self.qr_code = build_table_payload(self.table_number)
        super().save(*args, **kwargs)

    def __str__(self):
        return f"Table: {self.table_number}"

    class Meta:
        verbose_name_plural = "Tables"
        ordering = ['table_number']
        constraints = [
            models.CheckConstraint(condition=models.Q(table_number__gt=0), name='table_number_positive'),
        ]


class OrderStatus(models.TextChoices):
    PENDING = 'pending', 'Pending'
    VALIDATED = 'validated', 'Validated'
    PAID = 'paid', 'Paid'
    SERVED = 'served', 'Served'
    CANCELLED = 'cancelled', 'Cancelled'


class PaymentMethod(models.TextChoices):
    CASH = 'cash', 'Cash'
    QRIS = 'qris', 'QRIS'


class PaymentStatus(models.TextChoices):
    SUCCESS = 'success', 'Success'


class Order(TimeStampedModel):
    table = models.ForeignKey(Tables, on_delete=models.PROTECT, related_name='orders')
    status = models.CharField(max_length=20, choices=OrderStatus.choices, default=OrderStatus.PENDING)

    # Always equals the sum of line snapshots
    total_price = models.PositiveIntegerField(default=0)
    payment_method = models.CharField(max_length=10, choices=PaymentMethod.choices, null=True, blank=True)

    validated_at = models.DateTimeField(null=True, blank=True)
    served_at = models.DateTimeField(null=True, blank=True)
    cancelled_at = models.DateTimeField(null=True, blank=True)

    @classmethod
    def from_db(cls, db, field_names, values):
        instance = super().from_db(db, field_names, values)
        instance._loaded_table_id = instance.__dict__.get('table_id')
        return instance

    def save(self, *args, **kwargs):
        loaded_table_id = getattr(self, '_loaded_table_id', None)
        if loaded_table_id is not None and loaded_table_id != self.table_id:
            raise ValueError("An order's table cannot be changed")
        super().save(*args, **kwargs)
        self._loaded_table_id = self.table_id

    def calculate_totals(self, lines=None):
        """Recalculate the order total from the line price snapshots"""
        if lines is None:
            lines = self.items.all()
        self.total_price = sum(line.unit_price * line.quantity for line in lines)
        return self.total_price

    @property
    def is_served(self):
        return self.status == OrderStatus.SERVED

    def __str__(self):
        return f"#{self.id} - {self.table} - {self.status}"

    class Meta:
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['status'], name='order_status_idx'),
            models.Index(fields=['created_at'], name='order_created_at_idx'),
        ]


class OrderItem(models.Model):
    order = models.ForeignKey(Order, related_name='items', on_delete=models.CASCADE)
    # Weak reference: archived or removed items leave the snapshots behind
    menu_item = models.ForeignKey(
        MenuItem, on_delete=models.SET_NULL, related_name='order_items', null=True, blank=True
    )
    quantity = models.PositiveIntegerField()
    unit_price = models.PositiveIntegerField()
    item_name = models.CharField(max_length=150)

    @property
    def line_total(self):
        return self.unit_price * self.quantity

    def __str__(self):
        return f"{self.quantity} x {self.item_name}"

    class Meta:
        ordering = ['id']
        constraints = [
            models.CheckConstraint(condition=models.Q(quantity__gt=0), name='order_item_quantity_positive'),
        ]


class Payment(models.Model):
    order = models.ForeignKey(Order, on_delete=models.PROTECT, related_name='payments')
    method = models.CharField(max_length=10, choices=PaymentMethod.choices)
    status = models.CharField(max_length=20, choices=PaymentStatus.choices, default=PaymentStatus.SUCCESS)
    paid_at = models.DateTimeField(default=timezone.now)

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValueError("Payments are immutable once recorded")
        super().save(*args, **kwargs)

    def __str__(self):
        return f"Payment for Order #{self.order_id} - {self.method} - {self.status}"

    class Meta:
        ordering = ['-paid_at']
        constraints = [
            models.UniqueConstraint(
                fields=['order'],
                condition=models.Q(status='success'),
                name='one_successful_payment_per_order',
            ),
        ]
