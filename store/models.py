from django.conf import settings
from django.db import models
from django.db.models import Q
from django.utils.text import slugify
import uuid

# Largest quantity a cart line may hold; fits a 32-bit integer column on every backend
MAX_CART_ITEM_QUANTITY = 2147483647


def unique_slug(model, value, instance_pk=None):
    """
    Slugify ``value`` and append ``-1``, ``-2``... until no other row of
    ``model`` uses it.
    """
    base_slug = slugify(value) or uuid.uuid4().hex[:8]
    slug = base_slug
    num = 1
    while model.objects.filter(slug=slug).exclude(pk=instance_pk).exists():
        slug = f"{base_slug}-{num}"
        num += 1
    return slug


# ==========================================
# Catalog
# ==========================================
class Category(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=255)
    slug = models.SlugField(max_length=255, unique=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name_plural = "Categories"
        ordering = ['name']

    def save(self, *args, **kwargs):
        if not self.slug:
            self.slug = unique_slug(Category, self.name, self.pk)
        super().save(*args, **kwargs)

    def __str__(self):
        return self.name


class Product(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    # PROTECT keeps every product attached to exactly one category
    category = models.ForeignKey(Category, on_delete=models.PROTECT, related_name='products')
    name = models.CharField(max_length=255)
    slug = models.SlugField(max_length=255, unique=True, blank=True)
    description = models.TextField()
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['created_at']

    def save(self, *args, **kwargs):
        if not self.slug:
            self.slug = unique_slug(Product, self.name, self.pk)
        super().save(*args, **kwargs)

    @property
    def representative_variant(self):
        """
        Cheapest variant, earliest created on ties; None for a product without
        variants. Uses prefetched variants when present.
        """
        variants = list(self.variants.all())
        if not variants:
            return None
        return min(variants, key=lambda v: (v.price_in_cents, v.created_at))

    def __str__(self):
        return self.name


class ProductVariant(models.Model):
    """A purchasable configuration (colour) of a product with its own price and image."""
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    product = models.ForeignKey(Product, on_delete=models.CASCADE, related_name='variants')
    name = models.CharField(max_length=255)
    slug = models.SlugField(max_length=255, unique=True, blank=True)
    color = models.CharField(max_length=64)
    price_in_cents = models.PositiveIntegerField(help_text="Price in minor currency units")
    image_url = models.URLField(max_length=500, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['created_at']
        constraints = [
            models.CheckConstraint(condition=Q(price_in_cents__gte=0), name='variant_price_non_negative'),
        ]

    def save(self, *args, **kwargs):
        if not self.slug:
            self.slug = unique_slug(ProductVariant, f"{self.product.name}-{self.color}", self.pk)
        if not self.name:
            self.name = self.color
        super().save(*args, **kwargs)

    def __str__(self):
        return f"{self.product.name} ({self.color})"


# -------------------------------
# Shipping Address
# -------------------------------
class ShippingAddress(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='shipping_addresses')
    recipient_name = models.CharField(max_length=255)
    street = models.CharField(max_length=255)
    number = models.CharField(max_length=32)
    complement = models.CharField(max_length=255, blank=True)
    neighborhood = models.CharField(max_length=255)
    city = models.CharField(max_length=255)
    state = models.CharField(max_length=64)
    zip_code = models.CharField(max_length=20)
    country = models.CharField(max_length=64, default='Brasil')
    phone = models.CharField(max_length=32)
    email = models.EmailField()
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name_plural = "Shipping addresses"
        ordering = ['created_at']

    def __str__(self):
        return f"{self.recipient_name}, {self.street} {self.number}, {self.city}"


# -------------------------------
# Cart & Related Models
# -------------------------------
class Cart(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.OneToOneField(
        settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='cart',
        help_text="Each user has one active cart"
    )
    shipping_address = models.ForeignKey(
        ShippingAddress, on_delete=models.SET_NULL, null=True, blank=True, related_name='carts'
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=['user'], name='one_cart_per_user')
        ]

    @property
    def total_quantity(self):
        return sum(item.quantity for item in self.items.all())

    @property
    def total_price_in_cents(self):
        return sum(item.total_price_in_cents for item in self.items.all())

    def __str__(self):
        return f"Cart for {self.user.email}"


class CartItem(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    cart = models.ForeignKey(Cart, on_delete=models.CASCADE, related_name='items')
    product_variant = models.ForeignKey(ProductVariant, on_delete=models.CASCADE, related_name='cart_items')
    quantity = models.PositiveIntegerField(default=1)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['created_at']
        constraints = [
            # Repeat adds accumulate into one row per variant
            models.UniqueConstraint(fields=['cart', 'product_variant'], name='unique_variant_per_cart'),
            models.CheckConstraint(condition=Q(quantity__gte=1), name='cart_item_quantity_positive'),
        ]

    @property
    def unit_price_in_cents(self):
        return self.product_variant.price_in_cents

    @property
    def total_price_in_cents(self):
        return self.product_variant.price_in_cents * self.quantity

    def __str__(self):
        return f"{self.quantity} x {self.product_variant}"
