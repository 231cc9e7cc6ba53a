from django.db.models.signals import pre_delete
from django.dispatch import receiver
import logging

from .models import CartItem, Product, ProductVariant

logger = logging.getLogger(__name__)


@receiver(pre_delete, sender=Product)
def log_product_removal(sender, instance, **kwargs):
    """
    Log how many cart items disappear with a product.
    Its variants and their cart items are removed by cascade.
    """
    affected = CartItem.objects.filter(product_variant__product=instance).count()
    if affected:
        logger.warning(
            f"Deleting product '{instance.name}' removes {affected} cart item(s) across customer carts"
        )
    else:
        logger.info(f"Deleting product '{instance.name}'")


@receiver(pre_delete, sender=ProductVariant)
def log_variant_removal(sender, instance, **kwargs):
    affected = CartItem.objects.filter(product_variant=instance).count()
    if affected:
        logger.warning(
            f"Deleting variant '{instance.slug}' removes {affected} cart item(s) across customer carts"
        )
