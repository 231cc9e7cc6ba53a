"""
Cart aggregate operations.

Every mutating operation runs in a single transaction. Adding a variant that
is already in the cart increments the stored quantity with an ``F``
expression so concurrent adds for the same (cart, variant) never lose
updates; the unique ``(cart, product_variant)`` constraint turns a lost
insert race into an IntegrityError, which is retried as an increment.
"""
import logging
import uuid

from django.db import DatabaseError, IntegrityError, transaction
from django.db.models import F
from django.utils import timezone

from authentication.core.exceptions import (
    ConflictException,
    InvalidInputException,
    PersistenceException,
    ResourceNotFoundException,
    UnauthorizedException,
)
from store.models import MAX_CART_ITEM_QUANTITY, Cart, CartItem, ProductVariant, ShippingAddress

logger = logging.getLogger(__name__)


class CartService:

    @staticmethod
    def _require_user(user):
        if user is None or not getattr(user, 'is_authenticated', False):
            raise UnauthorizedException()

    @staticmethod
    def _validate_quantity(quantity):
        if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 1:
            raise InvalidInputException({'quantity': ['Ensure this value is an integer greater than or equal to 1.']})
        if quantity > MAX_CART_ITEM_QUANTITY:
            raise InvalidInputException(
                {'quantity': [f'Ensure this value is less than or equal to {MAX_CART_ITEM_QUANTITY}.']}
            )

    @staticmethod
    def _validate_variant_id(product_variant_id):
        try:
            return uuid.UUID(str(product_variant_id))
        except (TypeError, ValueError):
            raise InvalidInputException({'product_variant_id': ['Must be a valid UUID.']})

    @staticmethod
    def get_or_create_cart(user):
        CartService._require_user(user)
        # get_or_create re-reads on IntegrityError, so a concurrent first add lands on the same cart
        cart, created = Cart.objects.get_or_create(user=user)
        if created:
            logger.info(f"Created cart {cart.pk} for user {user.pk}")
        return cart

    @staticmethod
    def get_cart(user):
        cart = CartService.get_or_create_cart(user)
        return (
            Cart.objects.select_related('shipping_address')
            .prefetch_related('items__product_variant__product')
            .get(pk=cart.pk)
        )

    @staticmethod
    def _increment(cart, variant, quantity):
        """
        Atomically add ``quantity`` to an existing row with room for it;
        returns the number of rows updated.
        """
        return CartItem.objects.filter(
            cart=cart, product_variant=variant, quantity__lte=MAX_CART_ITEM_QUANTITY - quantity
        ).update(quantity=F('quantity') + quantity, updated_at=timezone.now())

    @staticmethod
    def _check_capacity(cart, variant, quantity):
        full = CartItem.objects.filter(
            cart=cart, product_variant=variant, quantity__gt=MAX_CART_ITEM_QUANTITY - quantity
        ).exists()
        if full:
            raise InvalidInputException(
                {'quantity': [f'A cart line cannot hold more than {MAX_CART_ITEM_QUANTITY} units.']}
            )

    @staticmethod
    def _insert(cart, variant, quantity):
        # Savepoint so a failed insert leaves the outer transaction usable
        with transaction.atomic():
            return CartItem.objects.create(cart=cart, product_variant=variant, quantity=quantity)

    @staticmethod
    def _increment_or_insert(cart, variant, quantity):
        if CartService._increment(cart, variant, quantity):
            return CartItem.objects.get(cart=cart, product_variant=variant), False
        CartService._check_capacity(cart, variant, quantity)

        try:
            return CartService._insert(cart, variant, quantity), True
        except IntegrityError:
            logger.info(
                f"Concurrent insert of variant {variant.pk} into cart {cart.pk}; retrying as increment"
            )

        if CartService._increment(cart, variant, quantity):
            return CartItem.objects.get(cart=cart, product_variant=variant), False
        CartService._check_capacity(cart, variant, quantity)

        raise ConflictException()

    @staticmethod
    def add_to_cart(user, product_variant_id, quantity=1):
        """
        Add ``quantity`` units of a variant to the user's cart.

        Repeat adds of the same variant accumulate into one row. Returns the
        resulting CartItem.
        """
        CartService._require_user(user)
        CartService._validate_quantity(quantity)
        product_variant_id = CartService._validate_variant_id(product_variant_id)

        try:
            with transaction.atomic():
                variant = ProductVariant.objects.filter(pk=product_variant_id).first()
                if variant is None:
                    raise ResourceNotFoundException(f"Product variant {product_variant_id} not found")

                cart = CartService.get_or_create_cart(user)
                item, created = CartService._increment_or_insert(cart, variant, quantity)
                Cart.objects.filter(pk=cart.pk).update(updated_at=timezone.now())
        except DatabaseError as e:
            logger.error(f"Failed to add variant {product_variant_id} to cart of user {user.pk}: {e}", exc_info=True)
            raise PersistenceException()

        logger.info(
            f"{'Added' if created else 'Incremented'} variant {variant.pk} in cart {cart.pk} "
            f"(+{quantity}, now {item.quantity})"
        )
        return item

    @staticmethod
    def _get_item(user, item_id, lock=False):
        queryset = CartItem.objects.select_related('product_variant__product').filter(pk=item_id, cart__user=user)
        if lock:
            queryset = queryset.select_for_update()
        item = queryset.first()
        if item is None:
            raise ResourceNotFoundException("Item not found in cart")
        return item

    @staticmethod
    def update_item_quantity(user, item_id, quantity):
        CartService._require_user(user)
        CartService._validate_quantity(quantity)

        item = CartService._get_item(user, item_id)
        item.quantity = quantity
        item.save(update_fields=['quantity', 'updated_at'])
        return item

    @staticmethod
    def decrease_item_quantity(user, item_id):
        """Remove one unit; the row is deleted when its quantity would reach zero. Returns the item or None."""
        CartService._require_user(user)

        with transaction.atomic():
            # Row lock so concurrent decrements see each other's result
            item = CartService._get_item(user, item_id, lock=True)
            if item.quantity <= 1:
                item.delete()
                return None
            CartItem.objects.filter(pk=item.pk).update(quantity=F('quantity') - 1, updated_at=timezone.now())
            item.refresh_from_db()
            return item

    @staticmethod
    def remove_item(user, item_id):
        CartService._require_user(user)

        item = CartService._get_item(user, item_id)
        item.delete()
        logger.info(f"Removed item {item_id} from cart of user {user.pk}")

    @staticmethod
    def clear(user):
        CartService._require_user(user)
        deleted, _ = CartItem.objects.filter(cart__user=user).delete()
        return deleted

    @staticmethod
    def set_shipping_address(user, shipping_address_id):
        CartService._require_user(user)

        address = ShippingAddress.objects.filter(pk=shipping_address_id, user=user).first()
        if address is None:
            raise ResourceNotFoundException("Shipping address not found")

        cart = CartService.get_or_create_cart(user)
        cart.shipping_address = address
        cart.save(update_fields=['shipping_address', 'updated_at'])
        return cart
