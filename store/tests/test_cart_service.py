"""
Cart aggregate tests: accumulation on repeat add, validation, and recovery
from a lost insert race.
"""
import threading
import uuid
from unittest.mock import patch

from django.contrib.auth.models import AnonymousUser
from django.db import DatabaseError, IntegrityError, connection
from django.test import TestCase, TransactionTestCase

from authentication.core.exceptions import (
    ConflictException,
    InvalidInputException,
    PersistenceException,
    ResourceNotFoundException,
    UnauthorizedException,
)
from store.models import MAX_CART_ITEM_QUANTITY, Cart, CartItem, ShippingAddress
from store.services.cart_service import CartService
from .helpers import create_catalog, create_user


class AddToCartTests(TestCase):

    def setUp(self):
        self.user = create_user()
        self.category, self.product, (self.white, self.black) = create_catalog()

    def test_first_add_creates_cart_lazily(self):
        self.assertFalse(Cart.objects.filter(user=self.user).exists())

        item = CartService.add_to_cart(self.user, self.white.id, 2)

        self.assertEqual(item.quantity, 2)
        self.assertEqual(item.cart.user, self.user)
        self.assertEqual(Cart.objects.filter(user=self.user).count(), 1)

    def test_repeat_add_accumulates_into_single_row(self):
        CartService.add_to_cart(self.user, self.white.id, 2)
        item = CartService.add_to_cart(self.user, self.white.id, 1)

        self.assertEqual(item.quantity, 3)
        self.assertEqual(CartItem.objects.filter(cart__user=self.user).count(), 1)

        cart = CartService.get_cart(self.user)
        self.assertEqual(cart.total_quantity, 3)
        self.assertEqual(cart.total_price_in_cents, 3 * 1999)

    def test_accumulation_for_many_adds(self):
        before = 0
        for added in (1, 4, 2, 7):
            item = CartService.add_to_cart(self.user, self.black.id, added)
            self.assertEqual(item.quantity, before + added)
            before = item.quantity
        self.assertEqual(CartItem.objects.count(), 1)

    def test_different_variants_get_separate_rows(self):
        CartService.add_to_cart(self.user, self.white.id, 2)
        CartService.add_to_cart(self.user, self.black.id, 1)

        cart = CartService.get_cart(self.user)
        self.assertEqual(cart.items.count(), 2)
        self.assertEqual(cart.total_quantity, 3)
        self.assertEqual(cart.total_price_in_cents, 2 * 1999 + 2999)

    def test_unknown_variant_is_not_found_and_cart_unchanged(self):
        CartService.add_to_cart(self.user, self.white.id, 2)

        with self.assertRaises(ResourceNotFoundException):
            CartService.add_to_cart(self.user, uuid.uuid4(), 1)

        items = CartItem.objects.filter(cart__user=self.user)
        self.assertEqual(items.count(), 1)
        self.assertEqual(items.get().quantity, 2)

    def test_non_positive_quantity_has_no_persistent_effect(self):
        for quantity in (0, -1, -5):
            with self.assertRaises(InvalidInputException) as ctx:
                CartService.add_to_cart(self.user, self.white.id, quantity)
            self.assertIn('quantity', ctx.exception.detail)

        self.assertFalse(Cart.objects.exists())
        self.assertFalse(CartItem.objects.exists())

    def test_non_integer_quantity_rejected(self):
        for quantity in (1.5, '2', True, None):
            with self.assertRaises(InvalidInputException):
                CartService.add_to_cart(self.user, self.white.id, quantity)
        self.assertFalse(CartItem.objects.exists())

    def test_quantity_above_cap_rejected(self):
        for quantity in (MAX_CART_ITEM_QUANTITY + 1, 2 ** 70):
            with self.assertRaises(InvalidInputException) as ctx:
                CartService.add_to_cart(self.user, self.white.id, quantity)
            self.assertIn('quantity', ctx.exception.detail)
        self.assertFalse(CartItem.objects.exists())

    def test_add_that_would_pass_cap_is_rejected(self):
        item = CartService.add_to_cart(self.user, self.white.id, MAX_CART_ITEM_QUANTITY - 1)

        with self.assertRaises(InvalidInputException) as ctx:
            CartService.add_to_cart(self.user, self.white.id, 2)
        self.assertIn('quantity', ctx.exception.detail)
        self.assertEqual(CartItem.objects.get(pk=item.pk).quantity, MAX_CART_ITEM_QUANTITY - 1)

        item = CartService.add_to_cart(self.user, self.white.id, 1)
        self.assertEqual(item.quantity, MAX_CART_ITEM_QUANTITY)

    def test_malformed_variant_id_rejected(self):
        with self.assertRaises(InvalidInputException) as ctx:
            CartService.add_to_cart(self.user, 'not-a-uuid', 1)
        self.assertIn('product_variant_id', ctx.exception.detail)

    def test_anonymous_user_is_unauthorized(self):
        with self.assertRaises(UnauthorizedException):
            CartService.add_to_cart(AnonymousUser(), self.white.id, 1)
        with self.assertRaises(UnauthorizedException):
            CartService.add_to_cart(None, self.white.id, 1)
        self.assertFalse(Cart.objects.exists())

    def test_lost_insert_race_is_retried_as_increment(self):
        real_increment = CartService._increment
        calls = []

        def racing_increment(cart, variant, quantity):
            calls.append(quantity)
            if len(calls) == 1:
                # A concurrent request inserts the row between our update and our insert
                CartItem.objects.create(cart=cart, product_variant=variant, quantity=2)
                return 0
            return real_increment(cart, variant, quantity)

        with patch.object(CartService, '_increment', side_effect=racing_increment):
            item = CartService.add_to_cart(self.user, self.white.id, 1)

        self.assertEqual(len(calls), 2)
        self.assertEqual(item.quantity, 3)
        self.assertEqual(CartItem.objects.filter(cart__user=self.user).count(), 1)

    def test_conflict_when_retry_cannot_find_row(self):
        with patch.object(CartService, '_increment', return_value=0), \
                patch.object(CartService, '_insert', side_effect=IntegrityError('duplicate key')):
            with self.assertRaises(ConflictException):
                CartService.add_to_cart(self.user, self.white.id, 1)

        self.assertFalse(CartItem.objects.exists())

    def test_database_errors_are_wrapped(self):
        with patch.object(CartService, '_increment', side_effect=DatabaseError('connection lost')):
            with self.assertLogs('store.services.cart_service', level='ERROR'):
                with self.assertRaises(PersistenceException) as ctx:
                    CartService.add_to_cart(self.user, self.white.id, 1)

        self.assertNotIn('connection lost', str(ctx.exception.detail))


class CartMaintenanceTests(TestCase):

    def setUp(self):
        self.user = create_user()
        self.other = create_user(email='other@test.com')
        self.category, self.product, (self.white, self.black) = create_catalog()
        self.item = CartService.add_to_cart(self.user, self.white.id, 3)

    def test_update_item_quantity_sets_value(self):
        item = CartService.update_item_quantity(self.user, self.item.id, 5)
        self.assertEqual(item.quantity, 5)
        self.assertEqual(CartItem.objects.get(pk=self.item.pk).quantity, 5)

    def test_update_item_quantity_rejects_zero(self):
        with self.assertRaises(InvalidInputException):
            CartService.update_item_quantity(self.user, self.item.id, 0)
        with self.assertRaises(InvalidInputException):
            CartService.update_item_quantity(self.user, self.item.id, MAX_CART_ITEM_QUANTITY + 1)
        self.assertEqual(CartItem.objects.get(pk=self.item.pk).quantity, 3)

    def test_decrease_removes_row_at_zero(self):
        self.assertEqual(CartService.decrease_item_quantity(self.user, self.item.id).quantity, 2)
        self.assertEqual(CartService.decrease_item_quantity(self.user, self.item.id).quantity, 1)
        self.assertIsNone(CartService.decrease_item_quantity(self.user, self.item.id))
        self.assertFalse(CartItem.objects.filter(pk=self.item.pk).exists())

    def test_items_of_other_users_are_not_found(self):
        with self.assertRaises(ResourceNotFoundException):
            CartService.remove_item(self.other, self.item.id)
        with self.assertRaises(ResourceNotFoundException):
            CartService.update_item_quantity(self.other, self.item.id, 1)
        self.assertTrue(CartItem.objects.filter(pk=self.item.pk).exists())

    def test_remove_and_clear(self):
        CartService.add_to_cart(self.user, self.black.id, 1)
        CartService.remove_item(self.user, self.item.id)
        self.assertEqual(CartItem.objects.filter(cart__user=self.user).count(), 1)

        self.assertEqual(CartService.clear(self.user), 1)
        self.assertFalse(CartItem.objects.filter(cart__user=self.user).exists())
        self.assertTrue(Cart.objects.filter(user=self.user).exists())

    def test_set_shipping_address_requires_own_address(self):
        address_data = dict(
            recipient_name='Ana Souza', street='Rua das Flores', number='42',
            neighborhood='Centro', city='São Paulo', state='SP', zip_code='01000-000',
            phone='+55 11 99999-0000', email='ana@test.com',
        )
        own = ShippingAddress.objects.create(user=self.user, **address_data)
        foreign = ShippingAddress.objects.create(user=self.other, **address_data)

        with self.assertRaises(ResourceNotFoundException):
            CartService.set_shipping_address(self.user, foreign.id)

        cart = CartService.set_shipping_address(self.user, own.id)
        self.assertEqual(cart.shipping_address, own)


class ConcurrentCartTests(TransactionTestCase):

    def setUp(self):
        self.user = create_user()
        self.category, self.product, (self.white, _) = create_catalog()

    def run_concurrently(self, action, workers):
        barrier = threading.Barrier(workers)
        errors = []

        def run():
            try:
                barrier.wait()
                action()
            except Exception as e:
                errors.append(e)
            finally:
                connection.close()

        threads = [threading.Thread(target=run) for _ in range(workers)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()
        return errors

    def test_concurrent_adds_sum_without_lost_updates(self):
        workers = 8
        errors = self.run_concurrently(lambda: CartService.add_to_cart(self.user, self.white.id, 1), workers)

        self.assertEqual(errors, [])
        self.assertEqual(CartItem.objects.filter(cart__user=self.user).count(), 1)
        self.assertEqual(CartItem.objects.get(cart__user=self.user).quantity, workers)

    def test_concurrent_decrements_remove_row_cleanly(self):
        item = CartService.add_to_cart(self.user, self.white.id, 2)

        errors = self.run_concurrently(lambda: CartService.decrease_item_quantity(self.user, item.id), 2)

        self.assertEqual(errors, [])
        self.assertFalse(CartItem.objects.filter(pk=item.pk).exists())
