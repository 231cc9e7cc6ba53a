import json
import os
import tempfile
from io import StringIO

from django.core.management import call_command
from django.core.management.base import CommandError
from django.test import TestCase

from store.models import Cart, CartItem, Category, Product, ProductVariant
from .helpers import create_user


class SeedCatalogCommandTests(TestCase):

    def _seed(self, *args):
        out = StringIO()
        call_command('seed_catalog', *args, stdout=out)
        return out.getvalue()

    def _write_dataset(self, dataset):
        fd, path = tempfile.mkstemp(suffix='.json')
        with os.fdopen(fd, 'w', encoding='utf-8') as fh:
            json.dump(dataset, fh)
        self.addCleanup(os.remove, path)
        return path

    def test_bundled_catalog(self):
        output = self._seed()

        self.assertEqual(Category.objects.count(), 6)
        self.assertEqual(Product.objects.count(), 24)
        self.assertEqual(ProductVariant.objects.count(), 62)
        self.assertIn('Created 6 categories, 24 products with 62 variants.', output)

        self.assertTrue(Category.objects.filter(slug='bermuda-shorts').exists())
        self.assertTrue(Category.objects.filter(slug='tenis').exists())
        self.assertFalse(ProductVariant.objects.filter(price_in_cents__lte=0).exists())

    def test_reseeding_replaces_catalog(self):
        self._seed()
        self._seed()

        self.assertEqual(Category.objects.count(), 6)
        self.assertEqual(Product.objects.count(), 24)
        self.assertEqual(ProductVariant.objects.count(), 62)

    def test_reseeding_drops_cart_items_of_old_variants(self):
        self._seed()
        user = create_user()
        cart = Cart.objects.create(user=user)
        CartItem.objects.create(cart=cart, product_variant=ProductVariant.objects.first(), quantity=2)

        self._seed()
        self.assertFalse(CartItem.objects.exists())
        self.assertTrue(Cart.objects.filter(pk=cart.pk).exists())

    def test_unknown_category_aborts_without_changes(self):
        self._seed()
        path = self._write_dataset({
            'categories': [{'name': 'Camisetas'}],
            'products': [{
                'name': 'Boné', 'description': 'Boné aba curva.', 'category': 'Chapéus',
                'variants': [{'color': 'Preto', 'price_in_cents': 4999}],
            }],
        })

        with self.assertRaises(CommandError):
            self._seed('--file', path)

        self.assertEqual(Category.objects.count(), 6)
        self.assertEqual(Product.objects.count(), 24)

    def test_missing_file(self):
        with self.assertRaises(CommandError):
            self._seed('--file', '/nonexistent/catalog.json')

    def test_dataset_shape_is_checked(self):
        path = self._write_dataset({'categories': []})
        with self.assertRaises(CommandError):
            self._seed('--file', path)
