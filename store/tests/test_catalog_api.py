from rest_framework import status
from rest_framework.test import APITestCase

from store.models import Category, Product
from .helpers import create_catalog, create_variant


class CatalogApiTests(APITestCase):
    def setUp(self):
        self.category, self.product, (self.white, self.black) = create_catalog()
        self.shorts = Category.objects.create(name='Bermuda & Shorts')
        self.bermuda = Product.objects.create(
            category=self.shorts, name='Bermuda Jeans', description='Bermuda jeans clássica.'
        )
        create_variant(self.bermuda, 'Azul', 8999)

    def test_categories_are_public_and_sorted(self):
        resp = self.client.get('/api/store/categories/')
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual([c['slug'] for c in resp.data['data']], ['acessorios', 'bermuda-shorts'])

    def test_product_list_has_cheapest_representative_variant(self):
        resp = self.client.get('/api/store/products/')
        self.assertEqual(resp.status_code, status.HTTP_200_OK)

        meia = next(p for p in resp.data['data'] if p['slug'] == 'meia-alta')
        self.assertEqual(meia['category'], 'acessorios')
        self.assertEqual(meia['representative_variant']['price_in_cents'], 1999)
        self.assertEqual(meia['representative_variant']['slug'], 'meia-alta-branca')

    def test_product_without_variants_has_no_representative(self):
        Product.objects.create(category=self.category, name='Boné', description='Boné aba curva.')

        resp = self.client.get('/api/store/products/')
        bone = next(p for p in resp.data['data'] if p['slug'] == 'bone')
        self.assertIsNone(bone['representative_variant'])

    def test_product_list_filters_by_category(self):
        resp = self.client.get('/api/store/products/', {'category': 'bermuda-shorts'})
        self.assertEqual([p['slug'] for p in resp.data['data']], ['bermuda-jeans'])

    def test_product_search(self):
        resp = self.client.get('/api/store/products/', {'search': 'algodão'})
        self.assertEqual([p['slug'] for p in resp.data['data']], ['meia-alta'])

    def test_category_products(self):
        resp = self.client.get('/api/store/categories/acessorios/products/')
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(resp.data['data']['category']['name'], 'Acessórios')
        self.assertEqual(len(resp.data['data']['products']), 1)

    def test_unknown_category_is_not_found(self):
        resp = self.client.get('/api/store/categories/nope/products/')
        self.assertEqual(resp.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(resp.data['error_code'], 'not_found')

    def test_product_detail_lists_variants(self):
        resp = self.client.get('/api/store/products/meia-alta/')
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual([v['color'] for v in resp.data['data']['variants']], ['Branca', 'Preta'])
        self.assertEqual(resp.data['data']['category']['slug'], 'acessorios')

    def test_variant_detail_includes_siblings(self):
        resp = self.client.get('/api/store/variants/meia-alta-preta/')
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(resp.data['data']['price_in_cents'], 2999)
        self.assertEqual(len(resp.data['data']['product']['variants']), 2)

    def test_unknown_product_and_variant(self):
        self.assertEqual(self.client.get('/api/store/products/nope/').status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(self.client.get('/api/store/variants/nope/').status_code, status.HTTP_404_NOT_FOUND)
