from django.db.models import Prefetch

from authentication.core.exceptions import ResourceNotFoundException
from store.models import Category, Product, ProductVariant


class CatalogService:
    """Read-only catalog queries. Writes happen through the seed command and the admin."""

    @staticmethod
    def _variants_prefetch():
        return Prefetch('variants', queryset=ProductVariant.objects.order_by('created_at'))

    @staticmethod
    def list_categories():
        return Category.objects.order_by('name')

    @staticmethod
    def get_category(slug):
        category = Category.objects.filter(slug=slug).first()
        if category is None:
            raise ResourceNotFoundException(f"Category '{slug}' not found")
        return category

    @staticmethod
    def list_products(category_slug=None):
        queryset = Product.objects.select_related('category').prefetch_related(CatalogService._variants_prefetch())
        if category_slug:
            queryset = queryset.filter(category__slug=category_slug)
        return queryset.order_by('created_at')

    @staticmethod
    def list_products_by_category(slug):
        category = CatalogService.get_category(slug)
        return category, CatalogService.list_products(category_slug=category.slug)

    @staticmethod
    def get_product(slug):
        product = CatalogService.list_products().filter(slug=slug).first()
        if product is None:
            raise ResourceNotFoundException(f"Product '{slug}' not found")
        return product

    @staticmethod
    def get_variant(slug):
        variant = (
            ProductVariant.objects.select_related('product__category')
            .prefetch_related(Prefetch('product__variants', queryset=ProductVariant.objects.order_by('created_at')))
            .filter(slug=slug)
            .first()
        )
        if variant is None:
            raise ResourceNotFoundException(f"Product variant '{slug}' not found")
        return variant
