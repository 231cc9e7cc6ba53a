"""
Management command to (re)populate the catalog from a static dataset.
Run with: python manage.py seed_catalog [--file path/to/catalog.json]

Existing variants, products and categories are wiped and reinserted in one
transaction. Cart items pointing at wiped variants are removed by cascade.
"""
import json
from pathlib import Path

from django.core.management.base import BaseCommand, CommandError
from django.db import transaction

from store.models import Category, Product, ProductVariant

DEFAULT_DATASET = Path(__file__).resolve().parents[2] / 'fixtures' / 'catalog_seed.json'


class Command(BaseCommand):
    help = 'Wipe and reseed categories, products and variants'

    def add_arguments(self, parser):
        parser.add_argument(
            '--file',
            type=str,
            default=str(DEFAULT_DATASET),
            help='JSON dataset with "categories" and "products" (default: bundled catalog)',
        )

    def load_dataset(self, path):
        try:
            with open(path, encoding='utf-8') as fh:
                dataset = json.load(fh)
        except FileNotFoundError:
            raise CommandError(f'Dataset not found: {path}')
        except json.JSONDecodeError as e:
            raise CommandError(f'Dataset is not valid JSON: {e}')

        if not isinstance(dataset, dict) or 'categories' not in dataset or 'products' not in dataset:
            raise CommandError('Dataset must contain "categories" and "products"')
        return dataset

    def handle(self, *args, **options):
        dataset = self.load_dataset(options['file'])

        with transaction.atomic():
            self.stdout.write('Clearing existing catalog...')
            ProductVariant.objects.all().delete()
            Product.objects.all().delete()
            Category.objects.all().delete()

            categories = {}
            for category_data in dataset['categories']:
                category = Category.objects.create(name=category_data['name'])
                categories[category.name] = category
                self.stdout.write(f'  Created category: {category.name}')

            variant_count = 0
            for product_data in dataset['products']:
                category = categories.get(product_data['category'])
                if category is None:
                    raise CommandError(f'Category "{product_data["category"]}" not found')

                product = Product.objects.create(
                    category=category,
                    name=product_data['name'],
                    description=product_data['description'],
                )
                self.stdout.write(f'  Created product: {product.name}')

                for variant_data in product_data.get('variants', []):
                    ProductVariant.objects.create(
                        product=product,
                        name=variant_data['color'],
                        color=variant_data['color'],
                        price_in_cents=variant_data['price_in_cents'],
                        image_url=variant_data.get('image_url', ''),
                    )
                    variant_count += 1

        self.stdout.write(
            self.style.SUCCESS(
                f'\nDone! Created {len(categories)} categories, '
                f'{len(dataset["products"])} products with {variant_count} variants.'
            )
        )
