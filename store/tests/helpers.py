from django.contrib.auth import get_user_model

from store.models import Category, Product, ProductVariant

User = get_user_model()


def create_user(email='customer@test.com', password='Str0ng-Passw0rd!', **extra):
    return User.objects.create_user(email=email, password=password, **extra)


def create_variant(product, color, price_in_cents):
    return ProductVariant.objects.create(
        product=product,
        color=color,
        price_in_cents=price_in_cents,
        image_url=f'https://cdn.example.com/{product.slug}/{color.lower()}.jpg',
    )


def create_catalog():
    """One category with a two-variant product. Returns (category, product, [variants])."""
    category = Category.objects.create(name='Acessórios')
    product = Product.objects.create(
        category=category,
        name='Meia Alta',
        description='Meia alta de algodão, confortável e durável.',
    )
    white = create_variant(product, 'Branca', 1999)
    black = create_variant(product, 'Preta', 2999)
    return category, product, [white, black]
