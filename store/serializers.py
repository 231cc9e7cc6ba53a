from rest_framework import serializers
from .models import MAX_CART_ITEM_QUANTITY, Category, Product, ProductVariant, ShippingAddress, Cart, CartItem


# ---------------------------
# Catalog Serializers
# ---------------------------
class CategorySerializer(serializers.ModelSerializer):
    class Meta:
        model = Category
        fields = ['id', 'name', 'slug', 'created_at']


class ProductVariantSerializer(serializers.ModelSerializer):
    class Meta:
        model = ProductVariant
        fields = ['id', 'name', 'slug', 'color', 'price_in_cents', 'image_url', 'created_at']


class ProductListSerializer(serializers.ModelSerializer):
    category = serializers.SlugRelatedField(slug_field='slug', read_only=True)
    representative_variant = serializers.SerializerMethodField()

    class Meta:
        model = Product
        fields = ['id', 'name', 'slug', 'description', 'category', 'representative_variant']

    def get_representative_variant(self, obj):
        variant = obj.representative_variant
        if variant is None:
            return None
        return ProductVariantSerializer(variant).data


class ProductDetailSerializer(serializers.ModelSerializer):
    category = CategorySerializer(read_only=True)
    variants = ProductVariantSerializer(many=True, read_only=True)

    class Meta:
        model = Product
        fields = ['id', 'name', 'slug', 'description', 'category', 'variants', 'created_at']


class VariantDetailSerializer(ProductVariantSerializer):
    product = ProductDetailSerializer(read_only=True)

    class Meta(ProductVariantSerializer.Meta):
        fields = ProductVariantSerializer.Meta.fields + ['product']


# ---------------------------
# Shipping Address Serializer
# ---------------------------
class ShippingAddressSerializer(serializers.ModelSerializer):
    class Meta:
        model = ShippingAddress
        fields = [
            'id', 'recipient_name', 'street', 'number', 'complement', 'neighborhood',
            'city', 'state', 'zip_code', 'country', 'phone', 'email', 'created_at'
        ]
        read_only_fields = ['id', 'created_at']


# ---------------------------
# Cart Serializers
# ---------------------------
class AddToCartSerializer(serializers.Serializer):
    """
    Add-to-cart input. Accepts ``product_variant_id`` or the camel-case
    ``productVariantId`` sent by the storefront client.
    """
    product_variant_id = serializers.UUIDField()
    quantity = serializers.IntegerField(min_value=1, max_value=MAX_CART_ITEM_QUANTITY, default=1)

    def to_internal_value(self, data):
        if hasattr(data, 'get') and 'product_variant_id' not in data and 'productVariantId' in data:
            data = {
                'product_variant_id': data.get('productVariantId'),
                'quantity': data.get('quantity', 1),
            }
        return super().to_internal_value(data)


class UpdateCartItemSerializer(serializers.Serializer):
    quantity = serializers.IntegerField(min_value=1, max_value=MAX_CART_ITEM_QUANTITY)


class SetShippingAddressSerializer(serializers.Serializer):
    shipping_address_id = serializers.UUIDField()


class CartItemSerializer(serializers.ModelSerializer):
    product_variant = ProductVariantSerializer(read_only=True)
    product_name = serializers.CharField(source='product_variant.product.name', read_only=True)
    product_slug = serializers.CharField(source='product_variant.product.slug', read_only=True)
    unit_price_in_cents = serializers.IntegerField(read_only=True)
    total_price_in_cents = serializers.IntegerField(read_only=True)

    class Meta:
        model = CartItem
        fields = [
            'id', 'product_variant', 'product_name', 'product_slug', 'quantity',
            'unit_price_in_cents', 'total_price_in_cents'
        ]


class CartSerializer(serializers.ModelSerializer):
    items = CartItemSerializer(many=True, read_only=True)
    shipping_address = ShippingAddressSerializer(read_only=True)
    total_quantity = serializers.IntegerField(read_only=True)
    total_price_in_cents = serializers.IntegerField(read_only=True)

    class Meta:
        model = Cart
        fields = [
            'id', 'items', 'shipping_address', 'total_quantity', 'total_price_in_cents',
            'created_at', 'updated_at'
        ]
