from rest_framework import status, generics
from rest_framework.permissions import IsAuthenticated, AllowAny
from rest_framework.response import Response
from rest_framework.filters import OrderingFilter, SearchFilter
from django_filters import rest_framework as filters
from drf_spectacular.utils import extend_schema, OpenApiParameter, OpenApiExample, OpenApiResponse

from authentication.core.base_view import BaseAPIView
from authentication.core.response import standardized_response
from .models import Product, ShippingAddress
from .serializers import (
    AddToCartSerializer, CartItemSerializer, CartSerializer, CategorySerializer,
    ProductDetailSerializer, ProductListSerializer, SetShippingAddressSerializer,
    ShippingAddressSerializer, UpdateCartItemSerializer, VariantDetailSerializer,
)
from .services.cart_service import CartService
from .services.catalog_service import CatalogService


# ---------------------------
# Categories
# ---------------------------
@extend_schema(tags=["Catalog"], responses={200: CategorySerializer(many=True)})
class CategoryListView(BaseAPIView):
    permission_classes = [AllowAny]

    def get(self, request):
        serializer = CategorySerializer(CatalogService.list_categories(), many=True)
        return Response(standardized_response(data=serializer.data))


@extend_schema(
    tags=["Catalog"],
    parameters=[OpenApiParameter(name='slug', description='Category slug', required=True, type=str, location=OpenApiParameter.PATH)],
    responses={200: ProductListSerializer(many=True), 404: OpenApiResponse(description="Category not found")},
    description="Products of a category, each with its cheapest variant as representative."
)
class CategoryProductListView(BaseAPIView):
    permission_classes = [AllowAny]

    def get(self, request, slug):
        category, products = CatalogService.list_products_by_category(slug)
        return Response(standardized_response(data={
            'category': CategorySerializer(category).data,
            'products': ProductListSerializer(products, many=True).data,
        }))


# ---------------------------
# Products List & Filtering
# ---------------------------
class ProductFilter(filters.FilterSet):
    category = filters.CharFilter(field_name='category__slug', lookup_expr='exact')

    class Meta:
        model = Product
        fields = ['category']


class ProductListView(BaseAPIView, generics.ListAPIView):
    permission_classes = [AllowAny]
    serializer_class = ProductListSerializer
    filter_backends = [filters.DjangoFilterBackend, SearchFilter, OrderingFilter]
    filterset_class = ProductFilter
    search_fields = ['name', 'description']
    ordering_fields = ['name', 'created_at']

    def get_queryset(self):
        return CatalogService.list_products()

    @extend_schema(
        tags=["Catalog"],
        parameters=[
            OpenApiParameter(name='category', description='Filter by category slug', required=False, type=str),
            OpenApiParameter(name='search', description='Search by name or description', required=False, type=str),
            OpenApiParameter(name='ordering', description='Order by name or created_at', required=False, type=str),
        ],
        responses={200: ProductListSerializer(many=True)},
        description="Retrieve a list of products. Supports filtering, search, and ordering."
    )
    def list(self, request, *args, **kwargs):
        queryset = self.filter_queryset(self.get_queryset())
        serializer = self.get_serializer(queryset, many=True)
        return Response(standardized_response(data=serializer.data))


class ProductDetailView(BaseAPIView):
    permission_classes = [AllowAny]

    @extend_schema(
        tags=["Catalog"],
        parameters=[OpenApiParameter(name='slug', description='Product slug', required=True, type=str, location=OpenApiParameter.PATH)],
        responses={200: ProductDetailSerializer, 404: OpenApiResponse(description="Product not found")},
        description="Retrieve a product with all of its variants"
    )
    def get(self, request, slug):
        product = CatalogService.get_product(slug)
        return Response(standardized_response(data=ProductDetailSerializer(product).data))


class ProductVariantDetailView(BaseAPIView):
    permission_classes = [AllowAny]

    @extend_schema(
        tags=["Catalog"],
        parameters=[OpenApiParameter(name='slug', description='Variant slug', required=True, type=str, location=OpenApiParameter.PATH)],
        responses={200: VariantDetailSerializer, 404: OpenApiResponse(description="Variant not found")},
        description="Retrieve a variant together with its product and sibling variants"
    )
    def get(self, request, slug):
        variant = CatalogService.get_variant(slug)
        return Response(standardized_response(data=VariantDetailSerializer(variant).data))


# ======================================================
# CART VIEWS
# ======================================================
@extend_schema(
    tags=["Cart"],
    description="Retrieve the authenticated user's cart with its items and totals (in cents).",
    responses={200: CartSerializer}
)
class CartView(BaseAPIView):
    permission_classes = [IsAuthenticated]

    def get(self, request):
        cart = CartService.get_cart(request.user)
        return Response(standardized_response(data=CartSerializer(cart).data))


@extend_schema(
    tags=["Cart"],
    description="Add a product variant to the authenticated user's cart. Repeat adds accumulate quantity.",
    request=AddToCartSerializer,
    examples=[
        OpenApiExample(
            "Add item example",
            summary="Add item to cart",
            value={"productVariantId": "3f1c2b9e-7a5d-4c1e-9b8f-2d6a4e0c7b11", "quantity": 2}
        )
    ],
    responses={
        200: CartItemSerializer,
        400: OpenApiResponse(description="Invalid input"),
        401: OpenApiResponse(description="Not signed in"),
        404: OpenApiResponse(description="Product variant not found"),
        409: OpenApiResponse(description="Concurrent modification, retry"),
    },
)
class AddToCartView(BaseAPIView):
    permission_classes = [IsAuthenticated]

    def post(self, request):
        serializer = AddToCartSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        item = CartService.add_to_cart(
            request.user,
            serializer.validated_data['product_variant_id'],
            serializer.validated_data['quantity'],
        )
        return Response(
            standardized_response(data=CartItemSerializer(item).data, message="Item added to cart"),
            status=status.HTTP_200_OK
        )


@extend_schema(tags=["Cart"], responses={200: OpenApiResponse(description="Cart cleared")})
class ClearCartView(BaseAPIView):
    permission_classes = [IsAuthenticated]

    def delete(self, request):
        removed = CartService.clear(request.user)
        return Response(standardized_response(data={'removed': removed}, message="Cart cleared"))


class CartItemView(BaseAPIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(
        tags=["Cart"],
        request=UpdateCartItemSerializer,
        responses={200: CartItemSerializer, 404: OpenApiResponse(description="Item not found in cart")},
        description="Set the quantity of an item in the cart."
    )
    def patch(self, request, item_id):
        serializer = UpdateCartItemSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        item = CartService.update_item_quantity(request.user, item_id, serializer.validated_data['quantity'])
        return Response(standardized_response(data=CartItemSerializer(item).data, message="Cart item updated"))

    @extend_schema(
        tags=["Cart"],
        responses={200: OpenApiResponse(description="Item removed"), 404: OpenApiResponse(description="Item not found in cart")},
    )
    def delete(self, request, item_id):
        CartService.remove_item(request.user, item_id)
        return Response(standardized_response(message="Item removed from cart"))


@extend_schema(
    tags=["Cart"],
    request=None,
    responses={200: CartItemSerializer, 404: OpenApiResponse(description="Item not found in cart")},
    description="Remove one unit of an item; the item is removed when its quantity reaches zero."
)
class DecreaseCartItemView(BaseAPIView):
    permission_classes = [IsAuthenticated]

    def post(self, request, item_id):
        item = CartService.decrease_item_quantity(request.user, item_id)
        if item is None:
            return Response(standardized_response(message="Item removed from cart"))
        return Response(standardized_response(data=CartItemSerializer(item).data, message="Cart item updated"))


@extend_schema(
    tags=["Cart"],
    request=SetShippingAddressSerializer,
    responses={200: CartSerializer, 404: OpenApiResponse(description="Shipping address not found")},
)
class CartShippingAddressView(BaseAPIView):
    permission_classes = [IsAuthenticated]

    def put(self, request):
        serializer = SetShippingAddressSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        CartService.set_shipping_address(request.user, serializer.validated_data['shipping_address_id'])
        cart = CartService.get_cart(request.user)
        return Response(standardized_response(data=CartSerializer(cart).data, message="Shipping address set"))


# ======================================================
# SHIPPING ADDRESS VIEWS
# ======================================================
class ShippingAddressListCreateView(BaseAPIView, generics.ListCreateAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = ShippingAddressSerializer

    def get_queryset(self):
        return ShippingAddress.objects.filter(user=self.request.user)

    @extend_schema(tags=["Addresses"], responses={200: ShippingAddressSerializer(many=True)})
    def list(self, request, *args, **kwargs):
        serializer = self.get_serializer(self.get_queryset(), many=True)
        return Response(standardized_response(data=serializer.data))

    @extend_schema(
        tags=["Addresses"],
        request=ShippingAddressSerializer,
        responses={201: ShippingAddressSerializer, 400: OpenApiResponse(description="Invalid input")},
    )
    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        serializer.save(user=request.user)
        return Response(
            standardized_response(data=serializer.data, message="Shipping address created"),
            status=status.HTTP_201_CREATED
        )
