from django.urls import path
from .views import (
    CategoryListView, CategoryProductListView,
    ProductListView, ProductDetailView, ProductVariantDetailView,
    CartView, AddToCartView, ClearCartView, CartItemView, DecreaseCartItemView,
    CartShippingAddressView, ShippingAddressListCreateView,
)

urlpatterns = [
    # Catalog
    path('categories/', CategoryListView.as_view(), name='category-list'),
    path('categories/<slug:slug>/products/', CategoryProductListView.as_view(), name='category-products'),
    path('products/', ProductListView.as_view(), name='product-list'),
    path('products/<slug:slug>/', ProductDetailView.as_view(), name='product-detail'),
    path('variants/<slug:slug>/', ProductVariantDetailView.as_view(), name='variant-detail'),

    # Cart
    path('cart/', CartView.as_view(), name='cart-view'),
    path('cart/add/', AddToCartView.as_view(), name='add-to-cart'),
    path('cart/clear/', ClearCartView.as_view(), name='clear-cart'),
    path('cart/items/<uuid:item_id>/', CartItemView.as_view(), name='cart-item'),
    path('cart/items/<uuid:item_id>/decrease/', DecreaseCartItemView.as_view(), name='cart-item-decrease'),
    path('cart/shipping-address/', CartShippingAddressView.as_view(), name='cart-shipping-address'),

    # Shipping addresses
    path('addresses/', ShippingAddressListCreateView.as_view(), name='shipping-address-list'),
]
