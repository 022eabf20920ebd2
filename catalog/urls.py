"""URL routes for the public catalog, mounted at /api/products/."""

from django.urls import path

from .views import ProductViewSet

product_list = ProductViewSet.as_view({"get": "list"})
product_categories = ProductViewSet.as_view({"get": "categories"})
product_detail = ProductViewSet.as_view({"get": "retrieve"})

urlpatterns = [
    path("", product_list, name="product-list"),
    path("categories/", product_categories, name="product-categories"),
    path("<slug:slug>/", product_detail, name="product-detail"),
]
