"""Read-only storefront endpoints for products."""

from common.choices import ProductCategory
from common.responses import envelope
from common.throttling import DEFAULT_THROTTLES
from common.views import EnvelopeMixin
from django_filters import rest_framework as filters
from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiExample, OpenApiParameter, extend_schema, extend_schema_view
from rest_framework import filters as drf_filters
from rest_framework import viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from . import selectors
from .models import Product
from .serializers import ProductDetailSerializer, ProductListSerializer


class ProductFilterSet(filters.FilterSet):
    category = filters.ChoiceFilter(field_name="category", choices=ProductCategory.choices)
    brand = filters.CharFilter(field_name="brand", lookup_expr="iexact")
    featured = filters.BooleanFilter(field_name="is_featured")
    onSale = filters.BooleanFilter(field_name="is_on_sale")
    forRental = filters.BooleanFilter(field_name="is_for_rental")
    minPrice = filters.NumberFilter(field_name="price", lookup_expr="gte")
    maxPrice = filters.NumberFilter(field_name="price", lookup_expr="lte")

    class Meta:
        model = Product
        fields = ["category", "brand", "featured", "onSale", "forRental", "minPrice", "maxPrice"]


@extend_schema_view(
    list=extend_schema(
        summary="List products",
        description=(
            "Returns available products. Filters: `category`, `brand`, `featured`, `onSale`, `forRental`, "
            "`minPrice`, `maxPrice`. Search with `search`; order with `ordering` "
            "(`name`, `price`, `created_at`, `average_rating`, prefix `-` for descending)."
        ),
        tags=["Catalog Endpoints"],
        parameters=[
            OpenApiParameter("category", OpenApiTypes.STR, location="query", description="Category value"),
            OpenApiParameter("brand", OpenApiTypes.STR, location="query", description="Brand (case-insensitive)"),
            OpenApiParameter("featured", OpenApiTypes.BOOL, location="query"),
            OpenApiParameter("onSale", OpenApiTypes.BOOL, location="query"),
            OpenApiParameter("forRental", OpenApiTypes.BOOL, location="query"),
            OpenApiParameter("minPrice", OpenApiTypes.NUMBER, location="query"),
            OpenApiParameter("maxPrice", OpenApiTypes.NUMBER, location="query"),
            OpenApiParameter("page", OpenApiTypes.INT, location="query"),
            OpenApiParameter("limit", OpenApiTypes.INT, location="query"),
        ],
    ),
    retrieve=extend_schema(
        summary="Get product by slug",
        description="Returns a single available product",
        tags=["Catalog Endpoints"],
    ),
)
class ProductViewSet(EnvelopeMixin, viewsets.ReadOnlyModelViewSet):
    lookup_field = "slug"
    lookup_value_regex = "[^/]+"
    envelope_key = "product"
    filterset_class = ProductFilterSet
    filter_backends = [filters.DjangoFilterBackend, drf_filters.OrderingFilter, drf_filters.SearchFilter]
    ordering_fields = ["name", "price", "created_at", "average_rating"]
    search_fields = ["name", "description", "brand", "model"]
    throttle_scope = "catalog"
    throttle_classes = DEFAULT_THROTTLES

    def get_queryset(self):
        return selectors.list_products()

    def get_serializer_class(self):
        return ProductDetailSerializer if self.action == "retrieve" else ProductListSerializer

    @extend_schema(
        tags=["Catalog Endpoints"],
        summary="List categories",
        description="Returns every product category with the number of available products in it",
        examples=[
            OpenApiExample(
                "Categories",
                value={
                    "success": True,
                    "data": {"categories": [{"value": "guitars", "label": "Guitars", "count": 12}]},
                },
                response_only=True,
            )
        ],
    )
    @action(detail=False, methods=["get"], url_path="categories")
    def categories(self, request):
        counts = selectors.category_counts()
        data = [
            {"value": value, "label": label, "count": counts.get(value, 0)} for value, label in ProductCategory.choices
        ]
        return Response(envelope(True, data={"categories": data}))
