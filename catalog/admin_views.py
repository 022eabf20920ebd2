"""Admin viewsets for write endpoints in the catalog app.

Endpoints are restricted to staff users and use scoped throttling.
"""

from common.throttling import DEFAULT_THROTTLES
from common.views import EnvelopeMixin
from django_filters import rest_framework as filters
from drf_spectacular.utils import extend_schema, extend_schema_view
from rest_framework import filters as drf_filters
from rest_framework import permissions, viewsets

from .admin_serializers import ProductAdminSerializer
from .models import Product


@extend_schema_view(
    list=extend_schema(tags=["Admin Endpoints"], summary="List products (admin)"),
    retrieve=extend_schema(tags=["Admin Endpoints"], summary="Get product (admin)"),
    create=extend_schema(tags=["Admin Endpoints"], summary="Create product"),
    update=extend_schema(tags=["Admin Endpoints"], summary="Update product"),
    partial_update=extend_schema(tags=["Admin Endpoints"], summary="Partial update product"),
    destroy=extend_schema(tags=["Admin Endpoints"], summary="Delete product"),
)
class ProductAdminViewSet(EnvelopeMixin, viewsets.ModelViewSet):
    """Staff CRUD over every product, including unavailable ones."""

    queryset = Product.objects.all().order_by("name")
    serializer_class = ProductAdminSerializer
    permission_classes = [permissions.IsAdminUser]
    throttle_scope = "catalog_admin_write"
    throttle_classes = DEFAULT_THROTTLES
    envelope_key = "product"
    filter_backends = [filters.DjangoFilterBackend, drf_filters.OrderingFilter, drf_filters.SearchFilter]
    filterset_fields = ["category", "is_available", "is_for_rental", "is_featured"]
    ordering_fields = ["name", "price", "stock", "created_at"]
    search_fields = ["name", "brand", "model", "slug"]
