"""Root URL configuration.

Public storefront routes live under ``/api/<domain>/``; staff-only write
endpoints sit next to them (``/api/admin/...`` or ``.../admin/...``).
"""

from django.contrib import admin
from django.urls import include, path
from drf_spectacular.views import SpectacularAPIView, SpectacularSwaggerView

from .health import health

admin.site.site_header = "Music Store Admin"
admin.site.index_title = "Back office"

urlpatterns = [
    path("admin/", admin.site.urls),
    # API schema and Swagger UI
    path("api/schema/", SpectacularAPIView.as_view(), name="api-schema"),
    path("api/docs/", SpectacularSwaggerView.as_view(url_name="api-schema"), name="api-docs"),
    # Healthcheck
    path("health/", health, name="health"),
    path("api/", include("users.urls")),
    path("api/products/", include("catalog.urls")),
    path("api/admin/", include("catalog.admin_urls")),
    path("api/rentals/", include("rentals.urls")),
    path("api/orders/", include("orders.urls")),
    path("api/contact/", include("contact.urls")),
    path("api/reviews/", include("reviews.urls")),
    path("api/newsletter/", include("newsletter.urls")),
]
