"""Rental routes, mounted at /api/rentals/."""

from django.urls import path

from .views import (
    AdminRentalListView,
    EquipmentListView,
    QuoteView,
    RentalDetailView,
    RentalExtendView,
    RentalListCreateView,
    RentalStatusView,
)

urlpatterns = [
    path("", RentalListCreateView.as_view(), name="rental-list"),
    path("equipment/", EquipmentListView.as_view(), name="rental-equipment"),
    path("quote/", QuoteView.as_view(), name="rental-quote"),
    path("admin/all/", AdminRentalListView.as_view(), name="rental-admin-list"),
    path("<int:rental_id>/", RentalDetailView.as_view(), name="rental-detail"),
    path("<int:rental_id>/extend/", RentalExtendView.as_view(), name="rental-extend"),
    path("<int:rental_id>/status/", RentalStatusView.as_view(), name="rental-status"),
]
