"""Order routes, mounted at /api/orders/."""

from django.urls import path

from .views import (
    AdminOrderListView,
    OrderCancelView,
    OrderDetailView,
    OrderListCreateView,
    OrderPayView,
    OrderStatusView,
)

urlpatterns = [
    path("", OrderListCreateView.as_view(), name="order-list"),
    path("admin/all/", AdminOrderListView.as_view(), name="order-admin-list"),
    path("<int:order_id>/", OrderDetailView.as_view(), name="order-detail"),
    path("<int:order_id>/pay/", OrderPayView.as_view(), name="order-pay"),
    path("<int:order_id>/cancel/", OrderCancelView.as_view(), name="order-cancel"),
    path("<int:order_id>/status/", OrderStatusView.as_view(), name="order-status"),
]
