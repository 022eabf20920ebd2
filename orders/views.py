"""Orders API endpoints.

Checkout, pay and cancel are idempotent when the client sends an
``Idempotency-Key`` header: the first response is stored and replayed.
"""

from common.responses import envelope
from common.throttling import DEFAULT_THROTTLES
from django.db.models import Count, Q, Sum
from django.shortcuts import get_object_or_404
from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiExample, OpenApiParameter, extend_schema
from rest_framework import generics, status
from rest_framework.exceptions import PermissionDenied
from rest_framework.permissions import IsAdminUser, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from .models import Order
from .serializers import (
    AdminOrderFilterSerializer,
    CancelSerializer,
    OrderCreateSerializer,
    OrderDetailSerializer,
    OrderSerializer,
    OrderStatusUpdateSerializer,
)
from .services import (
    OrderError,
    cancel_order,
    compute_request_hash,
    create_order,
    money,
    pay_order,
    transition_order,
    with_idempotency,
)

IDEMPOTENCY_HEADER = OpenApiParameter(
    name="Idempotency-Key",
    location=OpenApiParameter.HEADER,
    required=False,
    description="Makes the request idempotent within scope+path+method",
    type=str,
)


def _error(exc: OrderError) -> tuple[dict, int]:
    extra = {"unavailableItems": exc.items} if exc.items else {}
    return envelope(False, message=str(exc), **extra), 400


def _respond(request, handler) -> Response:
    idem_key = request.headers.get("Idempotency-Key")
    if idem_key:
        body, code = with_idempotency(
            key=idem_key,
            user=request.user,
            path=str(request.path),
            method=str(request.method),
            request_hash=compute_request_hash(getattr(request, "data", None)),
            handler=handler,
        )
    else:
        body, code = handler()
    return Response(body, status=code)


def _owned_order(request, order_id: int, allow_staff: bool = True) -> Order:
    order = get_object_or_404(Order.objects.prefetch_related("items", "status_history"), pk=order_id)
    if order.user_id != request.user.id and not (allow_staff and request.user.is_staff):
        raise PermissionDenied("You do not have access to this order.")
    return order


class OrderListCreateView(generics.ListCreateAPIView):
    permission_classes = [IsAuthenticated]
    throttle_classes = DEFAULT_THROTTLES

    def get_throttles(self):
        self.throttle_scope = "orders_write" if self.request.method == "POST" else "orders"
        return super().get_throttles()

    def get_queryset(self):
        qs = Order.objects.filter(user_id=self.request.user.id).prefetch_related("items")
        status_param = self.request.query_params.get("status")
        if status_param:
            qs = qs.filter(status=status_param)
        return qs

    def get_serializer_class(self):
        return OrderCreateSerializer if self.request.method == "POST" else OrderSerializer

    @extend_schema(
        tags=["Orders"],
        summary="List my orders",
        parameters=[
            OpenApiParameter("status", OpenApiTypes.STR, location="query"),
            OpenApiParameter("page", OpenApiTypes.INT, location="query"),
            OpenApiParameter("limit", OpenApiTypes.INT, location="query"),
        ],
        responses=OrderSerializer(many=True),
    )
    def get(self, request, *args, **kwargs):
        return super().get(request, *args, **kwargs)

    @extend_schema(
        tags=["Orders"],
        summary="Place order",
        description=(
            "Checks stock, snapshots sale-adjusted prices, adds 21% VAT and shipping "
            "(free when picking up or from 50 EUR) and deducts stock."
        ),
        parameters=[IDEMPOTENCY_HEADER],
        request=OrderCreateSerializer,
        responses={201: OrderDetailSerializer},
        examples=[
            OpenApiExample(
                "Checkout",
                value={
                    "items": [{"productId": 3, "quantity": 1}],
                    "paymentMethod": "card",
                    "shippingAddress": {"street": "Carrer Major 1", "city": "Girona", "postalCode": "17001"},
                },
                request_only=True,
            )
        ],
    )
    def post(self, request, *args, **kwargs):
        serializer = OrderCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        def _handler():
            try:
                order = create_order(request.user, serializer.validated_data)
            except OrderError as exc:
                return _error(exc)
            body = envelope(True, message="Order created", data={"order": OrderDetailSerializer(order).data})
            return body, status.HTTP_201_CREATED

        return _respond(request, _handler)


class OrderDetailView(APIView):
    permission_classes = [IsAuthenticated]
    throttle_scope = "orders"
    throttle_classes = DEFAULT_THROTTLES

    @extend_schema(tags=["Orders"], summary="Get order", responses=OrderDetailSerializer)
    def get(self, request, order_id: int):
        order = _owned_order(request, order_id)
        return Response(envelope(True, data={"order": OrderDetailSerializer(order).data}))


class OrderCancelView(APIView):
    """Cancel a pending or confirmed order for its owner; stock is restored."""

    permission_classes = [IsAuthenticated]
    throttle_scope = "orders_write"
    throttle_classes = DEFAULT_THROTTLES

    @extend_schema(
        tags=["Orders"],
        summary="Cancel order",
        description="Cancels a `pending` or `confirmed` order. Idempotent when Idempotency-Key header is set.",
        parameters=[IDEMPOTENCY_HEADER],
        request=CancelSerializer,
    )
    def put(self, request, order_id: int):
        order = _owned_order(request, order_id, allow_staff=False)
        serializer = CancelSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        def _handler():
            try:
                updated = cancel_order(order, reason=serializer.validated_data["reason"], updated_by=request.user)
            except OrderError as exc:
                return _error(exc)
            return envelope(True, message="Order cancelled", data={"order": OrderDetailSerializer(updated).data}), 200

        return _respond(request, _handler)


class OrderPayView(APIView):
    """Mark an order as paid for the authenticated owner."""

    permission_classes = [IsAuthenticated]
    throttle_scope = "orders_write"
    throttle_classes = DEFAULT_THROTTLES

    @extend_schema(
        tags=["Orders"],
        summary="Pay order",
        description="Records payment and confirms a pending order. Idempotent when Idempotency-Key header is set.",
        parameters=[IDEMPOTENCY_HEADER],
        request=None,
    )
    def post(self, request, order_id: int):
        order = _owned_order(request, order_id, allow_staff=False)

        def _handler():
            try:
                updated = pay_order(order, updated_by=request.user)
            except OrderError as exc:
                return _error(exc)
            return envelope(True, message="Payment recorded", data={"order": OrderDetailSerializer(updated).data}), 200

        return _respond(request, _handler)


class OrderStatusView(APIView):
    permission_classes = [IsAdminUser]
    throttle_scope = "orders_write"
    throttle_classes = DEFAULT_THROTTLES

    @extend_schema(
        tags=["Orders"],
        summary="Update order status (staff)",
        description="Applies a fulfilment transition; cancelling restores stock.",
        request=OrderStatusUpdateSerializer,
    )
    def put(self, request, order_id: int):
        order = get_object_or_404(Order, pk=order_id)
        serializer = OrderStatusUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            order = transition_order(order, updated_by=request.user, **serializer.validated_data)
        except OrderError as exc:
            body, code = _error(exc)
            return Response(body, status=code)
        return Response(
            envelope(True, message="Order status updated", data={"order": OrderDetailSerializer(order).data})
        )


class AdminOrderListView(generics.ListAPIView):
    """All orders with filters; the page carries per-status counts and revenue."""

    permission_classes = [IsAdminUser]
    serializer_class = OrderDetailSerializer
    throttle_scope = "orders"
    throttle_classes = DEFAULT_THROTTLES

    def get_queryset(self):
        params = AdminOrderFilterSerializer(data=self.request.query_params)
        params.is_valid(raise_exception=True)
        filters = params.validated_data
        qs = Order.objects.select_related("user").prefetch_related("items", "status_history")
        if filters.get("status"):
            qs = qs.filter(status=filters["status"])
        if filters.get("payment_status"):
            qs = qs.filter(payment_status=filters["payment_status"])
        if filters.get("start"):
            qs = qs.filter(created_at__date__gte=filters["start"])
        if filters.get("end"):
            qs = qs.filter(created_at__date__lte=filters["end"])
        if filters.get("search"):
            term = filters["search"]
            qs = qs.filter(
                Q(number__icontains=term)
                | Q(shipping_first_name__icontains=term)
                | Q(shipping_last_name__icontains=term)
                | Q(tracking_number__icontains=term)
                | Q(email__icontains=term)
            )
        return qs

    def get_paginated_response(self, data):
        return self.paginator.get_response(data, stats=self.status_stats())

    @staticmethod
    def status_stats() -> dict:
        rows = Order.objects.values("status").annotate(count=Count("id"), revenue=Sum("total_amount"))
        return {row["status"]: {"count": row["count"], "revenue": str(money(row["revenue"] or 0))} for row in rows}

    @extend_schema(
        tags=["Orders"],
        summary="List all orders (staff)",
        parameters=[
            OpenApiParameter("status", OpenApiTypes.STR, location="query"),
            OpenApiParameter("paymentStatus", OpenApiTypes.STR, location="query"),
            OpenApiParameter("startDate", OpenApiTypes.DATE, location="query"),
            OpenApiParameter("endDate", OpenApiTypes.DATE, location="query"),
            OpenApiParameter("search", OpenApiTypes.STR, location="query"),
            OpenApiParameter("page", OpenApiTypes.INT, location="query"),
            OpenApiParameter("limit", OpenApiTypes.INT, location="query"),
        ],
    )
    def get(self, request, *args, **kwargs):
        return super().get(request, *args, **kwargs)
