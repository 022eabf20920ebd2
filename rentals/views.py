"""Rentals API endpoints.

Public: equipment listing with per-period availability and quoting.
Authenticated: booking, listing own rentals, detail, extension.
Staff: status transitions and the back-office listing.
"""

from catalog.selectors import list_rentable_products
from common.choices import RentalStatus
from common.fields import CalendarDateField
from common.pagination import EnvelopePagination
from common.responses import fail, ok
from common.throttling import DEFAULT_THROTTLES
from django.shortcuts import get_object_or_404
from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiExample, OpenApiParameter, extend_schema
from rest_framework import generics, serializers, status
from rest_framework.exceptions import PermissionDenied
from rest_framework.permissions import AllowAny, IsAdminUser, IsAuthenticated
from rest_framework.views import APIView

from . import selectors
from .models import Rental
from .serializers import (
    EquipmentQuerySerializer,
    ExtendSerializer,
    QuoteRequestSerializer,
    RentalAdminSerializer,
    RentalCreateSerializer,
    RentalDetailSerializer,
    RentalEquipmentSerializer,
    RentalSerializer,
    StatusUpdateSerializer,
)
from .services import RentalConflict, RentalError, build_quote, create_rental, extend_rental, transition_rental

UNAVAILABLE_MESSAGE = "Some equipment is not available for the selected dates"


class EquipmentPagination(EnvelopePagination):
    page_size = 12


def _owned_or_staff(request, rental_id) -> Rental:
    rental = get_object_or_404(Rental.objects.prefetch_related("items", "status_history"), pk=rental_id)
    if rental.user_id != request.user.id and not request.user.is_staff:
        raise PermissionDenied("You do not have access to this rental.")
    return rental


class EquipmentListView(generics.ListAPIView):
    """Rentable equipment, optionally annotated with availability for a period."""

    permission_classes = [AllowAny]
    serializer_class = RentalEquipmentSerializer
    pagination_class = EquipmentPagination
    throttle_scope = "rentals"
    throttle_classes = DEFAULT_THROTTLES

    def get_query_params(self) -> dict:
        if not hasattr(self, "_query"):
            query = EquipmentQuerySerializer(data=self.request.query_params)
            query.is_valid(raise_exception=True)
            self._query = query.validated_data
        return self._query

    def get_queryset(self):
        return list_rentable_products(category=self.get_query_params().get("category"))

    def get_serializer_context(self):
        ctx = super().get_serializer_context()
        ctx.update(self.get_query_params())
        return ctx

    @extend_schema(
        tags=["Rental Endpoints"],
        summary="List rentable equipment",
        description=(
            "Lists products offered for rent. When both `startDate` and `endDate` are given, each item "
            "includes `availableStock` for that period (stock minus units held by confirmed, preparing, "
            "ready and active rentals overlapping it)."
        ),
        parameters=[
            OpenApiParameter("category", OpenApiTypes.STR, location="query"),
            OpenApiParameter("startDate", OpenApiTypes.DATE, location="query"),
            OpenApiParameter("endDate", OpenApiTypes.DATE, location="query"),
            OpenApiParameter("page", OpenApiTypes.INT, location="query"),
            OpenApiParameter("limit", OpenApiTypes.INT, location="query"),
        ],
    )
    def get(self, request, *args, **kwargs):
        return super().get(request, *args, **kwargs)


class QuoteView(APIView):
    permission_classes = [AllowAny]
    throttle_scope = "rentals"
    throttle_classes = DEFAULT_THROTTLES

    @extend_schema(
        tags=["Rental Endpoints"],
        summary="Quote a rental",
        description=(
            "Prices equipment for a period without booking it. Responds 400 with `unavailableItems` "
            "when any line cannot be served."
        ),
        request=QuoteRequestSerializer,
        examples=[
            OpenApiExample(
                "Quote request",
                value={
                    "equipment": [{"productId": 7, "quantity": 3}],
                    "startDate": "2024-06-01",
                    "endDate": "2024-06-04",
                    "deliveryRequired": False,
                },
                request_only=True,
            ),
            OpenApiExample(
                "Quote",
                value={
                    "success": True,
                    "data": {
                        "quote": {
                            "equipmentItems": [
                                {
                                    "productId": 7,
                                    "name": "JBL EON715",
                                    "quantity": 3,
                                    "dailyRate": "20.00",
                                    "totalDays": 3,
                                    "subtotal": "180.00",
                                }
                            ],
                            "pricing": {
                                "subtotal": "180.00",
                                "deliveryFee": "0.00",
                                "setupFee": "0.00",
                                "totalAmount": "180.00",
                                "deposit": "54.00",
                            },
                            "rentalPeriod": {"startDate": "2024-06-01", "endDate": "2024-06-04", "totalDays": 3},
                            "deliveryRequired": False,
                            "validUntil": "2024-05-20T12:00:00+00:00",
                        }
                    },
                },
                response_only=True,
            ),
            OpenApiExample(
                "Unavailable",
                value={
                    "success": False,
                    "message": UNAVAILABLE_MESSAGE,
                    "unavailableItems": [
                        {
                            "productId": 7,
                            "productName": "JBL EON715",
                            "requested": 3,
                            "available": 2,
                            "reason": "Insufficient stock for the requested dates",
                        }
                    ],
                },
                response_only=True,
                status_codes=["400"],
            ),
        ],
    )
    def post(self, request):
        serializer = QuoteRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        try:
            result = build_quote(
                data["equipment"],
                data["start_date"],
                data["end_date"],
                delivery_required=data["delivery_required"],
                address=data.get("address"),
            )
        except RentalError as exc:
            return fail(str(exc))
        if not result.ok:
            return fail(UNAVAILABLE_MESSAGE, unavailableItems=result.unavailable_items)
        return ok({"quote": result.quote.as_dict()})


class RentalListCreateView(generics.ListCreateAPIView):
    permission_classes = [IsAuthenticated]
    throttle_classes = DEFAULT_THROTTLES

    def get_throttles(self):
        self.throttle_scope = "rentals_write" if self.request.method == "POST" else "rentals"
        return super().get_throttles()

    def get_queryset(self):
        return selectors.rentals_for_user(self.request.user, status=self.request.query_params.get("status"))

    def get_serializer_class(self):
        return RentalCreateSerializer if self.request.method == "POST" else RentalSerializer

    @extend_schema(
        tags=["Rental Endpoints"],
        summary="List my rentals",
        parameters=[
            OpenApiParameter("status", OpenApiTypes.STR, location="query", enum=RentalStatus.values),
            OpenApiParameter("page", OpenApiTypes.INT, location="query"),
            OpenApiParameter("limit", OpenApiTypes.INT, location="query"),
        ],
        responses=RentalSerializer(many=True),
    )
    def get(self, request, *args, **kwargs):
        return super().get(request, *args, **kwargs)

    @extend_schema(
        tags=["Rental Endpoints"],
        summary="Book equipment",
        description=(
            "Creates a rental in `pending` status after checking availability for every line. "
            "Responds 400 with `conflicts` when equipment is not available."
        ),
        request=RentalCreateSerializer,
        responses={201: RentalDetailSerializer},
    )
    def post(self, request, *args, **kwargs):
        serializer = RentalCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            rental = create_rental(request.user, serializer.validated_data)
        except RentalConflict as exc:
            return fail(UNAVAILABLE_MESSAGE, conflicts=exc.conflicts)
        except RentalError as exc:
            return fail(str(exc))
        return ok(
            {"rental": RentalDetailSerializer(rental).data},
            message="Rental request created",
            status=status.HTTP_201_CREATED,
        )


class RentalDetailView(APIView):
    permission_classes = [IsAuthenticated]
    throttle_scope = "rentals"
    throttle_classes = DEFAULT_THROTTLES

    @extend_schema(tags=["Rental Endpoints"], summary="Get rental", responses=RentalDetailSerializer)
    def get(self, request, rental_id: int):
        rental = _owned_or_staff(request, rental_id)
        serializer_class = RentalAdminSerializer if request.user.is_staff else RentalDetailSerializer
        return ok({"rental": serializer_class(rental).data})


class RentalExtendView(APIView):
    permission_classes = [IsAuthenticated]
    throttle_scope = "rentals_write"
    throttle_classes = DEFAULT_THROTTLES

    @extend_schema(
        tags=["Rental Endpoints"],
        summary="Extend rental",
        description=(
            "Moves the end date of an `active` or `confirmed` rental forward. The extra days are billed at "
            "the booked daily rates and checked for availability first."
        ),
        request=ExtendSerializer,
    )
    def put(self, request, rental_id: int):
        rental = _owned_or_staff(request, rental_id)
        serializer = ExtendSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            extension = extend_rental(rental, serializer.validated_data["new_end_date"], updated_by=request.user)
        except RentalConflict as exc:
            return fail(UNAVAILABLE_MESSAGE, conflicts=exc.conflicts)
        except RentalError as exc:
            return fail(str(exc))
        return ok(
            {
                "rental": RentalDetailSerializer(extension.rental).data,
                "additionalDays": extension.additional_days,
                "additionalCost": str(extension.additional_cost),
            },
            message="Rental extended",
        )


class RentalStatusView(APIView):
    permission_classes = [IsAdminUser]
    throttle_scope = "rentals_write"
    throttle_classes = DEFAULT_THROTTLES

    @extend_schema(
        tags=["Rental Endpoints"],
        summary="Update rental status (staff)",
        description="Applies a lifecycle transition; transitions outside the allowed table are rejected with 400.",
        request=StatusUpdateSerializer,
    )
    def put(self, request, rental_id: int):
        rental = get_object_or_404(Rental, pk=rental_id)
        serializer = StatusUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            rental = transition_rental(
                rental,
                serializer.validated_data["status"],
                note=serializer.validated_data["note"],
                updated_by=request.user,
            )
        except RentalConflict as exc:
            return fail(UNAVAILABLE_MESSAGE, conflicts=exc.conflicts)
        except RentalError as exc:
            return fail(str(exc))
        return ok({"rental": RentalAdminSerializer(rental).data}, message="Rental status updated")


class AdminRentalListView(generics.ListAPIView):
    permission_classes = [IsAdminUser]
    serializer_class = RentalAdminSerializer
    throttle_scope = "rentals"
    throttle_classes = DEFAULT_THROTTLES

    class FilterSerializer(serializers.Serializer):
        status = serializers.ChoiceField(choices=RentalStatus.choices, required=False)
        startDate = CalendarDateField(source="start", required=False)
        endDate = CalendarDateField(source="end", required=False)
        search = serializers.CharField(required=False)

    def get_queryset(self):
        params = self.FilterSerializer(data=self.request.query_params)
        params.is_valid(raise_exception=True)
        return selectors.search_rentals(**params.validated_data).prefetch_related("status_history")

    @extend_schema(
        tags=["Rental Endpoints"],
        summary="List all rentals (staff)",
        parameters=[
            OpenApiParameter("status", OpenApiTypes.STR, location="query", enum=RentalStatus.values),
            OpenApiParameter("startDate", OpenApiTypes.DATE, location="query"),
            OpenApiParameter("endDate", OpenApiTypes.DATE, location="query"),
            OpenApiParameter("search", OpenApiTypes.STR, location="query"),
            OpenApiParameter("page", OpenApiTypes.INT, location="query"),
            OpenApiParameter("limit", OpenApiTypes.INT, location="query"),
        ],
    )
    def get(self, request, *args, **kwargs):
        return super().get(request, *args, **kwargs)
