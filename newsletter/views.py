"""Newsletter API endpoints.

Subscribing and the token links sent by email are public; the subscriber
list, campaigns and statistics are staff-only.
"""

from common.responses import fail, ok
from common.throttling import DEFAULT_THROTTLES
from django.shortcuts import get_object_or_404
from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiExample, OpenApiParameter, extend_schema
from rest_framework import generics, status
from rest_framework.permissions import AllowAny, IsAdminUser
from rest_framework.views import APIView

from .models import Subscriber
from .selectors import list_stats, newsletter_stats, search_subscribers
from .serializers import (
    AdminSubscriberFilterSerializer,
    CampaignSerializer,
    PreferencesSerializer,
    SubscribeSerializer,
    SubscriberSerializer,
)
from .services import NewsletterError, confirm_subscription, send_campaign, subscribe, unsubscribe, update_preferences


class PublicNewsletterView(APIView):
    permission_classes = [AllowAny]
    throttle_scope = "newsletter"
    throttle_classes = DEFAULT_THROTTLES


class SubscribeView(PublicNewsletterView):
    @extend_schema(
        tags=["Newsletter"],
        summary="Subscribe to the newsletter",
        description=(
            "Creates an unconfirmed subscription and emails a confirmation link. "
            "A lapsed subscription with the same email is reactivated instead."
        ),
        request=SubscribeSerializer,
        examples=[
            OpenApiExample(
                "Subscribed",
                value={
                    "success": True,
                    "message": "Subscription successful. Check your email to confirm it.",
                    "data": {"email": "ana@example.com", "isConfirmed": False},
                },
                response_only=True,
                status_codes=["201"],
            )
        ],
    )
    def post(self, request):
        serializer = SubscribeSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            subscriber, created = subscribe(serializer.validated_data)
        except NewsletterError as exc:
            return fail(str(exc))
        data = {"email": subscriber.email, "isConfirmed": subscriber.is_confirmed}
        if created:
            return ok(
                data,
                message="Subscription successful. Check your email to confirm it.",
                status=status.HTTP_201_CREATED,
            )
        return ok(data, message="Welcome back! Your subscription has been reactivated.")


class ConfirmView(PublicNewsletterView):
    @extend_schema(tags=["Newsletter"], summary="Confirm a subscription", request=None)
    def post(self, request, token: str):
        try:
            subscriber = confirm_subscription(token)
        except NewsletterError as exc:
            return fail(str(exc))
        return ok({"email": subscriber.email}, message="Subscription confirmed")


class UnsubscribeView(PublicNewsletterView):
    @extend_schema(tags=["Newsletter"], summary="Unsubscribe", request=None)
    def post(self, request, token: str):
        try:
            subscriber = unsubscribe(token)
        except NewsletterError as exc:
            return fail(str(exc), status=status.HTTP_404_NOT_FOUND)
        return ok({"email": subscriber.email}, message="You have been unsubscribed")


class PreferencesView(PublicNewsletterView):
    @extend_schema(
        tags=["Newsletter"],
        summary="Update subscription preferences",
        description="Keyed by the unsubscribe token included in every newsletter email.",
        request=PreferencesSerializer,
    )
    def put(self, request, token: str):
        serializer = PreferencesSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            subscriber = update_preferences(
                token,
                preferences=serializer.validated_data.get("preferences"),
                categories=serializer.validated_data.get("categories"),
            )
        except NewsletterError as exc:
            return fail(str(exc), status=status.HTTP_404_NOT_FOUND)
        return ok(
            {"preferences": subscriber.preferences, "categories": subscriber.categories},
            message="Preferences updated",
        )


class AdminSubscriberListView(generics.ListAPIView):
    permission_classes = [IsAdminUser]
    serializer_class = SubscriberSerializer
    throttle_scope = "newsletter_admin"
    throttle_classes = DEFAULT_THROTTLES

    def get_queryset(self):
        params = AdminSubscriberFilterSerializer(data=self.request.query_params)
        params.is_valid(raise_exception=True)
        return search_subscribers(**params.validated_data)

    def get_paginated_response(self, data):
        return self.paginator.get_response(data, stats=list_stats())

    @extend_schema(
        tags=["Newsletter"],
        summary="List subscribers (staff)",
        parameters=[
            OpenApiParameter("isActive", OpenApiTypes.BOOL, location="query"),
            OpenApiParameter("confirmed", OpenApiTypes.BOOL, location="query"),
            OpenApiParameter("source", OpenApiTypes.STR, location="query"),
            OpenApiParameter("categories", OpenApiTypes.STR, location="query", description="Comma separated"),
            OpenApiParameter("startDate", OpenApiTypes.DATE, location="query"),
            OpenApiParameter("endDate", OpenApiTypes.DATE, location="query"),
            OpenApiParameter("search", OpenApiTypes.STR, location="query"),
            OpenApiParameter("page", OpenApiTypes.INT, location="query"),
            OpenApiParameter("limit", OpenApiTypes.INT, location="query"),
        ],
    )
    def get(self, request, *args, **kwargs):
        return super().get(request, *args, **kwargs)


class NewsletterAdminView(APIView):
    permission_classes = [IsAdminUser]
    throttle_scope = "newsletter_admin"
    throttle_classes = DEFAULT_THROTTLES


class SendCampaignView(NewsletterAdminView):
    @extend_schema(
        tags=["Newsletter"],
        summary="Send a campaign (staff)",
        description="Emails every active, confirmed subscriber in the target audience.",
        request=CampaignSerializer,
    )
    def post(self, request):
        serializer = CampaignSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            sent = send_campaign(**serializer.validated_data)
        except NewsletterError as exc:
            return fail(str(exc))
        return ok({"recipientCount": sent}, message=f"Campaign sent to {sent} subscribers")


class NewsletterStatsView(NewsletterAdminView):
    @extend_schema(tags=["Newsletter"], summary="Newsletter statistics (staff)")
    def get(self, request):
        return ok(newsletter_stats())


class AdminSubscriberDeleteView(NewsletterAdminView):
    @extend_schema(tags=["Newsletter"], summary="Delete a subscriber (staff)", request=None)
    def delete(self, request, pk: int):
        get_object_or_404(Subscriber, pk=pk).delete()
        return ok(message="Subscriber deleted")
