"""Contact API endpoints.

The contact form is public (and tightly throttled); everything under the
message id is staff-only.
"""

from typing import Optional

from common.choices import ContactCategory
from common.responses import ok
from common.throttling import DEFAULT_THROTTLES
from django.shortcuts import get_object_or_404
from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiExample, OpenApiParameter, extend_schema
from rest_framework import generics, status
from rest_framework.permissions import AllowAny, IsAdminUser
from rest_framework.views import APIView

from .models import ContactMessage
from .selectors import inbox_stats, search_messages
from .serializers import (
    AdminContactFilterSerializer,
    AssignSerializer,
    ContactCreateSerializer,
    ContactMessageSerializer,
    ReplySerializer,
    ResolveSerializer,
)
from .services import assign_message, close_message, mark_spam, reply_to_message, resolve_message, submit_message

CATEGORY_DESCRIPTIONS = {
    ContactCategory.GENERAL: "General information about products or services",
    ContactCategory.PRODUCTS: "Questions about instruments and equipment",
    ContactCategory.ORDERS: "Order status, shipping and invoicing",
    ContactCategory.RENTALS: "Sound and lighting equipment rental",
    ContactCategory.CONCERTS: "Performances and bookings",
    ContactCategory.TECHNICAL_SUPPORT: "Technical help with purchased products",
    ContactCategory.WARRANTY: "Warranty claims",
    ContactCategory.COMPLAINTS: "Report a problem with a product or service",
    ContactCategory.SUGGESTIONS: "Ideas to improve our products or services",
    ContactCategory.PARTNERSHIPS: "Business proposals and collaborations",
    ContactCategory.PRESS: "Media enquiries",
    ContactCategory.OTHER: "Anything else",
}


class ContactCreateView(APIView):
    permission_classes = [AllowAny]
    throttle_scope = "contact"
    throttle_classes = DEFAULT_THROTTLES

    @extend_schema(
        tags=["Contact"],
        summary="Send a contact message",
        description=(
            "Stores the message with a priority derived from its category and a spam score. "
            "Answers with the ticket number and the estimated response time."
        ),
        request=ContactCreateSerializer,
        examples=[
            OpenApiExample(
                "Sent",
                value={
                    "success": True,
                    "message": "Your message has been sent. We will get back to you soon.",
                    "data": {"ticketNumber": "TCK240315001", "estimatedResponse": "2024-03-15T14:00:00+01:00"},
                },
                response_only=True,
                status_codes=["201"],
            )
        ],
    )
    def post(self, request):
        serializer = ContactCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        contact = submit_message(
            serializer.validated_data,
            user=request.user,
            meta={
                "ip_address": request.META.get("REMOTE_ADDR"),
                "user_agent": request.META.get("HTTP_USER_AGENT", ""),
                "referrer": request.META.get("HTTP_REFERER", ""),
            },
        )
        return ok(
            {"ticketNumber": contact.ticket_number, "estimatedResponse": contact.estimated_response_at.isoformat()},
            message="Your message has been sent. We will get back to you soon.",
            status=status.HTTP_201_CREATED,
        )


class ContactCategoriesView(APIView):
    permission_classes = [AllowAny]
    throttle_classes = DEFAULT_THROTTLES

    @extend_schema(tags=["Contact"], summary="List contact categories")
    def get(self, request):
        categories = [
            {"value": value, "label": label, "description": CATEGORY_DESCRIPTIONS.get(value, "")}
            for value, label in ContactCategory.choices
        ]
        return ok({"categories": categories})


class AdminContactListView(generics.ListAPIView):
    permission_classes = [IsAdminUser]
    serializer_class = ContactMessageSerializer
    throttle_scope = "contact_admin"
    throttle_classes = DEFAULT_THROTTLES

    def get_queryset(self):
        params = AdminContactFilterSerializer(data=self.request.query_params)
        params.is_valid(raise_exception=True)
        return search_messages(**params.validated_data)

    def get_paginated_response(self, data):
        return self.paginator.get_response(data, stats=inbox_stats())

    @extend_schema(
        tags=["Contact"],
        summary="Staff inbox",
        parameters=[
            OpenApiParameter("status", OpenApiTypes.STR, location="query"),
            OpenApiParameter("category", OpenApiTypes.STR, location="query"),
            OpenApiParameter("priority", OpenApiTypes.STR, location="query"),
            OpenApiParameter("assignedTo", OpenApiTypes.INT, location="query"),
            OpenApiParameter("startDate", OpenApiTypes.DATE, location="query"),
            OpenApiParameter("endDate", OpenApiTypes.DATE, location="query"),
            OpenApiParameter("search", OpenApiTypes.STR, location="query"),
            OpenApiParameter("includeSpam", OpenApiTypes.BOOL, location="query"),
            OpenApiParameter("page", OpenApiTypes.INT, location="query"),
            OpenApiParameter("limit", OpenApiTypes.INT, location="query"),
        ],
    )
    def get(self, request, *args, **kwargs):
        return super().get(request, *args, **kwargs)


class ContactAdminView(APIView):
    """Base for staff actions on a single message."""

    permission_classes = [IsAdminUser]
    throttle_scope = "contact_admin"
    throttle_classes = DEFAULT_THROTTLES

    def get_message(self, pk: int) -> ContactMessage:
        return get_object_or_404(ContactMessage, pk=pk)

    def respond(self, contact: ContactMessage, message: Optional[str] = None):
        return ok({"contact": ContactMessageSerializer(contact).data}, message=message)


class AdminContactDetailView(ContactAdminView):
    @extend_schema(tags=["Contact"], summary="Get contact message (staff)", responses=ContactMessageSerializer)
    def get(self, request, pk: int):
        return self.respond(self.get_message(pk))


class ContactAssignView(ContactAdminView):
    @extend_schema(
        tags=["Contact"],
        summary="Assign contact message",
        description="Assigns to `assignedTo` (a staff user id) or to the caller, and moves the message to in-progress.",
        request=AssignSerializer,
    )
    def put(self, request, pk: int):
        contact = self.get_message(pk)
        serializer = AssignSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        assignee = serializer.validated_data.get("assignee") or request.user
        return self.respond(assign_message(contact, assignee), "Message assigned")


class ContactReplyView(ContactAdminView):
    @extend_schema(tags=["Contact"], summary="Reply to contact message", request=ReplySerializer)
    def put(self, request, pk: int):
        contact = self.get_message(pk)
        serializer = ReplySerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        contact = reply_to_message(
            contact,
            serializer.validated_data["message"],
            responded_by=request.user,
            method=serializer.validated_data["method"],
        )
        return self.respond(contact, "Reply sent")


class ContactResolveView(ContactAdminView):
    @extend_schema(tags=["Contact"], summary="Resolve contact message", request=ResolveSerializer)
    def put(self, request, pk: int):
        contact = self.get_message(pk)
        serializer = ResolveSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        contact = resolve_message(contact, serializer.validated_data["resolution"], by=request.user)
        return self.respond(contact, "Message resolved")


class ContactCloseView(ContactAdminView):
    @extend_schema(tags=["Contact"], summary="Close contact message", request=None)
    def put(self, request, pk: int):
        return self.respond(close_message(self.get_message(pk), by=request.user), "Message closed")


class ContactSpamView(ContactAdminView):
    @extend_schema(tags=["Contact"], summary="Mark contact message as spam", request=None)
    def put(self, request, pk: int):
        return self.respond(mark_spam(self.get_message(pk), by=request.user), "Message marked as spam")
