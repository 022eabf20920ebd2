"""Reviews API endpoints.

Published reviews of a product are public. Writing, reporting and voting
need an account; moderation is staff-only.
"""

from typing import Optional

from catalog.models import Product
from common.pagination import EnvelopePagination
from common.responses import fail, ok
from common.throttling import DEFAULT_THROTTLES
from django.shortcuts import get_object_or_404
from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiExample, OpenApiParameter, extend_schema
from rest_framework import generics, status
from rest_framework.permissions import AllowAny, IsAdminUser, IsAuthenticated
from rest_framework.views import APIView

from .models import Review
from .selectors import SORT_ORDERS, moderation_queue, published_reviews, rating_breakdown, reported_reviews
from .serializers import (
    RejectSerializer,
    ReportSerializer,
    RespondSerializer,
    ReviewAdminSerializer,
    ReviewCreateSerializer,
    ReviewQuerySerializer,
    ReviewSerializer,
)
from .services import (
    ReviewError,
    approve_review,
    reject_review,
    report_review,
    respond_to_review,
    submit_review,
    toggle_helpful,
)


class ReviewPagination(EnvelopePagination):
    page_size = 10


class ProductReviewsView(generics.ListAPIView):
    serializer_class = ReviewSerializer
    pagination_class = ReviewPagination
    throttle_classes = DEFAULT_THROTTLES

    def get_permissions(self):
        if self.request.method == "POST":
            return [IsAuthenticated()]
        return [AllowAny()]

    def get_throttles(self):
        self.throttle_scope = "reviews_write" if self.request.method == "POST" else "reviews"
        return super().get_throttles()

    def get_product(self) -> Product:
        return get_object_or_404(Product, pk=self.kwargs["product_id"])

    def get_queryset(self):
        query = ReviewQuerySerializer(data=self.request.query_params)
        query.is_valid(raise_exception=True)
        return published_reviews(self.get_product().pk, query.validated_data["sort"])

    def get_paginated_response(self, data):
        return self.paginator.get_response(data, ratingStats=rating_breakdown(self.kwargs["product_id"]))

    @extend_schema(
        tags=["Reviews"],
        summary="List published reviews of a product",
        description="Approved reviews only, with the count of reviews per star under `ratingStats`.",
        parameters=[
            OpenApiParameter("sort", OpenApiTypes.STR, location="query", enum=list(SORT_ORDERS)),
            OpenApiParameter("page", OpenApiTypes.INT, location="query"),
            OpenApiParameter("limit", OpenApiTypes.INT, location="query"),
        ],
    )
    def get(self, request, *args, **kwargs):
        return super().get(request, *args, **kwargs)

    @extend_schema(
        tags=["Reviews"],
        summary="Review a product",
        description=(
            "One review per customer and product. The review is held for moderation; "
            "it is flagged as a verified purchase when the customer has a delivered order for the product."
        ),
        request=ReviewCreateSerializer,
        examples=[
            OpenApiExample(
                "Review request",
                value={"rating": 5, "title": "Great action", "comment": "Plays like a dream.", "pros": ["Neck"]},
                request_only=True,
            )
        ],
    )
    def post(self, request, product_id: int):
        product = self.get_product()
        serializer = ReviewCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            review = submit_review(request.user, product, serializer.validated_data)
        except ReviewError as exc:
            return fail(str(exc))
        return ok(
            {"review": ReviewSerializer(review).data},
            message="Review submitted. It will be published after moderation.",
            status=status.HTTP_201_CREATED,
        )


class PublishedReviewView(APIView):
    """Base for customer actions on a published review."""

    permission_classes = [IsAuthenticated]
    throttle_scope = "reviews_write"
    throttle_classes = DEFAULT_THROTTLES

    def get_review(self, pk: int) -> Review:
        return get_object_or_404(Review, pk=pk, status=Review.STATUS_APPROVED)


class ReviewHelpfulView(PublishedReviewView):
    @extend_schema(
        tags=["Reviews"],
        summary="Toggle helpful mark",
        description="Marks the review as helpful for the caller, or withdraws an earlier mark.",
        request=None,
    )
    def post(self, request, pk: int):
        votes, has_voted = toggle_helpful(self.get_review(pk), request.user)
        return ok(
            {"helpfulVotes": votes, "hasVoted": has_voted},
            message="Marked as helpful" if has_voted else "Vote removed",
        )


class ReviewReportView(PublishedReviewView):
    @extend_schema(tags=["Reviews"], summary="Report a review", request=ReportSerializer)
    def post(self, request, pk: int):
        review = self.get_review(pk)
        serializer = ReportSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        report_review(review, serializer.validated_data["reason"], by=request.user)
        return ok(message="Review reported")


class AdminReviewListView(generics.ListAPIView):
    permission_classes = [IsAdminUser]
    serializer_class = ReviewAdminSerializer
    throttle_scope = "reviews"
    throttle_classes = DEFAULT_THROTTLES


class AdminPendingReviewsView(AdminReviewListView):
    def get_queryset(self):
        return moderation_queue()

    @extend_schema(tags=["Reviews"], summary="Reviews awaiting moderation (staff)")
    def get(self, request, *args, **kwargs):
        return super().get(request, *args, **kwargs)


class AdminReportedReviewsView(AdminReviewListView):
    def get_queryset(self):
        return reported_reviews()

    @extend_schema(tags=["Reviews"], summary="Reported reviews (staff)")
    def get(self, request, *args, **kwargs):
        return super().get(request, *args, **kwargs)


class ReviewModerationView(APIView):
    """Base for staff actions on a single review."""

    permission_classes = [IsAdminUser]
    throttle_scope = "reviews_write"
    throttle_classes = DEFAULT_THROTTLES

    def get_review(self, pk: int) -> Review:
        return get_object_or_404(Review.objects.select_related("user", "product"), pk=pk)

    def respond(self, review: Review, message: Optional[str] = None):
        return ok({"review": ReviewAdminSerializer(review).data}, message=message)


class ReviewApproveView(ReviewModerationView):
    @extend_schema(
        tags=["Reviews"],
        summary="Approve a review",
        description="Publishes the review and recomputes the product rating.",
        request=None,
    )
    def post(self, request, pk: int):
        return self.respond(approve_review(self.get_review(pk), by=request.user), "Review approved")


class ReviewRejectView(ReviewModerationView):
    @extend_schema(tags=["Reviews"], summary="Reject a review", request=RejectSerializer)
    def post(self, request, pk: int):
        review = self.get_review(pk)
        serializer = RejectSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        review = reject_review(review, serializer.validated_data["reason"], by=request.user)
        return self.respond(review, "Review rejected")


class ReviewRespondView(ReviewModerationView):
    @extend_schema(tags=["Reviews"], summary="Answer a review publicly", request=RespondSerializer)
    def post(self, request, pk: int):
        review = self.get_review(pk)
        serializer = RespondSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        review = respond_to_review(review, serializer.validated_data["response"], by=request.user)
        return self.respond(review, "Response added")
