"""Review routes, mounted at /api/reviews/."""

from django.urls import path

from .views import (
    AdminPendingReviewsView,
    AdminReportedReviewsView,
    ProductReviewsView,
    ReviewApproveView,
    ReviewHelpfulView,
    ReviewRejectView,
    ReviewReportView,
    ReviewRespondView,
)

urlpatterns = [
    path("product/<int:product_id>/", ProductReviewsView.as_view(), name="product-reviews"),
    path("admin/pending/", AdminPendingReviewsView.as_view(), name="review-admin-pending"),
    path("admin/reported/", AdminReportedReviewsView.as_view(), name="review-admin-reported"),
    path("<int:pk>/helpful/", ReviewHelpfulView.as_view(), name="review-helpful"),
    path("<int:pk>/report/", ReviewReportView.as_view(), name="review-report"),
    path("<int:pk>/approve/", ReviewApproveView.as_view(), name="review-approve"),
    path("<int:pk>/reject/", ReviewRejectView.as_view(), name="review-reject"),
    path("<int:pk>/respond/", ReviewRespondView.as_view(), name="review-respond"),
]
