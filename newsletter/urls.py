"""Newsletter routes, mounted at /api/newsletter/."""

from django.urls import path

from .views import (
    AdminSubscriberDeleteView,
    AdminSubscriberListView,
    ConfirmView,
    NewsletterStatsView,
    PreferencesView,
    SendCampaignView,
    SubscribeView,
    UnsubscribeView,
)

urlpatterns = [
    path("subscribe/", SubscribeView.as_view(), name="newsletter-subscribe"),
    path("confirm/<str:token>/", ConfirmView.as_view(), name="newsletter-confirm"),
    path("unsubscribe/<str:token>/", UnsubscribeView.as_view(), name="newsletter-unsubscribe"),
    path("preferences/<str:token>/", PreferencesView.as_view(), name="newsletter-preferences"),
    path("admin/subscribers/", AdminSubscriberListView.as_view(), name="newsletter-admin-list"),
    path("admin/send-campaign/", SendCampaignView.as_view(), name="newsletter-send-campaign"),
    path("admin/stats/", NewsletterStatsView.as_view(), name="newsletter-stats"),
    path("admin/subscriber/<int:pk>/", AdminSubscriberDeleteView.as_view(), name="newsletter-admin-delete"),
]
