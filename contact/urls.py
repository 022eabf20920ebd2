"""Contact routes, mounted at /api/contact/."""

from django.urls import path

from .views import (
    AdminContactDetailView,
    AdminContactListView,
    ContactAssignView,
    ContactCategoriesView,
    ContactCloseView,
    ContactCreateView,
    ContactReplyView,
    ContactResolveView,
    ContactSpamView,
)

urlpatterns = [
    path("", ContactCreateView.as_view(), name="contact-create"),
    path("categories/", ContactCategoriesView.as_view(), name="contact-categories"),
    path("admin/all/", AdminContactListView.as_view(), name="contact-admin-list"),
    path("admin/<int:pk>/", AdminContactDetailView.as_view(), name="contact-admin-detail"),
    path("<int:pk>/assign/", ContactAssignView.as_view(), name="contact-assign"),
    path("<int:pk>/reply/", ContactReplyView.as_view(), name="contact-reply"),
    path("<int:pk>/resolve/", ContactResolveView.as_view(), name="contact-resolve"),
    path("<int:pk>/close/", ContactCloseView.as_view(), name="contact-close"),
    path("<int:pk>/spam/", ContactSpamView.as_view(), name="contact-spam"),
]
