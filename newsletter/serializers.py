from common.choices import CampaignAudience, ProductCategory, SubscriberSource
from common.fields import CalendarDateField
from rest_framework import serializers

from .models import PREFERENCE_TOPICS, Subscriber


def _clean_preferences(value: dict) -> dict:
    unknown = sorted(set(value) - set(PREFERENCE_TOPICS))
    if unknown:
        raise serializers.ValidationError(f"Unknown topics: {', '.join(unknown)}")
    if any(not isinstance(flag, bool) for flag in value.values()):
        raise serializers.ValidationError("Topic preferences must be true or false")
    return value


class SubscribeSerializer(serializers.Serializer):
    email = serializers.EmailField()
    firstName = serializers.CharField(source="first_name", max_length=50, required=False, allow_blank=True)
    lastName = serializers.CharField(source="last_name", max_length=50, required=False, allow_blank=True)
    preferences = serializers.DictField(required=False)
    categories = serializers.ListField(
        child=serializers.ChoiceField(choices=ProductCategory.choices), required=False
    )
    source = serializers.ChoiceField(choices=SubscriberSource.choices, required=False)

    def validate_email(self, value: str) -> str:
        return value.strip().lower()

    def validate_preferences(self, value: dict) -> dict:
        return _clean_preferences(value)


class PreferencesSerializer(serializers.Serializer):
    preferences = serializers.DictField(required=False)
    categories = serializers.ListField(
        child=serializers.ChoiceField(choices=ProductCategory.choices), required=False
    )

    def validate_preferences(self, value: dict) -> dict:
        return _clean_preferences(value)


class CampaignSerializer(serializers.Serializer):
    subject = serializers.CharField(max_length=200)
    content = serializers.CharField()
    targetAudience = serializers.ChoiceField(
        source="audience", choices=CampaignAudience.choices, default=CampaignAudience.ALL
    )
    categories = serializers.ListField(
        child=serializers.ChoiceField(choices=ProductCategory.choices), required=False, default=list
    )
    customEmails = serializers.ListField(
        source="emails", child=serializers.EmailField(), required=False, default=list
    )

    def validate(self, attrs):
        if attrs["audience"] == CampaignAudience.CATEGORY and not attrs["categories"]:
            raise serializers.ValidationError({"categories": "Choose at least one category"})
        if attrs["audience"] == CampaignAudience.CUSTOM and not attrs["emails"]:
            raise serializers.ValidationError({"customEmails": "Provide at least one email"})
        return attrs


class AdminSubscriberFilterSerializer(serializers.Serializer):
    isActive = serializers.BooleanField(source="is_active", required=False, allow_null=True, default=None)
    confirmed = serializers.BooleanField(required=False, allow_null=True, default=None)
    source = serializers.ChoiceField(choices=SubscriberSource.choices, required=False)
    categories = serializers.CharField(required=False)
    startDate = CalendarDateField(source="start", required=False)
    endDate = CalendarDateField(source="end", required=False)
    search = serializers.CharField(required=False)

    def validate_categories(self, value: str) -> list[str]:
        return [category.strip() for category in value.split(",") if category.strip()]


class SubscriberSerializer(serializers.ModelSerializer):
    full_name = serializers.CharField(read_only=True)
    is_confirmed = serializers.BooleanField(read_only=True)

    class Meta:
        model = Subscriber
        fields = [
            "id",
            "email",
            "first_name",
            "last_name",
            "full_name",
            "preferences",
            "categories",
            "tags",
            "source",
            "is_active",
            "is_confirmed",
            "confirmed_at",
            "unsubscribed_at",
            "last_email_sent_at",
            "total_emails_sent",
            "bounce_count",
            "created_at",
        ]
        read_only_fields = fields
