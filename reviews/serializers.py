from rest_framework import serializers

from .models import Review
from .selectors import SORT_ORDERS


class ReviewCreateSerializer(serializers.Serializer):
    rating = serializers.IntegerField(min_value=1, max_value=5)
    title = serializers.CharField(max_length=100)
    comment = serializers.CharField(max_length=1000)
    pros = serializers.ListField(child=serializers.CharField(max_length=200), required=False, max_length=10)
    cons = serializers.ListField(child=serializers.CharField(max_length=200), required=False, max_length=10)


class ReviewQuerySerializer(serializers.Serializer):
    sort = serializers.ChoiceField(choices=list(SORT_ORDERS), default="newest")


class ReportSerializer(serializers.Serializer):
    reason = serializers.CharField(max_length=500)


class RejectSerializer(serializers.Serializer):
    reason = serializers.CharField(max_length=1000, required=False, allow_blank=True, default="")


class RespondSerializer(serializers.Serializer):
    response = serializers.CharField(max_length=1000)


class ReviewSerializer(serializers.ModelSerializer):
    """Public shape: the author is shown by first name and initial only."""

    author = serializers.CharField(source="author_name", read_only=True)

    class Meta:
        model = Review
        fields = [
            "id",
            "product",
            "author",
            "rating",
            "title",
            "comment",
            "pros",
            "cons",
            "is_verified_purchase",
            "helpful_votes",
            "response_comment",
            "responded_at",
            "created_at",
        ]
        read_only_fields = fields


class ReviewAdminSerializer(ReviewSerializer):
    user_email = serializers.EmailField(source="user.email", read_only=True)
    product_name = serializers.CharField(source="product.name", read_only=True)

    class Meta(ReviewSerializer.Meta):
        fields = ReviewSerializer.Meta.fields + [
            "user",
            "user_email",
            "product_name",
            "order",
            "status",
            "moderated_by",
            "moderated_at",
            "admin_notes",
            "is_reported",
            "report_reason",
            "reported_at",
            "responded_by",
        ]
        read_only_fields = fields
