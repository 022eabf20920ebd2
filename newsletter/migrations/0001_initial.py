import newsletter.models
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Subscriber",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("email", models.EmailField(max_length=254, unique=True)),
                ("first_name", models.CharField(blank=True, max_length=50)),
                ("last_name", models.CharField(blank=True, max_length=50)),
                ("preferences", models.JSONField(blank=True, default=newsletter.models.default_preferences)),
                ("categories", models.JSONField(blank=True, default=list)),
                ("tags", models.JSONField(blank=True, default=list)),
                (
                    "source",
                    models.CharField(
                        choices=[
                            ("website", "Website"),
                            ("store", "Store"),
                            ("concert", "Concert"),
                            ("social", "Social media"),
                            ("referral", "Referral"),
                            ("other", "Other"),
                        ],
                        default="website",
                        max_length=16,
                    ),
                ),
                ("is_active", models.BooleanField(default=True)),
                ("confirmation_token", models.CharField(blank=True, db_index=True, max_length=64)),
                ("confirmed_at", models.DateTimeField(blank=True, null=True)),
                (
                    "unsubscribe_token",
                    models.CharField(
                        default=newsletter.models.new_token, editable=False, max_length=64, unique=True
                    ),
                ),
                ("unsubscribed_at", models.DateTimeField(blank=True, null=True)),
                ("last_email_sent_at", models.DateTimeField(blank=True, null=True)),
                ("total_emails_sent", models.PositiveIntegerField(default=0)),
                ("bounce_count", models.PositiveSmallIntegerField(default=0)),
            ],
            options={
                "ordering": ["-created_at", "-id"],
                "indexes": [
                    models.Index(fields=["is_active", "confirmed_at"], name="subscriber_active_conf_idx")
                ],
            },
        ),
    ]
