import factory
from django.utils import timezone
from factory.django import DjangoModelFactory
from newsletter.models import Subscriber


class SubscriberFactory(DjangoModelFactory):
    """An active, confirmed subscriber."""

    class Meta:
        model = Subscriber

    email = factory.Sequence(lambda n: f"fan{n}@example.com")
    first_name = factory.Faker("first_name")
    categories = factory.LazyFunction(lambda: ["guitars"])
    confirmed_at = factory.LazyFunction(timezone.now)


class PendingSubscriberFactory(SubscriberFactory):
    confirmed_at = None
    confirmation_token = factory.Sequence(lambda n: f"confirm-{n:04d}")
