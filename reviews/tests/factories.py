import factory
from catalog.tests.factories import ProductFactory
from factory.django import DjangoModelFactory
from orders.models import Order, OrderItem
from orders.tests.factories import OrderFactory
from reviews.models import Review
from users.tests.factories import UserFactory


class ReviewFactory(DjangoModelFactory):
    class Meta:
        model = Review

    user = factory.SubFactory(UserFactory)
    product = factory.SubFactory(ProductFactory)
    rating = 4
    title = "Solid instrument"
    comment = "Stays in tune and the finish is flawless."
    status = Review.STATUS_APPROVED


def delivered_order(user, product):
    """A delivered order of ``user`` with one line for ``product``."""

    order = OrderFactory(user=user, status=Order.STATUS_DELIVERED)
    OrderItem.objects.create(
        order=order,
        product=product,
        product_name=product.name,
        quantity=1,
        unit_price=product.price,
        line_total=product.price,
    )
    return order
