from decimal import Decimal

import pytest
from catalog.tests.factories import ProductFactory
from orders.models import Order
from reviews.models import Review
from reviews.selectors import moderation_queue, published_reviews, rating_breakdown
from reviews.services import (
    ReviewError,
    approve_review,
    refresh_product_rating,
    reject_review,
    report_review,
    submit_review,
    toggle_helpful,
)
from users.tests.factories import StaffFactory, UserFactory

from .factories import ReviewFactory, delivered_order

REVIEW = {"rating": 5, "title": "Wonderful", "comment": "Best purchase this year."}


@pytest.mark.django_db
def test_submit_review_is_pending_and_unverified():
    review = submit_review(UserFactory(), ProductFactory(), REVIEW)

    assert review.status == Review.STATUS_PENDING
    assert review.is_verified_purchase is False
    assert review.order is None


@pytest.mark.django_db
def test_submit_review_verified_by_delivered_order():
    user, product = UserFactory(), ProductFactory()
    order = delivered_order(user, product)

    review = submit_review(user, product, REVIEW)

    assert review.is_verified_purchase is True
    assert review.order == order


@pytest.mark.django_db
def test_undelivered_order_does_not_verify_purchase():
    user, product = UserFactory(), ProductFactory()
    order = delivered_order(user, product)
    Order.objects.filter(pk=order.pk).update(status=Order.STATUS_SHIPPED)

    assert submit_review(user, product, REVIEW).is_verified_purchase is False


@pytest.mark.django_db
def test_one_review_per_user_and_product():
    user, product = UserFactory(), ProductFactory()
    submit_review(user, product, REVIEW)

    with pytest.raises(ReviewError, match="already reviewed"):
        submit_review(user, product, REVIEW)
    assert Review.objects.count() == 1


@pytest.mark.django_db
def test_approval_recomputes_product_rating():
    product = ProductFactory()
    ReviewFactory(product=product, rating=5)
    pending = ReviewFactory(product=product, rating=4, status=Review.STATUS_PENDING)
    refresh_product_rating(product.id)
    product.refresh_from_db()
    assert product.average_rating == Decimal("5.00")
    assert product.num_reviews == 1

    approve_review(pending, by=StaffFactory())
    product.refresh_from_db()
    assert product.average_rating == Decimal("4.50")
    assert product.num_reviews == 2

    approve_review(ReviewFactory(product=product, rating=4, status=Review.STATUS_PENDING))
    product.refresh_from_db()
    # 13 / 3 rounds to one decimal
    assert product.average_rating == Decimal("4.30")
    assert product.num_reviews == 3


@pytest.mark.django_db
def test_rejecting_a_published_review_removes_it_from_the_rating():
    staff = StaffFactory()
    product = ProductFactory()
    ReviewFactory(product=product, rating=5)
    low = ReviewFactory(product=product, rating=1)
    refresh_product_rating(product.id)

    review = reject_review(low, "Off-topic", by=staff)

    product.refresh_from_db()
    assert review.status == Review.STATUS_REJECTED
    assert review.admin_notes == "Off-topic"
    assert review.moderated_by == staff
    assert product.average_rating == Decimal("5.00")
    assert product.num_reviews == 1


@pytest.mark.django_db
def test_rating_resets_when_no_review_is_approved():
    product = ProductFactory()
    reject_review(ReviewFactory(product=product, rating=3))

    product.refresh_from_db()
    assert product.average_rating == Decimal("0")
    assert product.num_reviews == 0


@pytest.mark.django_db
def test_toggle_helpful_adds_and_withdraws():
    review = ReviewFactory()
    voter = UserFactory()

    assert toggle_helpful(review, voter) == (1, True)
    assert toggle_helpful(review, UserFactory()) == (2, True)
    assert toggle_helpful(review, voter) == (1, False)


@pytest.mark.django_db
def test_reported_reviews_leave_the_moderation_queue_until_approved():
    review = ReviewFactory(status=Review.STATUS_PENDING)
    other = ReviewFactory(status=Review.STATUS_PENDING)

    report_review(review, "Spam link")
    assert list(moderation_queue()) == [other]

    approve_review(review)
    review.refresh_from_db()
    assert review.is_reported is False


@pytest.mark.django_db
def test_rating_breakdown_counts_approved_reviews_only():
    product = ProductFactory()
    ReviewFactory(product=product, rating=5)
    ReviewFactory(product=product, rating=5)
    ReviewFactory(product=product, rating=2)
    ReviewFactory(product=product, rating=1, status=Review.STATUS_PENDING)

    assert rating_breakdown(product.id) == {"5": 2, "4": 0, "3": 0, "2": 1, "1": 0}


@pytest.mark.django_db
def test_published_reviews_sort_orders():
    product = ProductFactory()
    low = ReviewFactory(product=product, rating=2, helpful_votes=7)
    high = ReviewFactory(product=product, rating=5)
    ReviewFactory(product=product, rating=3, status=Review.STATUS_REJECTED)

    assert list(published_reviews(product.id, "highest-rating")) == [high, low]
    assert list(published_reviews(product.id, "lowest-rating")) == [low, high]
    assert list(published_reviews(product.id, "most-helpful")) == [low, high]
    assert list(published_reviews(product.id, "oldest")) == [low, high]


@pytest.mark.django_db
def test_author_name_shows_initial_only():
    review = ReviewFactory(user=UserFactory(first_name="Jordi", last_name="Puig"))
    assert review.author_name == "Jordi P."
    assert ReviewFactory(user=UserFactory(first_name="", last_name="")).author_name == "Customer"
