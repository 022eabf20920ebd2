from datetime import datetime, timedelta
from datetime import timezone as dt_timezone

import pytest
from contact.models import ContactMessage
from contact.services import estimated_response, priority_for, spam_score, submit_message
from users.tests.factories import UserFactory

NOW = datetime(2024, 3, 15, 10, 0, tzinfo=dt_timezone.utc)


def _form(**overrides):
    data = {
        "first_name": "Pau",
        "last_name": "Serra",
        "email": "pau@example.com",
        "subject": "Drum lessons",
        "message": "Do you also offer drum lessons for beginners?",
        "category": "general",
    }
    data.update(overrides)
    return data


def test_plain_message_scores_zero():
    assert spam_score("Drum lessons", "Do you offer lessons for beginners?") == 0


def test_keywords_add_twenty_each():
    assert spam_score("Congratulations", "You are a winner") == 40


def test_many_links_add_thirty():
    links = " ".join(f"http://spam{i}.example" for i in range(4))
    assert spam_score("See", links) == 30
    assert spam_score("See", " ".join(f"http://ok{i}.example" for i in range(3))) == 0


def test_shouting_adds_twenty_five():
    assert spam_score("hello", "PLEASE CALL ME BACK") == 25


def test_score_is_capped_at_one_hundred():
    text = "viagra casino lottery winner congratulations million dollars"
    assert spam_score("", text) == 100


@pytest.mark.parametrize(
    "category,priority",
    [
        ("technical-support", "high"),
        ("warranty", "high"),
        ("complaints", "urgent"),
        ("general", "low"),
        ("suggestions", "low"),
        ("rentals", "medium"),
        ("press", "medium"),
    ],
)
def test_priority_follows_category(category, priority):
    assert priority_for(category) == priority


@pytest.mark.parametrize("priority,hours", [("urgent", 2), ("high", 4), ("medium", 12), ("low", 48)])
def test_estimated_response_by_priority(priority, hours):
    assert estimated_response(priority, now=NOW) == NOW + timedelta(hours=hours)


@pytest.mark.django_db
def test_submit_message_from_visitor():
    contact = submit_message(_form(category="complaints"), meta={"ip_address": "10.0.0.1", "user_agent": "pytest"})

    assert contact.ticket_number.startswith("TCK")
    assert contact.priority == "urgent"
    assert contact.status == ContactMessage.STATUS_NEW
    assert contact.customer_type == "new"
    assert contact.user is None
    assert contact.is_spam is False
    assert contact.ip_address == "10.0.0.1"
    assert contact.estimated_response_at is not None


@pytest.mark.django_db
def test_submit_message_from_signed_in_customer():
    user = UserFactory()
    contact = submit_message(_form(), user=user)
    assert contact.customer_type == "existing"
    assert contact.user == user


@pytest.mark.django_db
def test_spam_is_flagged_from_threshold():
    contact = submit_message(
        _form(subject="Hi", message="YOU ARE THE WINNER OF THE LOTTERY CLAIM YOUR MILLION DOLLARS")
    )
    assert contact.spam_score == 85
    assert contact.is_spam is True
