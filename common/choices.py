"""Shared enumerations and choices used across apps."""

from django.db import models


class ProductCategory(models.TextChoices):
    GUITARS = "guitars", "Guitars"
    KEYBOARDS = "keyboards", "Keyboards"
    PERCUSSION = "percussion", "Percussion"
    WIND = "wind", "Wind"
    STRINGS = "strings", "Strings"
    SOUND = "sound", "Sound"
    LIGHTING = "lighting", "Lighting"
    ACCESSORIES = "accessories", "Accessories"
    AMPLIFIERS = "amplifiers", "Amplifiers"
    MICROPHONES = "microphones", "Microphones"
    HEADPHONES = "headphones", "Headphones"


class RentalStatus(models.TextChoices):
    """Lifecycle statuses for equipment rentals."""

    PENDING = "pending", "Pending"
    CONFIRMED = "confirmed", "Confirmed"
    PREPARING = "preparing", "Preparing"
    READY = "ready", "Ready"
    ACTIVE = "active", "Active"
    OVERDUE = "overdue", "Overdue"
    RETURNING = "returning", "Returning"
    COMPLETED = "completed", "Completed"
    CANCELLED = "cancelled", "Cancelled"


class DepositStatus(models.TextChoices):
    PENDING = "pending", "Pending"
    PAID = "paid", "Paid"
    RETURNED = "returned", "Returned"
    FORFEITED = "forfeited", "Forfeited"


class PaymentStatus(models.TextChoices):
    PENDING = "pending", "Pending"
    PARTIAL = "partial", "Partial"
    PAID = "paid", "Paid"
    FAILED = "failed", "Failed"
    REFUNDED = "refunded", "Refunded"


class EventType(models.TextChoices):
    CONCERT = "concert", "Concert"
    WEDDING = "wedding", "Wedding"
    CORPORATE = "corporate", "Corporate"
    PARTY = "party", "Party"
    FESTIVAL = "festival", "Festival"
    RECORDING = "recording", "Recording"
    OTHER = "other", "Other"


class OrderStatus(models.TextChoices):
    """Lifecycle statuses for orders."""

    PENDING = "pending", "Pending"
    CONFIRMED = "confirmed", "Confirmed"
    PROCESSING = "processing", "Processing"
    SHIPPED = "shipped", "Shipped"
    DELIVERED = "delivered", "Delivered"
    CANCELLED = "cancelled", "Cancelled"
    REFUNDED = "refunded", "Refunded"


class OrderPaymentStatus(models.TextChoices):
    PENDING = "pending", "Pending"
    PAID = "paid", "Paid"
    FAILED = "failed", "Failed"
    REFUNDED = "refunded", "Refunded"


class PaymentMethod(models.TextChoices):
    CARD = "card", "Card"
    PAYPAL = "paypal", "PayPal"
    TRANSFER = "transfer", "Bank transfer"
    CASH = "cash", "Cash on pickup"


class ContactCategory(models.TextChoices):
    GENERAL = "general", "General"
    PRODUCTS = "products", "Products"
    ORDERS = "orders", "Orders"
    RENTALS = "rentals", "Rentals"
    CONCERTS = "concerts", "Concerts"
    TECHNICAL_SUPPORT = "technical-support", "Technical support"
    WARRANTY = "warranty", "Warranty"
    COMPLAINTS = "complaints", "Complaints"
    SUGGESTIONS = "suggestions", "Suggestions"
    PARTNERSHIPS = "partnerships", "Partnerships"
    PRESS = "press", "Press"
    OTHER = "other", "Other"


class ContactPriority(models.TextChoices):
    LOW = "low", "Low"
    MEDIUM = "medium", "Medium"
    HIGH = "high", "High"
    URGENT = "urgent", "Urgent"


class ContactStatus(models.TextChoices):
    NEW = "new", "New"
    IN_PROGRESS = "in-progress", "In progress"
    REPLIED = "replied", "Replied"
    RESOLVED = "resolved", "Resolved"
    CLOSED = "closed", "Closed"


class ContactSource(models.TextChoices):
    WEBSITE = "website", "Website"
    EMAIL = "email", "Email"
    PHONE = "phone", "Phone"
    SOCIAL = "social", "Social media"


class CustomerType(models.TextChoices):
    NEW = "new", "New"
    EXISTING = "existing", "Existing"


class ContactResponseMethod(models.TextChoices):
    EMAIL = "email", "Email"
    PHONE = "phone", "Phone"
    STORE = "store", "In store"
    OTHER = "other", "Other"


class ReviewStatus(models.TextChoices):
    PENDING = "pending", "Pending moderation"
    APPROVED = "approved", "Approved"
    REJECTED = "rejected", "Rejected"


class SubscriberSource(models.TextChoices):
    WEBSITE = "website", "Website"
    STORE = "store", "Store"
    CONCERT = "concert", "Concert"
    SOCIAL = "social", "Social media"
    REFERRAL = "referral", "Referral"
    OTHER = "other", "Other"


class CampaignAudience(models.TextChoices):
    ALL = "all", "All confirmed subscribers"
    CATEGORY = "category", "Subscribers of given categories"
    CUSTOM = "custom", "Explicit email list"
