import logging

logger = logging.getLogger("auth")


def log_auth_event(action: str, request, user=None, status: str = "success", extra: dict | None = None):
    """Emit a structured auth event; staff sign-ins are tagged for the back-office audit."""
    payload = {
        "action": action,
        "ip": request.META.get("REMOTE_ADDR"),
        "agent": request.META.get("HTTP_USER_AGENT", "")[:200],
        "status": status,
    }
    if user is not None:
        payload["user_id"] = getattr(user, "id", None)
        payload["email"] = getattr(user, "email", None)
        payload["staff"] = bool(getattr(user, "is_staff", False))
    if extra:
        payload.update(extra)
    level = logging.INFO if status == "success" else logging.WARNING
    logger.log(level, payload)
