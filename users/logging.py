import logging

logger = logging.getLogger("auth")


def _client_ip(request) -> str | None:
    forwarded = request.META.get("HTTP_X_FORWARDED_FOR", "")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.META.get("REMOTE_ADDR")


def log_auth_event(action: str, request, user=None, status: str = "success", extra: dict | None = None):
    """Emit a structured ``auth.<action>`` event; the payload is merged by JsonFormatter."""
    payload = {"event": f"auth.{action}", "action": action, "ip": _client_ip(request), "status": status}
    if user is not None:
        payload["user_id"] = getattr(user, "id", None)
        payload["email"] = getattr(user, "email", None)
    if extra:
        payload.update(extra)
    log = logger.warning if status not in ("success", "created") else logger.info
    log(payload)
