"""Text helpers for traffic log records: labels, truncation, durations."""

MAX_BODY_LENGTH = 4000
TRUNCATION_MARKER = "... [truncated]"

REQUEST_BODY_PLACEHOLDER = "[Could not read request body]"
RESPONSE_BODY_PLACEHOLDER = "[Could not read response body]"

SUCCESS_ICON = "✅"
FAILURE_ICON = "❌"

UNKNOWN_API = "UNKNOWN_API"


def truncate_body(body: str, limit: int = MAX_BODY_LENGTH) -> str:
    """Cap body at limit characters, appending TRUNCATION_MARKER when cut."""
    if len(body) > limit:
        return body[:limit] + TRUNCATION_MARKER
    return body


def format_duration(duration_ms: int) -> str:
    """
    Human-readable duration.

    Examples:
        >>> format_duration(250)
        '250ms'
        >>> format_duration(1500)
        '1.5s'
        >>> format_duration(90000)
        '1.5m'
    """
    if duration_ms < 1000:
        return f"{duration_ms}ms"
    if duration_ms < 60000:
        return f"{duration_ms / 1000.0}s"
    return f"{duration_ms / 60000.0}m"


def extract_api_name(url: str) -> str:
    """
    Endpoint label from the path following "v1/".

    tasks -> TASKS_LIST, tasks/analytics -> TASKS_ANALYTICS,
    auth/login -> AUTH_LOGIN, feedback -> FEEDBACK_SUBMIT.
    """
    _, sep, path = url.partition("v1/")
    if not sep:
        return UNKNOWN_API
    path = path.split("?", 1)[0].split("#", 1)[0]

    if path.startswith("auth/"):
        return "AUTH_" + path[len("auth/"):].upper()
    if path.startswith("tasks/"):
        return "TASKS_" + path[len("tasks/"):].upper()
    if path == "tasks":
        return "TASKS_LIST"
    if path.startswith("categories/"):
        return "CATEGORIES_" + path[len("categories/"):].upper()
    if path == "categories":
        return "CATEGORIES_LIST"
    if path.startswith("feedback/"):
        return "FEEDBACK_" + path[len("feedback/"):].upper()
    if path == "feedback":
        return "FEEDBACK_SUBMIT"
    return UNKNOWN_API


def status_icon(is_success: bool) -> str:
    return SUCCESS_ICON if is_success else FAILURE_ICON
