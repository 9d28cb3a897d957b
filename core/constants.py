from pathlib import Path

ROOT = Path(__file__).parent.parent

SESSION_FILE = ROOT / ".session.json"

API_PREFIX = "/api/v1"

# Endpoint paths, relative to the API base URL
AUTH_LOGIN = "/auth/login"
AUTH_REGISTER = "/auth/register"
AUTH_REFRESH = "/auth/refresh-token"
AUTH_LOGOUT = "/auth/logout"
AUTH_ME = "/auth/me"
USERS_ME = "/users/me"
COURSES = "/courses"

BEARER_PREFIX = "Bearer "

# Fallback messages when the server does not send one
STATUS_MESSAGES: dict[int, str] = {
    400: "Bad request",
    401: "Please log in again",
    403: "Access denied",
    404: "Resource not found",
    409: "Conflict with the current state of the resource",
    422: "Validation error",
    500: "Server error",
}
NETWORK_ERROR_MESSAGE = "Network error. Please check your internet connection."
TIMEOUT_ERROR_MESSAGE = "No response received from the server before the timeout."
