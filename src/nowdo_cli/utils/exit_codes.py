"""Exit codes for NowDo CLI.

Scripts calling ``nowdo`` can branch on these, e.g. re-run ``nowdo login``
on ``ERROR_AUTH_FAILURE`` or retry later on ``ERROR_NETWORK``.
"""

SUCCESS = 0

# Anything not covered below, including unexpected exceptions
ERROR_GENERAL = 1

# Bad option values, invalid dates, empty updates, unknown setting keys
ERROR_INVALID_ARGS = 2

# No stored session, rejected session or failed sign-in
ERROR_AUTH_FAILURE = 3

# The backend rejected a request or could not be reached
ERROR_NETWORK = 4

_NAMES = {
    SUCCESS: "SUCCESS",
    ERROR_GENERAL: "ERROR_GENERAL",
    ERROR_INVALID_ARGS: "ERROR_INVALID_ARGS",
    ERROR_AUTH_FAILURE: "ERROR_AUTH_FAILURE",
    ERROR_NETWORK: "ERROR_NETWORK",
}


def get_exit_code_name(code: int) -> str:
    """Get the name of an exit code for display purposes."""
    return _NAMES.get(code, f"UNKNOWN({code})")
