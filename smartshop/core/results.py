"""Result codes shared by the chat form and the auth pages."""

from enum import Enum


class ResultCode(str, Enum):
    INVALID_CREDENTIALS = "INVALID_CREDENTIALS"
    INVALID_SUBMISSION = "INVALID_SUBMISSION"
    USER_ALREADY_EXISTS = "USER_ALREADY_EXISTS"
    UNKNOWN_ERROR = "UNKNOWN_ERROR"
    USER_CREATED = "USER_CREATED"
    USER_LOGGED_IN = "USER_LOGGED_IN"


_MESSAGES = {
    ResultCode.INVALID_CREDENTIALS: "Invalid credentials!",
    ResultCode.INVALID_SUBMISSION: "Invalid submission, please try again!",
    ResultCode.USER_ALREADY_EXISTS: "User already exists, please log in!",
    ResultCode.USER_CREATED: "User created, welcome!",
    ResultCode.UNKNOWN_ERROR: "Something went wrong, please try again!",
    ResultCode.USER_LOGGED_IN: "Logged in!",
}

# Codes that report success through the same channel as errors
SUCCESS_CODES = frozenset({ResultCode.USER_CREATED, ResultCode.USER_LOGGED_IN})


def get_message_from_code(result_code: str) -> str:
    """User-facing text for a result code.

    Unknown codes fall back to the generic error text.
    """
    try:
        code = ResultCode(result_code)
    except ValueError:
        code = ResultCode.UNKNOWN_ERROR
    return _MESSAGES[code]


def is_success(result_code: str) -> bool:
    """True for the success signals (user created / logged in)."""
    try:
        return ResultCode(result_code) in SUCCESS_CODES
    except ValueError:
        return False
