"""Connector error taxonomy and AWS failure classification.

Every backend failure is mapped to exactly one BusError subclass. The error
kind and its context are kept as attributes so callers can branch on the
class without parsing the message text.
"""

import logging

from botocore.exceptions import BotoCoreError, ClientError

logger = logging.getLogger(__name__)

# Codes AWS returns when the access key is unknown or the session token has expired.
AWS_ERROR_CODES_AUTHENTICATION = frozenset({"InvalidClientTokenId", "ExpiredToken"})


class BusError(Exception):
    """Base class for all connector errors.

    context is the operation being attempted, detail is the backend's (or
    codec's) own message. str() joins them.
    """

    def __init__(self, context: str, detail: str | None = None) -> None:
        self.context = context
        self.detail = detail
        super().__init__(self.message)

    @property
    def message(self) -> str:
        """Composite human-readable message."""
        if self.detail:
            return f"{self.context}: {self.detail}"
        return self.context


class InvalidArgumentError(BusError):
    """A required input was missing (e.g. no destination)."""


class InvalidStateError(InvalidArgumentError):
    """The message is not in a state that allows the operation (e.g. no receipt handle)."""


class SerializationError(BusError):
    """A message could not be encoded or decoded."""


class SecurityError(BusError):
    """AWS rejected the credentials."""


class OperationError(BusError):
    """Any other AWS failure."""


class InternalError(BusError):
    """Programming defect, e.g. an unknown destination kind."""


def aws_error_codes(failure: Exception) -> list[str]:
    """Return the structured error codes carried by a botocore failure, if any."""
    if not isinstance(failure, ClientError):
        return []
    response = failure.response or {}
    codes = []
    code = response.get("Error", {}).get("Code")
    if code:
        codes.append(code)
    for error in response.get("Errors", []) or []:
        if error.get("Code"):
            codes.append(error["Code"])
    return codes


def is_security_error(failure: Exception) -> bool:
    """True when the failure carries an invalid/expired credentials code."""
    return any(code in AWS_ERROR_CODES_AUTHENTICATION for code in aws_error_codes(failure))


def classify_aws_error(context: str, failure: ClientError | BotoCoreError | Exception) -> BusError:
    """Map a backend failure to a SecurityError or OperationError.

    The returned error is logged here but not raised; the caller raises it
    (normally ``raise classify_aws_error(...) from e``).
    """
    error_class = SecurityError if is_security_error(failure) else OperationError
    error = error_class(context, str(failure))
    logger.error(error.message, exc_info=failure)
    return error
