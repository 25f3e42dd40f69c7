import logging
from contextlib import contextmanager

from bson.errors import BSONError
from pymongo.errors import DuplicateKeyError, PyMongoError

logger = logging.getLogger(__name__)


class FormsApiError(Exception):
    """Base class for failures reported by the account, schema and form operations."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidInput(FormsApiError):
    """A required field is missing or malformed."""


class Conflict(FormsApiError):
    """A unique key is already taken."""


class NotFound(FormsApiError):
    """The referenced account or form does not exist."""


class StoreUnavailable(FormsApiError):
    """The document store failed or timed out. Not retried."""


@contextmanager
def store_errors(operation: str):
    """Translate pymongo and bson failures raised inside the block into FormsApiError."""
    try:
        yield
    except DuplicateKeyError as e:
        logger.warning("%s: duplicate key: %s", operation, e)
        raise Conflict("User already exists.") from e
    except PyMongoError as e:
        logger.error("%s failed: %s", operation, e)
        raise StoreUnavailable(f"Store unavailable during {operation}") from e
    except (BSONError, OverflowError) as e:
        # values the store cannot encode, e.g. integers wider than 64 bits
        logger.warning("%s: unencodable document: %s", operation, e)
        raise InvalidInput("Value cannot be stored.") from e
