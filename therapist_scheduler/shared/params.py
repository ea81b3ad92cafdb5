"""Parameter-bag parsing and the success/failure result envelope"""

import functools
import inspect
import logging

from pydantic import BaseModel, ValidationError

from .errors import DomainError, InvalidParameter

logger = logging.getLogger(__name__)


def parse_params(model: type[BaseModel], params) -> BaseModel:
    """Validate a flat parameter bag, naming the first offending field on failure."""
    if isinstance(params, model):
        return params
    try:
        return model.model_validate(params or {})
    except ValidationError as e:
        first = e.errors()[0]
        field = ".".join(str(part) for part in first.get("loc", ())) or "params"
        raise InvalidParameter(field, first.get("msg", "invalid value")) from e


def operation(func):
    """
    Wrap a service method so it returns {"success": False, "error": ...}
    instead of raising domain errors. Works for sync and async methods.
    """
    if inspect.iscoroutinefunction(func):

        @functools.wraps(func)
        async def async_wrapper(*args, **kwargs):
            try:
                return await func(*args, **kwargs)
            except DomainError as e:
                logger.warning(f"{func.__name__} failed: {e}")
                return e.to_dict()

        return async_wrapper

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except DomainError as e:
            logger.warning(f"{func.__name__} failed: {e}")
            return e.to_dict()

    return wrapper
