import functools
import logging
from typing import Type

from pipelearner.utils.exceptions import PipelearnerException


def handle_engine_errors(operation_name: str, wrap_as: Type[PipelearnerException] = PipelearnerException):
    """
    Error boundary for engine steps.

    Library exceptions pass through untouched. Anything else is logged once
    with its traceback on the engine's logger and re-raised as ``wrap_as``,
    chained to the original, so callers only need to catch
    PipelearnerException.
    """
    def decorator(func):
        @functools.wraps(func)
        def wrapper(engine, *args, **kwargs):
            try:
                return func(engine, *args, **kwargs)
            except PipelearnerException:
                raise
            except Exception as e:
                logger = getattr(engine, 'logger', None) or logging.getLogger(__name__)
                logger.error(f"{operation_name} failed in {type(engine).__name__}: {e}", exc_info=True)
                raise wrap_as(f"{operation_name} failed: {e}") from e
        return wrapper
    return decorator
