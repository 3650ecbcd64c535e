"""
Base class for the product QA service layer.

Provides a per-class logger and a performance-logging decorator that works on
both plain methods and coroutines.
"""

import asyncio
import logging
import time
from functools import wraps
from typing import Callable

from product_qa.domain.exceptions import QAError


class BaseService:
    """
    Base class for all QA services providing common functionality.

    Provides:
    - Logging with class name
    - Performance timing decorator

    Usage:
        class QATransitionEngine(BaseService):
            def __init__(self, store):
                super().__init__()
                self.store = store

            @BaseService.log_performance
            async def approve_for_sample(self, record, actor, note=""):
                self.logger.info(f"Approving {record.listing_id}")
                # ... implementation
    """

    def __init__(self):
        """Initialize base service with logger."""
        self.logger = logging.getLogger(self.__class__.__module__ + "." + self.__class__.__name__)

    @staticmethod
    def log_performance(func: Callable) -> Callable:
        """
        Decorator to log performance of service methods.

        Logs execution time. Expected QA failures (QAError subclasses) are
        logged as warnings, anything else as an error with traceback.

        Args:
            func: The service method to wrap (sync or async)

        Returns:
            Wrapped function with performance logging
        """

        def _log_failure(self, method_name: str, start_time: float, e: Exception):
            elapsed_time = (time.time() - start_time) * 1000
            if isinstance(e, QAError):
                self.logger.warning(f"{method_name} failed with '{e.code}' in {elapsed_time:.2f}ms: {e}")
            else:
                self.logger.error(
                    f"{method_name} raised exception after {elapsed_time:.2f}ms: {str(e)}",
                    exc_info=True,
                )

        if asyncio.iscoroutinefunction(func):

            @wraps(func)
            async def async_wrapper(self, *args, **kwargs):
                start_time = time.time()
                method_name = f"{self.__class__.__name__}.{func.__name__}"
                self.logger.debug(f"{method_name} started")
                try:
                    result = await func(self, *args, **kwargs)
                except Exception as e:
                    _log_failure(self, method_name, start_time, e)
                    raise
                elapsed_time = (time.time() - start_time) * 1000  # Convert to ms
                self.logger.info(f"{method_name} completed in {elapsed_time:.2f}ms")
                return result

            return async_wrapper

        @wraps(func)
        def wrapper(self, *args, **kwargs):
            start_time = time.time()
            method_name = f"{self.__class__.__name__}.{func.__name__}"
            self.logger.debug(f"{method_name} started")
            try:
                result = func(self, *args, **kwargs)
            except Exception as e:
                _log_failure(self, method_name, start_time, e)
                raise
            elapsed_time = (time.time() - start_time) * 1000
            self.logger.info(f"{method_name} completed in {elapsed_time:.2f}ms")
            return result

        return wrapper
