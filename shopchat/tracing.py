"""Langfuse tracing for chat controller actions."""

import os
import threading
from functools import wraps
from typing import Any, Callable, Dict, List, Optional

from langfuse import Langfuse

from shopchat.logger import get_logger

logger = get_logger()


class LangfuseTracer:
    """Langfuse tracer, active only when credentials are configured."""

    _instance: Optional['LangfuseTracer'] = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._initialized = False
        return cls._instance

    def __init__(self):
        if self._initialized:
            return

        self.enabled = False
        self.client = None

        secret_key = os.getenv("LANGFUSE_SECRET_KEY")
        public_key = os.getenv("LANGFUSE_PUBLIC_KEY")
        host = os.getenv("LANGFUSE_HOST", "https://cloud.langfuse.com")

        if secret_key and public_key:
            try:
                self.client = Langfuse(secret_key=secret_key, public_key=public_key, host=host)
                self.enabled = True
                logger.info("[Langfuse] Tracing enabled")
            except Exception as e:
                logger.warning(f"[Langfuse] Failed to initialize: {e}")
        else:
            logger.debug("[Langfuse] Credentials not configured. Tracing disabled.")

        self._initialized = True

    def trace(
        self,
        name: str,
        user_id: Optional[str] = None,
        metadata: Optional[Dict] = None,
        tags: Optional[List[str]] = None
    ):
        """Create a new trace, or a no-op one when tracing is off."""
        if not self.enabled:
            return DisabledTrace(name)

        try:
            trace = self.client.trace(
                name=name,
                user_id=user_id,
                metadata=metadata or {},
                tags=tags or []
            )
            return TraceWrapper(trace)
        except Exception as e:
            logger.warning(f"[Langfuse] Error creating trace: {e}")
            return DisabledTrace(name)

    def flush(self):
        if self.enabled and self.client:
            try:
                self.client.flush()
            except Exception as e:
                logger.warning(f"[Langfuse] Error flushing: {e}")

    def flush_async(self) -> Optional[threading.Thread]:
        """Flush on a daemon thread so the caller never waits on the network."""
        if not self.enabled:
            return None
        thread = threading.Thread(target=self.flush, name="shopchat-trace-flush", daemon=True)
        thread.start()
        return thread


class TraceWrapper:
    """Wrapper for a Langfuse trace."""

    def __init__(self, trace):
        self.trace = trace

    def end(self, output: Optional[Any] = None):
        if not output:
            return
        try:
            self.trace.update(output=output)
        except Exception as e:
            logger.debug(f"[Langfuse] Error updating trace: {e}")


class DisabledTrace:
    """Stand-in trace used while tracing is off."""

    def __init__(self, name: str):
        self.name = name

    def end(self, output: Optional[Any] = None):
        pass


def traced(name: Optional[str] = None):
    """
    Decorator for tracing controller actions.

    The user id is taken from `self.session.user_id` when the wrapped
    callable is a controller method.
    """
    def decorator(func: Callable):
        @wraps(func)
        def wrapper(*args, **kwargs):
            tracer = get_tracer()
            user_id = None
            if args and hasattr(args[0], 'session'):
                user_id = getattr(args[0].session, 'user_id', None)

            trace = tracer.trace(
                name=name or func.__name__,
                user_id=str(user_id) if user_id is not None else None,
                metadata={"function": func.__name__},
                tags=["shopchat"]
            )

            try:
                result = func(*args, **kwargs)
                trace.end(output={"result": str(result)[:500] if result else None})
                return result
            except Exception as e:
                trace.end(output={"error": str(e)})
                raise
            finally:
                tracer.flush_async()

        return wrapper
    return decorator


_tracer: Optional[LangfuseTracer] = None


def get_tracer() -> LangfuseTracer:
    """Get the singleton Langfuse tracer."""
    global _tracer
    if _tracer is None:
        _tracer = LangfuseTracer()
    return _tracer
