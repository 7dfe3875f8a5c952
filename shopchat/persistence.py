"""Best-effort saving of chat messages to the backend."""

import queue
import threading
from typing import Callable, Optional

import requests

from shopchat.logger import get_logger
from shopchat.session import PersistMessage

logger = get_logger()

FailureHook = Callable[[PersistMessage, Exception], None]


class MessagePersister:
    """
    Saves chat messages without ever holding up the conversation.

    In background mode saves go through one daemon worker draining a FIFO
    queue, so messages reach the backend in the order they were appended.
    A failed save is logged and handed to `on_failure` (if given); it is
    never retried here and never changes what the user already sees.
    """

    def __init__(self, api, background: bool = True, on_failure: Optional[FailureHook] = None):
        """
        Args:
            api: Client exposing `save_chat_message(user_id, content, type)`
            background: Save on a worker thread instead of inline
            on_failure: Called with the effect and the exception when a save fails
        """
        self.api = api
        self.background = background
        self.on_failure = on_failure
        self._queue: "queue.Queue[PersistMessage]" = queue.Queue()
        self._worker: Optional[threading.Thread] = None
        self._worker_lock = threading.Lock()

    def save(self, effect: PersistMessage) -> None:
        """Save one message, queueing it for the worker in background mode."""
        if effect.user_id is None:
            logger.debug("Skipping save for message without a user id")
            return
        if not self.background:
            self._save(effect)
            return
        self._ensure_worker()
        self._queue.put(effect)

    def join(self) -> None:
        """Block until every queued save has been attempted."""
        self._queue.join()

    def _ensure_worker(self) -> None:
        with self._worker_lock:
            if self._worker is None or not self._worker.is_alive():
                self._worker = threading.Thread(target=self._drain, name="shopchat-persister", daemon=True)
                self._worker.start()

    def _drain(self) -> None:
        while True:
            effect = self._queue.get()
            try:
                self._save(effect)
            finally:
                self._queue.task_done()

    def _save(self, effect: PersistMessage) -> None:
        try:
            self.api.save_chat_message(effect.user_id, effect.content, effect.type)
            logger.debug(f"Saved {effect.type} message for user {effect.user_id}")
        except (requests.RequestException, ValueError) as e:
            logger.error(f"Failed to save {effect.type} message: {str(e)}")
            if self.on_failure is not None:
                self.on_failure(effect, e)
