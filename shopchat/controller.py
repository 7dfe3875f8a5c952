"""Chat session controller: the one owner of the widget's state."""

from typing import Iterable, Optional

import requests

from shopchat.api_client import ApiClient
from shopchat.classifier import classify
from shopchat.config import background_persistence_enabled
from shopchat.logger import get_logger
from shopchat.models import Credentials, Sender, Session
from shopchat import session as transitions
from shopchat.persistence import MessagePersister
from shopchat.session import Effect, FetchHistory, PersistMessage
from shopchat.tracing import traced

logger = get_logger()

# Everything the backend can throw at a call site: transport errors,
# non-JSON bodies and malformed payloads.
API_ERRORS = (requests.RequestException, ValueError)


class ChatController:
    """
    Turns user actions into session transitions and backend calls.

    Calls are issued one at a time, each awaited before the next. While a
    submit is in flight `session.loading` is set and further submits are
    ignored.
    """

    def __init__(self, api: Optional[ApiClient] = None, persister: Optional[MessagePersister] = None):
        """
        Args:
            api: Backend client (defaults to one built from the environment)
            persister: Message saver (defaults to background mode per SHOPCHAT_BACKGROUND_PERSISTENCE)
        """
        self.api = api or ApiClient()
        self.persister = persister or MessagePersister(self.api, background=background_persistence_enabled())
        self._session = transitions.new_session()

    @property
    def session(self) -> Session:
        return self._session

    @traced("submit_login")
    def submit_login(self, username: str, password: str) -> bool:
        """
        Log in and, on success, load the chat history and greet the user.

        Returns:
            True if the session is now authenticated
        """
        if self._session.loading or self._session.authenticated:
            return False

        credentials = Credentials(username=username, password=password)
        self._session = transitions.begin_submit(self._session, credentials.username)

        try:
            response = self.api.login(credentials.username, credentials.password)
        except API_ERRORS as e:
            logger.error(f"Login request failed: {str(e)}", exc_info=True)
            self._session = transitions.login_failed(self._session, transitions.LOGIN_ERROR)
            return False

        if not isinstance(response, dict):
            logger.error(f"Unexpected login response: {response!r}")
            self._session = transitions.login_failed(self._session, transitions.LOGIN_ERROR)
            return False

        user_id = response.get("user_id")
        if response.get("success") and user_id is not None:
            logger.info(f"User '{credentials.username}' logged in as {user_id}")
            self._session, effects = transitions.login_succeeded(self._session, user_id)
            self._run(effects)
            return True

        logger.info(f"Login rejected for '{credentials.username}'")
        self._session = transitions.login_failed(self._session, response.get("message"))
        return False

    @traced("submit_registration")
    def submit_registration(self, username: str, password: str) -> bool:
        """
        Create an account. Never logs in; on success the login form is shown.

        Returns:
            True if the backend accepted the registration
        """
        if self._session.loading or self._session.authenticated:
            return False

        credentials = Credentials(username=username, password=password)
        self._session = transitions.begin_submit(self._session, credentials.username)

        try:
            response = self.api.register(credentials.username, credentials.password)
        except API_ERRORS as e:
            logger.error(f"Registration request failed: {str(e)}", exc_info=True)
            self._session = transitions.registration_failed(self._session, transitions.REGISTRATION_ERROR)
            return False

        if isinstance(response, dict) and response.get("success"):
            logger.info(f"Registered user '{credentials.username}'")
            self._session = transitions.registration_succeeded(self._session)
            return True

        message = response.get("message") if isinstance(response, dict) else None
        self._session = transitions.registration_failed(self._session, message)
        return False

    @traced("send_message")
    def send_message(self, text: str) -> Optional[str]:
        """
        Post a user message and append the bot's reply.

        Both messages show up in the log right away; saving them to the
        backend is best effort.

        Returns:
            The bot reply, or None if the message was ignored
        """
        if not text or not text.strip():
            return None
        if self._session.loading or not self._session.authenticated:
            return None

        self._session, effects = transitions.append_message(self._session, Sender.USER, text)
        self._run(effects)

        self._session = self._session.evolve(loading=True)
        try:
            reply = classify(text, self.api)
        finally:
            self._session = self._session.evolve(loading=False)

        self._session, effects = transitions.append_message(self._session, Sender.BOT, reply)
        self._run(effects)
        return reply

    def toggle_mode(self) -> None:
        if self._session.loading or self._session.authenticated:
            return
        self._session = transitions.toggle_mode(self._session)

    def logout(self) -> None:
        if self._session.authenticated:
            logger.info(f"User {self._session.user_id} logged out")
        self._session = transitions.logout(self._session)

    def _run(self, effects: Iterable[Effect]) -> None:
        for effect in effects:
            if isinstance(effect, FetchHistory):
                self._load_history(effect.user_id)
            elif isinstance(effect, PersistMessage):
                self.persister.save(effect)
            else:
                raise TypeError(f"Unknown effect: {effect!r}")

    def _load_history(self, user_id) -> None:
        self._session = self._session.evolve(loading=True)
        try:
            history = self.api.get_chat_history(user_id)
            if not isinstance(history, list):
                raise ValueError(f"chat history is not a list: {history!r}")
            self._session = transitions.history_loaded(self._session, history)
            logger.info(f"Loaded {len(history)} history message(s) for user {user_id}")
        except API_ERRORS as e:
            logger.error(f"Failed to load chat history: {str(e)}", exc_info=True)
            self._session = transitions.history_failed(self._session)
        finally:
            self._session = self._session.evolve(loading=False)
