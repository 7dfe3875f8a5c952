"""
Session state transitions.

Each transition takes the current Session and returns the next Session
together with the side effects the controller must run. Nothing here
touches the network, so every step can be tested on plain values.

    Anonymous --begin_submit--> Authenticating --login_succeeded--> Authenticated
                                Authenticating --login_failed-----> Anonymous
                                Authenticating --registration_*---> Anonymous
    Authenticated --logout--> Anonymous
"""

from dataclasses import dataclass
from typing import Any, Iterable, List, Optional, Tuple, Union

from shopchat.classifier import GREETING_TEXT
from shopchat.models import Message, Sender, Session, UserId

LOGIN_FAILED = "Login failed"
LOGIN_ERROR = "Login failed. Please try again."
REGISTRATION_FAILED = "Registration failed"
REGISTRATION_ERROR = "Registration failed. Please try again."
REGISTRATION_OK = "Registration successful! Please login."
HISTORY_ERROR = "Failed to load chat history"


@dataclass(frozen=True)
class FetchHistory:
    """Load the user's chat history from the backend."""
    user_id: UserId


@dataclass(frozen=True)
class PersistMessage:
    """Save one message to the backend, best effort."""
    user_id: UserId
    content: str
    type: str


Effect = Union[FetchHistory, PersistMessage]
Transition = Tuple[Session, List[Effect]]


def new_session() -> Session:
    return Session()


def begin_submit(session: Session, username: str) -> Session:
    """Enter the authenticating state for a login or registration submit."""
    return session.evolve(loading=True, error=None, notice=None, username=username)


def login_succeeded(session: Session, user_id: UserId) -> Transition:
    authenticated = session.evolve(
        authenticated=True,
        user_id=user_id,
        loading=False,
        error=None,
        notice=None,
        registering=False,
        messages=[],
    )
    return authenticated, [FetchHistory(user_id)]


def login_failed(session: Session, message: Optional[str] = None) -> Session:
    return session.evolve(loading=False, error=message or LOGIN_FAILED)


def registration_succeeded(session: Session) -> Session:
    """Registration never logs in; it flips back to the login form."""
    return session.evolve(loading=False, registering=False, error=None, notice=REGISTRATION_OK)


def registration_failed(session: Session, message: Optional[str] = None) -> Session:
    return session.evolve(loading=False, error=message or REGISTRATION_FAILED)


def history_loaded(session: Session, entries: Iterable[Any]) -> Session:
    """Replace the log with the fetched history, then greet."""
    messages = [Message.from_history(entry) for entry in entries]
    messages.append(Message(sender=Sender.BOT, text=GREETING_TEXT))
    return session.evolve(messages=messages)


def history_failed(session: Session) -> Session:
    greeting = Message(sender=Sender.BOT, text=GREETING_TEXT)
    return session.evolve(error=HISTORY_ERROR, messages=list(session.messages) + [greeting])


def append_message(session: Session, sender: Sender, text: str) -> Transition:
    """Append a message to the log and ask for it to be persisted."""
    message = Message(sender=sender, text=text)
    updated = session.evolve(messages=list(session.messages) + [message])
    return updated, [PersistMessage(session.user_id, text, sender.value)]


def toggle_mode(session: Session) -> Session:
    """Switch between the login and registration forms."""
    return session.evolve(registering=not session.registering, error=None, notice=None, username="")


def logout(session: Session) -> Session:
    """Reset everything. Safe to call from any state."""
    return new_session()
