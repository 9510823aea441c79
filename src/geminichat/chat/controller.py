"""Conversation orchestration.

Hides the lifecycle of the active transcript: which session is active, when
it is saved, and how replies that arrive after the user moved on to another
chat are kept out of the new transcript.
"""

import logging

from ..exceptions import ConversationBusyError, RequestError
from ..history import ChatSessionStore
from ..llm import LLMProvider, Message, UpdateCallback
from .models import TurnResult

logger = logging.getLogger(__name__)


class ConversationController:
    """Drives one chat window: transcript, provider requests, persistence.

    Everything runs on one event loop. A reply is always attached to the
    session it was requested from; partial updates are only forwarded while
    that session is still the active one.
    """

    def __init__(self, provider: LLMProvider, store: ChatSessionStore):
        self._provider = provider
        self._store = store
        self._transcript: list[Message] = []
        self._session_id = store.create_session()
        # Transcripts with a request in flight, by session id.
        self._in_flight: dict[str, list[Message]] = {}
        # In-flight sessions the user discarded; their late replies are dropped.
        self._discarded: set[str] = set()

    @property
    def session_id(self) -> str:
        return self._session_id

    @property
    def transcript(self) -> list[Message]:
        """Copy of the active transcript."""
        return list(self._transcript)

    @property
    def pending(self) -> bool:
        """True while the active session waits for a reply."""
        return self._session_id in self._in_flight

    @property
    def provider(self) -> LLMProvider:
        return self._provider

    @property
    def store(self) -> ChatSessionStore:
        return self._store

    def _start_session(self) -> str:
        self._transcript = []
        self._session_id = self._store.create_session()
        return self._session_id

    def save(self) -> None:
        """Persist the active transcript (no-op when empty)."""
        self._store.save(self._transcript, session_id=self._session_id)

    def new_chat(self) -> str:
        """Save the current chat and start an empty one.

        Returns:
            The new session id
        """
        self.save()
        return self._start_session()

    def reset(self) -> str:
        """Drop the current transcript without saving it and start over.

        A reply still streaming in for the dropped chat is not saved either.
        """
        if self._session_id in self._in_flight:
            self._discarded.add(self._session_id)
        return self._start_session()

    def open_chat(self, session_id: str) -> bool:
        """Save the current chat and resume a saved one.

        Returns:
            False if no chat with that id is saved
        """
        entry = self._store.load(session_id)
        if entry is None:
            return False

        self.save()
        # A chat still waiting for its reply keeps its live transcript.
        self._transcript = self._in_flight.get(entry.id, list(entry.messages))
        self._session_id = entry.id
        self._store.activate(entry.id)
        self._discarded.discard(entry.id)
        return True

    async def send(self, text: str, on_update: UpdateCallback | None = None) -> TurnResult:
        """Submit a user message and wait for the reply.

        Args:
            text: User message
            on_update: Receives each distinct partial reply while the
                originating session is active

        Returns:
            TurnResult with the final reply, or the error text if the request
            failed (failed turns are recorded and saved as well)

        Raises:
            ValueError: If the message is blank
            ConversationBusyError: If this session already waits for a reply
        """
        text = text.strip()
        if not text:
            raise ValueError("Cannot send an empty message")
        if self.pending:
            raise ConversationBusyError("A reply is still streaming in")

        origin = self._session_id
        transcript = self._transcript
        transcript.append(Message.user(text))
        self._in_flight[origin] = transcript

        last_partial: str | None = None

        def forward(partial: str) -> None:
            nonlocal last_partial
            if self._session_id != origin:
                return
            if partial == last_partial:
                return
            last_partial = partial
            if on_update is not None:
                on_update(partial)

        failed = False
        try:
            reply = await self._provider.generate(list(transcript), forward)
        except RequestError as e:
            logger.warning("Request for session %s failed: %s", origin, e)
            reply = str(e)
            failed = True
        finally:
            self._in_flight.pop(origin, None)

        transcript.append(Message.assistant(reply))
        stale = self._session_id != origin
        if origin in self._discarded:
            self._discarded.discard(origin)
            logger.info("Reply for discarded session %s dropped", origin)
        else:
            self._store.save(transcript, session_id=origin)
            if stale:
                logger.info("Reply for inactive session %s saved without display", origin)
        return TurnResult(session_id=origin, text=reply, failed=failed, stale=stale)
