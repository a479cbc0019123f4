"""
Single-flight request handling for a conversation.

Submitting a new request cancels the previous outstanding one; a response
that arrives for a cancelled request is dropped rather than applied.
"""

import asyncio
import itertools
import logging
from typing import Awaitable, Callable, Dict, List, Optional

from config.settings import HistorySettings
from core.data_models import ConversationTurn, ExecutionReport, TranslationResult
from services.history_normalizer import KEEP_HISTORY_MESSAGES, MAX_HISTORY_MESSAGES, append_exchange
from .command_executor import CommandExecutor


logger = logging.getLogger(__name__)


TranslateFn = Callable[[str, List[Dict[str, str]]], Awaitable[TranslationResult]]


class CancellationToken:
    """Identifies one request; cancelled when a newer request starts."""

    _ids = itertools.count(1)

    def __init__(self, conversation_id: str):
        self.conversation_id = conversation_id
        self.request_id = next(self._ids)
        self.cancelled = False
        self._task: Optional[asyncio.Future] = None

    def bind_task(self, task: Optional[asyncio.Future]) -> None:
        """Attach the task running the request so cancel() can interrupt it."""
        self._task = task

    def cancel(self) -> None:
        self.cancelled = True
        if self._task is not None and not self._task.done():
            self._task.cancel()


class RequestGuard:
    """Tracks the current token per conversation."""

    def __init__(self):
        self._current: Dict[str, CancellationToken] = {}

    def begin(self, conversation_id: str = "default") -> CancellationToken:
        """
        Start a request, cancelling any outstanding one for the conversation.

        Args:
            conversation_id: Logical conversation key

        Returns:
            CancellationToken: Token for the new request
        """
        previous = self._current.get(conversation_id)
        if previous is not None:
            logger.debug(f"Cancelling request {previous.request_id} for {conversation_id}")
            previous.cancel()

        token = CancellationToken(conversation_id)
        self._current[conversation_id] = token
        return token

    def is_current(self, token: CancellationToken) -> bool:
        return not token.cancelled and self._current.get(token.conversation_id) is token

    def complete(self, token: CancellationToken) -> None:
        """Forget the token if it is still the current one."""
        if self._current.get(token.conversation_id) is token:
            del self._current[token.conversation_id]

    def in_flight(self, conversation_id: str = "default") -> bool:
        return conversation_id in self._current


class TranslationSession:
    """
    Client-side conversation: translate, then apply, one request at a time.

    Keeps a bounded history of completed exchanges and sends its most recent
    turns with every request.
    """

    def __init__(
        self,
        translate: TranslateFn,
        executor: CommandExecutor,
        guard: Optional[RequestGuard] = None,
        conversation_id: str = "default",
        send_messages: int = MAX_HISTORY_MESSAGES,
        keep_messages: int = KEEP_HISTORY_MESSAGES
    ):
        """
        Initialize the session.

        Args:
            translate: Coroutine function (text, history) -> TranslationResult,
                e.g. a translator's translate or an HTTP call to the service
            executor: Executor bound to the geometry session
            guard: Shared request guard
            conversation_id: Key for single-flight tracking
            send_messages: History turns sent per request
            keep_messages: History turns kept locally
        """
        self.translate = translate
        self.executor = executor
        self.guard = guard or RequestGuard()
        self.conversation_id = conversation_id
        self.send_messages = send_messages
        self.keep_messages = keep_messages
        self.history: List[ConversationTurn] = []
        self.last_result: Optional[TranslationResult] = None
        self.last_report: Optional[ExecutionReport] = None

    @classmethod
    def from_settings(
        cls,
        translate: TranslateFn,
        executor: CommandExecutor,
        settings: HistorySettings,
        **kwargs
    ) -> 'TranslationSession':
        """Build a session whose history limits come from HistorySettings."""
        return cls(
            translate,
            executor,
            send_messages=settings.max_messages,
            keep_messages=settings.keep_messages,
            **kwargs
        )

    @property
    def busy(self) -> bool:
        """True while a request for this conversation is outstanding."""
        return self.guard.in_flight(self.conversation_id)

    async def submit(self, text: str) -> Optional[TranslationResult]:
        """
        Translate text and apply the resulting commands.

        Args:
            text: User request

        Returns:
            TranslationResult, or None if this request was superseded by a
            newer one before its response arrived

        Raises:
            ValueError: If the text is blank
            LLMServiceError / ExecutionError: For failures of a current request
        """
        trimmed = (text or '').strip()
        if not trimmed:
            raise ValueError("请输入你的自然语言描述，例如：\"画一个椭圆\"")

        if self.busy:
            logger.info(f"Superseding outstanding request for {self.conversation_id}")
        token = self.guard.begin(self.conversation_id)
        outgoing = [turn.to_message() for turn in self.history[-self.send_messages:]] if self.send_messages > 0 else []

        request = asyncio.ensure_future(self.translate(trimmed, outgoing))
        token.bind_task(request)

        try:
            result = await request
        except asyncio.CancelledError:
            if token.cancelled and request.cancelled():
                logger.debug(f"Request {token.request_id} cancelled")
                return None
            request.cancel()
            raise
        except Exception:
            if not self.guard.is_current(token):
                logger.debug(f"Dropping failure of superseded request {token.request_id}")
                return None
            raise
        finally:
            stale = not self.guard.is_current(token)
            self.guard.complete(token)

        if stale:
            logger.debug(f"Dropping stale response for request {token.request_id}")
            return None

        self.last_result = result
        self.history = append_exchange(
            self.history, trimmed, result.explanation, result.commands, keep=self.keep_messages
        )

        if result.commands:
            self.last_report = self.executor.execute(result.commands)
        return result

    def clear(self) -> None:
        """Forget the last result and reset the construction."""
        self.last_result = None
        self.last_report = None
        try:
            self.executor.reset()
        except Exception as e:
            logger.error(f"Failed to reset geometry session: {e}")
