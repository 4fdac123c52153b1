"""Generation orchestrator: the state machine behind the compose screen.

States::

    Idle -> Processing -> Idle with result
                       -> Idle with error

All transitions happen under one lock and are published to subscribers as
immutable ``OrchestratorState`` snapshots. The engine call itself runs
outside the lock; a second ``generate`` while one is in flight is rejected
as busy rather than queued.
"""

import threading
from dataclasses import dataclass, replace
from enum import Enum
from typing import Callable, List, Optional

from ..config import GenerationConfig
from ..llm.provider import LLMError, LLMResponseError
from ..llm.session import Session, SessionInitError, SessionManager
from ..models import (
    GenerationResult,
    RequestContext,
    MAX_FORMALITY_SCORE,
    MIN_FORMALITY_SCORE,
    count_words,
)
from ..utils.logging import get_logger, set_request_id
from ..utils.parsing import coerce_int, extract_json_object
from .errors import ComposerError, classify_failure, classify_init_failure
from .prompt_builder import build_prompt, build_response_schema

logger = get_logger(__name__)


class GenerateOutcome(Enum):
    """How a ``generate`` call ended."""
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    REJECTED_EMPTY = "rejected_empty"
    REJECTED_BUSY = "rejected_busy"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class OrchestratorState:
    """Snapshot of everything the presentation layer binds to."""
    is_processing: bool = False
    current_result: Optional[GenerationResult] = None
    current_error: Optional[ComposerError] = None


StateObserver = Callable[[OrchestratorState], None]


class GenerationOrchestrator:
    """Issues one generation per user action and owns its outcome."""

    def __init__(
        self,
        session_manager: SessionManager,
        config: Optional[GenerationConfig] = None,
    ):
        self.session_manager = session_manager
        self.config = config or GenerationConfig()
        self._lock = threading.Lock()
        self._state = OrchestratorState()
        # Bumped by every generate() and cancel(); a call whose token is
        # stale when the engine answers must not touch the state.
        self._call_token = 0
        self._observers: List[StateObserver] = []

    # -- observation -----------------------------------------------------

    def snapshot(self) -> OrchestratorState:
        with self._lock:
            return self._state

    @property
    def is_processing(self) -> bool:
        return self.snapshot().is_processing

    @property
    def current_result(self) -> Optional[GenerationResult]:
        return self.snapshot().current_result

    @property
    def current_error(self) -> Optional[ComposerError]:
        return self.snapshot().current_error

    def subscribe(self, observer: StateObserver) -> Callable[[], None]:
        """Register a callback for state changes.

        Returns:
            A function that removes the subscription.
        """
        with self._lock:
            self._observers.append(observer)

        def unsubscribe() -> None:
            with self._lock:
                if observer in self._observers:
                    self._observers.remove(observer)

        return unsubscribe

    def _notify(self, state: OrchestratorState) -> None:
        with self._lock:
            observers = list(self._observers)
        for observer in observers:
            try:
                observer(state)
            except Exception:
                logger.exception("State observer failed")

    def _transition(self, **changes) -> OrchestratorState:
        """Replace the state. Caller must hold ``self._lock``."""
        self._state = replace(self._state, **changes)
        return self._state

    # -- session lifecycle -----------------------------------------------

    def initialize(self) -> bool:
        """Create the session at startup.

        Returns:
            True when a session is ready. On failure the mapped error becomes
            the current error and generation stays gated.
        """
        return self._initialize_with(self.session_manager.initialize)

    def retry_initialization(self) -> bool:
        """Explicit user retry: re-probe the engine and rebuild the session."""
        return self._initialize_with(self.session_manager.reinitialize)

    def _initialize_with(self, init: Callable[[], Session]) -> bool:
        if self.is_processing:
            logger.info("Not initializing while a generation is in flight")
            return False

        try:
            init()
        except SessionInitError as e:
            error = classify_init_failure(e)
            with self._lock:
                state = self._transition(current_error=error)
            self._notify(state)
            return False

        with self._lock:
            state = self._transition(current_error=None)
        self._notify(state)
        return True

    def shutdown(self) -> None:
        self.session_manager.shutdown()

    # -- generation ------------------------------------------------------

    def generate(self, message: str, context: RequestContext) -> GenerateOutcome:
        """Generate one response for ``message``.

        The outcome is also reflected in the state: after SUCCEEDED only a
        result is set, after FAILED only an error. Rejected calls change
        nothing.
        """
        if not message or not message.strip():
            logger.debug("Ignoring empty input")
            return GenerateOutcome.REJECTED_EMPTY

        with self._lock:
            if self._state.is_processing:
                logger.info("Generation already in progress, rejecting request")
                return GenerateOutcome.REJECTED_BUSY
            self._call_token += 1
            token = self._call_token
            state = self._transition(is_processing=True, current_result=None, current_error=None)
        self._notify(state)

        set_request_id()
        log = logger.with_context(tone=context.tone.value, audience=context.audience.value)
        log.info("Generating response", extra_data={"input_words": count_words(message)})

        result: Optional[GenerationResult] = None
        error: Optional[ComposerError] = None
        final_state: Optional[OrchestratorState] = None
        try:
            session = self.session_manager.session
            if session is None:
                log.warning("Generation requested without a session")
                error = ComposerError.session_not_initialized()
            else:
                result = self._generate_with(session, message, context)
        except LLMError as e:
            log.warning(f"Generation failed: {e}")
            error = classify_failure(e)
        except Exception as e:
            log.exception("Unexpected generation failure")
            error = classify_failure(e)
        finally:
            with self._lock:
                if token == self._call_token:
                    final_state = self._transition(
                        is_processing=False, current_result=result, current_error=error
                    )

        if final_state is None:
            log.info("Discarding response of a cancelled generation")
            return GenerateOutcome.CANCELLED

        self._notify(final_state)
        if result is not None:
            log.info(
                "Generation succeeded",
                extra_data={"word_count": result.word_count, "formality_score": result.formality_score},
            )
            return GenerateOutcome.SUCCEEDED
        return GenerateOutcome.FAILED

    def cancel(self) -> bool:
        """Abandon the in-flight generation, leaving neither result nor error.

        Returns:
            True if a generation was in flight.
        """
        with self._lock:
            if not self._state.is_processing:
                return False
            self._call_token += 1
            state = self._transition(is_processing=False, current_result=None, current_error=None)
        logger.info("Generation cancelled")
        self._notify(state)
        return True

    def clear_error(self) -> bool:
        """Acknowledge the live error so it is shown only once."""
        with self._lock:
            if self._state.current_error is None:
                return False
            state = self._transition(current_error=None)
        self._notify(state)
        return True

    def _generate_with(
        self,
        session: Session,
        message: str,
        context: RequestContext,
    ) -> GenerationResult:
        prompt = build_prompt(message, context)
        schema = build_response_schema() if session.provider.supports_structured_output else None
        raw = session.respond(prompt, schema=schema)
        return self._build_result(raw, context, structured=schema is not None)

    def _build_result(self, raw: str, context: RequestContext, structured: bool) -> GenerationResult:
        """Validate engine output and turn it into a result.

        Tone and audience always come from the request; an echo that differs
        is only logged. The score is clamped into range, and the configured
        placeholder is used when the engine gives none.
        """
        text = raw
        score = self.config.placeholder_formality_score

        if structured:
            data = extract_json_object(raw)
            if data is None:
                logger.warning("Structured output was not a JSON object, using it as free text")
            else:
                text = data.get("text")
                if not isinstance(text, str):
                    raise LLMResponseError("Structured response has no text field")

                for key, expected in (("tone", context.tone.value), ("audience", context.audience.value)):
                    echoed = data.get(key)
                    if echoed is not None and echoed != expected:
                        logger.warning(f"Engine echoed {key} {echoed!r}, expected {expected!r}")

                value = coerce_int(data.get("formality_score"))
                if value is None:
                    logger.warning(
                        f"Unusable formality_score {data.get('formality_score')!r}, using placeholder"
                    )
                else:
                    score = min(max(value, MIN_FORMALITY_SCORE), MAX_FORMALITY_SCORE)

        text = text.strip()
        if not text:
            raise LLMResponseError("Engine returned empty text")

        return GenerationResult(
            tone=context.tone,
            audience=context.audience,
            text=text,
            formality_score=score,
        )
