"""
Chat service for course questions.

Orchestrates one conversational turn: direct-mention resolution, refusal
short-circuit for closed courses, intent classification, templated answer or
language model fallback, policy enforcement and session update.

Dependencies: course_assistant.core, course_assistant.boundary.llm, course_assistant.application.session_store
System role: Chat service orchestration layer
"""

import logging
import time

from course_assistant.application.session_store import SessionStore
from course_assistant.boundary.llm.generation_client import TextGenerator
from course_assistant.core.catalog import CourseCatalog
from course_assistant.core.exceptions import GenerationError, ValidationError
from course_assistant.core.generation.prompt import (
    build_messages,
    catalog_context,
    get_instructions,
    history_messages,
    matching_hint,
)
from course_assistant.core.intent_classifier import IntentClassifier
from course_assistant.core.policy_engine import PolicyEngine
from course_assistant.core.renderer import ResponseRenderer
from course_assistant.core.sanitizer import clamp, sanitize
from course_assistant.core.title_matcher import resolve_direct_mention
from course_assistant.models.rendering import ResponseDocument
from course_assistant.models.session import OfferedCourse, SessionState
from course_assistant.observability.log_utils import (
    log_exception_with_context,
    log_with_context,
)

logger = logging.getLogger(__name__)

EMPTY_MESSAGE_ERROR = "Mensaje vacío"


class ChatService:
    """
    Chat service for course Q&A.

    Deterministic answers come from the renderer; only questions without a
    template reach the language model. Every answer, generated or not, passes
    through PolicyEngine.enforce before it is returned or stored.
    """

    def __init__(
        self,
        catalog: CourseCatalog,
        policy: PolicyEngine,
        classifier: IntentClassifier,
        renderer: ResponseRenderer,
        sessions: SessionStore,
        generator: TextGenerator,
        message_max_chars: int = 1200,
        context_max_chars: int = 18000,
        context_fallback_courses: int = 40,
        context_exclude_closed: bool = True,
        use_prompt_registry: bool = False,
        prompt_label: str | None = None,
    ) -> None:
        """
        Initialize chat service.

        Args:
            catalog: Loaded course catalog
            policy: Disclosure policy
            classifier: Intent classifier
            renderer: Template renderer
            sessions: Session store
            generator: Language model client for the fallback path
            message_max_chars: Clamp for stored history entries
            context_max_chars: Character budget for the catalog context
            context_fallback_courses: Courses kept when over budget
            context_exclude_closed: Leave closed courses out of the context
            use_prompt_registry: Fetch the instruction block from Langfuse
            prompt_label: Optional registry label
        """
        self.catalog = catalog
        self.policy = policy
        self.classifier = classifier
        self.renderer = renderer
        self.sessions = sessions
        self.generator = generator
        self._message_max_chars = message_max_chars
        self._use_prompt_registry = use_prompt_registry
        self._prompt_label = prompt_label

        # Catalog is immutable, serialize it once
        self._catalog_context = catalog_context(
            catalog,
            policy,
            max_chars=context_max_chars,
            fallback_courses=context_fallback_courses,
            exclude_closed=context_exclude_closed,
        )

    async def process_chat(self, session_key: str, message: str | None) -> str:
        """
        Process one chat message.

        Flow:
        1. Reject empty input
        2. Resolve the directly mentioned course; closed courses get the refusal
        3. Classify and render, or ask the language model
        4. Enforce the disclosure policy
        5. Store the turn and the offered enrollment link

        Args:
            session_key: Session identifier
            message: User message

        Returns:
            str: Answer text (HTML-flavored)

        Raises:
            ValidationError: If the message is empty
            GenerationError: If the language model fallback failed
        """
        text = (message or "").strip()
        if not text:
            raise ValidationError(EMPTY_MESSAGE_ERROR, field="message")

        started = time.perf_counter()
        async with self.sessions.lock(session_key):
            state = await self.sessions.get(session_key)

            mentioned = resolve_direct_mention(self.catalog, text)
            document = self.policy.refusal_document(mentioned) if mentioned else None
            path = "refusal"

            if document is None:
                intent = self.classifier.classify(text, mentioned)
                document = self.renderer.render(intent, state.last_offered_course)
                path = intent.type.value
                if document is None:
                    document = await self._generate(session_key, text, state)
                    path = "generated"

            document = self.policy.enforce(document)
            answer = document.to_text()

            await self.sessions.append_turn(
                session_key,
                clamp(sanitize(text), self._message_max_chars),
                clamp(answer, self._message_max_chars),
            )
            await self._remember_offer(session_key, document)

        log_with_context(
            logger,
            logging.INFO,
            "Chat turn completed",
            session_key=session_key,
            path=path,
            course_id=mentioned.id if mentioned else None,
            duration_ms=round((time.perf_counter() - started) * 1000, 2),
        )
        return answer

    async def _generate(self, session_key: str, text: str, state: SessionState) -> ResponseDocument:
        messages = build_messages(
            instructions=get_instructions(self._use_prompt_registry, self._prompt_label),
            catalog=self._catalog_context,
            hint=matching_hint(self.catalog, text),
            history=history_messages(state.history, self._message_max_chars),
            question=clamp(sanitize(text), self._message_max_chars),
        )
        try:
            generated = await self.generator.generate(messages)
        except GenerationError as e:
            log_exception_with_context(
                logger,
                "Generation fallback failed",
                e,
                session_key=session_key,
            )
            raise
        return self.renderer.parse_generated(generated)

    async def _remember_offer(self, session_key: str, document: ResponseDocument) -> None:
        offered = self.policy.offered_courses(document)
        if len(offered) != 1:
            return
        course = offered[0]
        await self.sessions.set_last_offered(
            session_key,
            OfferedCourse(
                course_id=course.id,
                title=course.title,
                enrollment_form_url=course.enrollment_form_url,
            ),
        )
