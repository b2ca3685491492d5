"""The conversation engine shared by every front end.

One :class:`ConversationEngine` serves one session. It is synchronous and
not safe for concurrent :meth:`~ConversationEngine.submit` calls; an
event-driven front end must serialize them (e.g. disable its input until
the previous call returns). The only blocking call is the completion
request.
"""

from __future__ import annotations

from dataclasses import dataclass, fields, replace
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Callable

from openaicli.config.settings import Settings
from openaicli.errors import (
    CompletionServiceError,
    ConfigurationError,
    EngineError,
    StorageError,
)
from openaicli.logging import get_logger

from . import code_blocks
from .client import CompletionClient, OpenAIChatClient
from .history import HistoryStore
from .models import Message
from .naming import FileNamer

logger = get_logger(__name__)


@dataclass(frozen=True)
class Options:
    """Session toggles. The set of options is fixed."""

    disable_output_code_to_file: bool = False
    disable_logging_chatgpt_history: bool = False
    disable_sending_chatgpt_history: bool = False

    @classmethod
    def from_settings(cls, settings: Settings) -> "Options":
        return cls(
            disable_output_code_to_file=settings.disable_output_code_to_file,
            disable_logging_chatgpt_history=settings.disable_logging_chatgpt_history,
            disable_sending_chatgpt_history=settings.disable_sending_chatgpt_history,
        )

    def as_dict(self) -> dict[str, bool]:
        return {OPTION_NAMES[f.name]: getattr(self, f.name) for f in fields(self)}


# External (configuration file / front end) names of each option field.
OPTION_NAMES = {
    "disable_output_code_to_file": "disableOutputCodeToFile",
    "disable_logging_chatgpt_history": "disableLoggingChatGPTHistory",
    "disable_sending_chatgpt_history": "disableSendingChatGPTHistory",
}
_FIELD_BY_NAME = {**{v: k for k, v in OPTION_NAMES.items()}, **{k: k for k in OPTION_NAMES}}


def option_field(name: str) -> str:
    """Map an option name to its :class:`Options` field.

    Raises
    ------
    ConfigurationError
        If ``name`` is not a known option.
    """

    try:
        return _FIELD_BY_NAME[name]
    except KeyError:
        known = ", ".join(sorted(OPTION_NAMES.values()))
        raise ConfigurationError(f"Unknown option {name!r}; expected one of: {known}") from None


class State(str, Enum):
    IDLE = "idle"
    DISPATCHING = "dispatching"
    STOPPED = "stopped"


@dataclass(frozen=True)
class Continue:
    """The session goes on.

    ``message`` is the assistant reply, or ``None`` when the input was a
    command handled locally (``WRITELAST``, ``WIPE``).
    """

    message: Message | None = None
    code_file: Path | None = None


@dataclass(frozen=True)
class Stopped:
    """The session ended through ``QUIT``."""


EngineResult = Continue | Stopped

QUIT = "QUIT"
WRITELAST = "WRITELAST"
WIPE_COMMANDS = frozenset({"WIPE", "WIPEHISTORY"})


class ConversationEngine:
    def __init__(
        self,
        *,
        client: CompletionClient,
        history_path: str | Path,
        model: str = "chatgpt-3.5",
        max_tokens: int = 256,
        options: Options | None = None,
        store: HistoryStore | None = None,
        namer: FileNamer | None = None,
        output_dir: str | Path = ".",
        transcript: list[Message] | None = None,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.client = client
        self.history_path = Path(history_path)
        self.model = model
        self.max_tokens = max_tokens
        self.store = store or HistoryStore()
        self.namer = namer or FileNamer()
        self.output_dir = Path(output_dir)
        self.clock = clock
        self.state = State.IDLE
        self._options = options or Options()
        self._transcript: list[Message] = list(transcript or [])

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        client: CompletionClient | None = None,
        *,
        store: HistoryStore | None = None,
    ) -> "ConversationEngine":
        """Build an engine and load the persisted transcript.

        Storage and decoding errors here are fatal to startup and propagate
        unchanged.
        """

        store = store or HistoryStore()
        if client is None:
            client = OpenAIChatClient(
                settings.api_key,
                base_url=settings.base_url,
                timeout=settings.timeout_seconds,
            )
        history_path = store.ensure_exists(settings.history_file)
        transcript = store.load(history_path)
        logger.info("Loaded %s message(s) of history from %s", len(transcript), history_path)
        return cls(
            client=client,
            history_path=history_path,
            model=settings.model,
            max_tokens=settings.max_tokens,
            options=Options.from_settings(settings),
            store=store,
            namer=FileNamer(settings.date_format),
            output_dir=settings.output_dir,
            transcript=transcript,
        )

    # state -------------------------------------------------------------------
    @property
    def transcript(self) -> tuple[Message, ...]:
        return tuple(self._transcript)

    @property
    def options(self) -> Options:
        return self._options

    def set_option(self, name: str, value: bool) -> None:
        field_name = option_field(name)
        if not isinstance(value, bool):
            raise ConfigurationError(
                f"Option {OPTION_NAMES[field_name]} takes true or false, got {value!r}"
            )
        self._options = replace(self._options, **{field_name: value})
        logger.info("Option %s set to %s", OPTION_NAMES[field_name], value)

    def flip_option(self, name: str) -> bool:
        """Invert an option and return its new value."""

        field_name = option_field(name)
        value = not getattr(self._options, field_name)
        self.set_option(field_name, value)
        return value

    # protocol ----------------------------------------------------------------
    def submit(self, raw_input: str) -> EngineResult:
        """Handle one line of user input.

        Raises
        ------
        EngineError
            If the completion call or a history save fails, or the session
            has already stopped. The session stays usable after a failure.
        """

        if self.state is State.STOPPED:
            raise EngineError("the session has stopped; start a new one")

        command = raw_input.strip().upper()
        if command == QUIT:
            self.save()
            self.state = State.STOPPED
            logger.info("Session stopped")
            return Stopped()
        if command == WRITELAST:
            self.save()
            return Continue()
        if command in WIPE_COMMANDS:
            self.wipe()
            return Continue()
        return self._chat_turn(raw_input)

    def save(self) -> None:
        try:
            self.store.save(self.history_path, self._transcript)
        except StorageError as exc:
            logger.error("couldn't write the history file: %s", exc)
            raise EngineError(str(exc)) from exc

    def wipe(self) -> Path:
        """Clear the transcript and archive the persisted history."""

        self._transcript = []
        try:
            return self.store.archive_and_reset(self.history_path, self.namer, self.clock())
        except StorageError as exc:
            logger.error("couldn't reset the history file: %s", exc)
            raise EngineError(str(exc)) from exc

    # internal ----------------------------------------------------------------
    def _chat_turn(self, text: str) -> Continue:
        prompt = Message.user(text)
        options = self._options

        context: list[Message] | None = None
        if not options.disable_sending_chatgpt_history:
            context = [*self._transcript, prompt]

        self.state = State.DISPATCHING
        try:
            response = self.client.complete(self.model, context, self.max_tokens, prompt=prompt)
        except CompletionServiceError as exc:
            logger.error("Completion failed: %s", exc)
            raise EngineError(str(exc)) from exc
        finally:
            self.state = State.IDLE

        if not options.disable_logging_chatgpt_history:
            self._transcript.extend((prompt, response))

        code_file = None
        if not options.disable_output_code_to_file and code_blocks.has_code(response.content):
            code_file = self._write_code(response)
        return Continue(response, code_file)

    def _write_code(self, response: Message) -> Path | None:
        name = self.namer.code_file_name(code_blocks.extract_language_tag(response.content), self.clock())
        try:
            return self.store.write_code_file(
                self.output_dir, name, code_blocks.extract_blocks(response.content)
            )
        except StorageError as exc:
            logger.error("couldn't write the code file: %s", exc)
            return None
