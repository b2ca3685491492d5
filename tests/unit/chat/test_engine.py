"""Tests for the conversation engine using a fake completion client."""

from __future__ import annotations

from datetime import datetime
from unittest.mock import MagicMock

import pytest

from openaicli.chat.engine import Continue, ConversationEngine, Options, State, Stopped
from openaicli.chat.history import HistoryStore
from openaicli.chat.models import Message, Role
from openaicli.chat.naming import FileNamer
from openaicli.config import Settings
from openaicli.errors import (
    CompletionServiceError,
    ConfigurationError,
    CorruptHistoryError,
    EngineError,
    StorageError,
)

MOMENT = datetime(2024, 5, 6, 7, 8, 9)


class FakeClient:
    def __init__(self, replies=None, error: Exception | None = None):
        self.replies = list(replies or [])
        self.error = error
        self.calls: list[dict] = []

    def complete(self, model, messages, max_tokens, *, prompt):
        self.calls.append(
            {
                "model": model,
                "messages": None if messages is None else list(messages),
                "max_tokens": max_tokens,
                "prompt": prompt,
            }
        )
        if self.error is not None:
            raise self.error
        content = self.replies.pop(0) if self.replies else f"reply {len(self.calls)}"
        return Message.assistant(content)


def _engine(tmp_path, client=None, **kwargs):
    store = kwargs.pop("store", HistoryStore())
    path = store.ensure_exists(tmp_path / "history")
    return ConversationEngine(
        client=client or FakeClient(),
        history_path=path,
        model="test-model",
        store=store,
        namer=FileNamer("yyyyMMdd-HHmmss"),
        output_dir=tmp_path,
        clock=lambda: MOMENT,
        **kwargs,
    )


def test_turns_alternate_user_and_assistant(tmp_path):
    engine = _engine(tmp_path)

    for turn in range(3):
        result = engine.submit(f"question {turn}")
        assert isinstance(result, Continue)
        assert result.message == Message.assistant(f"reply {turn + 1}")

    roles = [message.role for message in engine.transcript]
    assert len(roles) == 6
    assert roles == [Role.USER, Role.ASSISTANT] * 3
    assert engine.transcript[0] == Message.user("question 0")


def test_turn_sends_transcript_model_and_budget(tmp_path):
    client = FakeClient()
    engine = _engine(tmp_path, client, max_tokens=99)
    engine.submit("first")
    engine.submit("second")

    call = client.calls[-1]
    assert call["model"] == "test-model"
    assert call["max_tokens"] == 99
    assert call["messages"] == [
        Message.user("first"),
        Message.assistant("reply 1"),
        Message.user("second"),
    ]
    assert call["prompt"] == Message.user("second")


def test_default_budget_is_256(tmp_path):
    client = FakeClient()
    _engine(tmp_path, client).submit("hi")
    assert client.calls[0]["max_tokens"] == 256


def test_disable_logging_leaves_transcript_unchanged(tmp_path):
    engine = _engine(tmp_path)
    engine.submit("kept")
    engine.flip_option("disableLoggingChatGPTHistory")

    result = engine.submit("not kept")

    assert isinstance(result, Continue) and result.message is not None
    assert len(engine.transcript) == 2


def test_disable_logging_still_sends_current_turn(tmp_path):
    client = FakeClient()
    engine = _engine(tmp_path, client, options=Options(disable_logging_chatgpt_history=True))
    engine.submit("hello")
    assert client.calls[0]["messages"] == [Message.user("hello")]


def test_disable_sending_passes_no_context(tmp_path):
    client = FakeClient()
    engine = _engine(tmp_path, client)
    engine.submit("one")
    engine.set_option("disableSendingChatGPTHistory", True)
    engine.submit("two")

    assert client.calls[1]["messages"] is None
    assert client.calls[1]["prompt"] == Message.user("two")
    assert len(engine.transcript) == 4


def test_completion_failure_leaves_transcript_untouched(tmp_path):
    engine = _engine(tmp_path)
    engine.submit("ok")
    before = engine.transcript

    engine.client = FakeClient(error=CompletionServiceError("401 Unauthorized", status_code=401))
    with pytest.raises(EngineError) as excinfo:
        engine.submit("fails")

    assert isinstance(excinfo.value.__cause__, CompletionServiceError)
    assert engine.transcript == before
    assert engine.state is State.IDLE
    assert not list(tmp_path.glob("2024*"))


def test_session_continues_after_failure(tmp_path):
    engine = _engine(tmp_path, FakeClient(error=CompletionServiceError("boom")))
    with pytest.raises(EngineError):
        engine.submit("first try")

    engine.client = FakeClient(replies=["recovered"])
    result = engine.submit("second try")
    assert result == Continue(Message.assistant("recovered"))


def test_quit_saves_once_and_stops(tmp_path):
    store = MagicMock(wraps=HistoryStore())
    client = FakeClient()
    engine = _engine(tmp_path, client, store=store)
    engine.submit("hi")

    result = engine.submit("quit")

    assert result == Stopped()
    assert engine.state is State.STOPPED
    store.save.assert_called_once()
    assert client.calls and len(client.calls) == 1
    assert HistoryStore().load(tmp_path / "history") == list(engine.transcript)


def test_submit_after_quit_is_rejected(tmp_path):
    engine = _engine(tmp_path)
    engine.submit("QUIT")
    with pytest.raises(EngineError):
        engine.submit("hello?")


def test_quit_save_failure_keeps_session_running(tmp_path):
    store = MagicMock(wraps=HistoryStore())
    store.save.side_effect = StorageError("disk full")
    engine = _engine(tmp_path, store=store)
    engine.submit("hi")

    with pytest.raises(EngineError):
        engine.submit("QUIT")

    assert engine.state is not State.STOPPED
    assert len(engine.transcript) == 2


def test_writelast_saves_without_calling_model(tmp_path):
    client = FakeClient()
    engine = _engine(tmp_path, client)
    engine.submit("hi")

    result = engine.submit("  WriteLast ")

    assert result == Continue()
    assert len(client.calls) == 1
    assert HistoryStore().load(tmp_path / "history") == list(engine.transcript)
    assert engine.state is State.IDLE


@pytest.mark.parametrize("command", ["WIPE", "wipehistory"])
def test_wipe_clears_transcript_and_archives_file(tmp_path, command):
    client = FakeClient()
    engine = _engine(tmp_path, client)
    engine.submit("hi")
    engine.submit("WRITELAST")

    result = engine.submit(command)

    assert result == Continue()
    assert engine.transcript == ()
    assert len(client.calls) == 1
    archived = tmp_path / "history.20240506-070809"
    assert archived.exists()
    assert archived != engine.history_path
    assert len(HistoryStore().load(archived)) == 2
    assert engine.history_path.read_text() == ""


def test_code_reply_is_written_to_file(tmp_path):
    engine = _engine(tmp_path, FakeClient(replies=["Sure:\n```python\nprint(1)\n```"]))

    result = engine.submit("write code")

    assert isinstance(result, Continue)
    assert result.code_file == tmp_path / "20240506-070809.python"
    assert result.code_file.read_text() == "print(1)\n"


def test_untagged_code_file_has_no_extension(tmp_path):
    engine = _engine(tmp_path, FakeClient(replies=["```\nls\n```"]))
    result = engine.submit("list")
    assert result.code_file == tmp_path / "20240506-070809"


def test_code_output_can_be_disabled(tmp_path):
    engine = _engine(tmp_path, FakeClient(replies=["```py\nx\n```"]))
    assert engine.flip_option("disableOutputCodeToFile") is True

    result = engine.submit("code please")

    assert result.code_file is None
    assert not (tmp_path / "20240506-070809.py").exists()


def test_code_write_failure_does_not_fail_turn(tmp_path):
    engine = _engine(tmp_path, FakeClient(replies=["```py\nx\n```"]))
    engine.output_dir = tmp_path / "missing"

    result = engine.submit("code please")

    assert result.message == Message.assistant("```py\nx\n```")
    assert result.code_file is None
    assert len(engine.transcript) == 2


def test_plain_reply_writes_no_file(tmp_path):
    engine = _engine(tmp_path)
    result = engine.submit("hello")
    assert result.code_file is None


def test_unknown_option_is_rejected(tmp_path):
    engine = _engine(tmp_path)
    with pytest.raises(ConfigurationError):
        engine.flip_option("disableEverything")
    with pytest.raises(ConfigurationError):
        engine.set_option("", True)


def test_option_names_accept_both_spellings(tmp_path):
    engine = _engine(tmp_path)
    engine.set_option("disable_sending_chatgpt_history", True)
    assert engine.options.disable_sending_chatgpt_history is True
    assert engine.options.as_dict() == {
        "disableOutputCodeToFile": False,
        "disableLoggingChatGPTHistory": False,
        "disableSendingChatGPTHistory": True,
    }


def test_from_settings_loads_persisted_transcript(tmp_path):
    history = tmp_path / "history"
    HistoryStore().save(history, [Message.user("old q"), Message.assistant("old a")])
    settings = Settings(
        api_key="sk-test",
        history_file=history,
        disable_output_code_to_file=True,
        max_tokens=64,
    )
    client = FakeClient()

    engine = ConversationEngine.from_settings(settings, client)
    engine.submit("new q")

    assert engine.options.disable_output_code_to_file is True
    assert client.calls[0]["max_tokens"] == 64
    assert [m.content for m in engine.transcript] == ["old q", "old a", "new q", "reply 1"]


def test_from_settings_creates_missing_history(tmp_path):
    settings = Settings(api_key="sk-test", history_file=tmp_path / "history")
    engine = ConversationEngine.from_settings(settings, FakeClient())
    assert engine.transcript == ()
    assert (tmp_path / "history").exists()


def test_from_settings_fails_on_corrupt_history(tmp_path):
    history = tmp_path / "history"
    history.write_text("garbage\n")
    with pytest.raises(CorruptHistoryError):
        ConversationEngine.from_settings(Settings(api_key="k", history_file=history), FakeClient())


@pytest.mark.parametrize("value", ["false", "true", 0, 1, None])
def test_set_option_requires_a_real_boolean(tmp_path, value):
    engine = _engine(tmp_path)
    with pytest.raises(ConfigurationError, match="true or false"):
        engine.set_option("disableOutputCodeToFile", value)
    assert engine.options.disable_output_code_to_file is False
