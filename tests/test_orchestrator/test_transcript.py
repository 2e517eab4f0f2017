"""Tests for the Transcript store."""

import json

import pytest

from automation_agent.llm_client.types import (
    BinaryPayload,
    InlineBinaryPart,
    Role,
    TextPart,
    ToolCallPart,
    ToolResultPart,
    Turn,
)
from automation_agent.orchestrator.transcript import Transcript


@pytest.fixture
def transcript() -> Transcript:
    return Transcript(
        [
            Turn.user_text("read the image"),
            Turn(role=Role.MODEL, parts=[ToolCallPart(name="read_file", arguments={"fileName": "a.png"})]),
            Turn(role=Role.TOOL, parts=[ToolResultPart(name="read_file", text="Image loaded successfully.")]),
            Turn(
                role=Role.USER,
                parts=[
                    InlineBinaryPart(payload=BinaryPayload(mime_type="image/png", data=b"\x89PNG\x00\x01")),
                    TextPart(text="caption"),
                ],
            ),
        ]
    )


class TestRollback:
    """Rollback of the newest turns."""

    def test_rollback_removes_newest_turns(self, transcript: Transcript) -> None:
        assert transcript.rollback(2)
        assert [turn.role for turn in transcript.turns] == [Role.USER, Role.MODEL]

    def test_rollback_zero_is_noop(self, transcript: Transcript) -> None:
        assert transcript.rollback(0)
        assert len(transcript) == 4

    def test_rollback_more_than_length_changes_nothing(self, transcript: Transcript) -> None:
        assert not transcript.rollback(5)
        assert len(transcript) == 4

    def test_rollback_negative_is_rejected(self, transcript: Transcript) -> None:
        assert not transcript.rollback(-1)
        assert len(transcript) == 4

    def test_dangling_model_turn_is_dropped(self) -> None:
        transcript = Transcript([Turn.user_text("hi"), Turn(role=Role.MODEL, parts=[TextPart(text="x")])])
        assert transcript.rollback_dangling_model_turn()
        assert transcript.last.role is Role.USER

    def test_non_model_last_turn_is_kept(self, transcript: Transcript) -> None:
        assert not transcript.rollback_dangling_model_turn()
        assert len(transcript) == 4


class TestSnapshots:
    """Serialization and restore."""

    def test_snapshot_is_json_array_of_role_and_parts(self, transcript: Transcript) -> None:
        data = json.loads(transcript.snapshot())
        assert isinstance(data, list)
        assert [entry["role"] for entry in data] == ["user", "model", "tool", "user"]
        assert data[1]["parts"][0] == {
            "type": "tool_call",
            "name": "read_file",
            "arguments": {"fileName": "a.png"},
        }
        # Binary payloads are stored as base64 text
        assert isinstance(data[3]["parts"][0]["payload"]["data"], str)

    def test_restore_preserves_turns(self, transcript: Transcript) -> None:
        restored = Transcript()
        assert restored.restore(transcript.snapshot())
        assert restored.turns == transcript.turns
        assert restored.turns[3].parts[0].payload.data == b"\x89PNG\x00\x01"

    def test_thought_signature_survives_restore(self) -> None:
        original = Transcript(
            [Turn(role=Role.MODEL, parts=[ToolCallPart(name="list_files", signature="sig-call")])]
        )
        data = json.loads(original.snapshot())
        assert data[0]["parts"][0]["signature"] == "sig-call"

        restored = Transcript()
        assert restored.restore(original.snapshot())
        assert restored.turns[0].parts[0].signature == "sig-call"

    def test_restore_invalid_json_keeps_current_turns(self, transcript: Transcript) -> None:
        assert not transcript.restore("{not json")
        assert len(transcript) == 4

    def test_restore_invalid_turns_keeps_current_turns(self, transcript: Transcript) -> None:
        bad = json.dumps([{"role": "user", "parts": [{"type": "text", "text": "ok"}]}, {"role": "alien"}])
        assert not transcript.restore(bad)
        assert len(transcript) == 4

    def test_tool_turn_with_binary_is_rejected(self, transcript: Transcript) -> None:
        bad = json.dumps(
            [
                {
                    "role": "tool",
                    "parts": [
                        {
                            "type": "tool_result",
                            "name": "read_file",
                            "text": "img",
                            "binary": {"mime_type": "image/png", "data": "AAAA"},
                        }
                    ],
                }
            ]
        )
        assert not transcript.restore(bad)
        assert len(transcript) == 4

    def test_save_and_load(self, tmp_path, transcript: Transcript) -> None:
        path = tmp_path / "history.json"
        assert transcript.save(path)

        loaded = Transcript()
        assert loaded.load(path)
        assert loaded.turns == transcript.turns

    def test_load_missing_file(self, tmp_path) -> None:
        transcript = Transcript([Turn.user_text("keep me")])
        assert not transcript.load(tmp_path / "nope.json")
        assert transcript.turns[0].text == "keep me"

    def test_save_to_missing_directory_fails(self, tmp_path, transcript: Transcript) -> None:
        assert not transcript.save(tmp_path / "missing" / "history.json")

    def test_clear(self, transcript: Transcript) -> None:
        transcript.clear()
        assert len(transcript) == 0
        assert transcript.last is None
