"""Transcript storage for the orchestrator.

The transcript is the ordered list of turns sent to the service every round.
It only supports appending and rolling back the newest turns; snapshots are
the JSON array of turns and can be restored atomically.
"""

from pathlib import Path

from pydantic import TypeAdapter, ValidationError

from automation_agent.llm_client.types import Role, Turn
from automation_agent.telemetry import (
    TRANSCRIPT_LOAD_FAILED,
    TRANSCRIPT_LOADED,
    TRANSCRIPT_ROLLED_BACK,
    TRANSCRIPT_SAVE_FAILED,
    TRANSCRIPT_SAVED,
    get_logger,
)

log = get_logger(__name__)

_TURNS_ADAPTER = TypeAdapter(list[Turn])


class Transcript:
    """Ordered, append-only conversation log with bounded rollback."""

    def __init__(self, turns: list[Turn] | None = None) -> None:
        self._turns: list[Turn] = list(turns or [])

    def __len__(self) -> int:
        return len(self._turns)

    @property
    def turns(self) -> tuple[Turn, ...]:
        """Read-only view of the turns, oldest first."""
        return tuple(self._turns)

    @property
    def last(self) -> Turn | None:
        """Newest turn, or None for an empty transcript."""
        return self._turns[-1] if self._turns else None

    def append(self, turn: Turn) -> None:
        """Append a turn."""
        self._turns.append(turn)

    def rollback(self, count: int) -> bool:
        """Remove the newest ``count`` turns.

        Args:
            count: Number of turns to remove.

        Returns:
            True if the turns were removed, False (and nothing changed) when
            fewer than ``count`` turns exist.
        """
        if count < 0 or count > len(self._turns):
            return False
        if count:
            del self._turns[-count:]
        log.debug(TRANSCRIPT_ROLLED_BACK, count=count, remaining=len(self._turns))
        return True

    def rollback_dangling_model_turn(self) -> bool:
        """Drop a trailing ``model`` turn left by an interrupted round."""
        last = self.last
        if last is not None and last.role is Role.MODEL:
            return self.rollback(1)
        return False

    def clear(self) -> None:
        """Remove all turns."""
        self._turns.clear()

    def snapshot(self) -> str:
        """Serialize the transcript as a JSON array of ``{role, parts}`` objects."""
        return _TURNS_ADAPTER.dump_json(self._turns, indent=2, exclude_none=True).decode("utf-8")

    def restore(self, serialized: str | bytes) -> bool:
        """Replace the transcript with a snapshot.

        The replacement is atomic: on any parse or validation failure the
        current turns are left untouched.

        Returns:
            True on success, False if the snapshot could not be parsed.
        """
        try:
            turns = _TURNS_ADAPTER.validate_json(serialized)
        except ValidationError as e:
            log.warning(TRANSCRIPT_LOAD_FAILED, error=str(e), error_count=e.error_count())
            return False
        self._turns = turns
        return True

    def save(self, path: Path | str) -> bool:
        """Write a snapshot to ``path``, overwriting it.

        Returns:
            True on success, False if the file could not be written.
        """
        path = Path(path)
        try:
            path.write_text(self.snapshot(), encoding="utf-8")
        except OSError as e:
            log.error(TRANSCRIPT_SAVE_FAILED, path=str(path), error=str(e))
            return False
        log.info(TRANSCRIPT_SAVED, path=str(path), turns=len(self._turns))
        return True

    def load(self, path: Path | str) -> bool:
        """Replace the transcript with the snapshot stored at ``path``.

        Returns:
            True on success, False if the file is missing or invalid.
        """
        path = Path(path)
        try:
            serialized = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            log.warning(TRANSCRIPT_LOAD_FAILED, path=str(path), error="file not found")
            return False
        except (OSError, UnicodeDecodeError) as e:
            log.warning(TRANSCRIPT_LOAD_FAILED, path=str(path), error=str(e))
            return False

        if not self.restore(serialized):
            return False
        log.info(TRANSCRIPT_LOADED, path=str(path), turns=len(self._turns))
        return True
