from __future__ import annotations

import json
import logging
from pathlib import Path

from gymlog import DEFAULT_DB_PATH, DEFAULT_RECOVERY_SECONDS
from gymlog import session_state, settings
from gymlog.history import get_user_progress
from gymlog.recorder import record_session
from gymlog.recovery_timer import RecoveryTimer
from gymlog.ticker import RecoveryTicker
from gymlog.templates import get_template, mark_template_used
from gymlog.utils import now_iso


# Directory for persisting the in-progress session.  The slot survives an
# app restart and is removed once the session is finalized or cancelled.
RECOVERY_DIR = Path(__file__).resolve().parents[1] / "data"
RECOVERY_BASE = RECOVERY_DIR / "session_recovery"

STATUS_NO_SESSION = "no_session"
STATUS_ACTIVE = "active"
STATUS_FINALIZED = "finalized"
STATUS_CANCELLED = "cancelled"


def _recovery_files(base: Path) -> tuple[Path, Path]:
    base = Path(base)
    return (
        base.with_name(base.name + "_1.json"),
        base.with_name(base.name + "_2.json"),
    )


class SessionController:
    """Owner of the single active workout of one user.

    The session itself is an immutable-by-convention dict produced by the
    transitions in :mod:`gymlog.session_state`; this class keeps the current
    one, drives the recovery timer on set completion and mirrors every
    change into a one-slot recovery store. The store holds one session per
    ``recovery_base``; a second writer silently replaces the first.
    """

    def __init__(
        self,
        user_id: str,
        db_path: Path = DEFAULT_DB_PATH,
        recovery_base: Path = RECOVERY_BASE,
        timer: RecoveryTimer | None = None,
        clock=None,
    ):
        self.user_id = user_id
        self.db_path = Path(db_path)
        self.recovery_base = Path(recovery_base)
        self.timer = timer or RecoveryTimer()
        # pass kivy.clock.Clock (or a stand-in) to have the timer tick itself
        self.ticker = RecoveryTicker(self.timer, clock=clock) if clock is not None else None
        self.state: dict | None = None
        self.status = STATUS_NO_SESSION
        self.cursor = 0

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @property
    def active(self) -> bool:
        return self.status == STATUS_ACTIVE and self.state is not None

    def _require_active(self) -> dict:
        if not self.active:
            raise RuntimeError("No active session")
        return self.state

    def _require_idle(self) -> None:
        if self.active:
            raise RuntimeError("A session is already active")

    def _apply(self, new_state: dict) -> None:
        self.state = new_state
        self.save_recovery_state()

    def _progress_log(self) -> list[dict]:
        return get_user_progress(self.user_id, db_path=self.db_path)

    @staticmethod
    def _recovery_seconds(value: int | None) -> int:
        if value is not None:
            return int(value)
        return int(settings.get_value("recovery_seconds") or DEFAULT_RECOVERY_SECONDS)

    def _begin(self, state: dict) -> None:
        self.status = STATUS_ACTIVE
        self.cursor = 0
        self.timer.cancel()
        self._apply(state)
        logging.info(
            "Started workout '%s' with %d exercises",
            state["workout_name"],
            len(state["exercises"]),
        )

    def _end(self, status: str) -> None:
        self.timer.cancel()
        if self.ticker is not None:
            self.ticker.stop()
        self.clear_recovery_state(self.recovery_base)
        self.state = None
        self.cursor = 0
        self.status = status

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def start_template_session(
        self,
        template_id: str,
        recovery_seconds: int | None = None,
        started_at: str | None = None,
    ) -> dict:
        """Start a session from ``template_id`` seeded with the last results."""

        self._require_idle()
        template = get_template(template_id, db_path=self.db_path)
        if template is None:
            raise ValueError(f"Template '{template_id}' not found")
        started_at = started_at or now_iso()
        state = session_state.new_template_session(
            template,
            self._progress_log(),
            self._recovery_seconds(recovery_seconds),
            started_at,
        )
        mark_template_used(template_id, when=started_at, db_path=self.db_path)
        self._begin(state)
        return state

    def start_custom_session(
        self,
        name: str = "Custom",
        recovery_seconds: int | None = None,
        started_at: str | None = None,
    ) -> dict:
        """Start an empty session that exercises are added to on the fly."""

        self._require_idle()
        state = session_state.new_custom_session(
            name, self._recovery_seconds(recovery_seconds), started_at or now_iso()
        )
        self._begin(state)
        return state

    def add_exercise(self, exercise: dict) -> int:
        """Append ``exercise`` to a custom session and return its index."""

        state = self._require_active()
        new_state = session_state.add_exercise(state, exercise, self._progress_log())
        self._apply(new_state)
        return len(new_state["exercises"]) - 1

    def update_set(self, exercise_index: int, set_index: int, field: str, value) -> bool:
        """Change one set field; start recovery when a set becomes completed.

        Returns ``True`` when the change started the recovery timer.
        """

        state = self._require_active()
        new_state, newly_completed = session_state.update_set(
            state, exercise_index, set_index, field, value
        )
        self._apply(new_state)
        if newly_completed:
            self.timer.start(new_state["recovery_seconds"])
        return newly_completed

    def update_notes(self, exercise_index: int, text: str) -> None:
        state = self._require_active()
        self._apply(session_state.update_notes(state, exercise_index, text))

    # ------------------------------------------------------------------
    # Navigation
    # ------------------------------------------------------------------

    def navigate(self, index: int) -> int:
        """Move the cursor to ``index`` (clamped) without touching the session."""

        state = self._require_active()
        self.cursor = session_state.clamp_cursor(state, index)
        return self.cursor

    def next_exercise(self) -> int:
        return self.navigate(self.cursor + 1)

    def previous_exercise(self) -> int:
        return self.navigate(self.cursor - 1)

    def current_exercise(self) -> dict | None:
        if not self.active or not self.state["exercises"]:
            return None
        return self.state["exercises"][self.cursor]

    @property
    def is_last_exercise(self) -> bool:
        return self.active and self.cursor >= len(self.state["exercises"]) - 1

    @property
    def can_cancel(self) -> bool:
        return self.active and session_state.can_cancel(self.cursor)

    # ------------------------------------------------------------------
    # Recovery
    # ------------------------------------------------------------------

    def extend_recovery(self, seconds: int | None = None) -> None:
        if seconds is None:
            seconds = settings.get_value("recovery_extend_seconds")
        self.timer.extend(seconds)

    def cancel_recovery(self) -> None:
        self.timer.cancel()

    @property
    def recovery_label(self) -> str:
        """Countdown text for the session screen, empty when idle."""

        return self.timer.display() if self.timer.visible else ""

    # ------------------------------------------------------------------
    # Terminal transitions
    # ------------------------------------------------------------------

    def cancel(self) -> None:
        """Discard the session. History is never touched."""

        state = self._require_active()
        logging.info("Cancelled workout '%s'", state["workout_name"])
        self._end(STATUS_CANCELLED)

    def finalize(self, now: str | None = None) -> dict:
        """Record the session in history and end it.

        Raises :class:`ValueError` with the session untouched when it cannot
        be finalized. Otherwise returns the recorder result with ``written``
        and ``failed`` lists; failed writes do not keep the session open.
        """

        state = self._require_active()
        errors = session_state.validate_for_finalize(state)
        if errors:
            raise ValueError("; ".join(errors))
        result = record_session(state, self.user_id, db_path=self.db_path, now=now)
        progress = session_state.session_progress(state)
        logging.info(
            "Finished workout '%s' (%d/%d sets): %d entries written, %d failed",
            state["workout_name"],
            progress["completed"],
            progress["total"],
            len(result["written"]),
            len(result["failed"]),
        )
        self._end(STATUS_FINALIZED)
        return result

    # --------------------------------------------------------------
    # Persistence helpers
    # --------------------------------------------------------------

    def export_state(self) -> dict:
        """Return a JSON-serialisable representation of the controller."""

        return {
            "user_id": self.user_id,
            "db_path": str(self.db_path),
            "session": self.state,
            "cursor": self.cursor,
        }

    @classmethod
    def from_state(
        cls, data: dict, recovery_base: Path = RECOVERY_BASE, clock=None
    ) -> "SessionController":
        """Reconstruct an active controller from :meth:`export_state` output."""

        obj = cls(
            data["user_id"],
            db_path=Path(data.get("db_path") or DEFAULT_DB_PATH),
            recovery_base=recovery_base,
            clock=clock,
        )
        obj.state = data["session"]
        obj.status = STATUS_ACTIVE
        obj.cursor = session_state.clamp_cursor(obj.state, data.get("cursor", 0))
        return obj

    def save_recovery_state(self) -> None:
        """Overwrite the recovery slot with the current session."""

        payload = json.dumps(self.export_state())
        try:
            self.recovery_base.parent.mkdir(parents=True, exist_ok=True)
            for path in _recovery_files(self.recovery_base):
                path.write_text(payload)
        except OSError:
            logging.exception("Could not write session recovery files")

    @staticmethod
    def load_recovery_state(base: Path = RECOVERY_BASE) -> dict | None:
        """Return the saved slot from whichever recovery file is readable."""

        for path in _recovery_files(base):
            try:
                text = path.read_text().strip()
            except FileNotFoundError:
                continue
            except OSError:
                logging.warning("Recovery file %s unreadable", path)
                continue
            if not text:
                continue
            try:
                data = json.loads(text)
            except ValueError:
                logging.warning("Recovery file %s is corrupt", path)
                continue
            if data.get("session"):
                return data
        return None

    @staticmethod
    def clear_recovery_state(base: Path = RECOVERY_BASE) -> None:
        """Remove any existing recovery files."""

        for path in _recovery_files(base):
            try:
                path.unlink()
            except FileNotFoundError:
                pass

    @classmethod
    def resume(
        cls, user_id: str, recovery_base: Path = RECOVERY_BASE, clock=None
    ) -> "SessionController | None":
        """Return a controller for the saved session of ``user_id``, if any."""

        data = cls.load_recovery_state(recovery_base)
        if not data or data.get("user_id") != user_id:
            return None
        return cls.from_state(data, recovery_base=recovery_base, clock=clock)
