"""
Session correlator: the Entry → Exit protocol around one interaction.

Flow Overview
-------------
1. **Entry** (prompt submitted, before the assistant acts)
   - Gate: credentials present, ``auto_track`` on, prompt non-empty, prompt
     not matched by a skip pattern. A failed gate makes no network call and
     drops any record still pending from an earlier interaction.
   - Scan the tree, diff against the cached snapshot, and submit it even when
     the diff is empty: the Entry snapshot marks where the work began.
   - On success, cache the new snapshot and write the session record.

2. **Exit** (assistant stopped)
   - No session record → nothing to correlate; return quietly.
   - ``auto_track`` off → drop the pending record without scanning.
   - Scan and diff again. With ``exit_requires_changes`` an empty diff is not
     submitted and the record stays pending.
   - Submit the interaction (pre-snapshot id, prompt, timing). On success,
     cache the new snapshot and delete the session record.

State machine
-------------
``Idle`` (no record) → ``Pending`` (record written by Entry) → ``Idle``
(record deleted by a successful Exit). A failed submission changes nothing
locally, so the next trigger retries against the same baseline.

Every method returns a :class:`Result`; nothing here raises past its caller.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Literal

from codetracker.core.clock import format_timestamp, parse_timestamp, utc_now
from codetracker.core.contracts.change import ChangeRecord
from codetracker.core.contracts.config import Credentials, TrackerConfig
from codetracker.core.contracts.hook import EntryEvent, ExitEvent
from codetracker.core.contracts.inventory import Inventory, Snapshot
from codetracker.core.contracts.session import SessionRecord
from codetracker.core.result import Err, Failure, FailureKind, Result, failure, ok
from codetracker.core.settings import get_logger
from codetracker.core.state.base import StateStore
from codetracker.engine.diff import diff_inventories, summarize
from codetracker.engine.scanner import TreeScanner
from codetracker.transport.client import TrackerClient

logger = get_logger(__name__)

Scanner = Callable[[], Result[Inventory, Failure]]


class OutcomeStatus(str, Enum):
    SUBMITTED = "submitted"
    SKIPPED = "skipped"


class SkipReason(str, Enum):
    """Why a trigger ended without a submission (none of these are errors)."""

    DISABLED = "disabled"
    EMPTY_PROMPT = "empty_prompt"
    SKIP_PATTERN = "skip_pattern"
    NO_SESSION = "no_session"
    NO_CHANGES = "no_changes"


@dataclass(frozen=True, slots=True)
class Outcome:
    """What one trigger did."""

    status: OutcomeStatus
    reason: SkipReason | None = None
    snapshot_id: str | None = None
    change_count: int = 0

    @classmethod
    def skipped(cls, reason: SkipReason) -> Outcome:
        return cls(status=OutcomeStatus.SKIPPED, reason=reason)

    @classmethod
    def submitted(cls, snapshot_id: str, change_count: int) -> Outcome:
        return cls(
            status=OutcomeStatus.SUBMITTED,
            snapshot_id=snapshot_id,
            change_count=change_count,
        )


def compile_skip_patterns(patterns: Iterable[str]) -> list[re.Pattern[str]]:
    """Compile skip patterns case-insensitively, dropping invalid ones."""
    compiled: list[re.Pattern[str]] = []
    for pattern in patterns:
        try:
            compiled.append(re.compile(pattern, re.IGNORECASE))
        except re.error as exc:
            logger.debug("Ignoring invalid skip pattern %r: %s", pattern, exc)
    return compiled


def should_skip_prompt(prompt: str, patterns: Iterable[re.Pattern[str]]) -> bool:
    """Return True if any skip pattern occurs anywhere in ``prompt``."""
    return any(p.search(prompt) for p in patterns)


class SessionCorrelator:
    """Run the Entry and Exit triggers for one workspace.

    Parameters
    ----------
    root : Path
        Project root to scan.
    config : TrackerConfig
        Tracking configuration.
    credentials : Credentials | None
        Credentials; ``None`` or incomplete makes every trigger a no-op.
    store : StateStore
        Where the snapshot and session record live.
    client : TrackerClient | None
        Transport; built from ``config`` and ``credentials`` when omitted.
    scanner : Callable | None
        Override for the tree scan (tests); defaults to :class:`TreeScanner`.
    reserved : Iterable[Path]
        Directories the default scanner always prunes (the agent's state dir).
    clock : Callable[[], datetime]
        Source of "now" (tests).
    """

    def __init__(
        self,
        root: Path,
        config: TrackerConfig,
        credentials: Credentials | None,
        store: StateStore,
        *,
        client: TrackerClient | None = None,
        scanner: Scanner | None = None,
        reserved: Iterable[Path] = (),
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.root = root
        self.config = config
        self.credentials = credentials
        self.store = store
        self.clock = clock
        self._scanner: Scanner = scanner or TreeScanner(root, config, reserved=reserved).scan
        self._client = client
        self._skip_patterns = compile_skip_patterns(config.skip_patterns)

    # ------------------------------------------------------------------ #
    # Triggers
    # ------------------------------------------------------------------ #
    def on_entry(self, event: EntryEvent) -> Result[Outcome, Failure]:
        """Handle the prompt-submit trigger (``Idle → Pending``)."""
        client = self._require_client()
        if client.is_err():
            return Err(client.unwrap_err())
        if not self.config.auto_track:
            return self._stay_idle(SkipReason.DISABLED)
        prompt = event.prompt.strip()
        if not prompt:
            return self._stay_idle(SkipReason.EMPTY_PROMPT)
        if should_skip_prompt(prompt, self._skip_patterns):
            logger.info("Prompt matched a skip pattern; not tracking this interaction")
            return self._stay_idle(SkipReason.SKIP_PATTERN)

        started_at = format_timestamp(self.clock())
        previous = self.store.load_snapshot()
        scanned = self._scan_and_diff(previous)
        if scanned.is_err():
            return Err(scanned.unwrap_err())
        inventory, changes = scanned.unwrap()

        submitted = client.unwrap().register_snapshot(
            changes,
            session_id=event.session_id,
            parent_snapshot_id=previous.snapshot_id if previous is not None else None,
            prompt_text=prompt,
            trigger="entry",
        )
        if submitted.is_err():
            return Err(submitted.unwrap_err())
        snapshot_id = submitted.unwrap()

        record = SessionRecord(
            pre_snapshot_id=snapshot_id,
            prompt_text=prompt,
            session_id=event.session_id,
            started_at=started_at,
        )
        persisted = self._persist(inventory, snapshot_id).flat_map(
            lambda _: self.store.save_session(record)
        )
        if persisted.is_err():
            return Err(persisted.unwrap_err())

        self._log_submission("entry", snapshot_id, changes)
        return ok(Outcome.submitted(snapshot_id, len(changes)))

    def on_exit(self, event: ExitEvent) -> Result[Outcome, Failure]:
        """Handle the stop trigger (``Pending → Idle``)."""
        client = self._require_client()
        if client.is_err():
            return Err(client.unwrap_err())
        record = self.store.load_session()
        if record is None:
            return ok(Outcome.skipped(SkipReason.NO_SESSION))
        if not self.config.auto_track:
            return self._stay_idle(SkipReason.DISABLED)
        if event.session_id and record.session_id and event.session_id != record.session_id:
            logger.debug(
                "Stop for session %s closes interaction opened by %s",
                event.session_id,
                record.session_id,
            )

        previous = self.store.load_snapshot()
        scanned = self._scan_and_diff(previous)
        if scanned.is_err():
            return Err(scanned.unwrap_err())
        inventory, changes = scanned.unwrap()
        if not changes and self.config.exit_requires_changes:
            return ok(Outcome.skipped(SkipReason.NO_CHANGES))

        ended = self._event_time(event)
        started = self._started_time(record, fallback=ended)
        submitted = client.unwrap().register_interaction(
            changes,
            pre_snapshot_id=record.pre_snapshot_id,
            prompt_text=record.prompt_text,
            started_at=record.started_at,
            ended_at=format_timestamp(ended),
            duration_seconds=round((ended - started).total_seconds(), 3),
            session_id=record.session_id or event.session_id,
            parent_snapshot_id=previous.snapshot_id if previous is not None else None,
        )
        if submitted.is_err():
            return Err(submitted.unwrap_err())
        snapshot_id = submitted.unwrap()

        persisted = self._persist(inventory, snapshot_id).flat_map(
            lambda _: self.store.clear_session()
        )
        if persisted.is_err():
            return Err(persisted.unwrap_err())

        self._log_submission("exit", snapshot_id, changes)
        return ok(Outcome.submitted(snapshot_id, len(changes)))

    def preview(self) -> Result[list[ChangeRecord], Failure]:
        """Scan and diff against the cached snapshot without submitting anything."""
        return self._scan_and_diff(self.store.load_snapshot()).map(lambda pair: pair[1])

    # ------------------------------------------------------------------ #
    # Helpers
    # ------------------------------------------------------------------ #
    def _require_client(self) -> Result[TrackerClient, Failure]:
        if self.credentials is None or not self.credentials.is_complete:
            return failure(FailureKind.CONFIG_MISSING, "credentials are missing or incomplete")
        if self._client is None:
            self._client = TrackerClient.from_config(self.config, self.credentials)
        return ok(self._client)

    def _stay_idle(self, reason: SkipReason) -> Result[Outcome, Failure]:
        # a record left Pending by an elided Exit belongs to an earlier prompt
        if self.store.load_session() is not None:
            logger.debug("Dropping pending session record (%s)", reason.value)
        return self.store.clear_session().map(lambda _: Outcome.skipped(reason))

    def _scan_and_diff(
        self, previous: Snapshot | None
    ) -> Result[tuple[Inventory, list[ChangeRecord]], Failure]:
        baseline = previous.files if previous is not None else None
        return self._scanner().map(lambda inv: (inv, diff_inventories(inv, baseline)))

    def _persist(self, inventory: Inventory, snapshot_id: str) -> Result[None, Failure]:
        return self.store.save_snapshot(Snapshot.from_inventory(inventory, snapshot_id))

    def _event_time(self, event: ExitEvent) -> datetime:
        if event.timestamp is not None:
            try:
                return parse_timestamp(event.timestamp)
            except (ValueError, OverflowError, OSError):
                logger.debug("Unparseable stop timestamp %r; using now", event.timestamp)
        return self.clock()

    @staticmethod
    def _started_time(record: SessionRecord, *, fallback: datetime) -> datetime:
        try:
            return parse_timestamp(record.started_at)
        except ValueError:
            logger.debug("Session record has a bad started_at %r", record.started_at)
            return fallback

    def _log_submission(
        self, phase: Literal["entry", "exit"], snapshot_id: str, changes: list[ChangeRecord]
    ) -> None:
        counts = summarize(changes)
        logger.info(
            "%s snapshot %s submitted (+%d ~%d -%d)",
            phase,
            snapshot_id,
            counts["added"],
            counts["modified"],
            counts["deleted"],
        )


__all__ = [
    "SessionCorrelator",
    "Outcome",
    "OutcomeStatus",
    "SkipReason",
    "compile_skip_patterns",
    "should_skip_prompt",
]
