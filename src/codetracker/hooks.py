"""
Trigger adapters: the process boundary between the host tool and the agent.

The host tool runs one of two commands per interaction and pipes a JSON
payload to its stdin:

    codetracker-user-prompt-submit   →  Entry  (``{"prompt": ..., "session_id": ...}``)
    codetracker-stop                 →  Exit   (``{"session_id": ..., "timestamp": ...}``)

Both adapters are thin: parse the payload, locate the workspace, hand over to
:class:`~codetracker.session.correlator.SessionCorrelator`. Whatever happens
inside, including an unexpected exception, they return exit status 0 and
write nothing to stdout, so the agent can never be the reason the host tool
failed.
"""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Any, Literal

from pydantic import ValidationError

from codetracker.core.contracts.hook import EntryEvent, ExitEvent
from codetracker.core.result import Err, Failure, FailureKind, Result, ok
from codetracker.core.settings import get_logger
from codetracker.core.state.base import StateStore
from codetracker.core.state.storage import JsonStateStore
from codetracker.core.workspace import Workspace
from codetracker.session.correlator import Outcome, SessionCorrelator
from codetracker.transport.client import TrackerClient

logger = get_logger(__name__)

Phase = Literal["entry", "exit"]


def _decode_payload(raw: str) -> dict[str, Any]:
    """Parse stdin text into a dict; anything else reads as an empty payload."""
    if not raw.strip():
        return {}
    try:
        data = json.loads(raw)
    except json.JSONDecodeError:
        logger.debug("Hook payload is not JSON; treating it as empty")
        return {}
    return data if isinstance(data, dict) else {}


def parse_entry_event(raw: str) -> EntryEvent:
    """Build an :class:`EntryEvent` from raw stdin text."""
    try:
        return EntryEvent.model_validate(_decode_payload(raw))
    except ValidationError:
        logger.debug("Hook payload does not describe a prompt")
        return EntryEvent()


def parse_exit_event(raw: str) -> ExitEvent:
    """Build an :class:`ExitEvent` from raw stdin text."""
    try:
        return ExitEvent.model_validate(_decode_payload(raw))
    except ValidationError:
        logger.debug("Hook payload does not describe a stop event")
        return ExitEvent()


def build_correlator(
    workspace: Workspace,
    *,
    store: StateStore | None = None,
    client: TrackerClient | None = None,
) -> Result[SessionCorrelator, Failure]:
    """Load config and credentials for ``workspace`` and wire a correlator."""
    config = workspace.load_config()
    if config.is_err():
        return Err(config.unwrap_err())
    credentials = workspace.load_credentials()
    if credentials.is_err():
        return Err(credentials.unwrap_err())
    return ok(
        SessionCorrelator(
            workspace.root,
            config.unwrap(),
            credentials.unwrap(),
            store if store is not None else JsonStateStore(workspace.cache_dir),
            client=client,
            reserved=[workspace.state_dir],
        )
    )


def run_trigger(
    phase: Phase,
    raw: str,
    *,
    root: str | Path | None = None,
    store: StateStore | None = None,
    client: TrackerClient | None = None,
) -> Result[Outcome, Failure]:
    """Run one trigger end to end and report what happened."""
    if phase == "entry":
        entry = parse_entry_event(raw)
        workspace = Workspace.locate(root, entry.cwd)
        return build_correlator(workspace, store=store, client=client).flat_map(
            lambda c: c.on_entry(entry)
        )
    stop = parse_exit_event(raw)
    workspace = Workspace.locate(root, stop.cwd)
    return build_correlator(workspace, store=store, client=client).flat_map(
        lambda c: c.on_exit(stop)
    )


def handle(phase: Phase, raw: str, **kwargs: Any) -> int:
    """Run a trigger and map every outcome to exit status 0."""
    try:
        result = run_trigger(phase, raw, **kwargs)
    except (Exception, KeyboardInterrupt):  # noqa: BLE001
        logger.debug("%s trigger crashed", phase, exc_info=True)
        return 0

    if result.is_ok():
        outcome = result.unwrap()
        logger.debug("%s trigger: %s %s", phase, outcome.status.value, outcome.reason or "")
    else:
        problem = result.unwrap_err()
        if problem.kind is FailureKind.CONFIG_MISSING:
            logger.debug("%s trigger skipped: %s", phase, problem)
        else:
            logger.info("%s trigger failed: %s", phase, problem)
    return 0


def read_stdin() -> str:
    """Read the hook payload until end-of-stream (``""`` if there is none)."""
    stream = sys.stdin
    if stream is None or stream.closed:
        return ""
    try:
        return stream.read()
    except (OSError, ValueError, UnicodeDecodeError):
        return ""


def user_prompt_submit() -> int:
    """Console entry point for the prompt-submit hook."""
    return handle("entry", read_stdin())


def stop() -> int:
    """Console entry point for the stop hook."""
    return handle("exit", read_stdin())


__all__ = [
    "parse_entry_event",
    "parse_exit_event",
    "build_correlator",
    "run_trigger",
    "handle",
    "read_stdin",
    "user_prompt_submit",
    "stop",
]
