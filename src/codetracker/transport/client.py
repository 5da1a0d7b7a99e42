# -----------------------------------------------------------------------------
# This module provides the small, synchronous HTTP client the agent uses to
# report snapshots to the CodeTracker service:
#   - authenticates with the project's API key in the `X-API-Key` header
#   - POSTs one JSON body per call with a bounded timeout
#   - returns `Result[snapshot_id, Failure]` and never raises
#
# The implementation uses only the Python standard library (`urllib.request`).
# Unit tests mock the internal `_post()` method so that no real HTTP calls are
# made during CI.
#
# Endpoints
# ---------
#   POST /api/snapshots     register a snapshot (Entry, or a standalone report)
#   POST /api/interactions  register the post-snapshot of a prompt/stop pair
#
# Both answer with the envelope {"success": bool, "data": {"snapshot_id": ..}}.
# Any non-2xx status, network error, timeout, or malformed body is the same
# uniform `transport` failure to callers.
# -----------------------------------------------------------------------------
from __future__ import annotations

import json
import urllib.error
import urllib.request
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Literal

from pydantic import BaseModel, ValidationError

from codetracker import __version__
from codetracker.core.contracts.api import ApiEnvelope, InteractionRequest, SnapshotRequest
from codetracker.core.contracts.change import ChangeRecord
from codetracker.core.contracts.config import Credentials, TrackerConfig
from codetracker.core.result import Failure, FailureKind, Result, failure, ok
from codetracker.core.settings import get_logger

logger = get_logger(__name__)

SNAPSHOTS_PATH = "/api/snapshots"
INTERACTIONS_PATH = "/api/interactions"


class TransportError(RuntimeError):
    """Raised by :meth:`TrackerClient._post`; never escapes the client."""


@dataclass(slots=True)
class TrackerClient:
    """Client for the CodeTracker snapshot API.

    Parameters
    ----------
    base_url:
        Service root, e.g. ``"https://api.thinktrace.net"``.
    api_key:
        Secret sent in the ``X-API-Key`` header.
    project_hash:
        Project correlation id included in every request body.
    timeout_seconds:
        Network timeout for each request. The agent runs inside the host
        tool's hook, so this stays short.
    """

    base_url: str
    api_key: str
    project_hash: str
    timeout_seconds: float = 5.0

    @classmethod
    def from_config(cls, config: TrackerConfig, credentials: Credentials) -> TrackerClient:
        """Build a client from the project's config and credential files."""
        return cls(
            base_url=config.server_url,
            api_key=credentials.api_key or "",
            project_hash=credentials.current_project_hash or "",
            timeout_seconds=config.request_timeout,
        )

    # --------------------------------------------------------------------- #
    # Public API
    # --------------------------------------------------------------------- #
    def register_snapshot(
        self,
        changes: list[ChangeRecord],
        *,
        session_id: str | None = None,
        parent_snapshot_id: str | None = None,
        prompt_text: str | None = None,
        trigger: Literal["entry", "exit"] = "entry",
    ) -> Result[str, Failure]:
        """Submit a snapshot's change records; return the new snapshot id."""
        request = SnapshotRequest(
            project_hash=self.project_hash,
            session_id=session_id,
            parent_snapshot_id=parent_snapshot_id,
            prompt_text=prompt_text,
            trigger=trigger,
            changes=changes,
        )
        return self._submit(SNAPSHOTS_PATH, request)

    def register_interaction(
        self,
        changes: list[ChangeRecord],
        *,
        pre_snapshot_id: str,
        prompt_text: str,
        started_at: str,
        ended_at: str,
        duration_seconds: float,
        session_id: str | None = None,
        parent_snapshot_id: str | None = None,
    ) -> Result[str, Failure]:
        """Submit the post-snapshot of an interaction; return its snapshot id."""
        request = InteractionRequest(
            project_hash=self.project_hash,
            session_id=session_id,
            pre_snapshot_id=pre_snapshot_id,
            parent_snapshot_id=parent_snapshot_id,
            prompt_text=prompt_text,
            started_at=started_at,
            ended_at=ended_at,
            duration_seconds=max(0.0, duration_seconds),
            changes=changes,
        )
        return self._submit(INTERACTIONS_PATH, request)

    # --------------------------------------------------------------------- #
    # Internal helpers
    # --------------------------------------------------------------------- #
    def _submit(self, path: str, request: BaseModel) -> Result[str, Failure]:
        """POST ``request`` and extract the snapshot id, absorbing every error."""
        url = self.base_url.rstrip("/") + path
        headers: dict[str, str] = {
            "Content-Type": "application/json",
            "Accept": "application/json",
            "X-API-Key": self.api_key,
            "User-Agent": f"codetracker/{__version__}",
        }
        try:
            response = self._post(url=url, headers=headers, payload=request.model_dump(mode="json"))
            envelope = ApiEnvelope.model_validate(response)
        except (TransportError, ValidationError) as exc:
            logger.debug("Submission to %s failed: %s", path, exc)
            return failure(FailureKind.TRANSPORT, str(exc))
        except Exception as exc:  # noqa: BLE001
            logger.debug("Unexpected error submitting to %s", path, exc_info=True)
            return failure(FailureKind.TRANSPORT, f"{type(exc).__name__}: {exc}")

        if not envelope.success or envelope.data is None:
            detail = envelope.error or "response carried no snapshot_id"
            logger.debug("Service rejected %s: %s (%s)", path, detail, envelope.code)
            return failure(FailureKind.TRANSPORT, detail)
        return ok(envelope.data.snapshot_id)

    def _post(
        self,
        *,
        url: str,
        headers: Mapping[str, str],
        payload: Mapping[str, Any],
    ) -> Any:
        """Perform an HTTP POST request and decode the JSON response.

        This is the seam for unit tests: patch :meth:`_post` to return a
        stubbed body without any network I/O.

        Raises
        ------
        TransportError
            On HTTP error status, network failure, timeout, or a body that is
            not JSON.
        """
        body = json.dumps(payload).encode("utf-8")
        request = urllib.request.Request(
            url=url,
            data=body,
            headers=dict(headers),
            method="POST",
        )

        try:
            with urllib.request.urlopen(request, timeout=self.timeout_seconds) as resp:
                raw = resp.read()
        except urllib.error.HTTPError as exc:
            detail = exc.read().decode("utf-8", errors="ignore")
            raise TransportError(f"HTTP {exc.code}: {exc.reason}; body={detail[:200]!r}") from exc
        except urllib.error.URLError as exc:
            raise TransportError(f"network error: {exc.reason}") from exc
        except (TimeoutError, OSError) as exc:
            raise TransportError(f"connection failed: {exc}") from exc

        try:
            return json.loads(raw.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise TransportError("response body is not JSON") from exc


__all__ = ["TrackerClient", "TransportError", "SNAPSHOTS_PATH", "INTERACTIONS_PATH"]
