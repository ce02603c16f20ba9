"""Tracking IDs for log correlation.

Two IDs exist per process:
- session id: one per CLI invocation, stamped on every log line.
- pipeline run id: regenerated each time a pipeline starts; used in
  `[pipeline:...]` log suffixes and run manifests.
"""

from __future__ import annotations

import logging
import os
import threading
import uuid

SESSION_ENV_VAR = "DOCWEAVE_SESSION_ID"

_session_id: str | None = None
_pipeline_run_id: str | None = None

_session_lock = threading.Lock()
_pipeline_lock = threading.Lock()


def _short_id() -> str:
    return uuid.uuid4().hex[:8]


# region session id
def seed_session_id(value: str) -> None:
    """Set the session ID if it has not been generated yet (tests, embedding apps)."""
    global _session_id
    with _session_lock:
        if _session_id is None:
            _session_id = value


def get_session_id() -> str:
    """
    Return the session ID, creating it on first use.

    A seeded value wins, then the DOCWEAVE_SESSION_ID environment variable,
    then a fresh 8-character hex string.
    """
    global _session_id
    if _session_id is None:
        with _session_lock:
            if _session_id is None:
                _session_id = os.environ.get(SESSION_ENV_VAR) or _short_id()
    return _session_id


# endregion


# region pipeline run id
def start_pipeline_run() -> str:
    """Generate a new pipeline run ID, replacing any previous one."""
    global _pipeline_run_id
    with _pipeline_lock:
        _pipeline_run_id = _short_id()
    return _pipeline_run_id


def get_pipeline_run_id() -> str:
    """Current pipeline run ID, or "Unknown" outside of a pipeline run."""
    if _pipeline_run_id is None:
        logging.getLogger("docweave").debug(
            "No pipeline run active; call start_pipeline_run() first. Using 'Unknown'."
        )
        return "Unknown"
    return _pipeline_run_id


def seed_pipeline_run_id(value: str | None) -> None:
    """Force the pipeline run ID. Passing None clears it."""
    global _pipeline_run_id
    with _pipeline_lock:
        _pipeline_run_id = value


# endregion
