"""Session correlation between the prompt-submit and stop triggers.

Currently exposed:

- :class:`SessionCorrelator`: Entry/Exit protocol, implemented in ``correlator.py``.
"""

from __future__ import annotations

from .correlator import Outcome, OutcomeStatus, SessionCorrelator, SkipReason

__all__ = ["SessionCorrelator", "Outcome", "OutcomeStatus", "SkipReason"]
