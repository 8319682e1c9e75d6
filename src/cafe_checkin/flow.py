"""Ordering flow: scan a café code, pick a bean, record the brew."""

from __future__ import annotations

import logging
from urllib.parse import unquote, urlsplit

from cafe_checkin.exceptions import FlowError, ParseError
from cafe_checkin.schema import FlowState, FlowStep

logger = logging.getLogger(__name__)


def parse_scan_payload(payload: str | None) -> str:
    """Extract a café id from a scanned payload.

    The payload is either a bare id or a URL whose last path segment is the
    id, e.g. ``https://example.com/cafe/42``.

    Raises:
        ParseError: If no non-empty id can be extracted.
    """
    value = (payload or "").strip()
    if not value:
        raise ParseError("Scanned code is empty")

    parts = urlsplit(value)
    if parts.scheme and parts.netloc:
        segments = [segment for segment in parts.path.split("/") if segment.strip()]
        if not segments:
            raise ParseError(f"No café id in scanned URL: {value}")
        cafe_id = unquote(segments[-1]).strip()
        if not cafe_id:
            raise ParseError(f"No café id in scanned URL: {value}")
        return cafe_id

    return value


class OrderingFlow:
    """State machine for the scan -> bean-select -> brew-order session.

    While inactive the step reads ``scan`` and both ids are unset.
    ``bean-select`` always has a café id; ``brew-order`` has both ids.
    """

    def __init__(self) -> None:
        self._reset()

    @property
    def active(self) -> bool:
        return self._active

    @property
    def step(self) -> FlowStep:
        return self._step

    @property
    def cafe_id(self) -> str | None:
        return self._cafe_id

    @property
    def bean_id(self) -> str | None:
        return self._bean_id

    @property
    def state(self) -> FlowState:
        return FlowState(
            active=self._active,
            step=self._step,
            cafe_id=self._cafe_id,
            bean_id=self._bean_id,
            scan_error=self._scan_error,
        )

    def start(self) -> None:
        self._reset()
        self._active = True

    def scan_complete(self, cafe_id: str) -> bool:
        """Move from ``scan`` to ``bean-select``.

        Ignored when the flow is elsewhere, so a late callback from an
        abandoned scan cannot move the session.

        Returns:
            True if the transition happened.
        """
        if not self._active or self._step != "scan":
            logger.debug("ignoring scan result %r in step %s", cafe_id, self._step)
            return False
        self._cafe_id = cafe_id
        self._step = "bean-select"
        self._scan_error = None
        return True

    def report_scan_error(self, reason: str) -> None:
        if self._active and self._step == "scan":
            self._scan_error = reason

    def select_bean(self, bean_id: str) -> None:
        if not self._active or self._step != "bean-select":
            raise FlowError(f"select_bean called in step {self._step!r} (active={self._active})")
        if not self._cafe_id:
            raise FlowError("select_bean called without a scanned café")
        self._bean_id = bean_id
        self._step = "brew-order"

    def back(self) -> None:
        """Step back one screen; backing out of ``scan`` ends the session."""
        if not self._active:
            return
        if self._step == "brew-order":
            self._bean_id = None
            self._step = "bean-select"
        elif self._step == "bean-select":
            self._cafe_id = None
            self._step = "scan"
        else:
            self.cancel()

    def cancel(self) -> None:
        self._reset()

    def _reset(self) -> None:
        self._active = False
        self._step: FlowStep = "scan"
        self._cafe_id: str | None = None
        self._bean_id: str | None = None
        self._scan_error: str | None = None
