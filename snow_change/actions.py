"""Change request workflow steps: create, wait for approval, close."""

import logging
import time
from enum import Enum
from typing import Optional

from snow_change.client import ChangeClient
from snow_change.config import CloseConfig, RunConfig
from snow_change.errors import (
    ApprovalTimeoutError,
    ChangeRejectedError,
    ParseError,
    ValidationError,
)
from snow_change.output import OutputSink
from snow_change.response import extract_result_field

logger = logging.getLogger("snow_change.actions")

DEFAULT_POLL_INTERVAL = 30


class ApprovalState(Enum):
    """Approval polling states."""
    PENDING = 'pending'
    APPROVED = 'approved'
    REJECTED = 'rejected'
    TIMED_OUT = 'timed_out'


class SystemClock:
    """Wall clock and blocking sleep."""

    def now(self) -> float:
        return time.monotonic()

    def sleep(self, seconds: float) -> None:
        time.sleep(seconds)


def next_state(
    approval: str,
    elapsed_seconds: float,
    timeout_minutes: Optional[int] = None,
) -> ApprovalState:
    """
    Decide the approval state after one poll.

    Only ``approval`` drives the decision; rejection wins over timeout.
    Elapsed time is counted in whole minutes.

    Args:
        approval: The ``result.approval`` value of the latest poll.
        elapsed_seconds: Seconds since polling started.
        timeout_minutes: Give up after this many minutes, or None to wait forever.

    Returns:
        The next ApprovalState.
    """
    if approval == 'approved':
        return ApprovalState.APPROVED
    if approval == 'rejected':
        return ApprovalState.REJECTED

    if timeout_minutes is not None:
        elapsed_minutes = int(elapsed_seconds // 60)
        if elapsed_minutes >= timeout_minutes:
            return ApprovalState.TIMED_OUT

    return ApprovalState.PENDING


def create_change(
    client: ChangeClient,
    config: RunConfig,
    sink: OutputSink,
) -> str:
    """
    Create a change request and emit its number as ``cr_id``.

    Returns:
        The change request number.

    Raises:
        ValidationError: If no request body was given.
        APICallError: If the API call fails.
        ParseError: If the response carries no ``result.number``.
    """
    if not config.body:
        raise ValidationError("Request body (-b) is required for create action")

    logger.info("Creating Change Request")
    response = client.create_change(config.body)

    cr_id = extract_result_field(response, 'number')
    if not cr_id:
        raise ParseError("Failed to parse CR ID from response")

    logger.info(f"Created CR: {cr_id}", extra={'context': {'cr_id': cr_id}})
    sink.set_output('cr_id', cr_id)
    return cr_id


def wait_for_approval(
    client: ChangeClient,
    config: RunConfig,
    clock=None,
    interval_seconds: int = DEFAULT_POLL_INTERVAL,
) -> int:
    """
    Poll a change request until it is approved.

    Without a timeout the loop only ends on approval or rejection.

    Args:
        client: Change API client.
        config: Run configuration; ``cr_id`` and ``timeout_minutes`` are used.
        clock: Object with ``now()`` and ``sleep(seconds)``; SystemClock by default.
        interval_seconds: Pause between polls.

    Returns:
        Number of polls performed.

    Raises:
        ValidationError: If no change request ID was given.
        APICallError: If a poll fails.
        ChangeRejectedError: If the change request is rejected.
        ApprovalTimeoutError: If the timeout elapses first.
    """
    if not config.cr_id:
        raise ValidationError("CR ID (-c) is required for wait action")

    clock = clock or SystemClock()
    logger.info(f"Waiting for approval of CR: {config.cr_id}")

    start_time = clock.now()
    polls = 0
    while True:
        response = client.get_change(config.cr_id)
        polls += 1

        approval = extract_result_field(response, 'approval')
        state = extract_result_field(response, 'state')
        logger.debug(f"State: {state} | Approval: {approval}")

        outcome = next_state(approval, clock.now() - start_time, config.timeout_minutes)

        if outcome is ApprovalState.APPROVED:
            logger.info("CR Approved", extra={'context': {'cr_id': config.cr_id, 'polls': polls}})
            return polls
        if outcome is ApprovalState.REJECTED:
            raise ChangeRejectedError("CR Rejected")
        if outcome is ApprovalState.TIMED_OUT:
            raise ApprovalTimeoutError(f"Timed out after {config.timeout_minutes} minutes")

        logger.info(f"Still pending, retrying in {interval_seconds}s...")
        clock.sleep(interval_seconds)


def close_change(
    client: ChangeClient,
    config: RunConfig,
    close_config: Optional[CloseConfig] = None,
) -> None:
    """
    Close a change request. The response body is ignored.

    Raises:
        ValidationError: If no change request ID was given.
        APICallError: If the API call fails.
    """
    if not config.cr_id:
        raise ValidationError("CR ID (-c) is required for close action")

    close_config = close_config or CloseConfig()

    logger.info(f"Closing CR: {config.cr_id}")
    client.update_change(config.cr_id, {
        'state': 'closed',
        'close_code': close_config.close_code,
        'close_notes': close_config.close_notes,
    })

    logger.info(f"Closed CR: {config.cr_id}")
