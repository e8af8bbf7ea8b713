"""
Retries for outbound calls (notification delivery, gateway requests), guarded
by a per-collaborator circuit breaker.
"""

import asyncio
import random
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Awaitable, Callable, Dict, Optional

from jobflow.config.logging import get_logger

logger = get_logger(__name__)

CLOSED = "closed"
OPEN = "open"
HALF_OPEN = "half_open"


class CircuitOpenError(Exception):
    """Raised when calls to a collaborator are short-circuited."""

    def __init__(self, operation_key: str):
        self.operation_key = operation_key
        super().__init__(f"Circuit breaker is open for {operation_key}")


@dataclass
class Circuit:
    state: str = CLOSED
    failures: int = 0
    last_failure: Optional[datetime] = None


class RetryHandler:
    """
    Runs an async operation up to ``max_retries + 1`` times with exponential
    backoff and jitter.

    Every failed attempt counts towards the circuit of ``operation_key``.
    Once ``failure_threshold`` failures pile up the circuit opens and calls
    fail fast with ``CircuitOpenError`` until ``reset_after`` has passed.
    The next call then goes through half-open and a success closes it again.
    """

    def __init__(
        self,
        failure_threshold: int = 5,
        reset_after: timedelta = timedelta(minutes=5),
        max_delay: float = 60.0,
    ):
        self.failure_threshold = failure_threshold
        self.reset_after = reset_after
        self.max_delay = max_delay
        self._circuits: Dict[str, Circuit] = {}

    async def execute_with_retry(
        self,
        operation: Callable[[], Awaitable[Any]],
        max_retries: int = 3,
        base_delay: float = 1.0,
        operation_key: str = "default",
    ) -> Any:
        circuit = self._circuits.setdefault(operation_key, Circuit())
        self._check_circuit(operation_key, circuit)

        attempt = 0
        while True:
            try:
                result = await operation()
            except Exception as e:
                self._on_failure(operation_key, circuit)
                if attempt >= max_retries:
                    logger.error(
                        "Giving up on operation",
                        operation_key=operation_key,
                        attempts=attempt + 1,
                        error=str(e),
                    )
                    raise

                delay = self.backoff(attempt, base_delay)
                logger.warning(
                    "Operation failed, backing off",
                    operation_key=operation_key,
                    attempt=attempt + 1,
                    max_retries=max_retries,
                    error=str(e),
                    delay_seconds=round(delay, 3),
                )
                await asyncio.sleep(delay)
                attempt += 1
            else:
                self._on_success(operation_key, circuit)
                return result

    def backoff(self, attempt: int, base_delay: float) -> float:
        """``base_delay * 2**attempt`` with 25% jitter, capped at ``max_delay``."""
        delay = base_delay * (2**attempt)
        delay += random.uniform(-0.25, 0.25) * delay
        return min(max(delay, 0.0), self.max_delay)

    def _check_circuit(self, operation_key: str, circuit: Circuit) -> None:
        if circuit.state != OPEN:
            return
        if datetime.now(timezone.utc) - circuit.last_failure <= self.reset_after:
            raise CircuitOpenError(operation_key)
        circuit.state = HALF_OPEN
        logger.info("Circuit breaker half-open", operation_key=operation_key)

    def _on_failure(self, operation_key: str, circuit: Circuit) -> None:
        circuit.failures += 1
        circuit.last_failure = datetime.now(timezone.utc)
        if circuit.state != OPEN and circuit.failures >= self.failure_threshold:
            circuit.state = OPEN
            logger.warning(
                "Circuit breaker opened",
                operation_key=operation_key,
                failure_count=circuit.failures,
            )

    def _on_success(self, operation_key: str, circuit: Circuit) -> None:
        if circuit.state != CLOSED:
            logger.info("Circuit breaker closed", operation_key=operation_key)
        circuit.state = CLOSED
        circuit.failures = 0

    def get_circuit_breaker_status(self, operation_key: str) -> dict:
        """Circuit state for health reporting."""
        circuit = self._circuits.get(operation_key, Circuit())
        return {
            "state": circuit.state,
            "failure_count": circuit.failures,
            "last_failure": (
                circuit.last_failure.isoformat() if circuit.last_failure else None
            ),
        }

    def reset_circuit_breaker(self, operation_key: str) -> None:
        if self._circuits.pop(operation_key, None) is not None:
            logger.info("Circuit breaker manually reset", operation_key=operation_key)
