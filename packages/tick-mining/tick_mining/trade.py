"""Trade collaborator protocol, mock client, and the async trade system.

A trade sells the whole cargo for tokens. The collaborator call is blocking
and runs on a worker thread; the system harvests the future on the
simulation thread so session state is only ever touched there.
"""
from __future__ import annotations

import random as _random_mod
import sys
import time
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable, Protocol, runtime_checkable

from tick_mining.signals import TRADE_FAILED, TRADE_STARTED, TRADE_SUCCEEDED
from tick_mining.state import SETTLE_TIMER, Trigger

if TYPE_CHECKING:
    from tick_mining.session import Session
    from tick_mining.types import TickContext


class TradeError(Exception):
    """Raised by trade clients, or for a malformed trade response."""


@dataclass(frozen=True)
class TradeRequest:
    resources: dict[str, int]
    max_capacities: dict[str, int]

    def to_payload(self) -> dict[str, Any]:
        """Wire shape of the request body."""
        return {
            "resources": dict(self.resources),
            "maxCapacities": dict(self.max_capacities),
        }


@dataclass(frozen=True)
class TradeResult:
    success: bool
    ocx_earned: float = 0.0
    error: str | None = None

    @classmethod
    def from_payload(cls, payload: Any) -> TradeResult:
        """Parse ``{"success", "data": {"ocxEarned"}, "error"}``."""
        if not isinstance(payload, dict):
            raise TradeError(
                f"Trade response must be an object, got {type(payload).__name__}"
            )
        success = bool(payload.get("success", False))
        data = payload.get("data") or {}
        if not isinstance(data, dict):
            raise TradeError("Trade response 'data' must be an object")
        try:
            earned = float(data.get("ocxEarned", 0))
        except (TypeError, ValueError) as exc:
            raise TradeError(f"Invalid ocxEarned: {data.get('ocxEarned')!r}") from exc
        if success and earned < 0:
            raise TradeError(f"ocxEarned must be >= 0, got {earned}")
        error = payload.get("error")
        return cls(
            success=success,
            ocx_earned=earned if success else 0.0,
            error=str(error) if error is not None else None,
        )


@runtime_checkable
class TradeClient(Protocol):
    """Protocol for trade collaborators.

    ``trade`` blocks and is invoked inside a thread pool worker. It may
    return a TradeResult or the raw response payload. Any exception counts
    as a failed trade.
    """

    def trade(self, request: TradeRequest) -> TradeResult | dict[str, Any]:
        ...


class MockTradeClient:
    """Deterministic trade client for tests and offline play.

    Args:
        responses: A fixed TradeResult, or a callable (TradeRequest) ->
            TradeResult. Defaults to success paying ``price`` per unit.
        price: Tokens per mineral unit for the default response.
        latency: Simulated delay in seconds before returning.
        error_rate: Probability of raising (0.0--1.0).
        error_exception: Exception raised on simulated error. Defaults to
            TradeError("mock error").
    """

    def __init__(
        self,
        responses: TradeResult | Callable[[TradeRequest], TradeResult] | None = None,
        price: float = 1.0,
        latency: float = 0.0,
        error_rate: float = 0.0,
        error_exception: BaseException | None = None,
    ) -> None:
        self._responses = responses
        self._price = price
        self._latency = latency
        self._error_rate = error_rate
        self._error_exception = (
            error_exception if error_exception is not None else TradeError("mock error")
        )
        self._rng = _random_mod.Random()
        self.requests: list[TradeRequest] = []

    def trade(self, request: TradeRequest) -> TradeResult:
        self.requests.append(request)
        if self._error_rate > 0.0 and self._rng.random() < self._error_rate:
            raise self._error_exception

        if self._latency > 0.0:
            time.sleep(self._latency)

        if self._responses is None:
            units = sum(request.resources.values())
            return TradeResult(success=True, ocx_earned=units * self._price)
        if isinstance(self._responses, TradeResult):
            return self._responses
        return self._responses(request)


@dataclass
class _PendingTrade:
    """In-flight trade. ``waited`` counts simulation ticks since dispatch."""

    request: TradeRequest
    future: Future[Any]
    waited: int = 0


class TradeSystem:
    """Async trade system for one session.

    Callable as a system. Each tick it harvests a finished future, then
    enforces the timeout in virtual time. Only one trade is in flight at a
    time because the state machine only begins a trade from idle.

    Use ``make_trade_system(session, client)`` to create an instance.
    """

    def __init__(self, session: Session, client: TradeClient) -> None:
        self._session = session
        self._client = client
        self._executor = ThreadPoolExecutor(
            max_workers=session.config.trade_pool_size,
        )
        self._pending: _PendingTrade | None = None
        self._shutdown: bool = False
        self._on_result: list[Callable[[TradeResult], None]] = []
        self._on_error: list[Callable[[str, str], None]] = []

    @property
    def in_flight(self) -> bool:
        return self._pending is not None

    def on_result(self, cb: Callable[[TradeResult], None]) -> None:
        """Register callback fired with each successful TradeResult."""
        self._on_result.append(cb)

    def on_error(self, cb: Callable[[str, str], None]) -> None:
        """Register callback fired on failure.

        Signature: (error_type, error_message) -> None, where error_type is
        one of ``"client_error"``, ``"rejected"``, ``"timeout"``.
        """
        self._on_error.append(cb)

    def request(self) -> bool:
        """Sell the whole cargo. Only allowed when storage is completely full."""
        session = self._session
        if self._shutdown or self._pending is not None:
            return False
        if not session.cargo.is_full():
            return False
        if not session.fsm.begin(Trigger.TRADE):
            return False
        trade_request = TradeRequest(
            resources=session.cargo.resources(),
            max_capacities=dict(session.cargo.capacity),
        )
        future: Future[Any] = self._executor.submit(
            self._client.trade, trade_request,
        )
        self._pending = _PendingTrade(request=trade_request, future=future)
        session.bus.publish(TRADE_STARTED, resources=trade_request.resources)
        return True

    def __call__(self, session: Session, ctx: TickContext) -> None:
        if self._shutdown or self._pending is None:
            return
        self._harvest(session)
        self._check_timeout(session)

    def shutdown(self) -> None:
        """Stop the worker pool and drop any pending trade.

        A dropped trade leaves the session in ``trading``; call this when
        the engine stops.
        """
        self._shutdown = True
        self._executor.shutdown(wait=False, cancel_futures=True)
        self._pending = None

    def _harvest(self, session: Session) -> None:
        pending = self._pending
        assert pending is not None
        if not pending.future.done():
            pending.waited += 1
            return
        self._pending = None

        exc = pending.future.exception()
        if exc is not None:
            self._fail(session, "client_error", str(exc) or type(exc).__name__)
            return

        result = pending.future.result()
        if not isinstance(result, TradeResult):
            try:
                result = TradeResult.from_payload(result)
            except TradeError as parse_exc:
                self._fail(session, "client_error", str(parse_exc))
                return
        if not result.success:
            self._fail(session, "rejected", result.error or "Trade failed")
            return

        session.cargo.clear()
        session.balance += result.ocx_earned
        session.last_error = None
        session.fsm.fire(Trigger.TRADE_SUCCEEDED)
        session.bus.publish(
            TRADE_SUCCEEDED,
            resources=pending.request.resources,
            ocx_earned=result.ocx_earned,
            balance=session.balance,
        )
        session.timers.start(SETTLE_TIMER, session.config.ticks(session.config.settle_ms))
        self._fire_on_result(result)

    def _check_timeout(self, session: Session) -> None:
        pending = self._pending
        if pending is None:
            return
        timeout_ms = session.config.trade_timeout_ms
        if pending.waited >= session.config.ticks(timeout_ms):
            pending.future.cancel()
            self._pending = None
            self._fail(session, "timeout", f"Trade timed out after {timeout_ms}ms")

    def _fail(self, session: Session, error_type: str, message: str) -> None:
        session.last_error = message
        session.fsm.fire(Trigger.TRADE_FAILED)
        session.bus.publish(TRADE_FAILED, error_type=error_type, error=message)
        self._fire_on_error(error_type, message)

    def _fire_on_result(self, result: TradeResult) -> None:
        for cb in self._on_result:
            try:
                cb(result)
            except Exception:
                print(
                    f"tick-mining: on_result callback error: {sys.exc_info()[1]}",
                    file=sys.stderr,
                )

    def _fire_on_error(self, error_type: str, message: str) -> None:
        for cb in self._on_error:
            try:
                cb(error_type, message)
            except Exception:
                print(
                    f"tick-mining: on_error callback error: {sys.exc_info()[1]}",
                    file=sys.stderr,
                )


def make_trade_system(session: Session, client: TradeClient) -> TradeSystem:
    """Create a trade system bound to ``session``.

    The system owns a ThreadPoolExecutor; call ``system.shutdown()`` when
    the engine stops.
    """
    return TradeSystem(session, client)
