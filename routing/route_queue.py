"""
Purpose: Rate-limited, cached access to the external driving-route service.
What it does:
- Owns the route cache (signature -> DrivingRoute)
- Owns the FIFO of waiting route requests and the in-flight counter

Provides operations:
   - plan_route(points, preference) -> RouteOutcome

Applies throttling rules (not routing):
 - at most policy.max_in_flight requests run at once, the rest wait FIFO
 - every dequeued request sleeps policy.request_delay_s before it is issued
 - identical signatures already in flight share one request

Never retries. Failures are returned to the caller inside RouteOutcome and
are never cached, so a later call with the same signature tries again.

Rule: Queue owns scheduling and caching, provider clients own HTTP.
"""

from __future__ import annotations

import asyncio
import logging
from collections import deque
from dataclasses import dataclass, replace
from typing import Deque, Dict, List, Optional, Protocol, Sequence, Set

from .cache import Cache, MemoryCache
from .models import Coordinate, DrivingRoute, RouteOutcome, RoutePreference, RoutingError, build_route_key
from .policy import RoutingPolicy, default_routing_policy

logger = logging.getLogger(__name__)


class RouteProvider(Protocol):
    """Anything that can turn ordered points into a DrivingRoute (AMap, OSRM, fakes)."""

    def fetch_route(self, points: Sequence[Coordinate], preference: RoutePreference) -> DrivingRoute: ...


@dataclass
class _RouteTask:
    points: List[Coordinate]
    preference: RoutePreference
    route_key: str
    future: asyncio.Future


class RouteRequestQueue:
    """
    In-memory request scheduler in front of a RouteProvider:

    cache hit -> immediate answer
    cache miss -> WAITING (FIFO) -> IN FLIGHT (bounded) -> cached on success

    Blocking provider calls run in a worker thread so the event loop stays free.
    """

    def __init__(
        self,
        provider: RouteProvider,
        *,
        policy: Optional[RoutingPolicy] = None,
        cache: Optional[Cache] = None,
    ):
        self.provider = provider
        self.policy = policy or default_routing_policy()
        self.cache = cache if cache is not None else MemoryCache()

        self._waiting: Deque[_RouteTask] = deque()
        self._pending_by_key: Dict[str, asyncio.Future] = {}
        self._running: Set[asyncio.Task] = set()
        self._active = 0

        # number of calls actually handed to the provider
        self.requests_issued = 0

    # --- Public API ---

    async def plan_route(self, points: Sequence[Coordinate], preference=RoutePreference.HIGHWAY_FIRST) -> RouteOutcome:
        """
        Get a road-following route through the ordered points.

        points[0] is the origin, points[-1] the destination, anything in
        between is a via point in order.
        """
        points = list(points)
        if len(points) < 2:
            return RouteOutcome(
                error=RoutingError("POINTS_NOT_ENOUGH", "Route planning needs at least a start and an end point.")
            )

        preference = RoutePreference.parse(preference)
        route_key = build_route_key(points, preference)

        cached = self.cache.get(route_key)
        if cached is not None:
            logger.debug("Route cache hit for %s", route_key)
            return RouteOutcome(route=replace(cached, from_cache=True))

        future = self._pending_by_key.get(route_key)
        if future is None:
            future = asyncio.get_running_loop().create_future()
            self._pending_by_key[route_key] = future
            self._waiting.append(_RouteTask(points, preference, route_key, future))
            self._pump()

        try:
            # shield: an abandoned caller must not cancel a request others share
            route = await asyncio.shield(future)
        except RoutingError as error:
            return RouteOutcome(error=error)

        return RouteOutcome(route=route)

    @property
    def waiting_count(self) -> int:
        return len(self._waiting)

    @property
    def in_flight_count(self) -> int:
        return self._active

    # --- Scheduling ---

    def _pump(self) -> None:
        """Start waiting requests while there is a free slot."""
        while self._active < self.policy.max_in_flight and self._waiting:
            task = self._waiting.popleft()
            self._active += 1
            runner = asyncio.ensure_future(self._run(task))
            self._running.add(runner)
            runner.add_done_callback(self._running.discard)

    async def _run(self, task: _RouteTask) -> None:
        try:
            if self.policy.request_delay_s:
                await asyncio.sleep(self.policy.request_delay_s)

            self.requests_issued += 1
            route = await asyncio.to_thread(self.provider.fetch_route, task.points, task.preference)
        except RoutingError as error:
            logger.warning("Route request %s failed: [%s] %s", task.route_key, error.code, error.message)
            self._settle(task, error=error)
        except asyncio.CancelledError:
            self._settle(task, error=RoutingError("CANCELLED", "Route request was cancelled."))
            raise
        except Exception as exc:
            logger.exception("Route request %s raised an unexpected error", task.route_key)
            self._settle(task, error=RoutingError("PROVIDER_ERROR", str(exc) or type(exc).__name__))
        else:
            # only successes are cached
            self.cache.set(task.route_key, route)
            self._settle(task, route=route)
        finally:
            self._active -= 1
            self._pump()

    def _settle(self, task: _RouteTask, *, route: Optional[DrivingRoute] = None, error: Optional[BaseException] = None) -> None:
        self._pending_by_key.pop(task.route_key, None)
        if task.future.done():
            return
        if error is not None:
            task.future.set_exception(error)
        else:
            task.future.set_result(route)
