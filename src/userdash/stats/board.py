"""Observable store for the three user statistics.

Each write swaps in a new immutable StatsSnapshot and notifies
subscribers once, so an observer always sees whole MetricViews and
sees all three loading flags drop in the same notification.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Callable, Mapping

from userdash.models.domain import MetricView

logger = logging.getLogger(__name__)

METRIC_NAMES = ("registered", "new", "verified")

Subscriber = Callable[["StatsSnapshot"], None]


@dataclass(frozen=True)
class StatsSnapshot:
    """The three MetricViews at one point in time."""

    registered: MetricView = field(default_factory=MetricView)
    new: MetricView = field(default_factory=MetricView)
    verified: MetricView = field(default_factory=MetricView)

    def get(self, name: str) -> MetricView:
        if name not in METRIC_NAMES:
            raise ValueError(f"Unknown metric: {name}")
        return getattr(self, name)

    @property
    def settled(self) -> bool:
        """True once no view is loading."""
        return not any(self.get(name).loading for name in METRIC_NAMES)

    @property
    def page_ready(self) -> bool:
        """True when every metric settled successfully."""
        return all(self.get(name).state == "ready" for name in METRIC_NAMES)


class StatsBoard:
    """Holds the current StatsSnapshot for one page instance."""

    def __init__(self) -> None:
        self._snapshot = StatsSnapshot()
        self._subscribers: list[Subscriber] = []
        self._closed = False

    @property
    def snapshot(self) -> StatsSnapshot:
        return self._snapshot

    @property
    def closed(self) -> bool:
        return self._closed

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Register a callback for every published snapshot.

        Returns:
            A function that removes the subscription.
        """
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def stage(self, name: str, value: str, description: str) -> bool:
        """Publish a metric's value and description while it is still loading.

        Returns:
            False if the board is closed and the write was discarded.

        Raises:
            ValueError: Unknown metric, or the metric was already staged or settled.
        """
        current = self._snapshot.get(name)
        if self._closed:
            logger.debug(f"Discarding late value for {name}: board closed")
            return False
        if not current.loading or current.staged:
            raise ValueError(f"Metric {name} already published")

        self._publish(
            replace(self._snapshot, **{name: MetricView(value=value, description=description)})
        )
        return True

    def settle(self, failures: Mapping[str, str] | None = None) -> bool:
        """Move every view out of loading in one snapshot.

        Staged views become ready. Views listed in ``failures`` (or never
        staged) become failed with the error text.

        Returns:
            False if the board is closed and the write was discarded.

        Raises:
            ValueError: If the board already settled.
        """
        if self._closed:
            logger.debug("Discarding settle: board closed")
            return False
        if self._snapshot.settled:
            raise ValueError("Stats already settled")

        failures = failures or {}
        views: dict[str, MetricView] = {}
        for name in METRIC_NAMES:
            view = self._snapshot.get(name)
            if name in failures:
                views[name] = MetricView(state="failed", error=failures[name])
            elif view.staged:
                views[name] = replace(view, state="ready")
            else:
                views[name] = MetricView(state="failed", error="no value published")

        self._publish(StatsSnapshot(**views))
        return True

    def close(self) -> None:
        """Stop accepting writes and drop all subscribers."""
        self._closed = True
        self._subscribers.clear()

    def _publish(self, snapshot: StatsSnapshot) -> None:
        self._snapshot = snapshot
        for callback in list(self._subscribers):
            callback(snapshot)
