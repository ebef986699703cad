"""
Simulation driver.

Runs the iteration loop over a BodyStore:

1. Walk the current octree and accumulate each body's next acceleration
2. Velocity-Verlet step every leaf and write it back to the store
3. Recompute the bounding box from the updated store
4. Build a fresh tree, release the old one, then run the collision pass
5. Every ``snapshot_interval`` iterations, hand the store to the snapshot writer
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Callable, Optional

import numpy as np

if TYPE_CHECKING:
    from typing_extensions import Self

from .collisions import detect_collisions
from .config import SimulationConfig
from .forces import evaluate_forces
from .integrator import integrate
from .spatial.octree import Octree
from .types import BodyStore, Event, EventType, kinetic_energy, total_momentum
from .validation import InvalidRegionError

logger = logging.getLogger(__name__)

SnapshotWriterFn = Callable[[BodyStore], Any]


class Simulation:
    """
    Barnes-Hut n-body simulation with velocity-Verlet integration.

    Provides:
    - Per-iteration tree rebuild, force evaluation and integration
    - Periodic snapshots through a pluggable writer
    - Event system (start/tick/snapshot/end events)

    Example:
        store = BodyStore([
            Body(position=(-1e11, 0, 0), mass=1e30),
            Body(position=(1e11, 0, 0), mass=1e30),
        ])
        sim = Simulation(store, SimulationConfig(timestep=1.0, iterations=10))
        sim.run()

        for body in sim.store:
            print(body.index, body.position)
    """

    def __init__(
        self,
        store: BodyStore,
        config: Optional[SimulationConfig] = None,
        *,
        snapshot_writer: Optional[SnapshotWriterFn] = None,
        on_start: Optional[Callable[[Optional[Event]], None]] = None,
        on_tick: Optional[Callable[[Optional[Event]], None]] = None,
        on_snapshot: Optional[Callable[[Optional[Event]], None]] = None,
        on_end: Optional[Callable[[Optional[Event]], None]] = None,
    ) -> None:
        """
        Initialize the simulation and build the first tree.

        Args:
            store: Bodies to simulate (mutated in place)
            config: Run parameters. Defaults to SimulationConfig().
            snapshot_writer: Called with the store every snapshot_interval iterations
            on_start: Callback for start event
            on_tick: Callback for tick event
            on_snapshot: Callback for snapshot event
            on_end: Callback for end event

        Raises:
            InvalidRegionError: If the store is empty
        """
        if len(store) == 0:
            raise InvalidRegionError("cannot simulate an empty body store")

        self._store = store
        self._config = config if config is not None else SimulationConfig()
        self._snapshot_writer = snapshot_writer
        self._events: dict[EventType, Callable[[Optional[Event]], None]] = {}
        self._iteration: int = 0
        self._snapshots_written: int = 0
        self._running: bool = False
        self._primed: bool = not self._config.prime_acceleration

        if on_start:
            self._events[EventType.start] = on_start
        if on_tick:
            self._events[EventType.tick] = on_tick
        if on_snapshot:
            self._events[EventType.snapshot] = on_snapshot
        if on_end:
            self._events[EventType.end] = on_end

        self._tree: Optional[Octree] = None
        self._rebuild()

    # -------------------------------------------------------------------------
    # Properties
    # -------------------------------------------------------------------------

    @property
    def store(self) -> BodyStore:
        """Get the body store."""
        return self._store

    @property
    def config(self) -> SimulationConfig:
        """Get the run configuration."""
        return self._config

    @property
    def tree(self) -> Octree:
        """Get the octree for the current iteration."""
        assert self._tree is not None
        return self._tree

    @property
    def iteration(self) -> int:
        """Get the number of completed iterations."""
        return self._iteration

    @property
    def time(self) -> float:
        """Get the simulated time elapsed."""
        return self._iteration * self._config.timestep

    @property
    def snapshots_written(self) -> int:
        """Get the number of snapshots handed to the writer."""
        return self._snapshots_written

    @property
    def bounds(self) -> tuple[np.ndarray, np.ndarray]:
        """Get the (lower, upper) corners of the current root region."""
        region = self.tree.region
        return region.lower, region.upper

    def momentum(self) -> np.ndarray:
        """Total momentum of the store."""
        return total_momentum(self._store)

    def kinetic_energy(self) -> float:
        """Total kinetic energy of the store."""
        return kinetic_energy(self._store)

    # -------------------------------------------------------------------------
    # Event System
    # -------------------------------------------------------------------------

    def on(self, event: EventType | str, callback: Callable[[Optional[Event]], None]) -> Self:
        """
        Subscribe to a simulation event.

        Args:
            event: Event type (EventType enum or string name)
            callback: Function to call when event fires

        Returns:
            self (for chaining)
        """
        if isinstance(event, str):
            event = EventType[event]
        self._events[event] = callback
        return self

    def trigger(self, event: Event) -> None:
        """Trigger an event, calling the registered callback."""
        event_type = event.get("type")
        if event_type is not None and event_type in self._events:
            self._events[event_type](event)

    # -------------------------------------------------------------------------
    # Lifecycle Methods
    # -------------------------------------------------------------------------

    def run(self) -> Self:
        """
        Run the configured number of iterations.

        Fires start event, ticks until done or stopped, fires end event.

        Returns:
            self (for chaining)
        """
        logger.info(
            "starting simulation: %d bodies, %d iterations, dt=%g, theta=%g",
            len(self._store),
            self._config.iterations,
            self._config.timestep,
            self._config.theta,
        )
        self._running = True
        self.trigger({"type": EventType.start, "iteration": self._iteration, "time": self.time})

        self.kick()

        self._running = False
        self.trigger({"type": EventType.end, "iteration": self._iteration, "time": self.time})
        logger.info(
            "simulation finished after %d iterations, %d snapshot(s) written",
            self._iteration,
            self._snapshots_written,
        )
        return self

    def kick(self) -> None:
        """Run tick() repeatedly until the iteration count is reached or stop() is called."""
        while self._running and not self.tick():
            pass

    def stop(self) -> Self:
        """Stop the simulation after the current iteration."""
        self._running = False
        return self

    def tick(self) -> bool:
        """
        Perform one iteration.

        Returns:
            True once the configured iteration count has been reached.
        """
        if self._iteration >= self._config.iterations:
            return True

        if not self._primed:
            self._prime()

        root = self.tree.root
        evaluate_forces(root, self._config.gravitational_constant, self._config.theta)
        integrate(root, self._store, self._config.timestep)
        self._iteration += 1

        self._rebuild()

        interval = self._config.snapshot_interval
        if interval and self._iteration % interval == 0:
            self._snapshot()

        self.trigger({"type": EventType.tick, "iteration": self._iteration, "time": self.time})
        return self._iteration >= self._config.iterations

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _prime(self) -> None:
        """Set every body's old acceleration from the initial tree."""
        evaluate_forces(self.tree.root, self._config.gravitational_constant, self._config.theta)
        for body in self._store:
            body.acceleration = body.next_acceleration
            body.next_acceleration = np.zeros(3, dtype=np.float64)
        self._primed = True

    def _rebuild(self) -> None:
        """
        Build a new tree over the store, then release the old one.

        If building fails the previous tree stays in place, unreleased.
        """
        tree = Octree.from_store(
            self._store,
            padding=self._config.boundary_padding,
            max_depth=self._config.max_depth,
            extent_factor=self._config.collision_extent_factor,
        )
        if self._tree is not None:
            self._tree.release()
        self._tree = tree
        detect_collisions(tree.root)

    def _snapshot(self) -> None:
        """Hand the store to the snapshot writer."""
        if self._snapshot_writer is None:
            return
        path = self._snapshot_writer(self._store)
        self._snapshots_written += 1
        logger.info("iteration %d: wrote snapshot %s", self._iteration, path)
        self.trigger(
            {
                "type": EventType.snapshot,
                "iteration": self._iteration,
                "time": self.time,
                "path": path,
            }
        )


__all__ = ["Simulation"]
