"""
One dashboard view's fetch cycle.

A DashboardSession loads the world geometry and both data sources on an
asyncio loop, runs the view builders on whatever arrives and writes the
results to a state sink, one slot per view:

    totals           Totals (domestic / foreign / overall Rollups)
    global_map       [{name, value}, ...] for the breakdown map
    table            [TableRow, ...]
    per_million_map  [MapEntry, ...]
    loaded           True once the geometry and the data have settled

The area snapshot and the geometry load run concurrently. The countries
snapshot is only fetched after the geometry has settled, so its map is never
drawn against an unregistered geometry.

After every await the session checks its torn-down flag and cancel token; a
torn-down session discards what it received and never calls the sink again.
"""

import asyncio
import logging
from dataclasses import dataclass

import data_loader
from case_records import parse_results, split_results
from data_loader import DataSourceError
from map_presentation import WORLD_MAP_ID
from view_builders import build_global_map, build_per_million_map, build_table, build_totals

logger = logging.getLogger(__name__)

SLOTS = ("totals", "global_map", "table", "per_million_map", "loaded")


class CancelToken:
    def __init__(self):
        self._cancelled = False

    @property
    def cancelled(self):
        return self._cancelled

    def cancel(self):
        self._cancelled = True


@dataclass(frozen=True)
class LoadResult:
    ok: bool
    value: object = None
    error: Exception = None

    @classmethod
    def success(cls, value):
        return cls(True, value)

    @classmethod
    def failure(cls, error):
        return cls(False, error=error)


async def load_geometry(registry, map_id=WORLD_MAP_ID):
    """Load and register the world geometry unless it already is registered."""
    if registry.is_registered(map_id):
        return LoadResult.success(registry.get(map_id))
    try:
        geometry = await data_loader.load_world_geometry_async()
    except DataSourceError as e:
        logger.warning("World geometry unavailable: %s", e)
        return LoadResult.failure(e)
    if registry.register(map_id, geometry):
        logger.info("Registered map geometry %r", map_id)
    return LoadResult.success(registry.get(map_id))


class DashboardState:
    """Independent view slots, each written only by its own builder."""

    def __init__(self):
        self.slots = {slot: None for slot in SLOTS}
        self.slots["loaded"] = False

    def __call__(self, slot, value):
        if slot not in self.slots:
            raise KeyError(f"Unknown dashboard slot: {slot}")
        self.slots[slot] = value

    def __getitem__(self, slot):
        return self.slots[slot]


class DashboardSession:
    def __init__(self, sink, registry, tz=None):
        self.sink = sink
        self.registry = registry
        self.tz = tz
        self.token = CancelToken()
        self.torn_down = False
        self.geometry = None
        self._tasks = set()

    @property
    def alive(self):
        return not self.torn_down and not self.token.cancelled

    def _publish(self, slot, value):
        if self.alive:
            self.sink(slot, value)

    def teardown(self):
        """Abandon any in-flight fetch; its results are discarded."""
        self.torn_down = True
        self.token.cancel()
        for task in list(self._tasks):
            task.cancel()

    async def refresh_area(self):
        try:
            payload = await data_loader.fetch_area_snapshot_async()
        except DataSourceError as e:
            logger.warning("Request global data: %s", e)
            return False
        if not self.alive:
            return False

        records = parse_results(payload)
        domestic, foreign = split_results(records)
        self._publish("totals", build_totals(records, self.tz))
        self._publish("global_map", build_global_map(domestic, foreign))
        self._publish("table", build_table(domestic, foreign))
        return True

    async def refresh_countries(self):
        self.geometry = await load_geometry(self.registry)
        if not self.alive:
            return False

        try:
            countries = await data_loader.load_countries_snapshot_async()
        except DataSourceError as e:
            logger.warning("Request countries cases: %s", e)
            return False
        if not self.alive:
            return False

        self._publish("per_million_map", build_per_million_map(countries))
        return True

    async def run_cycle(self):
        """Fetch everything once and fill the sink. Returns True if not torn down."""
        if not self.alive:
            return False

        tasks = [asyncio.ensure_future(self.refresh_area()),
                 asyncio.ensure_future(self.refresh_countries())]
        self._tasks.update(tasks)
        try:
            await asyncio.gather(*tasks)
        except asyncio.CancelledError:
            if not self.torn_down:
                raise
            logger.debug("Fetch cycle abandoned after teardown")
            return False
        finally:
            self._tasks.difference_update(tasks)

        self._publish("loaded", True)
        return self.alive


def run_once(registry, tz=None):
    """Run one fetch cycle to completion and return the filled DashboardState."""
    state = DashboardState()
    session = DashboardSession(state, registry, tz)
    asyncio.run(session.run_cycle())
    return state
