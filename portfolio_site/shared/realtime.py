"""
Change feed and realtime collection cache

ChangeFeed is a small in-process pub/sub keyed by table name. Notifications
reach it from two places:
- admin mutation handlers publish after each commit
- PostgresChangeListener relays LISTEN/NOTIFY events raised by triggers on
  the watched tables (changes made outside this process, e.g. in the
  Supabase dashboard)

RealtimeCache subscribes to the feed and keeps the latest rows of a few
collections. Notifications carry no diff: any event for a table re-fetches
the whole collection and replaces the snapshot.
"""
import json
import logging
import os
import select
import threading
from collections import defaultdict
from typing import Callable, Iterable, Optional

from sqlalchemy import text
from sqlalchemy.engine import Engine

logger = logging.getLogger(__name__)

NOTIFY_CHANNEL = "portfolio_changes"
REALTIME_LISTENER_ENABLED = os.getenv("REALTIME_LISTENER_ENABLED", "true").lower() == "true"

ChangeHandler = Callable[[str, str], None]


class ChangeFeed:
    """Table-keyed publish/subscribe. Handlers run on the publisher's thread."""

    def __init__(self):
        self._handlers: dict[str, list[ChangeHandler]] = defaultdict(list)
        self._lock = threading.Lock()

    def subscribe(self, table: str, handler: ChangeHandler) -> Callable[[], None]:
        """Register handler(table, event) for a table. Returns an unsubscribe callable."""
        with self._lock:
            self._handlers[table].append(handler)

        def unsubscribe() -> None:
            with self._lock:
                if handler in self._handlers.get(table, []):
                    self._handlers[table].remove(handler)

        return unsubscribe

    def publish(self, table: str, event: str = "UPDATE") -> None:
        with self._lock:
            handlers = list(self._handlers.get(table, []))

        for handler in handlers:
            try:
                handler(table, event)
            except Exception as e:
                logger.error(f"Change handler for '{table}' failed: {e}", exc_info=True)


# Process-wide feed shared by the admin handlers, the listener and the cache
change_feed = ChangeFeed()


class RealtimeCache:
    """
    Latest rows of the watched collections.

    Args:
        loaders: table name -> callable returning the fresh rows for that table
        feed: change feed to subscribe to

    Reads return immutable tuples. Until start() has run, every collection
    is empty and ready is False.
    """

    def __init__(self, loaders: dict[str, Callable[[], Iterable]], feed: ChangeFeed = change_feed):
        self._loaders = dict(loaders)
        self._feed = feed
        self._snapshots: dict[str, tuple] = {table: () for table in self._loaders}
        self._lock = threading.Lock()
        self._unsubscribers: list[Callable[[], None]] = []
        self.refresh_counts: dict[str, int] = {table: 0 for table in self._loaders}
        self.ready = False

    @property
    def tables(self) -> list[str]:
        return list(self._loaders)

    def start(self) -> None:
        """Subscribe once per table and load every collection."""
        if self._unsubscribers:
            return
        for table in self._loaders:
            self._unsubscribers.append(self._feed.subscribe(table, self._on_change))
        for table in self._loaders:
            self.refresh(table)
        self.ready = True
        logger.info(f"Realtime cache started for: {', '.join(self._loaders)}")

    def stop(self) -> None:
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers = []
        self.ready = False
        logger.info("Realtime cache stopped")

    def _on_change(self, table: str, event: str) -> None:
        logger.debug(f"Change notification: {event} on {table}")
        self.refresh(table)

    def refresh(self, table: str) -> None:
        """
        Re-fetch one collection and swap in the new snapshot. A failed
        fetch keeps the previous snapshot.
        """
        try:
            rows = tuple(self._loaders[table]())
        except Exception as e:
            logger.error(f"Refreshing '{table}' failed, keeping previous snapshot: {e}")
            return
        with self._lock:
            self._snapshots[table] = rows
            self.refresh_counts[table] += 1

    def get(self, table: str) -> tuple:
        with self._lock:
            return self._snapshots[table]


# ──────────────────────────────────────────────────────────────────────────────
# Postgres LISTEN/NOTIFY relay
# ──────────────────────────────────────────────────────────────────────────────

TRIGGER_FUNCTION_SQL = f"""
CREATE OR REPLACE FUNCTION notify_portfolio_change() RETURNS trigger AS $$
BEGIN
    PERFORM pg_notify(
        '{NOTIFY_CHANNEL}',
        json_build_object('table', TG_TABLE_NAME, 'event', TG_OP)::text
    );
    RETURN NULL;
END;
$$ LANGUAGE plpgsql;
"""


def install_change_triggers(engine: Engine, tables: Iterable[str]) -> None:
    """Create (or replace) the NOTIFY triggers on the watched tables. Postgres only."""
    with engine.begin() as conn:
        conn.execute(text(TRIGGER_FUNCTION_SQL))
        for table in tables:
            trigger = f"{table}_notify_change"
            conn.execute(text(f"DROP TRIGGER IF EXISTS {trigger} ON {table}"))
            conn.execute(text(
                f"CREATE TRIGGER {trigger} AFTER INSERT OR UPDATE OR DELETE ON {table} "
                f"FOR EACH STATEMENT EXECUTE FUNCTION notify_portfolio_change()"
            ))
    logger.info(f"Installed change triggers on: {', '.join(tables)}")


class PostgresChangeListener:
    """
    Background thread that LISTENs on the notify channel and republishes each
    notification on the change feed.
    """

    def __init__(self, engine: Engine, feed: ChangeFeed = change_feed, poll_interval: float = 1.0):
        self._engine = engine
        self._feed = feed
        self._poll_interval = poll_interval
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def start(self) -> None:
        self._thread = threading.Thread(target=self._run, name="pg-change-listener", daemon=True)
        self._thread.start()

    def stop(self, timeout: float = 5.0) -> None:
        self._stop.set()
        if self._thread:
            self._thread.join(timeout)

    def _run(self) -> None:
        raw = self._engine.raw_connection()
        try:
            dbapi_conn = raw.driver_connection
            dbapi_conn.autocommit = True
            with dbapi_conn.cursor() as cur:
                cur.execute(f"LISTEN {NOTIFY_CHANNEL};")
            logger.info(f"Listening for database changes on '{NOTIFY_CHANNEL}'")

            while not self._stop.is_set():
                if select.select([dbapi_conn], [], [], self._poll_interval) == ([], [], []):
                    continue
                dbapi_conn.poll()
                while dbapi_conn.notifies:
                    notify = dbapi_conn.notifies.pop(0)
                    self._dispatch(notify.payload)
        except Exception as e:
            logger.error(f"Database change listener stopped: {e}", exc_info=True)
        finally:
            raw.close()

    def _dispatch(self, payload: str) -> None:
        try:
            message = json.loads(payload)
        except ValueError:
            logger.warning(f"Ignoring malformed change notification: {payload!r}")
            return
        self._feed.publish(message.get("table", ""), message.get("event", "UPDATE"))
