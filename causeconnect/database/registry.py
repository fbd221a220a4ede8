"""
Per-application store registry.

create_app() attaches one UserStore, one EventStore and one SessionStore to
the Flask app; handlers reach them through get_stores() instead of module
globals.
"""

from dataclasses import dataclass
from typing import Optional

from flask import Flask, current_app

from causeconnect.database.stores import (
    EventStore,
    InMemoryEventStore,
    InMemorySessionStore,
    InMemoryUserStore,
    PostgresEventStore,
    PostgresSessionStore,
    PostgresUserStore,
    SessionStore,
    UserStore,
)

EXTENSION_KEY = "causeconnect"


@dataclass(frozen=True)
class Stores:
    users: UserStore
    events: EventStore
    sessions: SessionStore


def build_stores(backend: str, database_url: Optional[str] = None) -> Stores:
    """
    Build the stores named by STORE_BACKEND.

    Raises:
        ValueError: For an unknown backend name.
        RuntimeError: For the postgres backend without a DATABASE_URL.
    """
    if backend == "postgres":
        if not database_url:
            raise RuntimeError("DATABASE_URL is not set. Add it to .env or use STORE_BACKEND=memory")
        return Stores(
            users=PostgresUserStore(database_url),
            events=PostgresEventStore(database_url),
            sessions=PostgresSessionStore(database_url),
        )
    if backend == "memory":
        return Stores(
            users=InMemoryUserStore(),
            events=InMemoryEventStore(),
            sessions=InMemorySessionStore(),
        )
    raise ValueError(f"Unknown STORE_BACKEND '{backend}'. Use 'postgres' or 'memory'.")


def init_stores(
    app: Flask,
    user_store: Optional[UserStore] = None,
    event_store: Optional[EventStore] = None,
    session_store: Optional[SessionStore] = None,
) -> Stores:
    """Attach stores to `app`, preferring injected ones over the configured backend."""
    if user_store is None or event_store is None or session_store is None:
        configured = build_stores(app.config["STORE_BACKEND"], app.config.get("DATABASE_URL"))
        if user_store is None:
            user_store = configured.users
        if event_store is None:
            event_store = configured.events
        if session_store is None:
            session_store = configured.sessions

    stores = Stores(users=user_store, events=event_store, sessions=session_store)
    app.extensions[EXTENSION_KEY] = stores
    return stores


def get_stores() -> Stores:
    return current_app.extensions[EXTENSION_KEY]
