"""
Store interfaces (repository pattern) and their implementations.

Route handlers never talk to the database directly. They receive a
UserStore, an EventStore and a SessionStore through the application, so the
backend can be swapped between PostgreSQL and an in-process store.
"""

import logging
import threading
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Dict, List, Optional

import psycopg2
import psycopg2.errors

from causeconnect.database.db_connection import get_db
from causeconnect.database.models import Event, SessionRecord, User


# --- ERRORS ---
class StoreError(Exception):
    """A persistence operation failed."""


class DuplicateEmailError(StoreError):
    """The email is already registered."""

    def __init__(self, email: str):
        super().__init__(f"Email already registered: {email}")
        self.email = email


# --- INTERFACES ---
class UserStore(ABC):
    """Credential store: users keyed by id, unique by email."""

    @abstractmethod
    def create_user(self, email: str, password_hash: str) -> User:
        """
        Insert a user.

        Raises:
            DuplicateEmailError: If the email is already taken.
            StoreError: On any other persistence failure.
        """
        ...

    @abstractmethod
    def get_user_by_email(self, email: str) -> Optional[User]:
        ...

    @abstractmethod
    def get_user_by_id(self, user_id: int) -> Optional[User]:
        ...


class EventStore(ABC):
    """Event store: append-only list of posted events."""

    @abstractmethod
    def create_event(
        self,
        name: str,
        organization: str,
        location: str,
        time: datetime,
        created_by: Optional[int] = None,
    ) -> Event:
        ...

    @abstractmethod
    def list_events(self) -> List[Event]:
        """Return all events ordered by time ascending."""
        ...


class SessionStore(ABC):
    """Server-side login sessions keyed by a random session id."""

    @abstractmethod
    def create_session(self, session_id: str, user_id: int, expires_at: datetime) -> SessionRecord:
        ...

    @abstractmethod
    def get_session(self, session_id: str) -> Optional[SessionRecord]:
        ...

    @abstractmethod
    def delete_session(self, session_id: str) -> bool:
        """Remove a session. Returns False if it did not exist."""
        ...


# --- POSTGRES ---
class _PostgresStore:
    def __init__(self, database_url: Optional[str] = None):
        self._database_url = database_url

    def _fetch(self, sql: str, params: tuple, many: bool = False, commit: bool = False):
        try:
            conn = get_db(self._database_url)
        except psycopg2.Error as e:
            raise StoreError("Could not connect to database") from e

        try:
            with conn:
                with conn.cursor() as cur:
                    cur.execute(sql, params)
                    if many:
                        result = [dict(r) for r in cur.fetchall()]
                    else:
                        row = cur.fetchone()
                        result = dict(row) if row else None
                    if commit:
                        conn.commit()
                    return result
        finally:
            conn.close()


class PostgresUserStore(_PostgresStore, UserStore):
    def create_user(self, email: str, password_hash: str) -> User:
        # Uniqueness is enforced by the users_email_key constraint, not by a
        # lookup before the insert.
        sql = """
            INSERT INTO users (email, password_hash)
            VALUES (%s, %s)
            RETURNING id, email, password_hash, created_at;
        """
        try:
            row = self._fetch(sql, (email, password_hash), commit=True)
        except psycopg2.errors.UniqueViolation as e:
            raise DuplicateEmailError(email) from e
        except psycopg2.Error as e:
            raise StoreError("Failed to create user") from e
        return User.from_row(row)

    def get_user_by_email(self, email: str) -> Optional[User]:
        sql = "SELECT id, email, password_hash, created_at FROM users WHERE email = %s;"
        try:
            row = self._fetch(sql, (email,))
        except psycopg2.Error as e:
            raise StoreError("Failed to look up user") from e
        return User.from_row(row) if row else None

    def get_user_by_id(self, user_id: int) -> Optional[User]:
        sql = "SELECT id, email, password_hash, created_at FROM users WHERE id = %s;"
        try:
            row = self._fetch(sql, (user_id,))
        except psycopg2.Error as e:
            raise StoreError("Failed to look up user") from e
        return User.from_row(row) if row else None


class PostgresEventStore(_PostgresStore, EventStore):
    def create_event(
        self,
        name: str,
        organization: str,
        location: str,
        time: datetime,
        created_by: Optional[int] = None,
    ) -> Event:
        sql = """
            INSERT INTO events (name, organization, location, time, created_by)
            VALUES (%s, %s, %s, %s, %s)
            RETURNING id, name, organization, location, time, created_by, created_at;
        """
        try:
            row = self._fetch(sql, (name, organization, location, time, created_by), commit=True)
        except psycopg2.Error as e:
            raise StoreError("Failed to create event") from e
        return Event.from_row(row)

    def list_events(self) -> List[Event]:
        sql = """
            SELECT id, name, organization, location, time, created_by, created_at
            FROM events
            ORDER BY time, id;
        """
        try:
            rows = self._fetch(sql, (), many=True)
        except psycopg2.Error as e:
            raise StoreError("Failed to list events") from e
        return [Event.from_row(r) for r in rows]


class PostgresSessionStore(_PostgresStore, SessionStore):
    def create_session(self, session_id: str, user_id: int, expires_at: datetime) -> SessionRecord:
        sql = """
            INSERT INTO sessions (id, user_id, expires_at)
            VALUES (%s, %s, %s)
            RETURNING id, user_id, expires_at, created_at;
        """
        try:
            row = self._fetch(sql, (session_id, user_id, expires_at), commit=True)
        except psycopg2.Error as e:
            raise StoreError("Failed to create session") from e
        return SessionRecord.from_row(row)

    def get_session(self, session_id: str) -> Optional[SessionRecord]:
        sql = """
            SELECT id, user_id, expires_at, created_at
            FROM sessions
            WHERE id = %s AND expires_at > CURRENT_TIMESTAMP;
        """
        try:
            row = self._fetch(sql, (session_id,))
        except psycopg2.Error as e:
            raise StoreError("Failed to look up session") from e
        return SessionRecord.from_row(row) if row else None

    def delete_session(self, session_id: str) -> bool:
        sql = "DELETE FROM sessions WHERE id = %s RETURNING id;"
        try:
            row = self._fetch(sql, (session_id,), commit=True)
        except psycopg2.Error as e:
            raise StoreError("Failed to delete session") from e
        return row is not None


# --- IN MEMORY ---
class InMemoryUserStore(UserStore):
    """Process-local user store for development and tests."""

    def __init__(self):
        self._lock = threading.Lock()
        self._users: Dict[int, User] = {}
        self._by_email: Dict[str, int] = {}
        self._next_id = 1

    def create_user(self, email: str, password_hash: str) -> User:
        with self._lock:
            if email in self._by_email:
                raise DuplicateEmailError(email)
            user = User(
                id=self._next_id,
                email=email,
                password_hash=password_hash,
                created_at=datetime.now(timezone.utc),
            )
            self._users[user.id] = user
            self._by_email[email] = user.id
            self._next_id += 1
        logging.debug(f"[Store] Created user {user.id}")
        return user

    def get_user_by_email(self, email: str) -> Optional[User]:
        with self._lock:
            user_id = self._by_email.get(email)
            return self._users.get(user_id) if user_id is not None else None

    def get_user_by_id(self, user_id: int) -> Optional[User]:
        with self._lock:
            return self._users.get(user_id)

    def __len__(self) -> int:
        return len(self._users)


class InMemoryEventStore(EventStore):
    """Process-local event store for development and tests."""

    def __init__(self):
        self._lock = threading.Lock()
        self._events: List[Event] = []

    def create_event(
        self,
        name: str,
        organization: str,
        location: str,
        time: datetime,
        created_by: Optional[int] = None,
    ) -> Event:
        with self._lock:
            event = Event(
                id=len(self._events) + 1,
                name=name,
                organization=organization,
                location=location,
                time=time,
                created_by=created_by,
                created_at=datetime.now(timezone.utc),
            )
            self._events.append(event)
        return event

    def list_events(self) -> List[Event]:
        with self._lock:
            events = list(self._events)
        return sorted(events, key=_event_sort_key)

    def __len__(self) -> int:
        return len(self._events)


class InMemorySessionStore(SessionStore):
    """Process-local session store for development and tests."""

    def __init__(self):
        self._lock = threading.Lock()
        self._sessions: Dict[str, SessionRecord] = {}

    def create_session(self, session_id: str, user_id: int, expires_at: datetime) -> SessionRecord:
        record = SessionRecord(
            id=session_id,
            user_id=user_id,
            expires_at=expires_at,
            created_at=datetime.now(timezone.utc),
        )
        with self._lock:
            self._sessions[session_id] = record
        return record

    def get_session(self, session_id: str) -> Optional[SessionRecord]:
        with self._lock:
            record = self._sessions.get(session_id)
            if record and record.expires_at <= datetime.now(timezone.utc):
                del self._sessions[session_id]
                return None
            return record

    def delete_session(self, session_id: str) -> bool:
        with self._lock:
            return self._sessions.pop(session_id, None) is not None

    def __len__(self) -> int:
        return len(self._sessions)


def _event_sort_key(event: Event):
    # Naive and aware datetimes cannot be compared; treat naive as UTC.
    t = event.time
    if t.tzinfo is None:
        t = t.replace(tzinfo=timezone.utc)
    return (t, event.id)
