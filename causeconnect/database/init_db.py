"""
Create the CauseConnect tables.

Safe to run repeatedly: every statement is CREATE ... IF NOT EXISTS.

Run with:
    causeconnect-init-db
or
    python -m causeconnect.database.init_db
"""

import sys

import psycopg2

from causeconnect.database.db_connection import get_db

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS users (
    id SERIAL PRIMARY KEY,
    email VARCHAR(320) NOT NULL,
    password_hash TEXT NOT NULL,
    created_at TIMESTAMPTZ NOT NULL DEFAULT CURRENT_TIMESTAMP,
    CONSTRAINT users_email_key UNIQUE (email)
);

CREATE TABLE IF NOT EXISTS events (
    id SERIAL PRIMARY KEY,
    name TEXT NOT NULL,
    organization TEXT NOT NULL,
    location TEXT NOT NULL,
    time TIMESTAMPTZ NOT NULL,
    created_by INTEGER REFERENCES users (id) ON DELETE SET NULL,
    created_at TIMESTAMPTZ NOT NULL DEFAULT CURRENT_TIMESTAMP
);

CREATE INDEX IF NOT EXISTS events_time_idx ON events (time);

CREATE TABLE IF NOT EXISTS sessions (
    id TEXT PRIMARY KEY,
    user_id INTEGER NOT NULL REFERENCES users (id) ON DELETE CASCADE,
    expires_at TIMESTAMPTZ NOT NULL,
    created_at TIMESTAMPTZ NOT NULL DEFAULT CURRENT_TIMESTAMP
);
"""


def init_db(database_url: str = None) -> None:
    """
    Apply SCHEMA_SQL in a single transaction.

    Raises:
        psycopg2.Error: If the connection or any statement fails.
    """
    conn = get_db(database_url)
    try:
        with conn:
            with conn.cursor() as cur:
                cur.execute(SCHEMA_SQL)
    finally:
        conn.close()


def main() -> None:
    print("--- Initialising CauseConnect schema ---")
    try:
        init_db()
    except (psycopg2.Error, RuntimeError) as e:
        print(f"Schema initialisation FAILED: {e}")
        sys.exit(1)
    print("Tables 'users', 'events' and 'sessions' are ready.")


if __name__ == "__main__":
    main()
