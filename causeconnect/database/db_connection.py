"""
PostgreSQL connection helper.
Provides get_db() for use by the store implementations.
"""

import logging
import os

import psycopg2
from psycopg2.extras import DictCursor
from dotenv import load_dotenv

# Load .env variables from the project root
load_dotenv()


def get_database_url() -> str:
    """
    Read DATABASE_URL from the environment.

    Raises:
        RuntimeError: If DATABASE_URL is not set.
    """
    url = os.getenv("DATABASE_URL")
    if not url:
        raise RuntimeError("DATABASE_URL is not set. Please set the environment variable.")
    return url


def get_db(database_url: str = None):
    """
    Returns a new psycopg2 connection with dictionary-based row access.

    Usage:
        with get_db() as conn:
            with conn.cursor() as cur:
                cur.execute(...)

    Note that leaving the `with` block commits or rolls back the
    transaction but does not close the connection.

    Returns:
        psycopg2.extensions.connection: A connection object with DictCursor factory.

    Raises:
        psycopg2.Error: If connection fails.
    """
    try:
        conn = psycopg2.connect(database_url or get_database_url())

        # Rows come back as dictionaries, e.g. {"id": 1, "email": "..."}
        conn.cursor_factory = DictCursor
        return conn
    except psycopg2.Error as e:
        logging.error(f"Error connecting to database: {e}")
        # Re-raise so the caller knows the connection failed
        raise
