import os
import sys

# Add the parent directory (backend) to the Python path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

import pytest
import sqlite3
import tempfile
from fastapi.testclient import TestClient

from core.db_connector import EngineRegistry
from main import app


@pytest.fixture(scope="session")
def client():
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def temp_sqlite_db():
    fd, path = tempfile.mkstemp(suffix=".db")
    try:
        conn = sqlite3.connect(path)
        cur = conn.cursor()
        cur.execute("CREATE TABLE users (id INTEGER PRIMARY KEY, name TEXT NOT NULL, email TEXT UNIQUE, status TEXT DEFAULT 'active');")
        cur.execute("CREATE TABLE orders (id INTEGER PRIMARY KEY, user_id INTEGER REFERENCES users(id), total REAL);")
        cur.execute("CREATE TABLE empty_table (id INTEGER PRIMARY KEY);")
        cur.executemany(
            "INSERT INTO users (name, email) VALUES (?, ?);",
            [(f"User {i}", f"user{i}@example.com") for i in range(1, 11)],
        )
        cur.executemany(
            "INSERT INTO orders (user_id, total) VALUES (?, ?);",
            [((i % 10) + 1, float(i * 10)) for i in range(25)],
        )
        conn.commit()
        conn.close()
        yield path
    finally:
        os.close(fd)
        os.remove(path)


@pytest.fixture
def sqlite_url(temp_sqlite_db):
    return f"sqlite:///{temp_sqlite_db}"


@pytest.fixture
def registry():
    reg = EngineRegistry()
    yield reg
    reg.dispose_all()
