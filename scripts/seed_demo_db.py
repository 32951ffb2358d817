#!/usr/bin/env python3
"""
Seed a local SQLite database with demo data for Querywright development.
Usage (from the repository root):
    python scripts/seed_demo_db.py
Creates: scripts/demo.db  (the default DATABASE_URL points here)
"""
import sqlite3
import random
from datetime import datetime, timedelta
from pathlib import Path

DB_PATH = Path(__file__).parent / "demo.db"

DDL = [
    """
    CREATE TABLE IF NOT EXISTS users (
        id          INTEGER PRIMARY KEY AUTOINCREMENT,
        name        TEXT    NOT NULL,
        email       TEXT    NOT NULL,
        status      TEXT    DEFAULT 'active',
        created_at  TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
        updated_at  TIMESTAMP
    )""",
    "CREATE UNIQUE INDEX IF NOT EXISTS ux_users_email ON users(email)",
    """
    CREATE TABLE IF NOT EXISTS posts (
        id          INTEGER PRIMARY KEY AUTOINCREMENT,
        user_id     INTEGER NOT NULL REFERENCES users(id),
        title       TEXT    NOT NULL,
        body        TEXT,
        published   INTEGER DEFAULT 0,
        created_at  TIMESTAMP DEFAULT CURRENT_TIMESTAMP
    )""",
    "CREATE INDEX IF NOT EXISTS ix_posts_user_id ON posts(user_id)",
    """
    CREATE TABLE IF NOT EXISTS comments (
        id          INTEGER PRIMARY KEY AUTOINCREMENT,
        post_id     INTEGER NOT NULL REFERENCES posts(id),
        user_id     INTEGER REFERENCES users(id),
        content     TEXT    NOT NULL,
        created_at  TIMESTAMP DEFAULT CURRENT_TIMESTAMP
    )""",
    """
    CREATE TABLE IF NOT EXISTS tags (
        id          INTEGER PRIMARY KEY AUTOINCREMENT,
        label       TEXT    NOT NULL
    )""",
    """
    CREATE TABLE IF NOT EXISTS post_tags (
        post_id     INTEGER NOT NULL REFERENCES posts(id),
        tag_id      INTEGER NOT NULL REFERENCES tags(id),
        PRIMARY KEY (post_id, tag_id)
    )""",
    # Framework bookkeeping table; the catalog excludes it by default
    """
    CREATE TABLE IF NOT EXISTS migrations (
        id          INTEGER PRIMARY KEY AUTOINCREMENT,
        migration   TEXT NOT NULL,
        batch       INTEGER NOT NULL
    )""",
]

STATUSES = ['active', 'suspended', 'pending']
TAGS     = ['python', 'sql', 'databases', 'security', 'llm']
WORDS    = ['query', 'index', 'join', 'schema', 'table', 'column', 'prompt', 'model', 'safety']


def _sentence(n: int) -> str:
    return " ".join(random.choice(WORDS) for _ in range(n)).capitalize()


def seed():
    conn = sqlite3.connect(DB_PATH)
    cur  = conn.cursor()

    for stmt in DDL:
        cur.execute(stmt)

    for label in TAGS:
        cur.execute("INSERT INTO tags(label) VALUES (?)", (label,))

    # users (50)
    for i in range(1, 51):
        cur.execute("INSERT OR IGNORE INTO users(name, email, status, created_at) VALUES (?,?,?,?)",
                    (f"User {i}", f"user{i}@example.com", random.choice(STATUSES),
                     datetime.now() - timedelta(days=random.randint(10, 730))))

    # posts (200) + comments + tags
    for _ in range(200):
        cur.execute("INSERT INTO posts(user_id, title, body, published, created_at) VALUES (?,?,?,?,?)",
                    (random.randint(1, 50), _sentence(4), _sentence(30), random.randint(0, 1),
                     datetime.now() - timedelta(hours=random.randint(1, 24 * 365))))
        post_id = cur.lastrowid
        for _ in range(random.randint(0, 5)):
            cur.execute("INSERT INTO comments(post_id, user_id, content) VALUES (?,?,?)",
                        (post_id, random.randint(1, 50), _sentence(12)))
        for tag_id in random.sample(range(1, len(TAGS) + 1), k=random.randint(1, 3)):
            cur.execute("INSERT OR IGNORE INTO post_tags(post_id, tag_id) VALUES (?,?)", (post_id, tag_id))

    cur.execute("INSERT INTO migrations(migration, batch) VALUES (?, ?)", ("create_users_table", 1))

    conn.commit()
    conn.close()
    print(f"Demo database seeded: {DB_PATH}")
    print("   Tables: users, posts, comments, tags, post_tags (+ migrations, excluded)")


if __name__ == "__main__":
    seed()
