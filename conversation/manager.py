"""
Conversation Log — SQLite-backed chat transcripts.

Responsibility:
- Store ChatMessages per session_id
- Retrieve a session's transcript in chronological order

Performance:
- Persistent SQLite connection (no reconnect per query)
- WAL mode for concurrent reads

Prohibitions:
- Never touches intents or domain records
"""

import json
import sqlite3

from shared.models import ChatMessage


class ConversationManager:
    """SQLite-backed transcript store with persistent connection."""

    def __init__(self, db_path: str = "chat.db"):
        self.db_path = db_path
        self._conn = sqlite3.connect(
            db_path,
            check_same_thread=False,
            isolation_level="DEFERRED",
        )
        self._conn.row_factory = sqlite3.Row
        self._conn.execute("PRAGMA journal_mode=WAL")
        self._conn.execute("PRAGMA synchronous=NORMAL")
        self._init_db()

    def _init_db(self) -> None:
        self._conn.execute("""
            CREATE TABLE IF NOT EXISTS chat_messages (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                session_id TEXT NOT NULL,
                message_id TEXT NOT NULL,
                sender TEXT NOT NULL,
                payload TEXT NOT NULL,
                created_at TEXT NOT NULL
            )
        """)
        self._conn.execute("""
            CREATE INDEX IF NOT EXISTS idx_chat_messages_session
            ON chat_messages(session_id)
        """)
        self._conn.commit()

    def save_message(self, session_id: str, message: ChatMessage) -> None:
        """Append one message to the session transcript."""
        self._conn.execute(
            """INSERT INTO chat_messages (session_id, message_id, sender, payload, created_at)
               VALUES (?, ?, ?, ?, ?)""",
            (
                session_id,
                message.id,
                message.sender,
                json.dumps(message.model_dump(mode="json"), ensure_ascii=False),
                message.timestamp,
            ),
        )
        self._conn.commit()

    def get_history(self, session_id: str, limit: int | None = None) -> list[ChatMessage]:
        """Transcript for a session, oldest first; `limit` keeps the most recent messages."""
        if limit is None:
            rows = self._conn.execute(
                "SELECT payload FROM chat_messages WHERE session_id = ? ORDER BY id ASC",
                (session_id,),
            ).fetchall()
        else:
            rows = list(
                reversed(
                    self._conn.execute(
                        """SELECT payload FROM chat_messages
                           WHERE session_id = ?
                           ORDER BY id DESC
                           LIMIT ?""",
                        (session_id, limit),
                    ).fetchall()
                )
            )
        return [ChatMessage.model_validate(json.loads(row["payload"])) for row in rows]

    def list_sessions(self) -> list[str]:
        rows = self._conn.execute(
            "SELECT session_id FROM chat_messages GROUP BY session_id ORDER BY MIN(id)"
        ).fetchall()
        return [row["session_id"] for row in rows]

    def clear_session(self, session_id: str) -> None:
        self._conn.execute("DELETE FROM chat_messages WHERE session_id = ?", (session_id,))
        self._conn.commit()

    def close(self) -> None:
        self._conn.close()
