# backend/app/db/conversation_log.py

import sqlite3
import json
import threading
import time
from pathlib import Path
from datetime import datetime, timezone
from typing import Optional, List, Union
from uuid import uuid4

from app.core.config_loader import settings
from app.core.errors import PersistenceError
from app.core.logger import logger
from app.db.realtime import OnInsert, RealtimeBroadcaster, Subscription
from app.models.conversation_models import ConversationOut, MessageOut, NewMessage


# Retry configuration
MAX_RETRIES = 5
RETRY_DELAY = 0.1  # 100ms


def utc_now_iso() -> str:
    # Fixed-width ISO string so lexical order == chronological order
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.%fZ")


class ConversationLog:
    """
    Append-only message store.

    Messages are never updated or deleted. Reads return them ordered by
    created_at, ties broken by insertion order (the autoincrement seq column).
    Every append is pushed to the realtime broadcaster after it is committed.
    """

    def __init__(self, db_path: Optional[Union[str, Path]] = None,
                 broadcaster: Optional[RealtimeBroadcaster] = None):
        self.db_path = str(db_path or settings.DB_PATH)
        if self.db_path != ":memory:":
            Path(self.db_path).resolve().parent.mkdir(parents=True, exist_ok=True)

        self.conn = sqlite3.connect(
            self.db_path,
            check_same_thread=False,
            timeout=30.0  # 30 seconds timeout
        )
        self.conn.row_factory = sqlite3.Row
        # Enable WAL mode for better concurrent access
        self.conn.execute("PRAGMA journal_mode=WAL")
        self.conn.execute("PRAGMA synchronous=NORMAL")
        self.conn.execute("PRAGMA busy_timeout=30000")
        self._lock = threading.RLock()
        self.broadcaster = broadcaster or RealtimeBroadcaster()
        self._init_tables()

    def _execute_with_retry(self, operation, *args, **kwargs):
        """Execute database operation with retry logic for handling locked database"""
        for attempt in range(MAX_RETRIES):
            try:
                with self._lock:
                    return operation(*args, **kwargs)
            except sqlite3.OperationalError as e:
                if "locked" in str(e).lower() and attempt < MAX_RETRIES - 1:
                    time.sleep(RETRY_DELAY * (attempt + 1))
                    continue
                logger.error(f"Conversation log operation failed: {e}")
                raise PersistenceError(str(e)) from e
            except sqlite3.Error as e:
                logger.error(f"Conversation log operation failed: {e}")
                raise PersistenceError(str(e)) from e

    # ----------------------------------------------------------------------
    # CREATE TABLES
    # ----------------------------------------------------------------------
    def _init_tables(self):
        cur = self.conn.cursor()

        cur.execute("""
        CREATE TABLE IF NOT EXISTS conversations (
            id TEXT PRIMARY KEY,
            user_id TEXT,
            created_at TEXT
        );
        """)

        cur.execute("""
        CREATE TABLE IF NOT EXISTS messages (
            seq INTEGER PRIMARY KEY AUTOINCREMENT,
            id TEXT UNIQUE NOT NULL,
            conversation_id TEXT NOT NULL,
            role TEXT NOT NULL,
            content TEXT NOT NULL,
            agent_type TEXT,
            agent_status TEXT,
            metadata_json TEXT,
            created_at TEXT NOT NULL,
            FOREIGN KEY (conversation_id) REFERENCES conversations(id)
        );
        """)

        cur.execute("CREATE INDEX IF NOT EXISTS idx_conv_user ON conversations(user_id);")
        cur.execute("CREATE INDEX IF NOT EXISTS idx_msg_conv ON messages(conversation_id, created_at, seq);")

        self.conn.commit()

    # ----------------------------------------------------------------------
    # CONVERSATIONS
    # ----------------------------------------------------------------------
    def create_conversation(self, user_id: str, conversation_id: Optional[str] = None) -> ConversationOut:
        conversation = ConversationOut(
            id=conversation_id or str(uuid4()),
            user_id=user_id,
            created_at=utc_now_iso(),
        )

        def _create_conversation():
            cur = self.conn.cursor()
            cur.execute("""
            INSERT OR IGNORE INTO conversations (id, user_id, created_at)
            VALUES (?, ?, ?)
            """, (conversation.id, conversation.user_id, conversation.created_at))
            self.conn.commit()

        self._execute_with_retry(_create_conversation)
        logger.info(f"Created conversation {conversation.id} for user {user_id}")
        # A concurrent turn may have created the same id first
        return self.get_conversation(conversation.id) or conversation

    def get_conversation(self, conversation_id: str) -> Optional[ConversationOut]:
        def _get_conversation():
            cur = self.conn.cursor()
            cur.execute("SELECT * FROM conversations WHERE id = ?", (conversation_id,))
            return cur.fetchone()

        row = self._execute_with_retry(_get_conversation)
        return ConversationOut(**dict(row)) if row else None

    def ensure_conversation(self, conversation_id: Optional[str], user_id: str) -> ConversationOut:
        """Existing conversation, or a new one when the id is empty or unknown."""
        if conversation_id:
            existing = self.get_conversation(conversation_id)
            if existing:
                return existing
        return self.create_conversation(user_id, conversation_id or None)

    # ----------------------------------------------------------------------
    # MESSAGES
    # ----------------------------------------------------------------------
    def append(self, message: NewMessage) -> MessageOut:
        stored = MessageOut(
            id=str(uuid4()),
            created_at=utc_now_iso(),
            **message.model_dump(),
        )

        def _append():
            cur = self.conn.cursor()
            cur.execute("""
            INSERT INTO messages (id, conversation_id, role, content, agent_type,
                                  agent_status, metadata_json, created_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?)
            """, (
                stored.id,
                stored.conversation_id,
                stored.role.value,
                stored.content,
                stored.agent_type.value if stored.agent_type else None,
                stored.agent_status.value if stored.agent_status else None,
                stored.metadata.model_dump_json() if stored.metadata else None,
                stored.created_at,
            ))
            self.conn.commit()

        self._execute_with_retry(_append)
        self.broadcaster.publish(stored)
        return stored

    def get_messages(self, conversation_id: str, limit: Optional[int] = None) -> List[MessageOut]:
        """Full ordered history, or only the newest `limit` messages (still oldest first)."""
        def _get_messages():
            cur = self.conn.cursor()
            if limit is None:
                cur.execute("""
                SELECT * FROM messages
                WHERE conversation_id = ?
                ORDER BY created_at ASC, seq ASC
                """, (conversation_id,))
                return cur.fetchall()

            cur.execute("""
            SELECT * FROM messages
            WHERE conversation_id = ?
            ORDER BY created_at DESC, seq DESC
            LIMIT ?
            """, (conversation_id, limit))
            return list(reversed(cur.fetchall()))

        rows = self._execute_with_retry(_get_messages)

        messages = []
        for r in rows:
            item = dict(r)
            item.pop("seq", None)
            metadata_json = item.pop("metadata_json", None)
            item["metadata"] = json.loads(metadata_json) if metadata_json else None
            messages.append(MessageOut(**item))

        return messages

    # ----------------------------------------------------------------------
    # REALTIME
    # ----------------------------------------------------------------------
    def subscribe(self, conversation_id: str, on_insert: OnInsert) -> Subscription:
        return self.broadcaster.subscribe(conversation_id, on_insert)

    def unsubscribe(self, handle: Subscription) -> None:
        self.broadcaster.unsubscribe(handle)

    def close(self):
        with self._lock:
            self.conn.close()
