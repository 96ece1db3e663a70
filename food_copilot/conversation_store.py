"""
Conversation memory store for session-based turn history.

Keeps a rolling window of the last 20 messages per session with automatic
cleanup of idle sessions after 1 hour. Assistant turns hold the finalized
directive sequence of that turn, stored read-only. Nothing is persisted.
"""

import json
import time
from typing import Any, Dict, List
from collections import deque
import threading
import logging

from food_copilot.contracts.directive_schema import DirectiveSequence, sequence_to_dicts
from food_copilot.utils.freezer import deep_freeze, thaw

logger = logging.getLogger(__name__)

# Configuration
MAX_MESSAGES_PER_SESSION = 20
SESSION_TIMEOUT_SECONDS = 3600  # 1 hour

# In-memory storage
# Structure: {session_id: {"messages": deque, "last_access": timestamp}}
_sessions: Dict[str, Dict] = {}
_lock = threading.Lock()


def _cleanup_expired_sessions():
    """Remove sessions that haven't been accessed in SESSION_TIMEOUT_SECONDS."""
    current_time = time.time()
    expired = []

    with _lock:
        for session_id, session_data in _sessions.items():
            if current_time - session_data["last_access"] > SESSION_TIMEOUT_SECONDS:
                expired.append(session_id)

        for session_id in expired:
            del _sessions[session_id]
            logger.info(f"Cleaned up expired session: {session_id}")


def get_history(session_id: str) -> List[Dict[str, Any]]:
    """
    Retrieve turn history for a session.

    Returns:
        List of message dicts with 'role' and 'content' keys. Assistant
        content is a list of finalized directive dicts.
    """
    _cleanup_expired_sessions()

    with _lock:
        if session_id not in _sessions:
            return []

        _sessions[session_id]["last_access"] = time.time()
        return [
            {"role": m["role"], "content": thaw(m["content"])}
            for m in _sessions[session_id]["messages"]
        ]


def append_user(session_id: str, message: str):
    """Add a user message to session history."""
    _append_message(session_id, "user", message or "Analyze this image")


def append_assistant(session_id: str, sequence: DirectiveSequence):
    """Retain a turn's finalized directive sequence."""
    _append_message(session_id, "assistant", sequence_to_dicts(sequence))


def _append_message(session_id: str, role: str, content: Any):
    """Internal helper to append a message to session history."""
    with _lock:
        if session_id not in _sessions:
            _sessions[session_id] = {
                "messages": deque(maxlen=MAX_MESSAGES_PER_SESSION),
                "last_access": time.time()
            }

        _sessions[session_id]["messages"].append({"role": role, "content": deep_freeze(content)})
        _sessions[session_id]["last_access"] = time.time()


def clear_history(session_id: str):
    """Clear all turn history for a session."""
    with _lock:
        if session_id in _sessions:
            del _sessions[session_id]
            logger.info(f"Cleared history for session: {session_id}")


def get_directive_feed(session_id: str) -> List[Dict[str, Any]]:
    """All finalized directives of a session, prior turns first."""
    feed: List[Dict[str, Any]] = []
    for msg in get_history(session_id):
        if msg["role"] == "assistant":
            feed.extend(msg["content"])
    return feed


def format_history_for_generator(history: List[Dict[str, Any]]) -> List[Dict[str, str]]:
    """
    Chat messages for the generator. Assistant turns are stringified so the
    model knows which components it showed previously.
    """
    messages = []
    for msg in history:
        content = msg.get("content")
        if not isinstance(content, str):
            content = json.dumps(thaw(content), ensure_ascii=False)
        messages.append({"role": msg.get("role", "user"), "content": content})
    return messages


def get_session_count() -> int:
    """Number of active sessions."""
    _cleanup_expired_sessions()
    with _lock:
        return len(_sessions)
