from __future__ import annotations

import threading
import time
import uuid
from typing import Any, Dict, Optional

from kingdom_gen.kingdom.selection_tree import SelectionTree, TreePurpose, build_selection_trees
from kingdom_gen.settings import SESSION_TTL_SECONDS
from kingdom_gen.type_definitions import Catalogue

# In-memory session store; nothing is persisted across processes
_SESSIONS: Dict[str, Dict[str, Any]] = {}
_TTL_SECONDS = SESSION_TTL_SECONDS
_TREES_LOCK = threading.Lock()

TREES_KEY = "selection_trees"


def new_sid() -> str:
    return uuid.uuid4().hex


def touch_session(sid: str) -> Dict[str, Any]:
    now = time.time()
    s = _SESSIONS.get(sid)
    if not s:
        s = {"created": now, "updated": now, "lock": threading.Lock(), "submit_seq": 0}
        _SESSIONS[sid] = s
    else:
        s["updated"] = now
    return s


def get_session(sid: Optional[str]) -> Dict[str, Any]:
    if not sid:
        sid = new_sid()
    return touch_session(sid)


def ensure_selection_trees(sess: Dict[str, Any], catalogue: Catalogue) -> Dict[TreePurpose, SelectionTree]:
    """Return the session's three trees, creating them on first use."""
    with _TREES_LOCK:
        trees = sess.get(TREES_KEY)
        if trees is None:
            trees = build_selection_trees(catalogue)
            sess[TREES_KEY] = trees
        return trees


def cleanup_expired() -> int:
    now = time.time()
    expired = [sid for sid, s in _SESSIONS.items() if now - s.get("updated", 0) > _TTL_SECONDS]
    for sid in expired:
        _SESSIONS.pop(sid, None)
    return len(expired)


def clear_sessions() -> None:
    """Drop every session (testing/support)."""
    _SESSIONS.clear()
