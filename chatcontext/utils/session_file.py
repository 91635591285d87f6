import logging
from pathlib import Path
from typing import Optional

from pydantic import ValidationError

from chatcontext.memory.state import SessionState

logger = logging.getLogger(__name__)


def load_session(path: Path) -> Optional[SessionState]:
    """
    Reads a saved session. Returns None when there is no file or it cannot be parsed.
    """
    path = Path(path)
    if not path.exists():
        return None
    try:
        return SessionState.model_validate_json(path.read_text(encoding="utf-8"))
    except (ValidationError, ValueError) as e:
        logger.warning(f"Ignoring unreadable session file '{path}': {e}")
        return None


def save_session(path: Path, state: SessionState):
    """Writes the session as JSON using the persisted key names (e.g. `contextWindow`)."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(state.model_dump_json(by_alias=True, indent=2), encoding="utf-8")
