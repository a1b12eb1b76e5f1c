import json
from pathlib import Path
from typing import Any, Dict

HISTORY_PATH = Path.home() / ".granit_history.jsonl"


def log_event(action: str, payload: Dict[str, Any], path: Path = HISTORY_PATH) -> None:
    """
    Append a JSON line describing an operation.

    Callers pass sizes and options only; keys and message text never belong
    in the history.
    """
    record = {"action": action, **payload}
    try:
        with path.open("a", encoding="utf-8") as fh:
            fh.write(json.dumps(record, ensure_ascii=False) + "\n")
    except OSError:
        # History failures should not break encryption or decryption.
        pass
