import json
import sys
import threading
from pathlib import Path
from typing import Dict

from .types import FetchedData


def outcome_record(fetched: FetchedData) -> Dict:
    return {
        "url": fetched.resource.url,
        "resource_status": fetched.resource.status.value,
        "status_code": fetched.status_code,
        "content_type": fetched.content_type,
        "size_bytes": fetched.size_bytes,
        "truncated": fetched.truncated,
    }


class JsonlWriter:
    """Appends one JSON object per line. ``-`` writes to stdout."""

    def __init__(self, output_path: str, append: bool = False) -> None:
        self.output_path = output_path
        self._lock = threading.Lock()
        if output_path == "-":
            self._fh = sys.stdout
            self._owns_fh = False
        else:
            out_path = Path(output_path)
            out_path.parent.mkdir(parents=True, exist_ok=True)
            mode = "a" if append else "w"
            self._fh = out_path.open(mode, encoding="utf-8")
            self._owns_fh = True

    def write(self, record: Dict) -> None:
        line = json.dumps(record, ensure_ascii=False)
        with self._lock:
            self._fh.write(line + "\n")
            # keep output visible to tailing readers
            self._fh.flush()

    def close(self) -> None:
        with self._lock:
            if self._owns_fh and not self._fh.closed:
                self._fh.close()

    def __enter__(self) -> "JsonlWriter":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
