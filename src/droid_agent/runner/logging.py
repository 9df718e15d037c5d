"""Structured per-command journal."""

from __future__ import annotations

import json
import pathlib
import sys
import time
from typing import Any


class StepLogger:
    """Append-only JSON-lines log of element operations."""

    def __init__(self, path: str | pathlib.Path, echo: bool = True):
        self._log_path = pathlib.Path(path)
        self._echo = echo
        self._fh = None
        self._step = 0

    @property
    def path(self) -> pathlib.Path:
        return self._log_path

    def open(self) -> None:
        self._log_path.parent.mkdir(parents=True, exist_ok=True)
        self._fh = open(self._log_path, "a", encoding="utf-8")

    def close(self) -> None:
        if self._fh:
            self._fh.close()
            self._fh = None

    def __enter__(self) -> StepLogger:
        self.open()
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def log_step(
        self,
        action: str,
        args: dict[str, Any],
        result: Any = None,
        error: str | None = None,
    ) -> int:
        self._step += 1
        entry = {
            "step": self._step,
            "timestamp": time.time(),
            "action": action,
            "args": args,
            "result": result,
            "error": error,
        }
        line = json.dumps(entry, ensure_ascii=False, default=str)
        if self._fh:
            self._fh.write(line + "\n")
            self._fh.flush()
        if self._echo:
            print(line, file=sys.stderr)
        return self._step

    def read_last_n(self, n: int = 20) -> list[dict[str, Any]]:
        if not self._log_path.exists():
            return []
        lines = self._log_path.read_text(encoding="utf-8").strip().splitlines()
        return [json.loads(l) for l in lines[-n:]]
