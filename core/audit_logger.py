"""Structured JSONL audit log of agent-tool calls."""

from __future__ import annotations

import hashlib
import json
import logging
from datetime import UTC, datetime
from pathlib import Path
from typing import Any


class AuditLogger:
    """Appends one JSON line per tool call and mirrors it to ``tgm.audit``."""

    def __init__(self, log_path: Path) -> None:
        self.log_path = log_path
        self.log_path.parent.mkdir(parents=True, exist_ok=True)
        self.logger = logging.getLogger("tgm.audit")

    @staticmethod
    def _hash_inputs(inputs: dict[str, Any]) -> str:
        payload = json.dumps(inputs, sort_keys=True, default=str).encode("utf-8")
        return hashlib.sha256(payload).hexdigest()

    def log(
        self,
        tool: str,
        inputs: dict[str, Any],
        outcome: str,
        success: bool,
        reason: str = "",
    ) -> dict[str, Any]:
        """Append one audit event and return it."""
        event = {
            "timestamp": datetime.now(UTC).isoformat(),
            "tool": tool,
            "inputs_hash": self._hash_inputs(inputs),
            "outcome": outcome,
            "success": success,
            "reason": reason,
        }
        with self.log_path.open("a", encoding="utf-8") as fh:
            fh.write(json.dumps(event, ensure_ascii=True) + "\n")
        self.logger.info("tool=%s outcome=%s success=%s", tool, outcome, success)
        return event

    def read_events(self) -> list[dict[str, Any]]:
        """Read back every recorded event, oldest first."""
        if not self.log_path.exists():
            return []
        with self.log_path.open("r", encoding="utf-8") as fh:
            return [json.loads(line) for line in fh if line.strip()]
