"""
HookResult: the single decision a review hook writes to stdout.

Review hooks are observational: they count edits and launch background
reviews, but the tool call always proceeds. There is no deny path.
"""

import json
import sys
from dataclasses import dataclass

APPROVE = "approve"


@dataclass(frozen=True)
class HookResult:
    """Result emitted by a hook runner.

    Attributes:
        decision: Always "approve" for review hooks
    """

    decision: str = APPROVE

    @staticmethod
    def approve() -> "HookResult":
        """Let the original tool call proceed."""
        return HookResult()

    def to_dict(self) -> dict:
        return {"decision": self.decision}

    def to_json(self) -> str:
        return json.dumps(self.to_dict())

    def emit(self, stream=None) -> None:
        """Write the decision as one JSON line."""
        out = stream or sys.stdout
        out.write(self.to_json() + "\n")
        out.flush()
