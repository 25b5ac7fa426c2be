"""Run summary model for one generation run."""

import uuid
from dataclasses import dataclass, field, asdict
from datetime import datetime
from typing import Any, Dict, List, Optional

STATUS_RUNNING = "RUNNING"
STATUS_SUCCESS = "SUCCESS"
STATUS_FAILED = "FAILED"


@dataclass
class RunSummary:
    """Summary of a generation run."""
    run_id: str
    config_path: str
    output_path: str
    started_at: str
    finished_at: Optional[str] = None
    status: str = STATUS_RUNNING  # RUNNING, SUCCESS, FAILED

    # Statistics
    files_scanned: int = 0
    token_count: int = 0
    rule_count: int = 0

    # Details
    skipped_files: List[str] = field(default_factory=list)
    unresolved: List[str] = field(default_factory=list)  # raw tokens without CSS
    post_command_ok: Optional[bool] = None  # None when no post-command configured
    error: Optional[str] = None
    durations: Dict[str, float] = field(default_factory=dict)  # Stage durations

    @classmethod
    def create(cls, config_path: str, output_path: str) -> 'RunSummary':
        """Create a new run summary."""
        return cls(
            run_id=str(uuid.uuid4()),
            config_path=str(config_path),
            output_path=str(output_path),
            started_at=datetime.now().isoformat()
        )

    @property
    def succeeded(self) -> bool:
        return self.status == STATUS_SUCCESS

    def complete(self, status: str = STATUS_SUCCESS):
        """Mark run as finished."""
        self.status = status
        self.finished_at = datetime.now().isoformat()

    def fail(self, error: str):
        """Mark run as failed with an error message."""
        self.error = error
        self.complete(STATUS_FAILED)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
