"""
Discovery job record kept in the job store while a job runs and for a short time after.
"""
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional, Dict, Any


class JobStatus(str, Enum):
    STARTED = "started"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (JobStatus.COMPLETED, JobStatus.FAILED)


@dataclass
class DiscoveryJob:
    id: str
    outlet: str
    quota: int
    status: JobStatus = JobStatus.STARTED
    progress: int = 0
    message: str = "Starting scraper..."
    website: Optional[str] = None
    authors_found: int = 0
    authors_saved: int = 0
    started_at: datetime = field(default_factory=datetime.utcnow)
    completed_at: Optional[datetime] = None
    error: Optional[str] = None
    cancel_requested: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "outlet": self.outlet,
            "quota": self.quota,
            "status": self.status.value,
            "progress": self.progress,
            "message": self.message,
            "website": self.website,
            "authors_found": self.authors_found,
            "authors_saved": self.authors_saved,
            "started_at": self.started_at.isoformat(),
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
            "error": self.error,
        }
