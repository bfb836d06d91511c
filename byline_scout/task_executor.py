"""
Background execution of discovery jobs.

submit_job() returns a job id immediately; the pipeline runs on a worker
thread and writes progress into the job store. Terminal jobs stay readable
for a retention window and are then purged.
"""
import concurrent.futures
import dataclasses
import threading
import time
import uuid
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Dict, Any, Optional, List, Callable
from byline_scout.config import (
    JOB_RETENTION_SECONDS, JOB_CLEANUP_INTERVAL_SECONDS, JOB_WORKERS, DEFAULT_MAX_AUTHORS,
)
from byline_scout.exceptions import JobCancelled
from byline_scout.models.job import DiscoveryJob, JobStatus
from byline_scout.utils.logger import get_logger

logger = get_logger(__name__)


class JobStore(ABC):
    """
    Keyed job store with expiry.

    Implementations must keep terminal jobs unchanged and drop them once
    their retention window has passed.
    """

    @abstractmethod
    def put(self, job: DiscoveryJob) -> None:
        """Store a new job."""

    @abstractmethod
    def get(self, job_id: str) -> Optional[DiscoveryJob]:
        """Return a snapshot of a job, or None if unknown or expired."""

    @abstractmethod
    def update(self, job_id: str, **changes) -> Optional[DiscoveryJob]:
        """Apply changes to a non-terminal job and return the updated snapshot."""

    @abstractmethod
    def list(self, limit: int = 10) -> List[DiscoveryJob]:
        """Most recently started jobs first."""

    @abstractmethod
    def purge_expired(self) -> int:
        """Remove expired jobs and return how many were removed."""


class InMemoryJobStore(JobStore):
    """Process-local job store; expiry is stamped when a job turns terminal."""

    def __init__(self, retention: float = JOB_RETENTION_SECONDS, clock: Callable[[], float] = time.monotonic):
        """
        Initialize the store.

        Args:
            retention: Seconds a terminal job stays readable
            clock: Monotonic time source
        """
        self.retention = retention
        self.clock = clock
        self._jobs: Dict[str, DiscoveryJob] = {}
        self._expires_at: Dict[str, float] = {}
        self._lock = threading.Lock()

    def _purge_locked(self) -> int:
        now = self.clock()
        expired = [job_id for job_id, expires in self._expires_at.items() if expires <= now]
        for job_id in expired:
            self._jobs.pop(job_id, None)
            del self._expires_at[job_id]
        return len(expired)

    def put(self, job: DiscoveryJob) -> None:
        with self._lock:
            self._jobs[job.id] = dataclasses.replace(job)

    def get(self, job_id: str) -> Optional[DiscoveryJob]:
        with self._lock:
            self._purge_locked()
            job = self._jobs.get(job_id)
            return dataclasses.replace(job) if job else None

    def update(self, job_id: str, **changes) -> Optional[DiscoveryJob]:
        with self._lock:
            self._purge_locked()
            job = self._jobs.get(job_id)
            if job is None:
                logger.warning(f"Update for unknown job {job_id} ignored")
                return None
            if job.status.is_terminal:
                logger.warning(f"Job {job_id} is already {job.status.value}, update ignored")
                return dataclasses.replace(job)

            for key, value in changes.items():
                setattr(job, key, value)
            if job.status.is_terminal:
                job.completed_at = datetime.utcnow()
                self._expires_at[job_id] = self.clock() + self.retention
            return dataclasses.replace(job)

    def list(self, limit: int = 10) -> List[DiscoveryJob]:
        with self._lock:
            self._purge_locked()
            jobs = sorted(self._jobs.values(), key=lambda j: j.started_at, reverse=True)
            return [dataclasses.replace(j) for j in jobs[:limit]]

    def purge_expired(self) -> int:
        with self._lock:
            return self._purge_locked()


def _default_manager_factory():
    from byline_scout.discovery.discovery_manager import DiscoveryManager
    return DiscoveryManager()


class JobExecutor:
    """Runs discovery jobs on a thread pool and tracks them in a job store."""

    def __init__(self, manager_factory: Callable[[], Any] = _default_manager_factory,
                 store: Optional[JobStore] = None, workers: int = JOB_WORKERS,
                 cleanup_interval: float = JOB_CLEANUP_INTERVAL_SECONDS, start_cleanup: bool = True):
        """
        Initialize the executor.

        Args:
            manager_factory: Builds a fresh DiscoveryManager for each job
            store: Job store, in-memory when omitted
            workers: Number of jobs that may run at once
            cleanup_interval: Seconds between expiry sweeps
            start_cleanup: Start the background expiry thread
        """
        self.manager_factory = manager_factory
        self.store = store or InMemoryJobStore()
        self._executor = concurrent.futures.ThreadPoolExecutor(max_workers=workers, thread_name_prefix="discovery-job")
        self._futures: Dict[str, concurrent.futures.Future] = {}
        self._cancel_events: Dict[str, threading.Event] = {}
        self._lock = threading.Lock()
        self._stop = threading.Event()
        self.cleanup_interval = cleanup_interval

        if start_cleanup:
            threading.Thread(target=self._cleanup_loop, name="job-cleanup", daemon=True).start()

    def submit_job(self, outlet: str, max_authors: int = DEFAULT_MAX_AUTHORS) -> str:
        """
        Submit a discovery job.

        Args:
            outlet: Outlet display name
            max_authors: Author quota

        Returns:
            Job ID that can be used to check the status
        """
        outlet = (outlet or "").strip()
        if not outlet:
            raise ValueError("Outlet name is required")
        if max_authors <= 0:
            raise ValueError("max_authors must be positive")

        job_id = str(uuid.uuid4())
        cancel_event = threading.Event()
        self.store.put(DiscoveryJob(id=job_id, outlet=outlet, quota=max_authors))

        with self._lock:
            self._cancel_events[job_id] = cancel_event
            self._futures[job_id] = self._executor.submit(self._run_job, job_id, outlet, max_authors, cancel_event)

        logger.info(f"Submitted discovery job {job_id} for '{outlet}' (max_authors={max_authors})")
        return job_id

    def _run_job(self, job_id: str, outlet: str, max_authors: int, cancel_event: threading.Event) -> None:
        def progress(percent: int, message: str, **details):
            self.store.update(job_id, status=JobStatus.RUNNING, progress=percent, message=message, **details)

        try:
            if cancel_event.is_set():
                raise JobCancelled()
            progress(5, "Starting scraper...")
            manager = self.manager_factory()
            result = manager.run_pipeline(outlet, max_authors, progress=progress, cancel_event=cancel_event)
            self.store.update(
                job_id,
                status=JobStatus.COMPLETED,
                progress=100,
                message="Completed successfully!",
                website=result.website,
                authors_found=result.authors_found,
                authors_saved=result.authors_saved,
            )
            logger.info(f"Job {job_id} completed: {result.authors_found} authors, {result.authors_saved} saved")
        except JobCancelled as e:
            self.store.update(job_id, status=JobStatus.FAILED, message=str(e), error=str(e))
            logger.info(f"Job {job_id} cancelled")
        except Exception as e:
            logger.error(f"Job {job_id} failed: {e}", exc_info=True)
            self.store.update(job_id, status=JobStatus.FAILED, message=f"Failed: {e}", error=str(e))
        finally:
            with self._lock:
                self._cancel_events.pop(job_id, None)

    def get_job_status(self, job_id: str) -> Optional[Dict[str, Any]]:
        """
        Get the status of a job.

        Args:
            job_id: ID of the job

        Returns:
            Job dictionary, or None if the job is unknown or expired
        """
        job = self.store.get(job_id)
        return job.to_dict() if job else None

    def wait(self, job_id: str, timeout: Optional[float] = None) -> Optional[Dict[str, Any]]:
        """
        Block until a job finishes or the timeout passes.

        Returns:
            The job dictionary at return time
        """
        with self._lock:
            future = self._futures.get(job_id)
        if future is not None:
            try:
                future.result(timeout=timeout)
            except concurrent.futures.TimeoutError:
                logger.info(f"Job {job_id} still running after {timeout} seconds")
        return self.get_job_status(job_id)

    def list_jobs(self, limit: int = 10) -> List[Dict[str, Any]]:
        """Recent jobs, newest first."""
        return [job.to_dict() for job in self.store.list(limit)]

    def cancel_job(self, job_id: str) -> bool:
        """
        Request cancellation of a running job.

        The job stops at its next checkpoint and ends failed with message "Cancelled".

        Returns:
            True if a cancellation was requested, False for unknown or finished jobs
        """
        job = self.store.get(job_id)
        if job is None or job.status.is_terminal:
            return False
        with self._lock:
            cancel_event = self._cancel_events.get(job_id)
        if cancel_event is None:
            return False
        cancel_event.set()
        self.store.update(job_id, cancel_requested=True)
        logger.info(f"Cancellation requested for job {job_id}")
        return True

    def _cleanup_loop(self) -> None:
        while not self._stop.wait(self.cleanup_interval):
            try:
                count = self.store.purge_expired()
                with self._lock:
                    for job_id in [j for j, f in self._futures.items() if f.done() and self.store.get(j) is None]:
                        del self._futures[job_id]
                if count > 0:
                    logger.info(f"Cleaned up {count} expired jobs")
            except Exception as e:
                logger.error(f"Error in cleanup thread: {e}")

    def shutdown(self, wait: bool = True) -> None:
        """Stop the cleanup thread and the worker pool."""
        self._stop.set()
        self._executor.shutdown(wait=wait)


_default_executor: Optional[JobExecutor] = None
_default_lock = threading.Lock()


def get_executor() -> JobExecutor:
    """Get the process-wide executor, creating it on first use."""
    global _default_executor
    with _default_lock:
        if _default_executor is None:
            _default_executor = JobExecutor()
        return _default_executor


def submit_job(outlet: str, max_authors: int = DEFAULT_MAX_AUTHORS) -> str:
    """Submit a discovery job on the default executor."""
    return get_executor().submit_job(outlet, max_authors)


def get_job_status(job_id: str) -> Optional[Dict[str, Any]]:
    """Get a job's status from the default executor."""
    return get_executor().get_job_status(job_id)


def cancel_job(job_id: str) -> bool:
    """Cancel a job on the default executor."""
    return get_executor().cancel_job(job_id)


def list_jobs(limit: int = 10) -> List[Dict[str, Any]]:
    """Recent jobs on the default executor."""
    return get_executor().list_jobs(limit)
