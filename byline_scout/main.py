"""
Main module for byline-scout.
"""
import argparse
import json
import sys
from byline_scout.classification.nlp_enricher import summarize_activity
from byline_scout.config import DEFAULT_MAX_AUTHORS, QUICK_MAX_AUTHORS
from byline_scout.database import crud
from byline_scout.database.models import init_db, session_scope
from byline_scout.discovery.discovery_manager import DiscoveryManager
from byline_scout.task_executor import JobExecutor
from byline_scout.validation.name_validator import profile_quality
from byline_scout.utils.logger import get_logger

logger = get_logger(__name__)


def _print(data) -> None:
    print(json.dumps(data, indent=2, ensure_ascii=False, default=str))


def run_discover(outlet: str, max_authors: int = DEFAULT_MAX_AUTHORS, timeout: float = None) -> int:
    """Submit a discovery job, wait for it and print the final job record."""
    init_db()
    executor = JobExecutor(start_cleanup=False)
    try:
        job_id = executor.submit_job(outlet, max_authors)
        job = executor.wait(job_id, timeout=timeout)
    finally:
        executor.shutdown(wait=False)
    _print(job)
    return 0 if job and job["status"] == "completed" else 1


def run_quick(outlet: str, max_authors: int = QUICK_MAX_AUTHORS) -> int:
    """Run the blocking quick variant and print the profiles."""
    result = DiscoveryManager().run_quick(outlet, max_authors=max_authors)
    _print(result.to_dict())
    return 0


def run_author(outlet: str, name: str) -> int:
    """Discover and store one named author."""
    init_db()
    result = DiscoveryManager().run_single_author(outlet, name)
    _print(result.to_dict())
    return 0


def run_resolve(outlet: str) -> int:
    """Print the website an outlet resolves to."""
    site = DiscoveryManager().resolve(outlet)
    _print({"outlet": outlet, "website": site.base_url, "method": site.method.value,
            "provider": site.provider, "score": site.score})
    return 0


def show_profiles(outlet: str = None, sort_by: str = "articles", limit: int = 20) -> int:
    """Print stored profiles."""
    init_db()
    with session_scope() as session:
        records = crud.list_profiles(session, outlet=outlet, sort_by=sort_by, limit=limit)
        _print([r.to_dict() for r in records])
    return 0


def show_stats(outlet: str = None) -> int:
    """Print the activity summary over stored profiles."""
    init_db()
    with session_scope() as session:
        profiles = [r.to_dict() for r in crud.list_profiles(session, outlet=outlet)]
    _print(summarize_activity(profiles))
    return 0


def run_audit(outlet: str = None) -> int:
    """Print quality scores for stored profiles, lowest first."""
    init_db()
    with session_scope() as session:
        profiles = [r.to_dict() for r in crud.list_profiles(session, outlet=outlet)]

    report = []
    for profile in profiles:
        quality = profile_quality(profile)
        report.append({
            "id": profile["id"],
            "name": profile["name"],
            "outlet": profile["outlet"],
            "score": quality["score"],
            "is_acceptable": quality["is_acceptable"],
            "issues": quality["issues"],
        })
    report.sort(key=lambda r: r["score"])
    _print({
        "total": len(report),
        "high_quality": sum(1 for p in profiles if profile_quality(p)["is_high_quality"]),
        "acceptable": sum(1 for r in report if r["is_acceptable"]),
        "profiles": report,
    })
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Discover journalists for a media outlet")

    # Main command groups
    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    discover_parser = subparsers.add_parser("discover", help="Run a discovery job and wait for it")
    discover_parser.add_argument("outlet", help="Outlet name, e.g. \"The Hindu\"")
    discover_parser.add_argument("--max-authors", type=int, default=DEFAULT_MAX_AUTHORS, help="Maximum number of authors")
    discover_parser.add_argument("--timeout", type=float, default=None, help="Seconds to wait before returning the job state")

    quick_parser = subparsers.add_parser("quick", help="Quick discovery without saving")
    quick_parser.add_argument("outlet")
    quick_parser.add_argument("--max-authors", type=int, default=QUICK_MAX_AUTHORS)

    author_parser = subparsers.add_parser("author", help="Find one named author at an outlet")
    author_parser.add_argument("outlet")
    author_parser.add_argument("name")

    resolve_parser = subparsers.add_parser("resolve", help="Resolve an outlet name to its website")
    resolve_parser.add_argument("outlet")

    profiles_parser = subparsers.add_parser("profiles", help="List stored profiles")
    profiles_parser.add_argument("--outlet", default=None)
    profiles_parser.add_argument("--sort", choices=["articles", "recent", "influence"], default="articles")
    profiles_parser.add_argument("--limit", type=int, default=20)

    stats_parser = subparsers.add_parser("stats", help="Activity summary of stored profiles")
    stats_parser.add_argument("--outlet", default=None)

    audit_parser = subparsers.add_parser("audit", help="Quality scores of stored profiles")
    audit_parser.add_argument("--outlet", default=None)

    return parser


def main(argv=None):
    """Main entry point for the application."""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        if args.command == "discover":
            status = run_discover(args.outlet, args.max_authors, args.timeout)
        elif args.command == "quick":
            status = run_quick(args.outlet, args.max_authors)
        elif args.command == "author":
            status = run_author(args.outlet, args.name)
        elif args.command == "resolve":
            status = run_resolve(args.outlet)
        elif args.command == "profiles":
            status = show_profiles(args.outlet, args.sort, args.limit)
        elif args.command == "stats":
            status = show_stats(args.outlet)
        elif args.command == "audit":
            status = run_audit(args.outlet)
        else:
            parser.print_help()
            status = 0
    except Exception as e:
        logger.error(f"Application error: {e}")
        sys.exit(1)

    sys.exit(status)


if __name__ == "__main__":
    main()
