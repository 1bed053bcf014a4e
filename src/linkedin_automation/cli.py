"""Command-line interface for LinkedIn automation."""

import asyncio
import json
import sys
from typing import Any, Dict, Optional

from linkedin_automation.automation import LinkedInAutomation
from linkedin_automation.config import Config, settings
from linkedin_automation.infrastructure.timing_evasion import TimingProfile
from linkedin_automation.logging_config import get_logger, setup_logging

logger = get_logger(__name__)


def emit(result: Dict[str, Any]) -> int:
    """Print a result envelope as JSON on stdout.

    Returns:
        Process exit code (0 on success, 1 otherwise)
    """
    print(json.dumps(result, indent=2, default=str))
    return 0 if result.get("success") else 1


def _config_from_args(args) -> Config:
    config = Config.from_env()
    if getattr(args, "headless", False):
        config.headless = True
    if getattr(args, "pacing", None) is not None:
        if args.pacing < 0:
            raise ValueError("--pacing must be >= 0")
        config.pacing_multiplier = args.pacing
    if getattr(args, "timing_profile", None):
        config.timing_profile = TimingProfile(args.timing_profile)
    return config


async def _run(args, config: Config) -> Dict[str, Any]:
    """Run one command against a fresh automation session."""
    automation = LinkedInAutomation(config)
    try:
        login = await automation.login(args.email, args.password)
        if args.command == "login" or not login.get("success"):
            return login

        if args.command == "search":
            filters = {
                "timePosted": args.time_posted,
                "experienceLevel": args.experience_level,
                "remote": args.remote,
            }
            return await automation.search_jobs(args.keywords, args.location, filters)

        return await automation.get_job_details(args.url)
    finally:
        await automation.cleanup()


def run_command(args) -> int:
    """Execute a subcommand and print its envelope."""
    try:
        config = _config_from_args(args)
    except ValueError as e:
        return emit({"success": False, "message": str(e), "errorType": "invalid_input"})

    logger.debug(f"Running {args.command} (headless={config.headless})")
    try:
        result = asyncio.run(_run(args, config))
    except KeyboardInterrupt:
        result = {"success": False, "message": "Interrupted", "errorType": "interrupted"}
    return emit(result)


def main(argv: Optional[list] = None):
    """Main CLI entry point."""
    import argparse

    parser = argparse.ArgumentParser(
        description="LinkedIn Automation - log in, search jobs and read job postings"
    )

    # Global flags (before subcommands)
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=settings.LOG_LEVEL.upper() if settings.LOG_LEVEL else "INFO",
        help="Set logging verbosity (default: INFO)",
    )
    parser.add_argument(
        "--log-file",
        default=settings.LOG_FILE,
        help="Write logs to file in addition to stderr",
    )
    parser.add_argument(
        "--headless",
        action="store_true",
        help="Run the browser without a window (checkpoints cannot be solved)",
    )
    parser.add_argument(
        "--pacing",
        type=float,
        help="Delay multiplier for human-like pacing (default: LINKEDIN_PACING_MULTIPLIER or 1.0)",
    )
    parser.add_argument(
        "--timing-profile",
        choices=[profile.value for profile in TimingProfile],
        help="Pacing preset applied on top of --pacing (default: LINKEDIN_TIMING_PROFILE)",
    )
    parser.add_argument("--email", help="LinkedIn email (default: LINKEDIN_EMAIL)")
    parser.add_argument("--password", help="LinkedIn password (default: LINKEDIN_PASSWORD)")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    subparsers.add_parser(
        "login", help="Log in, restoring the saved session when possible."
    )

    search_parser = subparsers.add_parser(
        "search", help="Search for jobs (top 25 results)."
    )
    search_parser.add_argument("keywords", help="Job search keywords, e.g. 'software engineer'")
    search_parser.add_argument("--location", "-l", help="Job location, e.g. 'San Francisco, CA'")
    search_parser.add_argument(
        "--time-posted",
        help="r86400 (24h), r604800 (week), r2592000 (month), or 24h/week/month",
    )
    search_parser.add_argument(
        "--experience-level",
        help="Comma-separated levels: 1-6 or internship,entry,associate,mid_senior,director,executive",
    )
    search_parser.add_argument(
        "--remote",
        action="store_true",
        help="Only remote jobs",
    )

    details_parser = subparsers.add_parser(
        "details", help="Get detailed information about a job posting."
    )
    details_parser.add_argument("url", help="Full LinkedIn job posting URL")

    args = parser.parse_args(argv)

    # Configure logging based on flags
    setup_logging(
        level=args.log_level,
        log_file=getattr(args, "log_file", None),
    )

    if not args.command:
        parser.print_help()
        sys.exit(2)

    sys.exit(run_command(args))


if __name__ == "__main__":
    main()
