"""Shared CLI plumbing: context construction, prompting, and output helpers."""

import getpass
import logging
from dataclasses import replace

from dockhand.config import load_settings
from dockhand.lifecycle.context import LifecycleContext

logger = logging.getLogger(__name__)

RULE = "═" * 59


def make_context(args, **overrides):
    """Build a LifecycleContext from parsed CLI args.

    ``overrides`` are Settings fields to replace (e.g. acme_email from a flag).
    """
    settings = load_settings(getattr(args, "config", None))
    overrides = {k: v for k, v in overrides.items() if v is not None}
    if overrides:
        settings = replace(settings, **overrides)
    return LifecycleContext.build(settings, dry_run=getattr(args, "dry_run", False))


# ── prompts ───────────────────────────────────────────────────────


def ask(prompt, default=None):
    suffix = f" [{default}]" if default else ""
    answer = input(f"{prompt}{suffix}: ").strip()
    return answer or (default or "")


def ask_secret(prompt):
    return getpass.getpass(f"{prompt}: ").strip()


def ask_yes_no(prompt, default=True):
    suffix = "[Y/n]" if default else "[y/N]"
    answer = input(f"{prompt} {suffix}: ").strip().lower()
    if not answer:
        return default
    return answer in ("y", "yes")


def select_service(names, prompt="Select service"):
    """Numbered selection from ``names``. Returns a name, or None on 'q'."""
    for i, name in enumerate(names, start=1):
        logger.info(f"  {i}) {name}")
    while True:
        selection = input(f"{prompt} (1-{len(names)}, or 'q' to quit): ").strip()
        if selection.lower() == "q":
            return None
        if selection.isdigit() and 1 <= int(selection) <= len(names):
            return names[int(selection) - 1]
        logger.error(f"✗ Invalid selection. Please enter a number between 1 and {len(names)}")


# ── output ────────────────────────────────────────────────────────


def print_header(title):
    logger.info("")
    logger.info(RULE)
    logger.info(f"  {title}")
    logger.info(RULE)
    logger.info("")


def display_service_info(record, container=None):
    logger.info("")
    logger.info("Service Details:")
    logger.info(f"  Name:     {record.name}")
    logger.info(f"  Hostname: {record.hostname}")
    logger.info(f"  Image:    {record.image}")
    logger.info(f"  Port:     {record.port}")
    if record.health_path:
        logger.info(f"  Health:   {record.health_path}")
    if container is not None:
        logger.info(f"  Version:  {container.version}")
        logger.info(f"  Status:   {container.status}")
        logger.info(f"  Health:   {container.health}")
        logger.info(f"  Uptime:   {container.uptime()}")
    logger.info("")


def useful_commands(service_dir):
    logger.info("Useful commands:")
    logger.info(f"  View logs:    cd {service_dir} && docker compose logs -f")
    logger.info(f"  Restart:      cd {service_dir} && docker compose restart")
    logger.info(f"  Stop:         cd {service_dir} && docker compose down")
    logger.info("")
