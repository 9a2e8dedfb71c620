"""
Throwaway-mailbox domains refused at registration.

Domains come from the bundled rishta/data/disposable_email_blocklist.txt plus
any extra ones listed in BLOCKED_EMAIL_DOMAINS. Subdomains of a listed
domain are blocked as well (``x.mailinator.com``).
"""
import logging
from functools import lru_cache
from pathlib import Path
from typing import FrozenSet

from rishta.core.config import settings

logger = logging.getLogger(__name__)

BLOCKLIST_FILE = Path(__file__).resolve().parent.parent / "data" / "disposable_email_blocklist.txt"


def _read_domains(path: Path) -> set:
    if not path.is_file():
        logger.warning("Disposable email list missing at %s; only configured domains are blocked", path)
        return set()
    with path.open(encoding="utf-8") as f:
        return {
            line.strip().lower()
            for line in f
            if line.strip() and not line.lstrip().startswith("#")
        }


@lru_cache(maxsize=1)
def blocked_domains() -> FrozenSet[str]:
    domains = _read_domains(BLOCKLIST_FILE)
    domains.update(settings.blocked_email_domains)
    return frozenset(domains)


def ensure_blocklist_loaded() -> int:
    """Warm the cache at startup; returns the number of blocked domains."""
    return len(blocked_domains())


def is_disposable_email(email: str) -> bool:
    if not email or "@" not in email:
        return False
    domain = email.strip().lower().rsplit("@", 1)[1]
    blocked = blocked_domains()
    parts = domain.split(".")
    # example.mailinator.com -> mailinator.com -> com
    return any(".".join(parts[i:]) in blocked for i in range(len(parts)))
