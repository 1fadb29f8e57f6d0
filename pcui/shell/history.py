"""
Recent Cell URLs.

Small JSON file `{"urls": [...]}` holding the most recently used Cell URLs,
deduplicated, oldest first.
"""

import json
from pathlib import Path

from pcui.core.logging import get_logger, log_with_source

logger = get_logger(__name__)

URLS_KEY = "urls"


class RecentUrls:
    """Load and update the recent Cell URL list."""

    def __init__(self, path: Path, max_entries: int) -> None:
        self.path = path
        self.max_entries = max_entries

    def load(self) -> list[str]:
        """Return stored URLs oldest first; an absent or unreadable file gives []."""
        try:
            with open(self.path, encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            return []
        except (OSError, ValueError) as e:
            log_with_source(logger, "shell", "warning", "Unreadable URL history", path=str(self.path), error=str(e))
            return []

        urls = data.get(URLS_KEY) if isinstance(data, dict) else None
        if not isinstance(urls, list):
            return []
        return [u for u in urls if isinstance(u, str)]

    def menu(self) -> list[str]:
        """URLs most recent first, as offered at the login prompt."""
        return list(reversed(self.load()))

    def save(self, url: str) -> None:
        """Record `url` as the most recent entry, keeping at most max_entries."""
        urls = [u for u in self.load() if u != url]
        urls.append(url)
        urls = urls[-self.max_entries:]

        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump({URLS_KEY: urls}, f, indent=2)
            f.write("\n")
