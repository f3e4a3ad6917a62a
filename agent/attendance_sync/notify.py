"""
User-visible notices (queued offline, batch synced).
"""

from .config import log, safe_print


class Notifier:
    def info(self, message, description=None):
        raise NotImplementedError

    def success(self, message):
        raise NotImplementedError


class ConsoleNotifier(Notifier):
    """Prints notices for the operator at the check-in console."""

    def info(self, message, description=None):
        log.info("%s%s", message, f" — {description}" if description else "")
        safe_print(f"[i] {message}")
        if description:
            safe_print(f"    {description}")

    def success(self, message):
        log.info(message)
        safe_print(f"[ok] {message}")
