"""Per-site store of the most recently used scan configuration."""

import logging
import threading
from typing import Dict, Optional

from app.models.scan import ScanConfiguration

logger = logging.getLogger(__name__)


class ScanSettingsStore:
    """Key-value store remembering the active :class:`ScanConfiguration` per site.

    Only the redirect key and protocol mode persist; ``exclude_posts`` is a
    per-request view option and both of its variants share the settings.
    """

    def __init__(self) -> None:
        self._settings: Dict[str, ScanConfiguration] = {}
        self._lock = threading.Lock()

    def get(self, site: str) -> ScanConfiguration:
        with self._lock:
            return self._settings.get(site, ScanConfiguration())

    def update(self, site: str, config: ScanConfiguration) -> Optional[ScanConfiguration]:
        """Make *config* the active configuration of *site*.

        Returns the previous configuration when the persisted options changed,
        so the caller can invalidate results cached under it; otherwise *None*.
        """
        stored = config.model_copy(update={"exclude_posts": False})
        with self._lock:
            previous = self._settings.get(site, ScanConfiguration())
            self._settings[site] = stored
        if previous == stored:
            return None
        logger.info(
            "Settings for %s changed: redirect_key=%r protocol_mode=%s",
            site,
            stored.redirect_key,
            stored.protocol_mode,
        )
        return previous
