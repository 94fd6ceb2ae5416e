"""
User-facing notifications raised by the view-models.
"""
import logging

logger = logging.getLogger(__name__)


class Notifier:
    """
    Default notifier: writes notifications to the log.

    Front ends pass their own object with the same ``success``/``error``
    methods to show toasts instead.
    """

    def success(self, title: str, message: str) -> None:
        logger.info(f"{title}: {message}")

    def error(self, title: str, message: str) -> None:
        logger.warning(f"{title}: {message}")
