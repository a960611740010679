from __future__ import annotations

import logging
import subprocess

logger = logging.getLogger(__name__)


URGENCIES = ("normal", "critical")


class DesktopNotifier:
    """Desktop popups via `notify-send`. Failures are logged, never raised."""

    def __init__(self, notify_send_path: str = "notify-send", timeout_s: float = 5.0) -> None:
        self._cmd = notify_send_path
        self._timeout_s = timeout_s

    def notify(self, title: str, body: str, urgency: str = "normal") -> None:
        if urgency not in URGENCIES:
            urgency = "normal"
        try:
            proc = subprocess.run(
                [self._cmd, "-u", urgency, title, body],
                capture_output=True,
                text=True,
                timeout=self._timeout_s,
                check=False,
            )
        except FileNotFoundError:
            logger.warning("notify-send not found (%s); notification dropped: %s", self._cmd, title)
            return
        except (OSError, subprocess.TimeoutExpired) as e:
            logger.warning("Failed to show notification %r: %s", title, e)
            return

        if proc.returncode != 0:
            logger.warning(
                "Failed to show notification %r: exit=%s stderr=%s",
                title, proc.returncode, (proc.stderr or "").strip(),
            )
        else:
            logger.debug("Notification shown: %s", title)


class LogNotifier:
    def notify(self, title: str, body: str, urgency: str = "normal") -> None:
        logger.info("NOTIFY [%s] %s: %s", urgency, title, body)
