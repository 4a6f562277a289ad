"""Event hooks fired around imports and syncs."""

import logging
import os
import subprocess
from typing import Any, Callable, Dict, List

import requests

logger = logging.getLogger(__name__)

EVENTS = (
    "command_start",
    "command_end",
    "import_complete",
    "sync_complete",
    "sync_error",
)


def _event_environment(event: str, payload: Dict[str, Any]) -> Dict[str, str]:
    """Expose an event payload to shell hooks as CINELOG_* variables."""
    env = dict(os.environ)
    env["CINELOG_EVENT"] = event
    for key, value in payload.items():
        env[f"CINELOG_{key.upper()}"] = "" if value is None else str(value)
    return env


class HookManager:
    """Dispatches cinelog events to registered callbacks."""

    def __init__(self):
        self._hooks: Dict[str, List[Callable]] = {}

    def register(self, event: str, callback: Callable):
        """
        Register a callback for an event.

        Args:
            event: One of EVENTS
            callback: Called as callback(event, **payload)
        """
        if event not in EVENTS:
            logger.warning(f"Ignoring hook for unknown event: {event}")
            return
        self._hooks.setdefault(event, []).append(callback)
        logger.debug(f"Registered hook for event: {event}")

    def trigger(self, event: str, **payload):
        """
        Trigger all callbacks for an event.

        A failing hook is logged and never interrupts the command.

        Args:
            event: Event name
            **payload: Event data passed to callbacks
        """
        callbacks = self._hooks.get(event)
        if not callbacks:
            return

        logger.debug(f"Triggering event: {event}")
        for callback in callbacks:
            try:
                callback(event, **payload)
            except Exception as e:
                logger.error(f"Hook callback failed for {event}: {e}")

    def load_from_config(self, config):
        """
        Load hooks from the ``hooks`` section of the configuration.

        Example:
        hooks:
          sync_complete:
            - type: command
              command: "notify-send 'cinelog' \"$CINELOG_NEW_EPISODE_WATCHES new episodes\""
          sync_error:
            - type: webhook
              url: "https://example.org/hooks/cinelog"

        Args:
            config: Config object
        """
        hooks_config = config.get("hooks", {}) or {}

        for event, hook_configs in hooks_config.items():
            if not isinstance(hook_configs, list):
                continue

            for hook_config in hook_configs:
                hook_type = hook_config.get("type")

                if hook_type == "command" and hook_config.get("command"):
                    self.register(event, self._command_hook(hook_config["command"]))
                elif hook_type == "webhook" and hook_config.get("url"):
                    self.register(event, self._webhook_hook(hook_config["url"]))
                else:
                    logger.warning(f"Skipping invalid hook for {event}: {hook_config}")

    def _command_hook(self, command: str) -> Callable:
        def hook(event, **payload):
            result = subprocess.run(
                command,
                shell=True,
                check=False,
                capture_output=True,
                env=_event_environment(event, payload),
            )
            logger.debug(f"Hook command exited with {result.returncode}: {command}")
        return hook

    def _webhook_hook(self, url: str) -> Callable:
        def hook(event, **payload):
            response = requests.post(url, json={"event": event, **payload}, timeout=5)
            logger.debug(f"Sent webhook to {url}: {response.status_code}")
        return hook


_hook_manager = HookManager()


def get_hook_manager() -> HookManager:
    """Get the global hook manager instance."""
    return _hook_manager


def trigger_hook(event: str, **payload):
    _hook_manager.trigger(event, **payload)
