"""
Operator notifications via the Pushover API.
"""

import requests
from rich.console import Console
from rich.markup import escape


console = Console()

PUSHOVER_URL = "https://api.pushover.net/1/messages.json"


class PushoverNotifier:
    """Best-effort push notifications. Never raises."""

    def __init__(self, user_key: str = "", api_token: str = "", timeout: float = 10):
        self.user_key = user_key
        self.api_token = api_token
        self.timeout = timeout

    @property
    def enabled(self) -> bool:
        return bool(self.user_key and self.api_token)

    def notify(self, message: str) -> bool:
        """
        Send a notification.

        Args:
            message: Text to send

        Returns:
            True if Pushover accepted the message
        """
        if not self.enabled:
            console.print("[yellow]⚠ Pushover credentials not set, skipping notification.[/]")
            return False

        try:
            response = requests.post(
                PUSHOVER_URL,
                data={
                    "token": self.api_token,
                    "user": self.user_key,
                    "message": message,
                },
                timeout=self.timeout,
            )
            response.raise_for_status()
        except requests.RequestException as e:
            console.print(f"[red]Failed to send Pushover notification:[/] {escape(str(e))}")
            return False

        console.print("[dim]Pushover notification sent.[/]")
        return True
