"""
First-run setup: ask the operator for backend details and save the config.
"""

from .constants import CHECKIN_METHODS, DEFAULT_METHOD
from .config import log, safe_print, save_config


def _ask(prompt, default=None, required=True, input_fn=input):
    suffix = f" [{default}]" if default else ""
    while True:
        value = input_fn(f"{prompt}{suffix}: ").strip()
        if not value and default is not None:
            return default
        if value or not required:
            return value
        safe_print("  A value is required.")


def console_enroll(input_fn=input):
    """Prompt for settings on the console. Returns config dict."""
    server_url = _ask("Backend URL (https://<project>.supabase.co)", input_fn=input_fn)
    api_key = _ask("API key", input_fn=input_fn)
    event_id = _ask("Event ID", input_fn=input_fn)
    zone_id = _ask("Zone (optional)", required=False, input_fn=input_fn)

    method = ""
    while method not in CHECKIN_METHODS:
        method = _ask("Check-in method", default=DEFAULT_METHOD, input_fn=input_fn).upper()

    config = {
        "serverUrl": server_url.rstrip("/"),
        "apiKey": api_key,
        "eventId": event_id,
        "zoneId": zone_id or None,
        "method": method,
    }

    save_config(config)
    log.info("Check-in station configured for event %s", event_id)
    return config
