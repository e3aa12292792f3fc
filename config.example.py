# config.example.py

"""
Documentation-only module (safe to commit).

The real configuration is loaded from environment variables (optionally via a local .env file).
This file exists to make the repo self-documenting even without opening .env.
"""

ENV_VARS = {
    # App / logging
    "TASKDESK_APP_NAME": "App display name (default: taskdesk).",
    "TASKDESK_LOG_LEVEL": "Console logging level (default: INFO). The log file always gets DEBUG.",
    "TASKDESK_DATA_DIR": "Local data directory for taskdesk.log (default: .local/taskdesk).",
    # Backend
    "TASKDESK_API_URL": "Backend base URL (default: http://localhost:8000). API_URL is accepted too.",
    "TASKDESK_HTTP_TIMEOUT_SECONDS": "Per-request timeout; unset or 0 waits forever (default).",
    # Connectors
    "TASKDESK_CONSOLE_ENABLED": "Run the interactive console (true/false, default: true).",
}
