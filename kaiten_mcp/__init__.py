"""
Kaiten MCP - typed task-tracker operations for automated callers.

Exposes five tools over the Kaiten REST API:
- get_task_details: one card with an optional comments page
- get_time_logs: time logs, flat or grouped by user/date
- get_task_status: lightweight status for up to 50 cards at once
- create_task / update_task: writes returning the server's card
"""

__version__ = "0.1.0"
