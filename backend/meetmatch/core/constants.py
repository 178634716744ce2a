"""
Centralized constants for slot/meeting states and scheduler jobs.

Change state names or job IDs here instead of scattering literals across services and routes.
"""

# Availability slot states
SLOT_OPEN = "open"
SLOT_RESERVED = "reserved"
SLOT_COMPLETED = "completed"
SLOT_WITHDRAWN = "withdrawn"
SLOT_STATES = (SLOT_OPEN, SLOT_RESERVED, SLOT_COMPLETED, SLOT_WITHDRAWN)
# States that still occupy the owner's calendar (overlap checks)
SLOT_ACTIVE_STATES = (SLOT_OPEN, SLOT_RESERVED, SLOT_COMPLETED)

# Meeting states
MEETING_SCHEDULED = "scheduled"
MEETING_COMPLETED = "completed"
MEETING_CANCELLED = "cancelled"
MEETING_NO_SHOW = "no_show"
MEETING_STATES = (MEETING_SCHEDULED, MEETING_COMPLETED, MEETING_CANCELLED, MEETING_NO_SHOW)
MEETING_TERMINAL_STATES = (MEETING_COMPLETED, MEETING_CANCELLED, MEETING_NO_SHOW)

# Scheduler job IDs (must match ids used in main.py add_job)
SUGGESTION_REFRESH_JOB_ID = "suggestion_refresh"

# Cap owners enqueued per refresh tick so one tick cannot flood the rescoring queue
SUGGESTION_REFRESH_MAX_OWNERS = 500

# Header carrying the acting user (auth lives outside this service)
USER_ID_HEADER = "X-User-Id"
OPERATOR_TOKEN_HEADER = "X-Operator-Token"
