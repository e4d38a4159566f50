"""Service layer modules."""

# Import service modules (not individual functions) for cleaner access
from lawdesk.services import (  # noqa: F401
    appointment_service,
    attachment_service,
    client_service,
    note_service,
    scheduling_service,
    user_service,
)
