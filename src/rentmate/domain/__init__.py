"""Domain layer for rentmate application.

Services are resolved on first access so that the database layer can import
``rentmate.domain.entities`` without pulling the services in.
"""

_SERVICES = {
    "ActivityLogService": "rentmate.domain.activity_log",
    "CalendarService": "rentmate.domain.calendar",
    "ChoreService": "rentmate.domain.chore",
    "ExpenseService": "rentmate.domain.expense",
    "HouseholdService": "rentmate.domain.household",
    "InvitationService": "rentmate.domain.invitation",
    "UserService": "rentmate.domain.user",
}

__all__ = list(_SERVICES)


def __getattr__(name):
    if name in _SERVICES:
        import importlib

        return getattr(importlib.import_module(_SERVICES[name]), name)
    raise AttributeError(f"module '{__name__}' has no attribute '{name}'")
