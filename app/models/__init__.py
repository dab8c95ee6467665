# Import all models for easier access
from .event import Event  # noqa: F401
from .ticket import Ticket  # noqa: F401
