"""Cal.com Assistant CLI package.

A command-line client for Cal.com schedules, availability overrides,
event-type links, slots and bookings.
"""

__all__ = ["__version__"]
__version__ = "0.1.0"
