"""Documentation site build orchestrator."""

__version__ = "0.4.0"
