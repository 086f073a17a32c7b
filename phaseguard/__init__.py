"""phaseguard: per-phase time budgets for a single test execution."""

__version__ = "0.1.0"
