"""Exceptions raised by admissionsim."""


class ConfigurationError(ValueError):
    """A simulation cannot be built from the given parameters.

    Raised at construction time, before any simulated time passes: unknown
    process kinds, non-positive rates or periods, and admission limits that
    would not let a single request through.
    """
