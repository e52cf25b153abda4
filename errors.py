class SimulationError(Exception):
    """Base class for errors raised by the simulation core."""


class ConfigurationError(SimulationError, ValueError):
    """Raised when a world or simulation is configured with invalid values."""


class DegenerateGeometryError(SimulationError, ArithmeticError):
    """Raised when a direction is requested for a zero-length vector."""
