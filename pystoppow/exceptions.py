"""
Exception hierarchy for pystoppow.

Every error raised by a model or by the path-integration engine derives from
:class:`StopPowError`. The concrete classes also subclass the closest builtin
(``ValueError`` or ``RuntimeError``) so that callers who only know the
builtin types still catch them.

- :class:`DomainError`: energy outside a model's ``[Emin, Emax]`` validity domain.
- :class:`RangeError`: a ``Thickness`` query asks for an unreachable exit energy.
- :class:`ConvergenceError`: a root finder or quadrature failed to meet tolerance.
- :class:`TableFormatError`: a stopping-power table could not be parsed or validated.
"""


class StopPowError(Exception):
    """Base class for all pystoppow errors."""


class DomainError(StopPowError, ValueError):
    """
    Raised when an energy argument lies outside a model's validity domain.

    :ivar energy: The offending energy in MeV.
    :ivar Emin: Lower bound of the validity domain in MeV.
    :ivar Emax: Upper bound of the validity domain in MeV.
    """

    def __init__(self, energy: float, Emin: float, Emax: float, message: str = None):
        self.energy = energy
        self.Emin = Emin
        self.Emax = Emax
        if message is None:
            message = f"Energy {energy!r} MeV is outside the valid domain [{Emin}, {Emax}] MeV."
        super().__init__(message)


class RangeError(StopPowError, ValueError):
    """Raised when a requested exit energy cannot be reached along the path."""


class ConvergenceError(StopPowError, RuntimeError):
    """Raised when an iterative solver does not converge within its budget."""


class TableFormatError(StopPowError, ValueError):
    """Raised when tabulated stopping-power data is malformed."""
