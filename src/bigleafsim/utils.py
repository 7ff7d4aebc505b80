"""
Utilities: Includes the leaf class enumeration and the error kinds shared across the bigleafsim modules
"""

import enum


class LeafClass(enum.IntEnum):
    """
    The two big leaves of the canopy. The integer value is the position of the leaf in every
    per-leaf array of the canopy workspace, and the member order is the order in which the
    leaves are solved within a half hour.
    """
    SUNLIT = 0
    SHADED = 1


NUM_LEAVES = len(LeafClass)


class FatalModelError(BaseException):
    """
    Unrecoverable model error. Stops the whole simulation run.

    Derives from BaseException rather than Exception so that a generic ``except Exception``
    in calling code cannot catch it and continue with the next day.
    """

    def __init__(self, message, **context):
        super().__init__(message)
        self.message = message
        self.context = context

    def __str__(self):
        if not self.context:
            return self.message
        details = ", ".join(f"{k}={v}" for k, v in self.context.items())
        return f"{self.message} [{details}]"


class UnimplementedPathwayError(FatalModelError):
    """Raised when a photosynthetic pathway other than C3 is selected."""
    pass


class NonConvergenceError(FatalModelError):
    """Raised when the leaf temperature iteration reaches its ceiling without converging."""
    pass
