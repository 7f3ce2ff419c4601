class GeometricDegeneracyError(RuntimeError):
    """Raised when the contact geometry is degenerate.

    This typically indicates:
    - A clipped contact polygon with (near) zero area
    - A zero nodal normal (flat-folded or collapsed surface)
    - Corrupted geometry or normals for the current step

    The whole assembly step is aborted; it is never retried.
    """
    pass


class SingularDualBasisError(RuntimeError):
    """Raised when the dual basis coefficients Ae = De inv(Me) cannot be built.

    This typically indicates a slave element whose only overlap is a sliver
    (Me is singular or badly conditioned).
    """
    pass


class ProjectionError(RuntimeError):
    """Raised when a point cannot be mapped back onto a surface element
    (Newton iteration diverged or hit a singular tangent system)."""
    pass
