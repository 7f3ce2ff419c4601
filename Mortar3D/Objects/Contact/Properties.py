from dataclasses import dataclass
from enum import Enum
from typing import Union

import numpy as np


class ContactConstants:
    """Numerical thresholds of the contact kernel.

    These can be overridden by passing explicit values where a function
    exposes them.
    """
    AUTO_STATE_TOLERANCE = 1e-12         # |mean|, std of initial normal gap
    PROJECTION_TOLERANCE = 1e-10         # Newton residual on surface projection
    PROJECTION_MAX_ITERATIONS = 20
    DUAL_BASIS_CONDITION_LIMIT = 1e12    # cond(Me) above this is singular
    ZERO_AREA_TOLERANCE = 1e-14          # relative to slave element area
    REFERENCE_DOMAIN_TOLERANCE = 1e-2    # warn if projection leaves the element


class InitialContactState(Enum):
    """Contact state policy for the first iteration of a load step."""
    AUTO = "auto"
    ACTIVE = "active"
    INACTIVE = "inactive"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, value: Union[str, "InitialContactState"]) -> "InitialContactState":
        if isinstance(value, cls):
            return value
        key = str(value).strip().lstrip(":").upper()
        try:
            return cls[key]
        except KeyError:
            raise ValueError(
                f"Unknown initial contact state '{value}'. "
                f"Expected one of {[s.name for s in cls]}") from None


@dataclass
class ContactProperties:
    """
    Configuration of the mortar contact assembly.

    Attributes:
        dual_basis: Use biorthogonal Lagrange multiplier basis
        alpha: Edge-correction blend for quadratic slave elements (0 disables)
        distval: Centroid distance cutoff for master elements
        rotate_normals: Flip the computed nodal normals
        drop_tolerance: Absolute value below which operator entries are dropped
        contact_state_in_first_iteration: AUTO, ACTIVE, INACTIVE or UNKNOWN
        iteration: Current nonlinear iteration (1-based, incremented by the caller)
        integration_order: Triangle rule used on the integration cells
        split_quadratic: Split quadratic elements into linear facets before segmentation
    """
    dual_basis: bool = False
    alpha: float = 0.0
    distval: float = np.inf
    rotate_normals: bool = False
    drop_tolerance: float = 1e-9
    contact_state_in_first_iteration: Union[str, InitialContactState] = InitialContactState.AUTO
    iteration: int = 1
    integration_order: int = 2
    split_quadratic: bool = True

    def __post_init__(self):
        self.contact_state_in_first_iteration = InitialContactState.parse(
            self.contact_state_in_first_iteration)
        if self.iteration < 1:
            raise ValueError(f"Iteration counter is 1-based, got {self.iteration}")
        if self.distval <= 0:
            raise ValueError(f"distval must be positive, got {self.distval}")
        if self.drop_tolerance < 0:
            raise ValueError(f"drop_tolerance must be non-negative, got {self.drop_tolerance}")
        if np.isclose(self.alpha, 0.5):
            raise ValueError("alpha = 0.5 makes the edge transform singular")
