from abc import ABC, abstractmethod


class BaseFE(ABC):
    """Abstract base class for surface finite elements used by the contact kernel."""

    @abstractmethod
    def N_dN(self, xi, eta):
        pass

    @abstractmethod
    def reference_coordinates(self):
        pass

    @abstractmethod
    def outline(self):
        pass
