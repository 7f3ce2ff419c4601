from abc import ABC, abstractmethod
from typing import Dict

from .Properties import ContactProperties


class BaseContact(ABC):
    """
    Abstract base class for surface contact formulations.

    Provides shared infrastructure: configuration, verbosity and a
    diagnostics dictionary refreshed at every assembly call.

    Attributes
    ----------
    properties : ContactProperties
        Configuration of the formulation
    diagnostics : dict
        Counters of the last assembly call
    """

    def __init__(self, contact_type: str, properties: ContactProperties = None, verbose: bool = False):
        """
        Parameters
        ----------
        contact_type : str
            Identifier, e.g. 'mortar'
        properties : ContactProperties, optional
            Defaults to ContactProperties()
        verbose : bool
            Print progress and the node state table
        """
        self.contact_type = contact_type
        self.properties = properties if properties is not None else ContactProperties()
        self.verbose = verbose
        self.diagnostics: Dict[str, int] = {}
        self.reset_diagnostics()

    def reset_diagnostics(self):
        self.diagnostics = {
            'num_slave_elements': 0,
            'num_skipped_elements': 0,
            'num_segments': 0,
            'num_culled_masters': 0,
            'num_cells': 0,
            'num_active_nodes': 0,
            'num_inactive_nodes': 0,
        }

    @abstractmethod
    def assemble(self, problem, time: float = 0.0):
        """Assemble the global contact operators of `problem` at `time`."""
        pass

    def get_info(self) -> Dict:
        """Return formulation information for debugging."""
        return {
            'contact_type': self.contact_type,
            'properties': self.properties,
            **self.diagnostics,
        }
