"""
Tests for contact configuration and constants.
"""
import numpy as np
import pytest

from Mortar3D.Objects.Contact.Properties import ContactConstants, ContactProperties, InitialContactState


@pytest.mark.unit
class TestInitialContactState:

    @pytest.mark.parametrize("value, expected", [
        (":AUTO", InitialContactState.AUTO),
        ("auto", InitialContactState.AUTO),
        ("ACTIVE", InitialContactState.ACTIVE),
        (":inactive", InitialContactState.INACTIVE),
        (" unknown ", InitialContactState.UNKNOWN),
        (InitialContactState.ACTIVE, InitialContactState.ACTIVE),
    ])
    def test_parse(self, value, expected):
        """Test parsing of policy names."""
        assert InitialContactState.parse(value) is expected

    def test_unknown_name(self):
        """Test ValueError for an unknown policy name."""
        with pytest.raises(ValueError):
            InitialContactState.parse("sliding")


@pytest.mark.unit
class TestContactProperties:

    def test_defaults(self):
        """Test default properties."""
        p = ContactProperties()
        assert p.dual_basis is False
        assert p.alpha == 0.0
        assert np.isinf(p.distval)
        assert p.rotate_normals is False
        assert p.drop_tolerance == 1e-9
        assert p.contact_state_in_first_iteration is InitialContactState.AUTO
        assert p.iteration == 1
        assert p.integration_order == 2
        assert p.split_quadratic is True

    def test_state_coercion(self):
        """Test string policies are coerced to the enum."""
        p = ContactProperties(contact_state_in_first_iteration=":ACTIVE")
        assert p.contact_state_in_first_iteration is InitialContactState.ACTIVE

    @pytest.mark.parametrize("kwargs", [
        {"iteration": 0},
        {"distval": 0.0},
        {"distval": -1.0},
        {"drop_tolerance": -1e-3},
        {"alpha": 0.5},
        {"contact_state_in_first_iteration": "open"},
    ])
    def test_invalid_values(self, kwargs):
        """Test ValueError for invalid properties."""
        with pytest.raises(ValueError):
            ContactProperties(**kwargs)

    def test_constants(self):
        """Test contact constants."""
        assert ContactConstants.AUTO_STATE_TOLERANCE == 1e-12
        assert ContactConstants.PROJECTION_MAX_ITERATIONS > 1
        assert ContactConstants.DUAL_BASIS_CONDITION_LIMIT > 1.0
