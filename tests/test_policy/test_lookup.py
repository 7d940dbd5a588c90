"""Tests for policy definition lookups."""
import pytest
from unittest.mock import patch, MagicMock
from kvcompose.errors import PolicyLookupError
from kvcompose.policy.lookup import AzurePolicyDefinitionLookup, StaticPolicyDefinitionLookup

def _definition(display_name, definition_id):
    definition = MagicMock()
    definition.display_name = display_name
    definition.id = definition_id
    return definition

def test_static_lookup():
    lookup = StaticPolicyDefinitionLookup({"Key vaults should have soft delete enabled": "/defs/soft-delete"})
    assert lookup.resolve("Key vaults should have soft delete enabled") == "/defs/soft-delete"
    
    with pytest.raises(PolicyLookupError) as excinfo:
        lookup.resolve("Unknown policy")
    assert excinfo.value.context["display_name"] == "Unknown policy"

@patch("kvcompose.policy.lookup.DefaultAzureCredential")
def test_azure_lookup(mock_credential):
    """Test resolution against mocked built-in definitions."""
    with patch('azure.mgmt.resource.PolicyClient') as mock_client_class:
        mock_client = mock_client_class.return_value
        mock_client.policy_definitions.list_built_in.return_value = [
            _definition("Key vaults should have soft delete enabled", "/defs/soft-delete"),
            _definition(None, "/defs/unnamed"),
            _definition("Azure Key Vaults should use private link", "/defs/private-link")
        ]
        
        lookup = AzurePolicyDefinitionLookup("test-subscription")
        assert lookup.resolve("Azure Key Vaults should use private link") == "/defs/private-link"
        assert lookup.resolve("Key vaults should have soft delete enabled") == "/defs/soft-delete"
        
        # Definitions are listed once and cached
        mock_client_class.assert_called_once_with(mock_credential.return_value, "test-subscription")
        mock_client.policy_definitions.list_built_in.assert_called_once_with()

@patch("kvcompose.policy.lookup.DefaultAzureCredential")
def test_azure_lookup_unknown_name(mock_credential):
    with patch('azure.mgmt.resource.PolicyClient') as mock_client_class:
        mock_client_class.return_value.policy_definitions.list_built_in.return_value = []
        
        lookup = AzurePolicyDefinitionLookup("test-subscription")
        with pytest.raises(PolicyLookupError) as excinfo:
            lookup.resolve("Key vaults should have soft delete enabled")
        assert excinfo.value.context["subscription_id"] == "test-subscription"
