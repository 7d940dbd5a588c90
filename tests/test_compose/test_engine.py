"""Tests for the composition engine as a whole."""
import pytest
from datetime import date
from kvcompose.compose.engine import CompositionEngine
from kvcompose.errors import ValidationError
from kvcompose.graph.models import ResourceKind

WORKSPACE = "/subscriptions/sub/resourceGroups/rg-ops/providers/Microsoft.OperationalInsights/workspaces/law-ops"

@pytest.fixture
def full_config(base_config):
    """Configuration with every feature switched on."""
    return {
        **base_config,
        "additionalTags": {"CostCenter": "1234"},
        "ipRules": ["203.0.113.0/24"],
        "subnetIds": ["/subnets/app"],
        "accessPolicies": {"ignored": {"objectId": "ignored-oid", "secretPermissions": ["Get"]}},
        "roleAssignments": {
            "administrators": ["admin-1"],
            "secretsOfficers": ["deployer"],
            "cryptoUsers": ["storage-mi"]
        },
        "keys": {"cmk": {"name": "cmk", "keyType": "RSA-HSM", "keySize": 3072, "keyOpts": ["wrapKey"]}},
        "secrets": {"db": {"name": "db", "value": "v"}},
        "certificates": {"web": {"name": "web", "x509Properties": {"subject": "CN=web"}}},
        "contacts": [{"email": "secops@example.com"}],
        "enablePrivateEndpoint": True,
        "privateEndpointSubnetId": "/subnets/pe",
        "privateDnsZoneIds": ["/zones/vaultcore"],
        "enableDiagnosticSettings": True,
        "logAnalyticsWorkspaceId": WORKSPACE,
        "enableResourceLock": True,
        "enablePolicyAssignments": True,
        "resourceGroupId": "/subscriptions/sub/resourceGroups/rg-security-prod",
        "enableCustomPolicies": True,
        "enablePolicyInitiative": True
    }

def test_full_graph_is_consistent(full_config, engine):
    graph = engine.compose(full_config)
    
    # Every edge resolves and dependencies always come earlier in the order
    position = {key: index for index, key in enumerate(graph.order)}
    assert set(position) == set(graph.descriptors)
    for descriptor in graph:
        for dependency in descriptor.depends_on:
            assert dependency in graph
            assert position[dependency] < position[descriptor.logical_key]
    
    counts = {}
    for descriptor in graph:
        counts[descriptor.kind] = counts.get(descriptor.kind, 0) + 1
    assert counts == {
        ResourceKind.KEY_VAULT: 1,
        ResourceKind.ROLE_ASSIGNMENT: 3,
        ResourceKind.KEY: 1,
        ResourceKind.SECRET: 1,
        ResourceKind.CERTIFICATE: 1,
        ResourceKind.CERTIFICATE_CONTACTS: 1,
        ResourceKind.PRIVATE_ENDPOINT: 1,
        ResourceKind.DIAGNOSTIC_SETTING: 1,
        ResourceKind.MANAGEMENT_LOCK: 1,
        ResourceKind.POLICY_ASSIGNMENT: 7,
        ResourceKind.POLICY_DEFINITION: 3,
        ResourceKind.POLICY_SET_DEFINITION: 1
    }

def test_waves_have_no_internal_edges(full_config, engine):
    graph = engine.compose(full_config)
    for wave in graph.waves:
        members = set(wave)
        for key in wave:
            assert not (graph[key].depends_on & members)

def test_compose_is_idempotent(full_config, engine):
    assert engine.compose(full_config) == engine.compose(full_config)

def test_only_created_date_varies_across_days(full_config):
    first = CompositionEngine(today=date(2024, 5, 17)).compose(full_config)
    second = CompositionEngine(today=date(2024, 5, 18)).compose(full_config)
    assert first != second
    
    for key, descriptor in first.descriptors.items():
        other = second[key]
        assert descriptor.depends_on == other.depends_on
        attributes = dict(descriptor.attributes)
        other_attributes = dict(other.attributes)
        tags = attributes.pop("tags", None)
        other_tags = other_attributes.pop("tags", None)
        assert attributes == other_attributes
        if tags is not None:
            assert tags.pop("CreatedDate") == "2024-05-17"
            assert other_tags.pop("CreatedDate") == "2024-05-18"
            assert tags == other_tags

def test_base_tags_identical_across_resources(full_config, engine):
    graph = engine.compose(full_config)
    tagged = [d.attributes["tags"] for d in graph if "tags" in d.attributes]
    assert len(tagged) > 1
    for tags in tagged:
        assert tags["CostCenter"] == "1234"
        assert tags["CreatedDate"] == "2024-05-17"

def test_invalid_raw_configuration(base_config, engine):
    with pytest.raises(ValidationError):
        engine.compose({**base_config, "softDeleteRetentionDays": 6})

def test_missing_tenant_rejected_before_composition(engine):
    with pytest.raises(ValidationError) as excinfo:
        engine.compose({
            "location": "eastus",
            "resourceGroupName": "rg",
            "enableRbacAuthorization": False,
            "accessPolicies": {"app": {"objectId": "obj-1"}}
        })
    assert "tenantId" in excinfo.value.context["errors"]

def test_outputs(full_config, engine):
    graph = engine.compose(full_config)
    assert graph.outputs["key_vault_name"] == "kv-prod-eus01"
    assert str(graph.outputs["key_vault_uri"]) == "${azurerm_key_vault.main.vault_uri}"
    assert graph.outputs["authorization_mode"] == "rbac"

def test_debug_output(base_config, capsys):
    CompositionEngine(today=date(2024, 5, 17), debug=True).compose(base_config)
    captured = capsys.readouterr()
    assert "Composing key vault kv-prod-eus01" in captured.err
