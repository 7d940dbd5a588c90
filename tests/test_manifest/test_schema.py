"""Tests for configuration validation rules."""
import pytest
from kvcompose.errors import ValidationError
from kvcompose.manifest.schema import ModuleConfiguration

def _config(base, **overrides):
    return {**base, **overrides}

@pytest.mark.parametrize("days", [7, 90])
def test_retention_bounds_accepted(base_config, days):
    config = ModuleConfiguration.load(_config(base_config, softDeleteRetentionDays=days))
    assert config.soft_delete_retention_days == days

@pytest.mark.parametrize("days", [6, 91])
def test_retention_out_of_bounds(base_config, days):
    with pytest.raises(ValidationError) as excinfo:
        ModuleConfiguration.load(_config(base_config, softDeleteRetentionDays=days))
    assert "softDeleteRetentionDays" in excinfo.value.context["errors"]

@pytest.mark.parametrize("field, value", [
    ("skuName", "basic"),
    ("bypass", "Everything"),
    ("defaultAction", "Block"),
    ("resourceLockLevel", "DoNotTouch"),
])
def test_enumerated_fields_rejected(base_config, field, value):
    with pytest.raises(ValidationError) as excinfo:
        ModuleConfiguration.load(_config(base_config, **{field: value}))
    assert field in excinfo.value.context["errors"]

def test_private_endpoint_requires_subnet(base_config):
    with pytest.raises(ValidationError) as excinfo:
        ModuleConfiguration.load(_config(base_config, enablePrivateEndpoint=True))
    assert "privateEndpointSubnetId" in str(excinfo.value)

def test_diagnostics_require_workspace(base_config):
    with pytest.raises(ValidationError):
        ModuleConfiguration.load(_config(base_config, enableDiagnosticSettings=True))

def test_policy_assignments_require_resource_group_id(base_config):
    with pytest.raises(ValidationError) as excinfo:
        ModuleConfiguration.load(_config(
            base_config,
            enablePolicyAssignments=True,
            logAnalyticsWorkspaceId="/subscriptions/x/workspaces/law"
        ))
    assert "resourceGroupId" in str(excinfo.value)

def test_rsa_key_requires_size(base_config):
    keys = {"signing": {"name": "signing", "keyType": "RSA", "keyOpts": ["sign"]}}
    with pytest.raises(ValidationError) as excinfo:
        ModuleConfiguration.load(_config(base_config, keys=keys))
    assert "keySize" in str(excinfo.value)

def test_ec_key_requires_curve(base_config):
    keys = {"signing": {"name": "signing", "keyType": "EC-HSM", "keyOpts": ["sign"]}}
    with pytest.raises(ValidationError) as excinfo:
        ModuleConfiguration.load(_config(base_config, keys=keys))
    assert "curve" in str(excinfo.value)

def test_certificate_san_defaults(base_config):
    certificates = {"web": {"name": "web", "x509Properties": {"subject": "CN=example.com"}}}
    config = ModuleConfiguration.load(_config(base_config, certificates=certificates))
    sans = config.certificates["web"].x509_properties.subject_alternative_names
    assert sans.dns_names == []
    assert sans.emails == []
    assert sans.upns == []
    assert config.certificates["web"].issuer.name == "Self"

def test_configuration_is_immutable(base_config):
    config = ModuleConfiguration.load(base_config)
    with pytest.raises(Exception):
        config.sku_name = "premium"

def test_tenant_id_required(base_config):
    config = {k: v for k, v in base_config.items() if k != "tenantId"}
    with pytest.raises(ValidationError) as excinfo:
        ModuleConfiguration.load(config)
    assert "tenantId" in excinfo.value.context["errors"]

def test_blank_tenant_id_rejected(base_config):
    with pytest.raises(ValidationError) as excinfo:
        ModuleConfiguration.load(_config(base_config, tenantId=""))
    assert "tenantId" in excinfo.value.context["errors"]

def test_derived_name_requires_location_short(base_config):
    config = {k: v for k, v in base_config.items() if k != "locationShort"}
    with pytest.raises(ValidationError) as excinfo:
        ModuleConfiguration.load(config)
    assert "locationShort" in str(excinfo.value)

@pytest.mark.parametrize("field", ["customName", "namePrefix"])
def test_location_short_optional_with_explicit_name(base_config, field):
    config = {k: v for k, v in base_config.items() if k != "locationShort"}
    loaded = ModuleConfiguration.load({**config, field: "kvpayments"})
    assert loaded.location_short is None
