"""Pydantic models for key vault module configuration."""
from typing import Any, Dict, FrozenSet, List, Literal, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic import ValidationError as PydanticValidationError

from ..errors import ValidationError

DEFAULT_DIAGNOSTIC_LOGS = frozenset({"AuditEvent", "AzurePolicyEvaluationDetails"})
DEFAULT_DIAGNOSTIC_METRICS = frozenset({"AllMetrics"})

RSA_KEY_TYPES = ("RSA", "RSA-HSM")
EC_KEY_TYPES = ("EC", "EC-HSM")


class ConfigModel(BaseModel):
    """Base for all configuration models: immutable, camelCase aliases."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)


class AccessPolicy(ConfigModel):
    """Legacy per-principal access policy."""
    tenant_id: Optional[str] = Field(default=None, alias="tenantId")
    object_id: str = Field(alias="objectId")
    key_permissions: List[str] = Field(default_factory=list, alias="keyPermissions")
    secret_permissions: List[str] = Field(default_factory=list, alias="secretPermissions")
    certificate_permissions: List[str] = Field(default_factory=list, alias="certificatePermissions")
    storage_permissions: List[str] = Field(default_factory=list, alias="storagePermissions")


class RoleAssignments(ConfigModel):
    """Principals per RBAC role class."""
    administrators: List[str] = Field(default_factory=list)
    secrets_officers: List[str] = Field(default_factory=list, alias="secretsOfficers")
    secrets_users: List[str] = Field(default_factory=list, alias="secretsUsers")
    crypto_officers: List[str] = Field(default_factory=list, alias="cryptoOfficers")
    crypto_users: List[str] = Field(default_factory=list, alias="cryptoUsers")
    certificates_officers: List[str] = Field(default_factory=list, alias="certificatesOfficers")


class AutomaticRotation(ConfigModel):
    time_after_creation: Optional[str] = Field(default=None, alias="timeAfterCreation")
    time_before_expiry: Optional[str] = Field(default=None, alias="timeBeforeExpiry")


class RotationPolicy(ConfigModel):
    """Key rotation policy (ISO 8601 durations)."""
    expire_after: Optional[str] = Field(default=None, alias="expireAfter")
    notify_before_expiry: Optional[str] = Field(default=None, alias="notifyBeforeExpiry")
    automatic: Optional[AutomaticRotation] = None


class KeyEntry(ConfigModel):
    """Cryptographic key definition."""
    name: str
    key_type: Literal["RSA", "RSA-HSM", "EC", "EC-HSM"] = Field(alias="keyType")
    key_size: Optional[int] = Field(default=None, alias="keySize")
    key_opts: List[str] = Field(default_factory=list, alias="keyOpts")
    curve: Optional[str] = None
    not_before_date: Optional[str] = Field(default=None, alias="notBeforeDate")
    expiration_date: Optional[str] = Field(default=None, alias="expirationDate")
    rotation_policy: Optional[RotationPolicy] = Field(default=None, alias="rotationPolicy")
    tags: Dict[str, str] = Field(default_factory=dict)

    @model_validator(mode="after")
    def check_key_shape(self) -> "KeyEntry":
        if self.key_type in RSA_KEY_TYPES and self.key_size is None:
            raise ValueError(f"key '{self.name}': keySize is required for {self.key_type} keys")
        if self.key_type in EC_KEY_TYPES and not self.curve:
            raise ValueError(f"key '{self.name}': curve is required for {self.key_type} keys")
        return self


class SecretEntry(ConfigModel):
    """Secret definition."""
    name: str
    value: str
    content_type: Optional[str] = Field(default=None, alias="contentType")
    not_before_date: Optional[str] = Field(default=None, alias="notBeforeDate")
    expiration_date: Optional[str] = Field(default=None, alias="expirationDate")
    tags: Dict[str, str] = Field(default_factory=dict)


class CertificateIssuer(ConfigModel):
    name: str = "Self"


class CertificateKeyProperties(ConfigModel):
    exportable: bool = True
    key_type: str = Field(default="RSA", alias="keyType")
    key_size: Optional[int] = Field(default=2048, alias="keySize")
    reuse_key: bool = Field(default=True, alias="reuseKey")
    curve: Optional[str] = None


class CertificateSecretProperties(ConfigModel):
    content_type: str = Field(default="application/x-pkcs12", alias="contentType")


class SubjectAlternativeNames(ConfigModel):
    dns_names: List[str] = Field(default_factory=list, alias="dnsNames")
    emails: List[str] = Field(default_factory=list)
    upns: List[str] = Field(default_factory=list)


class X509Properties(ConfigModel):
    subject: str
    validity_in_months: int = Field(default=12, alias="validityInMonths")
    key_usage: List[str] = Field(default_factory=list, alias="keyUsage")
    extended_key_usage: List[str] = Field(default_factory=list, alias="extendedKeyUsage")
    subject_alternative_names: SubjectAlternativeNames = Field(
        default_factory=SubjectAlternativeNames, alias="subjectAlternativeNames"
    )


class CertificateEntry(ConfigModel):
    """Certificate definition."""
    name: str
    issuer: CertificateIssuer = Field(default_factory=CertificateIssuer)
    key_properties: CertificateKeyProperties = Field(
        default_factory=CertificateKeyProperties, alias="keyProperties"
    )
    secret_properties: CertificateSecretProperties = Field(
        default_factory=CertificateSecretProperties, alias="secretProperties"
    )
    x509_properties: X509Properties = Field(alias="x509Properties")
    tags: Dict[str, str] = Field(default_factory=dict)


class Contact(ConfigModel):
    """Certificate contact."""
    email: str
    name: Optional[str] = None
    phone: Optional[str] = None


class ModuleConfiguration(ConfigModel):
    """Root configuration for one key vault composition."""
    # Identity
    name_prefix: Optional[str] = Field(default=None, alias="namePrefix")
    name_suffix: Optional[str] = Field(default=None, alias="nameSuffix")
    custom_name: Optional[str] = Field(default=None, alias="customName")
    location: str
    location_short: Optional[str] = Field(default=None, alias="locationShort")
    resource_group_name: str = Field(alias="resourceGroupName")
    tenant_id: str = Field(min_length=1, alias="tenantId")
    environment: str = "dev"
    project_name: str = Field(default="", alias="projectName")
    created_by: str = Field(default="", alias="createdBy")
    additional_tags: Dict[str, str] = Field(default_factory=dict, alias="additionalTags")

    # Vault policy
    sku_name: Literal["standard", "premium"] = Field(default="standard", alias="skuName")
    enabled_for_deployment: bool = Field(default=False, alias="enabledForDeployment")
    enabled_for_disk_encryption: bool = Field(default=False, alias="enabledForDiskEncryption")
    enabled_for_template_deployment: bool = Field(default=False, alias="enabledForTemplateDeployment")
    enable_rbac_authorization: bool = Field(default=True, alias="enableRbacAuthorization")
    purge_protection_enabled: bool = Field(default=True, alias="purgeProtectionEnabled")
    soft_delete_retention_days: int = Field(default=90, ge=7, le=90, alias="softDeleteRetentionDays")
    public_network_access_enabled: bool = Field(default=False, alias="publicNetworkAccessEnabled")

    # Network
    enable_network_acls: bool = Field(default=True, alias="enableNetworkAcls")
    bypass: Literal["None", "AzureServices"] = "AzureServices"
    default_action: Literal["Allow", "Deny"] = Field(default="Deny", alias="defaultAction")
    ip_rules: List[str] = Field(default_factory=list, alias="ipRules")
    subnet_ids: FrozenSet[str] = Field(default_factory=frozenset, alias="subnetIds")

    # Authorization
    access_policies: Dict[str, AccessPolicy] = Field(default_factory=dict, alias="accessPolicies")
    role_assignments: RoleAssignments = Field(default_factory=RoleAssignments, alias="roleAssignments")

    # Material
    keys: Dict[str, KeyEntry] = Field(default_factory=dict)
    secrets: Dict[str, SecretEntry] = Field(default_factory=dict)
    certificates: Dict[str, CertificateEntry] = Field(default_factory=dict)
    contacts: List[Contact] = Field(default_factory=list)

    # Private networking
    enable_private_endpoint: bool = Field(default=False, alias="enablePrivateEndpoint")
    private_endpoint_subnet_id: Optional[str] = Field(default=None, alias="privateEndpointSubnetId")
    private_dns_zone_ids: Optional[List[str]] = Field(default=None, alias="privateDnsZoneIds")

    # Observability
    enable_diagnostic_settings: bool = Field(default=False, alias="enableDiagnosticSettings")
    log_analytics_workspace_id: Optional[str] = Field(default=None, alias="logAnalyticsWorkspaceId")
    diagnostic_logs: FrozenSet[str] = Field(default=DEFAULT_DIAGNOSTIC_LOGS, alias="diagnosticLogs")
    diagnostic_metrics: FrozenSet[str] = Field(default=DEFAULT_DIAGNOSTIC_METRICS, alias="diagnosticMetrics")

    # Governance
    enable_resource_lock: bool = Field(default=False, alias="enableResourceLock")
    resource_lock_level: Literal["CanNotDelete", "ReadOnly"] = Field(
        default="CanNotDelete", alias="resourceLockLevel"
    )
    enable_policy_assignments: bool = Field(default=False, alias="enablePolicyAssignments")
    resource_group_id: Optional[str] = Field(default=None, alias="resourceGroupId")
    enable_custom_policies: bool = Field(default=False, alias="enableCustomPolicies")
    enable_policy_initiative: bool = Field(default=False, alias="enablePolicyInitiative")

    @model_validator(mode="after")
    def check_feature_requirements(self) -> "ModuleConfiguration":
        if not (self.custom_name or self.name_prefix or self.location_short):
            raise ValueError("locationShort is required when neither customName nor namePrefix is set")
        if self.enable_private_endpoint and not self.private_endpoint_subnet_id:
            raise ValueError("privateEndpointSubnetId is required when enablePrivateEndpoint is true")
        if self.enable_diagnostic_settings and not self.log_analytics_workspace_id:
            raise ValueError("logAnalyticsWorkspaceId is required when enableDiagnosticSettings is true")
        if (self.enable_policy_assignments or self.enable_policy_initiative) and not self.resource_group_id:
            raise ValueError("resourceGroupId is required for policy assignments")
        if (self.enable_policy_assignments or self.enable_policy_initiative) and not self.log_analytics_workspace_id:
            raise ValueError("logAnalyticsWorkspaceId is required by the diagnostic logging policy")
        return self

    @classmethod
    def load(cls, data: Mapping[str, Any]) -> "ModuleConfiguration":
        """Validate raw configuration data.

        Args:
            data: Mapping with camelCase or snake_case keys.

        Returns:
            ModuleConfiguration: Validated, immutable configuration.

        Raises:
            ValidationError: If any field violates its constraints.
        """
        try:
            return cls.model_validate(data)
        except PydanticValidationError as e:
            problems = []
            for err in e.errors():
                location = ".".join(str(part) for part in err["loc"])
                problems.append(f"{location}: {err['msg']}" if location else err["msg"])
            raise ValidationError(
                "Invalid module configuration",
                {"errors": "; ".join(problems)}
            ) from e
