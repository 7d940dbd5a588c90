"""Key, secret, certificate and certificate-contact builders."""
from typing import Dict, List, Optional

from .base import VAULT_KEY, CompositionContext, ResourceBuilder, compact
from ...graph.models import ResourceDescriptor, ResourceKind
from ...manifest.schema import CertificateEntry, KeyEntry, RotationPolicy

class KeyBuilder(ResourceBuilder):
    """Builds one descriptor per configured key."""

    def build(self, context: CompositionContext) -> List[ResourceDescriptor]:
        return [
            ResourceDescriptor(
                logical_key=ResourceKind.KEY.address("keys", key),
                kind=ResourceKind.KEY,
                attributes=self._attributes(entry, context),
                depends_on=frozenset({VAULT_KEY})
            )
            for key, entry in context.config.keys.items()
        ]

    def _attributes(self, entry: KeyEntry, context: CompositionContext) -> Dict:
        attributes = compact({
            "name": entry.name,
            "key_vault_id": context.vault_ref,
            "key_type": entry.key_type,
            "key_size": entry.key_size,
            "key_opts": list(entry.key_opts),
            "curve": entry.curve,
            "not_before_date": entry.not_before_date,
            "expiration_date": entry.expiration_date,
            "tags": context.tags.resolve(entry.tags)
        })
        rotation_policy = self._rotation_policy(entry.rotation_policy)
        if rotation_policy is not None:
            attributes["rotation_policy"] = rotation_policy
        return attributes

    def _rotation_policy(self, policy: Optional[RotationPolicy]) -> Optional[Dict]:
        if policy is None:
            return None
        block = compact({
            "expire_after": policy.expire_after,
            "notify_before_expiry": policy.notify_before_expiry
        })
        if policy.automatic is not None:
            block["automatic"] = compact({
                "time_after_creation": policy.automatic.time_after_creation,
                "time_before_expiry": policy.automatic.time_before_expiry
            })
        return block

class SecretBuilder(ResourceBuilder):
    """Builds one descriptor per configured secret."""

    def build(self, context: CompositionContext) -> List[ResourceDescriptor]:
        depends_on = frozenset({VAULT_KEY}) | context.authorization.material_dependencies()
        descriptors = []
        for key, entry in context.config.secrets.items():
            descriptors.append(
                ResourceDescriptor(
                    logical_key=ResourceKind.SECRET.address("secrets", key),
                    kind=ResourceKind.SECRET,
                    attributes=compact({
                        "name": entry.name,
                        "value": entry.value,
                        "key_vault_id": context.vault_ref,
                        "content_type": entry.content_type,
                        "not_before_date": entry.not_before_date,
                        "expiration_date": entry.expiration_date,
                        "tags": context.tags.resolve(entry.tags)
                    }),
                    depends_on=depends_on
                )
            )
        return descriptors

class CertificateBuilder(ResourceBuilder):
    """Builds one descriptor per configured certificate."""

    def build(self, context: CompositionContext) -> List[ResourceDescriptor]:
        depends_on = frozenset({VAULT_KEY}) | context.authorization.material_dependencies()
        return [
            ResourceDescriptor(
                logical_key=ResourceKind.CERTIFICATE.address("certificates", key),
                kind=ResourceKind.CERTIFICATE,
                attributes={
                    "name": entry.name,
                    "key_vault_id": context.vault_ref,
                    "certificate_policy": self._certificate_policy(entry),
                    "tags": context.tags.resolve(entry.tags)
                },
                depends_on=depends_on
            )
            for key, entry in context.config.certificates.items()
        ]

    def _certificate_policy(self, entry: CertificateEntry) -> Dict:
        """Build the policy with its four mandatory blocks."""
        key_props = entry.key_properties
        x509 = entry.x509_properties
        sans = x509.subject_alternative_names
        return {
            "issuer_parameters": {
                "name": entry.issuer.name
            },
            "key_properties": compact({
                "exportable": key_props.exportable,
                "key_type": key_props.key_type,
                "key_size": key_props.key_size,
                "reuse_key": key_props.reuse_key,
                "curve": key_props.curve
            }),
            "secret_properties": {
                "content_type": entry.secret_properties.content_type
            },
            "x509_certificate_properties": {
                "subject": x509.subject,
                "validity_in_months": x509.validity_in_months,
                "key_usage": list(x509.key_usage),
                "extended_key_usage": list(x509.extended_key_usage),
                "subject_alternative_names": {
                    "dns_names": list(sans.dns_names),
                    "emails": list(sans.emails),
                    "upns": list(sans.upns)
                }
            }
        }

class CertificateContactsBuilder(ResourceBuilder):
    """Builds the certificate contacts descriptor when contacts are configured."""

    def build(self, context: CompositionContext) -> List[ResourceDescriptor]:
        contacts = context.config.contacts
        if not contacts:
            return []
        return [
            ResourceDescriptor(
                logical_key=ResourceKind.CERTIFICATE_CONTACTS.address("main"),
                kind=ResourceKind.CERTIFICATE_CONTACTS,
                attributes={
                    "key_vault_id": context.vault_ref,
                    "contact": [
                        compact({"email": c.email, "name": c.name, "phone": c.phone})
                        for c in contacts
                    ]
                },
                depends_on=frozenset({VAULT_KEY}) | context.authorization.material_dependencies()
            )
        ]
