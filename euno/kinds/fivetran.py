"""Fivetran integration (pull)."""

from dataclasses import dataclass, field
from typing import Optional

from euno.kinds.base import IntegrationKind, TriggerStyle
from euno.mapping.fields import ConfigField, FieldType, MappingContract


@dataclass
class FivetranConfiguration:
    api_key: Optional[str] = field(default=None, repr=False)
    api_secret: Optional[str] = field(default=None, repr=False)
    base_url: Optional[str] = None


FIVETRAN_FIELDS = [
    ConfigField("api_key", FieldType.STRING, required=True, sensitive=True,
                description="Fivetran API key"),
    ConfigField("api_secret", FieldType.STRING, required=True, sensitive=True,
                description="Fivetran API secret"),
    ConfigField("base_url", FieldType.STRING,
                description="Fivetran API base URL (defaults to https://api.fivetran.com/v1)"),
]

FIVETRAN = IntegrationKind(
    integration_type="fivetran",
    trigger_style=TriggerStyle.PULL,
    configuration=MappingContract("fivetran.configuration", FivetranConfiguration, FIVETRAN_FIELDS),
    description="Euno Fivetran Integration resource",
)
