"""Hex integration (pull)."""

from dataclasses import dataclass, field
from typing import Optional

from euno.kinds.base import IntegrationKind, TriggerStyle
from euno.mapping.fields import ConfigField, FieldType, MappingContract


@dataclass
class HexConfiguration:
    api_token: Optional[str] = field(default=None, repr=False)
    base_url: Optional[str] = None
    workspace_id: Optional[str] = None
    workspace_name: Optional[str] = None


HEX_FIELDS = [
    ConfigField("api_token", FieldType.STRING, required=True, sensitive=True,
                description="Hex API token"),
    ConfigField("base_url", FieldType.STRING,
                description="Hex API base URL (defaults to https://app.hex.tech/api/v1)"),
    ConfigField("workspace_id", FieldType.STRING, required=True,
                description="Hex workspace ID. Used to create links to projects in the workspace and generate URIs"),
    ConfigField("workspace_name", FieldType.STRING,
                description="Hex workspace name (defaults to hex_workspace)"),
]

HEX = IntegrationKind(
    integration_type="hex",
    trigger_style=TriggerStyle.PULL,
    configuration=MappingContract("hex.configuration", HexConfiguration, HEX_FIELDS),
    description="Euno Hex Integration resource",
)
