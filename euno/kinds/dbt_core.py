"""dbt Core integration (push).

Runs are triggered by an external CI job through the server-issued
``trigger_url`` and ``trigger_secret``; this kind never has a schedule.
"""

from dataclasses import dataclass
from typing import Optional

from euno.kinds.base import IntegrationKind, TriggerStyle
from euno.mapping.fields import ConfigField, FieldType, MappingContract


@dataclass
class DbtCoreConfiguration:
    build_target: Optional[str] = None
    schemas_aliases: Optional[dict[str, str]] = None
    repository_url: Optional[str] = None
    stage_build_target: Optional[str] = None
    repository_branch: Optional[str] = None
    dbt_project_root_directory_in_repository: Optional[str] = None
    repository_revision: Optional[str] = None
    allow_resources_with_no_catalog_entry: Optional[bool] = None
    override_uri_prefix: Optional[str] = None


DBT_CORE_FIELDS = [
    ConfigField("build_target", FieldType.STRING, required=True,
                description="The dbt target to build"),
    ConfigField("schemas_aliases", FieldType.STRING_MAP,
                description="Schema aliases keyed and valued as db.schema; resources are ingested "
                            "to the aliased database and schema when the manifest's pair appears here"),
    ConfigField("repository_url", FieldType.STRING,
                description="The URL of the git repository where the dbt project is stored"),
    ConfigField("stage_build_target", FieldType.STRING,
                description="The stage dbt target to build"),
    ConfigField("repository_branch", FieldType.STRING,
                description="The branch of the git repository where the dbt project is stored"),
    ConfigField("dbt_project_root_directory_in_repository", FieldType.STRING,
                description="The subdirectory within the git repository where the dbt project is stored (defaults to '/')"),
    ConfigField("repository_revision", FieldType.STRING,
                description="The revision of the git repository where the dbt project is stored"),
    ConfigField("allow_resources_with_no_catalog_entry", FieldType.BOOL,
                description="Whether to ingest dbt resources with no catalog entry (defaults to false)"),
    ConfigField("override_uri_prefix", FieldType.STRING,
                description="Prefix overriding resource URIs. If not set, 'dbt'.<dbt project name> is used"),
]

DBT_CORE = IntegrationKind(
    integration_type="dbt_core",
    trigger_style=TriggerStyle.PUSH,
    configuration=MappingContract("dbt_core.configuration", DbtCoreConfiguration, DBT_CORE_FIELDS),
    description="Euno dbt Core Integration resource (push integration)",
)
