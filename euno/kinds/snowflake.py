"""Snowflake integration (pull)."""

from dataclasses import dataclass, field
from typing import Optional

from euno.kinds.base import IntegrationKind, TriggerStyle
from euno.mapping.fields import ConfigField, FieldType, MappingContract


@dataclass
class SnowflakeConfiguration:
    host: Optional[str] = None
    user: Optional[str] = None
    password: Optional[str] = field(default=None, repr=False)
    private_key: Optional[str] = field(default=None, repr=False)
    role: Optional[str] = None
    warehouse: Optional[str] = None
    database: Optional[str] = None
    table_to_use_for_query_history: Optional[str] = None
    additional_where_clause_for_query_history_query: Optional[str] = None
    override_platform_uri: Optional[str] = None
    override_base_uri: Optional[str] = None
    extract_views: Optional[bool] = None
    extract_tables: Optional[bool] = None
    extract_tableau_usage: Optional[bool] = None
    extract_daily_usage: Optional[bool] = None
    extract_daily_dml_summary: Optional[bool] = None
    extract_materialized_views_refresh_history: Optional[bool] = None
    extract_hex_usage: Optional[bool] = None
    extract_hex_lineage: Optional[bool] = None
    extract_hex_lineage_lookback_days: Optional[int] = None
    cost_per_credit: Optional[float] = None
    storage_cost_per_tb: Optional[float] = None
    observe_warehouses: Optional[bool] = None
    use_snowflake_database: Optional[bool] = None
    extract_lineage_from_query_history: Optional[bool] = None
    lineage_lookback_days: Optional[int] = None
    observe_inbound_shares: Optional[bool] = None


S, B, I, F = FieldType.STRING, FieldType.BOOL, FieldType.INT, FieldType.FLOAT

SNOWFLAKE_FIELDS = [
    ConfigField("host", S, required=True, description="Snowflake host"),
    ConfigField("user", S, required=True, description="Snowflake user"),
    ConfigField("password", S, sensitive=True,
                description="Snowflake password (deprecated, use private_key instead)"),
    ConfigField("private_key", S, sensitive=True,
                description="Snowflake private key for key-pair authentication"),
    ConfigField("role", S, description="Snowflake role"),
    ConfigField("warehouse", S, description="Snowflake warehouse"),
    ConfigField("database", S, description="Snowflake database"),
    ConfigField("table_to_use_for_query_history", S,
                description="Table to use for query history (defaults to snowflake.account_usage.query_history)"),
    ConfigField("additional_where_clause_for_query_history_query", S,
                description="Additional WHERE clause to add to the query history query"),
    ConfigField("override_platform_uri", S,
                description="String to use for the URI. If not provided, the host will be used"),
    ConfigField("override_base_uri", S,
                description="String to use for the base URI. If not provided, the host will be used"),
    ConfigField("extract_views", B, description="Extract views (defaults to true)"),
    ConfigField("extract_tables", B, description="Extract tables (defaults to true)"),
    ConfigField("extract_tableau_usage", B, description="Extract Tableau usage (defaults to true)"),
    ConfigField("extract_daily_usage", B, description="Extract daily usage (defaults to true)"),
    ConfigField("extract_daily_dml_summary", B, description="Extract daily DML summary (defaults to true)"),
    ConfigField("extract_materialized_views_refresh_history", B,
                description="Extract materialized views refresh history (defaults to false)"),
    ConfigField("extract_hex_usage", B, description="Extract Hex usage (defaults to false)"),
    ConfigField("extract_hex_lineage", B, description="Extract Hex lineage (defaults to false)"),
    ConfigField("extract_hex_lineage_lookback_days", I,
                description="Number of days to look back for Hex lineage (defaults to 7)"),
    ConfigField("cost_per_credit", F, description="Cost per credit in dollars (defaults to 3.0)"),
    ConfigField("storage_cost_per_tb", F, description="Storage cost per TB in dollars (defaults to 23)"),
    ConfigField("observe_warehouses", B,
                description="Whether to observe warehouse information (defaults to false)"),
    ConfigField("use_snowflake_database", B,
                description="Use Snowflake system database to poll views (defaults to false)"),
    ConfigField("extract_lineage_from_query_history", B,
                description="Extract lineage from query history (defaults to true)"),
    ConfigField("lineage_lookback_days", I,
                description="Number of days to look back for lineage (defaults to 7)"),
    ConfigField("observe_inbound_shares", B,
                description="Observe Inbound Snowflake Shares (defaults to true)"),
]

SNOWFLAKE = IntegrationKind(
    integration_type="snowflake",
    trigger_style=TriggerStyle.PULL,
    configuration=MappingContract("snowflake.configuration", SnowflakeConfiguration, SNOWFLAKE_FIELDS),
    description="Euno Snowflake Integration resource",
)
