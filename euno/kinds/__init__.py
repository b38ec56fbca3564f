"""Supported integration kinds."""
from euno.kinds.base import IntegrationKind, TriggerStyle
from euno.kinds.dbt_core import DBT_CORE, DbtCoreConfiguration
from euno.kinds.fivetran import FIVETRAN, FivetranConfiguration
from euno.kinds.hex import HEX, HexConfiguration
from euno.kinds.snowflake import SNOWFLAKE, SnowflakeConfiguration

ALL_KINDS: tuple[IntegrationKind, ...] = (FIVETRAN, SNOWFLAKE, HEX, DBT_CORE)

__all__ = [
    "ALL_KINDS",
    "IntegrationKind",
    "TriggerStyle",
    "DBT_CORE",
    "DbtCoreConfiguration",
    "FIVETRAN",
    "FivetranConfiguration",
    "HEX",
    "HexConfiguration",
    "SNOWFLAKE",
    "SnowflakeConfiguration",
]
