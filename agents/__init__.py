from .value_prop import VALUE_PROP_SCHEMA, build_value_prop_prompt
from .campaign_assets import ASSET_OPTIONS, asset_key, build_campaign_prompt

__all__ = [
    "VALUE_PROP_SCHEMA",
    "build_value_prop_prompt",
    "ASSET_OPTIONS",
    "asset_key",
    "build_campaign_prompt",
]
