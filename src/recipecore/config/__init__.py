from .config import (
    Config,
    ContentFilterConfig,
    FallbackConfig,
    HtmlCleanupConfig,
    MonitoringConfig,
    SectionBasedConfig,
    StructuredDataConfig,
    find_config_file,
    load_config,
)

__all__ = [
    "Config",
    "ContentFilterConfig",
    "FallbackConfig",
    "HtmlCleanupConfig",
    "MonitoringConfig",
    "SectionBasedConfig",
    "StructuredDataConfig",
    "find_config_file",
    "load_config",
]
