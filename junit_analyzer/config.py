"""Configuration for the analyzer, the MCP server and the CLI."""

import logging
import os
from pathlib import Path

from .models import AnalysisOptions

logger = logging.getLogger(__name__)

DEFAULT_DISCOVERY_MAX_DEPTH = 3
DEFAULT_TRANSPORT = "stdio"
DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 8978

CONFIG_KEYS = [
    'SLOW_TEST_THRESHOLD_SEC', 'TOP_SLOW_TESTS', 'SLOW_SUITES_QUANTILE', 'MIN_KEEP_SUITES',
    'DISCOVERY_MAX_DEPTH', 'MCP_TRANSPORT', 'FASTMCP_HOST', 'FASTMCP_PORT', 'LOG_LEVEL',
]


def load_config() -> dict:
    """Load config from environment variables and .env file.

    Environment variables take precedence over .env file values.
    """
    paths = [
        os.environ.get('JUNIT_ANALYZER_CONFIG'),
        Path.cwd() / '.env',
        Path(__file__).parent.parent / '.env',
    ]
    config = {}
    for p in paths:
        if p and Path(p).exists():
            try:
                for line in Path(p).read_text().splitlines():
                    line = line.strip()
                    if line and not line.startswith('#') and '=' in line:
                        key, value = line.split('=', 1)
                        config[key.strip()] = value.strip()
                break
            except OSError as e:
                logger.warning(f"Failed to read config file {p}: {e}")

    for key in CONFIG_KEYS:
        env_value = os.environ.get(key)
        if env_value is not None:
            config[key] = env_value

    return config


def _get_number(config: dict, key: str, default, cast):
    value = config.get(key)
    if value is None:
        return default
    try:
        return cast(value)
    except ValueError:
        logger.warning(f"Invalid value for {key}: {value!r}, using default {default}")
        return default


def get_default_options() -> AnalysisOptions:
    """Analysis options from configuration, built-in defaults where unset or invalid."""
    config = load_config()
    defaults = AnalysisOptions()
    values = dict(
        slow_test_threshold_sec=_get_number(config, 'SLOW_TEST_THRESHOLD_SEC', defaults.slow_test_threshold_sec, float),
        top_slow_tests=_get_number(config, 'TOP_SLOW_TESTS', defaults.top_slow_tests, int),
        slow_suites_quantile=_get_number(config, 'SLOW_SUITES_QUANTILE', defaults.slow_suites_quantile, float),
        min_keep_suites=_get_number(config, 'MIN_KEEP_SUITES', defaults.min_keep_suites, int),
    )
    # Each key falls back to its default on its own
    for name, value in values.items():
        try:
            AnalysisOptions(**{name: value})
        except ValueError as e:
            logger.warning(f"Invalid analysis configuration ({e}), using default {getattr(defaults, name)}")
            values[name] = getattr(defaults, name)
    return AnalysisOptions(**values)


def get_discovery_max_depth() -> int:
    return _get_number(load_config(), 'DISCOVERY_MAX_DEPTH', DEFAULT_DISCOVERY_MAX_DEPTH, int)


def get_server_settings() -> dict:
    """Transport, host, port and log level for the MCP server."""
    config = load_config()
    return {
        "transport": config.get('MCP_TRANSPORT', DEFAULT_TRANSPORT).lower(),
        "host": config.get('FASTMCP_HOST', DEFAULT_HOST),
        "port": _get_number(config, 'FASTMCP_PORT', DEFAULT_PORT, int),
        "log_level": config.get('LOG_LEVEL', 'INFO').upper(),
    }
