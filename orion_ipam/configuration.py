"""Configuration options for Orion IPAM reservations."""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Optional, Union

from oslo_config import cfg
from oslo_log import log as logging

from .exceptions import OrionConfigurationError

PROJECT = "orion-ipam"

# Configuration group names
ORION_GROUP = "orion"
STATE_GROUP = "state"

# Environment fallbacks for unset [orion] options
ENV_SERVER = "SOLARWINDS_ORION_SERVER"
ENV_INSECURE = "SOLARWINDS_ORION_INSECURE"
ENV_USERNAME = "SOLARWINDS_ORION_USERNAME"
ENV_PASSWORD = "SOLARWINDS_ORION_PASSWORD"

_TRUE_STRINGS = ("1", "t", "true", "on", "y", "yes")
_FALSE_STRINGS = ("0", "f", "false", "off", "n", "no")


def _get_orion_opts():
    return [
        cfg.StrOpt(
            "server",
            default=None,
            help=(
                "Orion server host name or address. Falls back to the "
                "SOLARWINDS_ORION_SERVER environment variable."
            ),
        ),
        cfg.PortOpt(
            "port",
            default=17778,
            help="SWIS REST API port",
        ),
        cfg.BoolOpt(
            "insecure",
            default=None,
            help=(
                "Skip SSL certificate verification. Falls back to the "
                "SOLARWINDS_ORION_INSECURE environment variable, then False."
            ),
        ),
        cfg.StrOpt(
            "username",
            default=None,
            help="Orion account name. Falls back to SOLARWINDS_ORION_USERNAME.",
        ),
        cfg.StrOpt(
            "password",
            default=None,
            secret=True,
            help="Orion account password. Falls back to SOLARWINDS_ORION_PASSWORD.",
        ),
        cfg.IntOpt(
            "timeout",
            default=30,
            min=1,
            max=300,
            help="API request timeout in seconds",
        ),
    ]


def _get_state_opts():
    return [
        cfg.StrOpt(
            "state_dir",
            default=None,
            help=(
                "Directory holding reservation state. Overridden by the "
                "ORION_IPAM_STATE_DIR environment variable."
            ),
        ),
    ]


def register_opts(conf):
    """Register Orion IPAM configuration options.

    Args:
        conf: oslo_config.cfg.ConfigOpts instance
    """
    conf.register_opts(_get_orion_opts(), group=ORION_GROUP)
    conf.register_opts(_get_state_opts(), group=STATE_GROUP)


def list_opts():
    """Return a list of options for oslo-config-generator.

    Returns:
        List of (group_name, options) tuples
    """
    return [
        (ORION_GROUP, _get_orion_opts()),
        (STATE_GROUP, _get_state_opts()),
    ]


def load_conf(config_file: Optional[Union[str, Path]] = None) -> cfg.ConfigOpts:
    """Build and parse a ConfigOpts instance.

    Without ``config_file`` oslo.config searches its standard locations
    (e.g., /etc/orion-ipam/orion-ipam.conf); missing files there are not an
    error.

    Raises:
        OrionConfigurationError: The given config file is missing or unparsable
    """
    conf = cfg.ConfigOpts()
    register_opts(conf)
    logging.register_options(conf)

    default_config_files = [str(config_file)] if config_file else None
    try:
        conf(args=[], project=PROJECT, default_config_files=default_config_files)
    except (cfg.ConfigFilesNotFoundError, cfg.ConfigFileParseError) as e:
        raise OrionConfigurationError(details=str(e))
    return conf


def setup_logging(conf, debug: bool = False) -> None:
    """Configure oslo.log for one CLI invocation."""
    if debug:
        conf.set_override("debug", True)
    logging.setup(conf, PROJECT)


@dataclass(frozen=True)
class ConnectionSettings:
    """Resolved connection parameters for the SWIS client."""

    server: str
    username: str
    password: str = field(repr=False)
    port: int = 17778
    insecure: bool = False
    timeout: int = 30


def _parse_bool(raw: str) -> bool:
    value = raw.strip().lower()
    if value in _TRUE_STRINGS:
        return True
    if value in _FALSE_STRINGS:
        return False
    raise ValueError(f"unrecognized boolean value '{raw}'")


def get_connection_settings(conf, environ: Optional[Mapping[str, str]] = None) -> ConnectionSettings:
    """Resolve connection settings from config with environment fallback.

    Configured values win over the SOLARWINDS_ORION_* environment variables.

    Raises:
        OrionConfigurationError: Server, username or password missing, or
            the insecure flag cannot be parsed
    """
    env = os.environ if environ is None else environ
    group = conf[ORION_GROUP]
    errors = []

    server = group.server or env.get(ENV_SERVER, "")
    username = group.username or env.get(ENV_USERNAME, "")
    password = group.password or env.get(ENV_PASSWORD, "")

    insecure = group.insecure
    if insecure is None:
        raw = env.get(ENV_INSECURE, "")
        insecure = False
        if raw:
            try:
                insecure = _parse_bool(raw)
            except ValueError as e:
                errors.append(f"{ENV_INSECURE}: {e}")

    if not server:
        errors.append(f"no server address given (set [{ORION_GROUP}] server or {ENV_SERVER})")
    if not username:
        errors.append(f"no username given (set [{ORION_GROUP}] username or {ENV_USERNAME})")
    if not password:
        errors.append(f"no password given (set [{ORION_GROUP}] password or {ENV_PASSWORD})")

    if errors:
        raise OrionConfigurationError(details="; ".join(errors))

    return ConnectionSettings(
        server=server,
        username=username,
        password=password,
        port=group.port,
        insecure=insecure,
        timeout=group.timeout,
    )
