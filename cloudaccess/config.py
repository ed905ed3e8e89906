"""
Connection settings from config files and the environment.

A config file is a JSON (or YAML, if PyYAML is installed) mapping from
section names to connection parameters:

    {
        "default": {
            "url": "https://cloud.example.com/remote.php/webdav/",
            "username": "alice"
        },
        "work": {"inherits": "default", "username": "alice.work"}
    }
"""
import json
import logging
import os
from dataclasses import fields
from typing import Any
from typing import Dict
from typing import Optional

from cloudaccess.webdav.credential import WebDAVCredential

log = logging.getLogger("cloudaccess")

## Config file spellings of WebDAVCredential fields
_CONFIG_ALIASES = {
    "url": "base_url",
    "webdav_url": "base_url",
    "user": "username",
    "webdav_username": "username",
    "webdav_password": "password",
}


def config_section(config: Dict[str, Any], section: str = "default") -> Dict[str, Any]:
    if section in config and "inherits" in config[section]:
        ret = config_section(config, config[section]["inherits"])
    else:
        ret = {}
    if section in config:
        ret.update(config[section])
    ret.pop("inherits", None)
    return ret


def read_config(fn: Optional[str]) -> Dict[str, Any]:
    """
    Load a config file.  Without a file name the usual locations are
    tried in turn.  A missing or broken file yields an empty dict.
    """
    if not fn:
        cfgdir = f"{os.environ.get('HOME', '/')}/.config/"
        for config_file in (
            f"{cfgdir}/cloudaccess/cloudaccess.conf",
            f"{cfgdir}/cloudaccess/cloudaccess.yaml",
            f"{cfgdir}/cloudaccess/cloudaccess.json",
            "/etc/cloudaccess/cloudaccess.conf",
        ):
            cfg = read_config(config_file)
            if cfg:
                return cfg
        return {}

    try:
        try:
            with open(fn, "rb") as config_file:
                return json.load(config_file)
        except json.decoder.JSONDecodeError:
            ## Late import, yaml is an optional dependency
            try:
                import yaml

                try:
                    with open(fn, "rb") as config_file:
                        return yaml.load(config_file, yaml.SafeLoader) or {}
                except yaml.YAMLError:
                    log.error(
                        f"config file {fn} exists but is neither valid json nor yaml.  Check the syntax."
                    )
            except ImportError:
                log.error(
                    f"config file {fn} exists but is not valid json, and pyyaml is not installed."
                )

    except FileNotFoundError:
        log.info(f"no config file found at {fn}")
    except ValueError:
        log.error("error in config file.  It will be ignored", exc_info=True)
    return {}


def _normalize_section(section: Dict[str, Any]) -> Dict[str, Any]:
    ret = {}
    for key, value in section.items():
        ret[_CONFIG_ALIASES.get(key, key)] = value
    return ret


def get_connection_params(
    check_config_file: bool = True,
    config_file: Optional[str] = None,
    config_section_name: str = "default",
    environment: bool = True,
    **explicit: Any,
) -> Optional[Dict[str, Any]]:
    """
    Merge connection parameters from their sources.  Earlier sources win:

    1. Explicit keyword arguments (None values are ignored)
    2. Environment variables CLOUDACCESS_WEBDAV_URL,
       CLOUDACCESS_WEBDAV_USERNAME and CLOUDACCESS_WEBDAV_PASSWORD
    3. The config file section (CLOUDACCESS_CONFIG_FILE or the default
       locations)

    Returns:
        Keyword arguments for WebDAVCredential, or None if no URL was found
    """
    params: Dict[str, Any] = {}

    if check_config_file:
        if environment and not config_file:
            config_file = os.environ.get("CLOUDACCESS_CONFIG_FILE")
        cfg = read_config(config_file)
        if cfg:
            params.update(_normalize_section(config_section(cfg, config_section_name)))

    if environment:
        for key, env_var in (
            ("base_url", "CLOUDACCESS_WEBDAV_URL"),
            ("username", "CLOUDACCESS_WEBDAV_USERNAME"),
            ("password", "CLOUDACCESS_WEBDAV_PASSWORD"),
        ):
            if os.environ.get(env_var):
                params[key] = os.environ[env_var]

    params.update(
        {key: value for key, value in _normalize_section(explicit).items() if value is not None}
    )

    if not params.get("base_url"):
        return None
    return params


def get_webdav_credential(
    url: Optional[str] = None,
    username: Optional[str] = None,
    password: Optional[str] = None,
    **kwargs: Any,
) -> Optional[WebDAVCredential]:
    """
    Build a WebDAVCredential from explicit arguments, the environment and
    the config file, see get_connection_params().

    Returns:
        The credential, or None if no URL is configured anywhere
    """
    params = get_connection_params(url=url, username=username, password=password, **kwargs)
    if params is None:
        return None
    known = {f.name for f in fields(WebDAVCredential)}
    ignored = sorted(set(params) - known)
    if ignored:
        log.debug(f"ignoring config keys not used for WebDAV: {ignored}")
    return WebDAVCredential(**{k: v for k, v in params.items() if k in known})
