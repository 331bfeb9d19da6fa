# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Custom exceptions for the configuration system.

These live apart from the schemas so that callers can catch
config-specific failures without importing pydantic. Layer-level configuration errors (see lamina.layer.exceptions) subclass
ConfigError too, so a network builder can reject a bad configuration with a
single except clause.
"""


class ConfigError(Exception):
    """Base for all configuration errors."""
