"""Exceptions raised by the Tradfri bridge."""


class TradfriError(Exception):
    """Base class for all bridge errors"""


class ConfigError(TradfriError):
    """Exception when configuration is missing or invalid"""


class DiscoveryError(TradfriError):
    """Exception when no hub can be found on the local network"""


class SessionError(TradfriError):
    """Exception when the secure session with the hub cannot be established"""


class RequestError(TradfriError):
    """Exception when a single request to the hub fails"""


class DecodeError(TradfriError):
    """Exception when a hub reply cannot be parsed"""
