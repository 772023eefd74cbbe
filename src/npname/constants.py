"""Constants used in the project."""

from enum import Enum


class ExitCodes(Enum):
    """Exit codes for the program.

    Args:
        Enum (int): Exit codes for the program.
    """

    SUCCESS = 0
    UNAVAILABLE = 1
    ERROR = 2


class AuthType(Enum):
    """Authorization schemes understood by npm registries.

    Args:
        Enum (string): Scheme name as sent in the authorization header.
    """

    BEARER = "Bearer"
    BASIC = "Basic"


class Constants:  # pylint: disable=too-few-public-methods
    """General constants used in the project.
    Data holder for configuration constants; not intended to provide behavior.
    """

    DEFAULT_REGISTRY = "https://registry.npmjs.org/"
    NPM_ORGANIZATION_URL = "https://www.npmjs.com/org/"
    DEFAULT_TIMEOUT_MS = 10_000
    DEFAULT_CONCURRENCY = 4
    MAX_NAME_LENGTH = 214
    NPMRC_FILE = ".npmrc"

    ENV_REGISTRY = "npm_config_registry"
    ENV_REGISTRY_UPPER = "NPM_CONFIG_REGISTRY"
    ENV_ASCII = "NPNAME_ASCII"
    ENV_LOG_LEVEL = "NPNAME_LOG_LEVEL"

    LOG_FORMAT = "[%(levelname)s] %(message)s"
    LOG_FILE_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"
    USER_AGENT = "npname/1.0"
