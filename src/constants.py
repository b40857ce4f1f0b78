"""Constants used in the project."""

from enum import Enum


class ExitCodes(Enum):
    """Exit codes for the program.

    Args:
        Enum (int): Exit codes for the program.
    """

    SUCCESS = 0
    FILE_ERROR = 1
    INSTALL_ERROR = 4
    INTERRUPTED = 130


class Tools(Enum):
    """Package manager invocations supported by the program.

    Args:
        Enum (string): Command prefix used to invoke the package manager.
    """

    NPM = "npm"
    NPX_PNPM = "npx pnpm"
    PNPM = "pnpm"
    NPX_BUN = "npx bun"
    BUN = "bun"


class Constants:  # pylint: disable=too-few-public-methods
    """General constants used in the project.
    Data holder for configuration constants; not intended to provide behavior.
    """

    REGISTRY_URL_NPM = "https://registry.npmjs.org/"
    PACKAGE_JSON_FILE = "package.json"
    CONFIG_FILE = "depupdate.yml"
    OVERRIDES_FILE = "depupdate.overrides.json"
    LOCK_FILES = ["package-lock.json", "pnpm-lock.yaml", "bun.lock"]
    NODE_MODULES_DIR = "node_modules"
    LOG_FORMAT = "[%(levelname)s] %(message)s"
    LOG_LEVEL_ENV = "DEPUPDATE_LOG_LEVEL"
    REQUEST_TIMEOUT = 30  # Timeout in seconds for all HTTP requests
    HTTP_RETRY_MAX = 3
    HTTP_RETRY_DELAY = 0.5  # Seconds, multiplied by the attempt number
    USER_AGENT = "depupdate/0.1.0"
    TOOL_QUERY_TIMEOUT = 60  # Timeout in seconds for `npm view` style queries

    DEFAULT_POLICY = "latest"
    LATEST_TAG = "latest"
    # Keys of the registry "time" object that are not versions
    SYNTHETIC_TIME_KEYS = ("created", "modified")
    ALIAS_PREFIX = "npm:"
    SCOPE_PREFIX = "@"
    MIN_NAME_WIDTH = 20
    SELECTOR_WINDOW = 3

    DEP_GROUPS = {
        "prod": "dependencies",
        "dev": "devDependencies",
        "optional": "optionalDependencies",
        "peer": "peerDependencies",
    }
    INSTALL_MODES = ["all", "prod", "none"]
    TOOL_CHOICES = ["auto"] + [t.value for t in Tools]
    CATALOG_SOURCES = ["tool", "registry"]
