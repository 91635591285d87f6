import logging
from pathlib import Path
from typing import Any, Optional

from omegaconf import DictConfig, OmegaConf

logger = logging.getLogger(__name__)

DEFAULT_HISTORY_LIMIT = 6

# --- Application-wide Constants ---

# The installed package directory; bundled configuration and prompts live under it.
PACKAGE_ROOT = Path(__file__).resolve().parent.parent
CONFIG_DIR = PACKAGE_ROOT / "config"
PROMPTS_DIR = PACKAGE_ROOT / "prompts"


def find_project_root(marker: str = "pyproject.toml", start: Optional[Path] = None) -> Path:
    """
    Finds the project root by searching upwards for a marker file.

    Args:
        marker: The name of the marker file to find (e.g., 'pyproject.toml').
        start: Where to begin the search. Defaults to this file's location.

    Returns:
        The Path object representing the project root directory.

    Raises:
        FileNotFoundError: If no directory on the way up contains the marker.
    """
    origin = (start or Path(__file__)).resolve()
    current_path = origin
    while current_path != current_path.parent:  # Stop at the filesystem root
        if (current_path / marker).exists():
            return current_path
        current_path = current_path.parent

    raise FileNotFoundError(
        f"Could not find the project root. "
        f"Searched for a '{marker}' file from '{origin}' upwards."
    )


def load_app_config(config_dir: Optional[Path] = None) -> DictConfig:
    """
    Loads all YAML configuration files from a directory into a single,
    namespaced OmegaConf DictConfig object.

    Each YAML file is loaded under a key corresponding to its filename stem.
    For example, `llms.yaml` will be accessible under the `llms` key in the
    returned config object.

    Environment variables are read with OmegaConf's built-in `${oc.env:VAR_NAME,default}`
    resolver.

    Args:
        config_dir: The configuration directory. Defaults to the one bundled
                    with the package.

    Returns:
        A single, merged OmegaConf DictConfig object containing all configurations.

    Raises:
        FileNotFoundError: If the configuration directory does not exist.
    """
    config_path = Path(config_dir) if config_dir is not None else CONFIG_DIR
    if not config_path.is_dir():
        raise FileNotFoundError(f"Configuration directory not found at '{config_path.resolve()}'")

    merged_config = OmegaConf.create()

    for p in sorted(config_path.glob("*.yaml")):
        key = p.stem  # 'llms.yaml' -> 'llms'
        try:
            conf = OmegaConf.load(p)
            merged_config[key] = conf
        except Exception as e:
            raise RuntimeError(f"Failed to load or parse configuration file '{p.name}': {e}") from e

    return merged_config


def resolve_history_limit(value: Any) -> int:
    """
    Returns a usable history limit.

    Missing, non-integer or non-positive values fall back to the default
    instead of failing.
    """
    limit = None
    if isinstance(value, bool):
        pass
    elif isinstance(value, int):
        limit = value
    elif isinstance(value, float) and value.is_integer():
        limit = int(value)
    elif isinstance(value, str) and value.strip().isdigit():
        limit = int(value.strip())

    if limit is None or limit <= 0:
        if value is not None:
            logger.warning(
                f"Invalid history limit {value!r}. Falling back to {DEFAULT_HISTORY_LIMIT}."
            )
        return DEFAULT_HISTORY_LIMIT
    return limit
