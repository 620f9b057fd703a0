import json
import os
from typing import Any, Dict


def save_results_to_file(results: Dict[str, Any], filename: str) -> str:
    """
    Save a query and its answer to a file.

    Args:
        results: Dictionary of results
        filename: Name of the file to save to

    Returns:
        Path to the saved file
    """
    os.makedirs("output", exist_ok=True)

    file_path = os.path.join("output", filename)

    with open(file_path, "w") as f:
        json.dump(results, f, indent=2)

    return file_path


def load_server_config(config_path: str) -> Dict[str, Dict[str, Any]]:
    """
    Load server configuration from a JSON file.

    Args:
        config_path: Path to the configuration file

    Returns:
        Dictionary of server configurations
    """
    with open(config_path, "r") as f:
        config = json.load(f)

    for server_name, server_config in config.items():
        if not isinstance(server_config, dict) or "url" not in server_config:
            raise ValueError(f"Server '{server_name}' needs a 'url' entry")

    return config


def create_default_config(config_path: str) -> Dict[str, Dict[str, Any]]:
    """
    Create a default configuration file if none exists.

    Args:
        config_path: Path to create the configuration file

    Returns:
        Default configuration dictionary
    """
    default_config = {
        "crypto": {
            "transport": "http",
            "url": os.environ.get("MCP_SERVER_URL", "http://localhost:4000"),
        }
    }

    config_dir = os.path.dirname(config_path)
    if config_dir:
        os.makedirs(config_dir, exist_ok=True)

    with open(config_path, "w") as f:
        json.dump(default_config, f, indent=2)

    return default_config
