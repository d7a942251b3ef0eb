import os
from pathlib import Path
from typing import Optional

import yaml

DEFAULT_CONFIG: dict = {
    "model": "anthropic",
    "timeout_seconds": 10,
    "max_code_chars": 50000,
    "challenges": None,  # None = built-in catalog; set to a path string to override
    "store": "noop",  # noop | sqlite | gist
    "store_path": ".codekata.db",
    "gist_id": None,
}


def load_config(config_path: str = ".codekata.yml", cli_overrides: Optional[dict] = None) -> dict:
    """
    Load configuration by merging (in order of precedence):
      1. Built-in defaults
      2. .codekata.yml in the current directory
      3. CLI argument overrides
    """
    config = dict(DEFAULT_CONFIG)

    path = Path(config_path)
    if path.exists():
        with open(path) as f:
            file_config = yaml.safe_load(f) or {}
        if not isinstance(file_config, dict):
            raise ValueError(f"{config_path} must contain a YAML mapping.")
        config.update(file_config)

    if cli_overrides:
        for key, value in cli_overrides.items():
            if value is not None:
                config[key] = value

    # Resolve credentials from environment variables
    config["anthropic_api_key"] = os.environ.get("ANTHROPIC_API_KEY")
    config["openai_api_key"] = os.environ.get("OPENAI_API_KEY")
    config["github_token"] = os.environ.get("GITHUB_TOKEN")

    return config
