"""
Reading in the (optional) config file.

The config file is JSON and every element is optional; anything left out takes the value from DEFAULT_CONFIG:

{
  "cache_file": ".build_cache.json",
  "browser": "firefox",
  "host": "127.0.0.1",
  "port": 8080,
  "wsgi_app": "app:app",
  "python_marker": "requirements.txt",
  "node_folder": "nodejs_app",
  "server_process_pattern": "waitress",
  "editor_process_pattern": "vim",
  "terminal_window_title": "Terminal",
  "default_commit_message": "updated",
  "prompt_for_commit_message": true|false,
  "strict": true|false,
  "exit_runs_update": true|false,
  "verbose_output": true|false,
  "output_to_file": true|false,
  "output_file": "build_output.txt"
}
"""


import json
import os

from buildrules.tools import BuildError


DEFAULT_CONFIG_FILE = "build_config.json"

DEFAULT_CONFIG = {
    "cache_file": ".build_cache.json",
    "browser": "firefox",
    "host": "127.0.0.1",
    "port": 8080,
    "wsgi_app": "app:app",
    "python_marker": "requirements.txt",
    "node_folder": "nodejs_app",
    "server_process_pattern": "waitress",
    "editor_process_pattern": "vim",
    "terminal_window_title": "Terminal",
    "default_commit_message": "updated",
    "prompt_for_commit_message": False,
    "strict": False,
    "exit_runs_update": True,
    "verbose_output": False,
    "output_to_file": False,
    "output_file": "build_output.txt",
}


class ConfigError(BuildError):
    pass


def load_config(path=None):
    """
    Read in the config file and merge it over the defaults.
        Parameters:
            path (str): Config file to read.  When None, build_config.json in the current directory is used if it
                        exists, and the defaults alone otherwise.
        Returns:
            The settings dict.
    """
    settings = dict(DEFAULT_CONFIG)

    if path is None:
        if not os.path.exists(DEFAULT_CONFIG_FILE):
            return settings
        path = DEFAULT_CONFIG_FILE
    elif not os.path.exists(path):
        raise ConfigError(f"Config file {path} does not exist")

    try:
        with open(path) as config_file:
            config_data = json.load(config_file)
    except json.JSONDecodeError as error:
        raise ConfigError(f"Config file {path} is not valid JSON: {error}") from error

    if not isinstance(config_data, dict):
        raise ConfigError(f"Config file {path} must contain a JSON object")
    unknown = sorted(set(config_data) - set(DEFAULT_CONFIG))
    if unknown:
        raise ConfigError(f"Unknown config key(s) in {path}: {', '.join(unknown)}")

    settings.update(config_data)
    return settings
