"""
Shared helper functions and utilities.

This module contains common utility functions used across the project.
"""

import copy
import json
import logging
import os
from pathlib import Path


def setup_logging(level=logging.INFO):
    """Set up logging configuration.

    Args:
        level: Logging level (default: INFO)
    """
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )
    logger = logging.getLogger(__name__)
    logger.info("Logging initialized")


def rail(value, vmin, vmax):
    """Return value "railed" to fall within [vmin, vmax]."""
    return vmax if value > vmax else (vmin if value < vmin else value)


DEFAULT_CONFIG = {
    # Landmark detection
    'detector': {
        'k': 11,  # template side, forced odd and clamped to [9, 15]
        'thr_corr': 0.5,
        'thr_pix_rng': 45,
        'thr_pix_min': 80,
        'color_id_enabled': True,
    },

    # Printable target synthesis
    'synthesis': {
        'dpi': 72,
        'grid_inches': 3.0,
        'border_inches': 0.25,
        'x_repeat': 3,
        'y_repeat': 5,
        'checker_grid_inches': 0.5,
    },
}

REQUIRED_SECTIONS = ('detector', 'synthesis')


def get_config(config_path=None):
    """Load configuration from file or return defaults.

    Sections found in the file are merged over the matching default
    section, so a file only needs to name the values it changes.

    Args:
        config_path: Path to configuration file (optional)

    Returns:
        dict: Configuration dictionary
    """
    config = copy.deepcopy(DEFAULT_CONFIG)

    if config_path and os.path.exists(config_path):
        try:
            with open(config_path, 'r') as f:
                loaded_config = json.load(f)
            for key, value in loaded_config.items():
                if isinstance(value, dict) and isinstance(config.get(key), dict):
                    config[key].update(value)
                else:
                    config[key] = value
            logging.info(f"Configuration loaded from {config_path}")
        except (OSError, ValueError) as e:
            logging.warning(f"Failed to load config from {config_path}: {e}")
    elif config_path:
        logging.warning(f"Config file not found: {config_path}")

    return config


def save_config(config, config_path):
    """Save configuration to file.

    Args:
        config: Configuration dictionary
        config_path: Path to save configuration file

    Returns:
        bool: True if save successful, False otherwise
    """
    try:
        with open(config_path, 'w') as f:
            json.dump(config, f, indent=4)
        logging.info(f"Configuration saved to {config_path}")
        return True
    except (OSError, TypeError) as e:
        logging.error(f"Failed to save config to {config_path}: {e}")
        return False


def validate_config(config):
    """Validate configuration sections.

    Numeric values are not checked here; the detector and the image
    synthesizer clamp them into range themselves.

    Args:
        config: Configuration dictionary

    Returns:
        bool: True if valid, False otherwise
    """
    for key in REQUIRED_SECTIONS:
        if not isinstance(config.get(key), dict):
            logging.error(f"Missing required config section: {key}")
            return False

    logging.info("Configuration validated successfully")
    return True


def create_directory(path):
    """Create directory if it doesn't exist.

    Args:
        path: Directory path to create

    Returns:
        bool: True if created or exists, False on error
    """
    try:
        Path(path).mkdir(parents=True, exist_ok=True)
        return True
    except OSError as e:
        logging.error(f"Failed to create directory {path}: {e}")
        return False
