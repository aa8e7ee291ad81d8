"""Handles loading configuration from YAML files."""

import copy
import yaml
import os
import logging
from typing import Optional
from .exceptions import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = "config.yaml"

DEFAULT_CONFIG = {
    'ffmpeg_path': None,
    'temp_dir': None,
    'log_dir': 'logs',
    'log_file': 'vobsrt.log',
    'max_line_length': 42,
    'min_text_length': 2,
    'default_duration_ms': 3000,
    'ocr': {
        'language': 'eng',
        'min_confidence': 0.5,
        'max_threads': 4,
        'batch_size': 100,
        'tesseract_cmd': None,
    },
}

def _merge(base: dict, overrides: dict) -> dict:
    merged = copy.deepcopy(base)
    for key, value in overrides.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged

class ConfigLoader:
    """Loads configuration settings from a YAML file."""

    def load_config(self, config_path: Optional[str] = None) -> dict:
        """
        Loads configuration and merges it over DEFAULT_CONFIG.

        Args:
            config_path: The path to the YAML configuration file. If None,
                         config.yaml in the working directory is used when it
                         exists, otherwise the defaults are returned.

        Returns:
            A dictionary containing the loaded configuration settings.

        Raises:
            FileNotFoundError: If an explicitly given configuration file does not exist.
            ConfigurationError: If the file cannot be parsed as YAML, has an
                              invalid value, or cannot be read.
        """
        if config_path is None:
            if not os.path.exists(DEFAULT_CONFIG_PATH):
                logger.info("No configuration file given; using built-in defaults")
                return copy.deepcopy(DEFAULT_CONFIG)
            config_path = DEFAULT_CONFIG_PATH

        logger.info(f"Attempting to load configuration from: {config_path}")
        if not os.path.exists(config_path):
            logger.error(f"Configuration file not found at path: {config_path}")
            raise FileNotFoundError(f"Configuration file not found: {config_path}")
        if not os.path.isfile(config_path):
            logger.error(f"Configuration path is not a file: {config_path}")
            raise ConfigurationError(f"Configuration path is not a file: {config_path}")

        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                loaded = yaml.safe_load(f)
        except yaml.YAMLError as e:
            logger.error(f"Error parsing YAML configuration file {config_path}: {e}", exc_info=True)
            raise ConfigurationError(f"Invalid YAML format in {config_path}: {e}") from e
        except IOError as e:
            logger.error(f"Error reading configuration file {config_path}: {e}", exc_info=True)
            raise ConfigurationError(f"Could not read configuration file {config_path}: {e}") from e

        if loaded is None:
            loaded = {}
        if not isinstance(loaded, dict):
            logger.error(f"Configuration file {config_path} did not load as a dictionary (root object).")
            raise ConfigurationError(f"Invalid YAML structure in {config_path}. Root must be a mapping (dictionary).")
        if 'ocr' in loaded and not isinstance(loaded['ocr'], dict):
            raise ConfigurationError(f"'ocr' in {config_path} must be a mapping")

        config = _merge(DEFAULT_CONFIG, loaded)
        self.validate(config)
        logger.info(f"Configuration loaded successfully from {config_path}")
        return config

    def validate(self, config: dict) -> None:
        """
        Raises:
            ConfigurationError: If a numeric setting is out of range.
        """
        positive_ints = [
            ('max_line_length', config.get('max_line_length')),
            ('min_text_length', config.get('min_text_length')),
            ('default_duration_ms', config.get('default_duration_ms')),
            ('ocr.max_threads', config['ocr'].get('max_threads')),
            ('ocr.batch_size', config['ocr'].get('batch_size')),
        ]
        for name, value in positive_ints:
            if isinstance(value, bool) or not isinstance(value, int) or value < 1:
                raise ConfigurationError(f"'{name}' must be a positive integer, got {value!r}")

        confidence = config['ocr'].get('min_confidence')
        if isinstance(confidence, bool) or not isinstance(confidence, (int, float)) or not 0.0 <= confidence <= 1.0:
            raise ConfigurationError(f"'ocr.min_confidence' must be between 0.0 and 1.0, got {confidence!r}")
