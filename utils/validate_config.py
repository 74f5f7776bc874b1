import json
import logging
import os

import yaml
from jsonschema import validate

logger = logging.getLogger(__name__)

DEFAULT_SCHEMA_PATH = os.path.join(os.path.dirname(os.path.abspath(__file__)), 'schemas', 'engine.schema.json')


def load_schema(schema_path=DEFAULT_SCHEMA_PATH):
    if not os.path.exists(schema_path):
        raise FileNotFoundError(f"Schema file not found at: {schema_path}")
    with open(schema_path, 'r') as f:
        return json.load(f)


def validate_config(config, schema_path=DEFAULT_SCHEMA_PATH):
    """
    Validates an already loaded configuration dictionary against the JSON schema.

    Raises:
        jsonschema.ValidationError: If the configuration is invalid.
    """
    validate(instance=config, schema=load_schema(schema_path))
    return config


def load_and_validate_config(config_path, schema_path=DEFAULT_SCHEMA_PATH):
    """
    Loads a YAML configuration file and validates it against a JSON schema.

    Args:
        config_path (str): The path to the YAML config file.
        schema_path (str): The path to the JSON schema file.

    Returns:
        dict: The validated configuration dictionary.

    Raises:
        jsonschema.ValidationError: If the configuration is invalid.
        FileNotFoundError: If the config or schema file cannot be found.
    """
    if not os.path.exists(config_path):
        raise FileNotFoundError(f"Configuration file not found at: {config_path}")
    with open(config_path, 'r') as f:
        config = yaml.safe_load(f) or {}

    try:
        validate_config(config, schema_path)
    except Exception as e:
        logger.error(f"Configuration validation failed for {config_path}: {e}")
        raise
    logger.info(f"Configuration {config_path} is valid.")
    return config
