"""
Service configuration

Settings come from config/scan_config.yaml (built-in defaults when the file
is missing) and are overridden by environment variables. A .env file in the
working directory is honoured for local development.
"""

import copy
import os
from pathlib import Path
from typing import Dict, List, Optional

import yaml
from dotenv import load_dotenv
from loguru import logger


DEFAULT_CONFIG_PATH = Path(__file__).parent.parent / "config" / "scan_config.yaml"

_DEFAULTS: Dict = {
    'server': {
        'port': 4000,
        'allowed_origins': '*',
        'keep_uploads': False,
        'uploads_dir': None,
    },
    'ocr': {
        'endpoint': 'https://vision.googleapis.com/v1/images:annotate',
        'timeout_seconds': 8.0,
        'api_key': '',
    },
    'llm': {
        'model': 'gpt-4o-mini',
        'timeout_ms': 3000,
        'api_key': '',
    },
    'logging': {
        'level': 'INFO',
        'file': None,
    },
}

# env var -> (section, key, caster)
_ENV_OVERRIDES = {
    'PORT':                  ('server', 'port', int),
    'ALLOWED_ORIGINS':       ('server', 'allowed_origins', str),
    'KEEP_UPLOADS':          ('server', 'keep_uploads', lambda v: v.strip().lower() == 'true'),
    'UPLOADS_DIR':           ('server', 'uploads_dir', str),
    'GOOGLE_VISION_API_KEY': ('ocr', 'api_key', str),
    'OCR_TIMEOUT_SECONDS':   ('ocr', 'timeout_seconds', float),
    'OPENAI_API_KEY':        ('llm', 'api_key', str),
    'LLM_MODEL':             ('llm', 'model', str),
    'LLM_TIMEOUT_MS':        ('llm', 'timeout_ms', int),
    'LOG_LEVEL':             ('logging', 'level', str),
    'LOG_FILE':              ('logging', 'file', str),
}


def default_config() -> Dict:
    """Return a fresh copy of the built-in defaults"""
    return copy.deepcopy(_DEFAULTS)


def _merge(base: Dict, override: Dict) -> Dict:
    for key, value in (override or {}).items():
        if isinstance(value, dict) and isinstance(base.get(key), dict):
            _merge(base[key], value)
        else:
            base[key] = value
    return base


def load_config(config_path: Optional[str] = None, environ: Optional[Dict[str, str]] = None) -> Dict:
    """
    Load configuration from YAML, then apply environment overrides.

    Args:
        config_path: YAML path (default: config/scan_config.yaml)
        environ: Mapping to read overrides from (default: os.environ after .env)

    Returns:
        Nested configuration dict with the sections of the defaults
    """
    config = default_config()

    path = Path(config_path) if config_path else DEFAULT_CONFIG_PATH
    if path.exists():
        with open(path, 'r', encoding='utf-8') as f:
            _merge(config, yaml.safe_load(f) or {})
    else:
        logger.warning(f"Config file not found: {path}, using defaults")

    if environ is None:
        load_dotenv()
        environ = os.environ

    for env_name, (section, key, caster) in _ENV_OVERRIDES.items():
        raw = environ.get(env_name)
        if raw is None or raw == '':
            continue
        try:
            config[section][key] = caster(raw)
        except ValueError:
            logger.warning(f"Ignoring invalid {env_name}={raw!r}")

    if not config['server']['uploads_dir']:
        # Cloud Run (K_SERVICE) only allows writes under /tmp
        if environ.get('K_SERVICE'):
            config['server']['uploads_dir'] = '/tmp/uploads'
        else:
            config['server']['uploads_dir'] = str(Path(__file__).parent.parent / 'data' / 'uploads')

    return config


def allowed_origins(config: Dict) -> List[str]:
    """Split the comma-separated CORS origin list"""
    raw = config['server'].get('allowed_origins') or '*'
    return [origin.strip() for origin in str(raw).split(',') if origin.strip()]


def warn_missing_credentials(config: Dict):
    """Log which external providers are unusable"""
    if not config['llm'].get('api_key'):
        logger.warning("OPENAI_API_KEY missing, will use regex fallback for dates.")
    if not config['ocr'].get('api_key'):
        logger.warning("GOOGLE_VISION_API_KEY missing, Vision calls will fail.")
