"""
Annotator configuration.

Read once when the controller is created; ``read_only``, ``widgets`` and
``disable_editor`` can be changed later through controller properties.
"""

import os
from typing import Dict, Optional

from easydict import EasyDict as edict

from ...utils.env import load_cfg_from_env

DEFAULTS = {
    "read_only": False,
    "widgets": [],
    "disable_editor": False,
    "allow_empty": False,
    "editor_auto_position": True,
    "relation_vocabulary": None,
}

BOOLEAN_KEYS = ("read_only", "disable_editor", "allow_empty", "editor_auto_position")

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off", ""}


def to_bool(value) -> bool:
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in _TRUE:
            return True
        if lowered in _FALSE:
            return False
        raise ValueError(f"Not a boolean value: {value!r}")
    return bool(value)


def make_config(env: Optional[Dict[str, str]] = None, **overrides) -> edict:
    """
    Build an annotator configuration.

    Args:
        env: Environment to read ``TEXTANNOTATOR_*`` entries from,
            ``os.environ`` when omitted
        **overrides: Explicit entries, applied last

    Returns:
        Configuration as an EasyDict
    """
    cfg = edict(DEFAULTS)
    load_cfg_from_env(cfg, os.environ if env is None else env)
    for key, value in overrides.items():
        cfg[key] = value

    for key in BOOLEAN_KEYS:
        cfg[key] = to_bool(cfg[key])
    if cfg.widgets is None:
        cfg.widgets = []
    return cfg
