"""
OpenPose command-line flags.

Flags are forwarded verbatim into the `pyopenpose` parameter dict; the
library itself converts and validates most of them.
"""

from __future__ import annotations

import logging
from typing import Sequence

logger = logging.getLogger(__name__)


class FlagError(ValueError):
    pass


def parse_openpose_flags(argv: Sequence[str]) -> dict[str, str]:
    """
    Turn `--key value` and bare `--switch` tokens into a dict.

    A switch not followed by a value becomes "1". The first occurrence of a
    key wins. Stray positional tokens are ignored.
    """
    flags: dict[str, str] = {}
    tokens = list(argv)
    i = 0
    while i < len(tokens):
        tok = tokens[i]
        if not tok.startswith("--") or tok == "--":
            i += 1
            continue

        key, sep, inline = tok[2:].partition("=")
        key = key.strip()
        if not key:
            i += 1
            continue

        if sep:
            value = inline
            i += 1
        elif i + 1 < len(tokens) and not tokens[i + 1].startswith("--"):
            value = tokens[i + 1]
            i += 2
        else:
            value = "1"
            i += 1

        if key not in flags:
            flags[key] = value
    return flags


def build_openpose_params(flags: dict[str, str], model_dir: str) -> dict[str, str]:
    params: dict[str, str] = {"model_folder": str(model_dir)}
    # Explicit flags override the node parameter.
    params.update(flags)

    if "logging_level" in params:
        try:
            level = int(params["logging_level"])
        except ValueError as e:
            raise FlagError(f"Wrong logging_level value: {params['logging_level']!r}") from e
        if not 0 <= level <= 255:
            raise FlagError("Wrong logging_level value.")

    if params.get("write_keypoint"):
        logger.info("Flag `write_keypoint` is deprecated and will eventually be removed. Please, use `write_json` instead.")

    return params
