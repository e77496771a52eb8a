#!/usr/bin/env python3
"""
Utilities Module
================

Small helpers shared by the rest of the package:
- Hex number parsing for tool output fields
- Sidecar source-path recovery
- Logging configuration
"""

import logging
import os

logger = logging.getLogger(__name__)

SIDECAR_PATH_PREFIX = "pn: "


def parse_hex(text: str) -> int:
    """Parse an unsigned hex field, with or without a 0x prefix"""
    text = text.strip()
    if text.lower().startswith('0x'):
        text = text[2:]
    if not text or text.startswith(('-', '+')):
        raise ValueError(f"not a hex number: {text!r}")
    return int(text, 16)


def recover_source_path(object_path: str) -> str:
    """
    查找对象文件旁边的同名.txt文件，读取其中记录的原始源路径

    For X.o the sidecar is X.txt in the same directory; the first line that
    starts with "pn: " holds the path. Anything going wrong yields "".

    Args:
        object_path: Path of the input object file

    Returns:
        The recovered path, verbatim after the prefix, or "" if unavailable
    """
    root, ext = os.path.splitext(object_path)
    if ext != '.o':
        return ""
    sidecar = root + '.txt'
    try:
        with open(sidecar, 'r', encoding='utf-8', newline='') as f:
            content = f.read()
    except (IOError, OSError, UnicodeDecodeError) as e:
        logger.debug(f"No source path for {object_path}: {e}")
        return ""

    for line in content.split('\n'):
        if line.startswith(SIDECAR_PATH_PREFIX):
            return line[len(SIDECAR_PATH_PREFIX):]
    logger.debug(f"No '{SIDECAR_PATH_PREFIX}' line in {sidecar}")
    return ""


def setup_logging(debug: bool):
    """Setup logging configuration"""
    level = logging.DEBUG if debug else logging.INFO
    logging.basicConfig(
        level=level,
        format='%(levelname)s: %(message)s',
        force=True
    )
