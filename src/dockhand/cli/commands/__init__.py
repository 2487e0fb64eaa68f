#!/usr/bin/env python3
"""
CLI Commands Package for dockhand
"""

from .image import image_app, tag
from .run import run
from .shell import shell

__all__ = ["image_app", "run", "shell", "tag"]
