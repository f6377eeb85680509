#!/usr/bin/env python3
"""
Minimal setup.py for optional compilation of the coresp codec.
All project metadata is defined in pyproject.toml (PEP-621).
This file only handles mypyc compilation.
"""

from __future__ import annotations

import os


def get_ext_modules():
    """Get extension modules for the build."""
    if os.environ.get("USE_MYPYC", "false").lower() != "true":
        return []

    try:
        from mypyc.build import mypycify

        mypyc_extensions = mypycify(
            [
                "coresp/constants.py",
                "coresp/_packer.py",
                "coresp/_unpacker.py",
            ],
            debug_level="0",
            strip_asserts=True,
        )
    except ImportError:
        print("Warning: mypyc not available, skipping mypyc compilation")
        return []
    except Exception as e:
        print(f"Warning: mypyc compilation failed: {e}")
        return []

    # Remove -Werror from extra_compile_args to avoid build failures
    for ext in mypyc_extensions:
        if hasattr(ext, "extra_compile_args") and "-Werror" in ext.extra_compile_args:
            ext.extra_compile_args.remove("-Werror")
        # Fix the _needs_stub attribute issue
        if not hasattr(ext, "_needs_stub"):
            ext._needs_stub = False

    return mypyc_extensions


# All other metadata comes from pyproject.toml

if __name__ == "__main__":
    from setuptools import setup

    setup(
        ext_modules=get_ext_modules(),
    )
