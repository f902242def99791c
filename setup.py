"""
Custom setup.py to exclude pygame-dependent files from the wheel.

viewer.py and controls.py require pygame, which headless installs
(snapshot rendering, batch runs) do not carry. They are only needed
for local interactive use: pip install physarum[viewer].
"""

from setuptools import setup
from setuptools.command.build_py import build_py as _build_py


# Modules that import pygame at import time
_EXCLUDE_MODULES = {"viewer", "controls"}


class BuildPy(_build_py):
    """build_py that leaves the pygame modules out of the wheel."""

    def find_package_modules(self, package, package_dir):
        modules = super().find_package_modules(package, package_dir)
        return [
            (pkg, mod, path)
            for (pkg, mod, path) in modules
            if mod not in _EXCLUDE_MODULES
        ]


setup(
    cmdclass={"build_py": BuildPy},
)
