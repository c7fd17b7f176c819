"""
Adapter Deploy: change-driven build and publish for adapter packages

Detects which adapter packages changed in the latest commit, builds each one
with its JavaScript package manager, uploads the build output to an
S3-compatible object store and notifies the adapter registry of new versions.
"""

__version__ = "1.0.0"
__author__ = "Adapter Deploy Team"
__description__ = "Change-driven build and publish for adapter packages"
