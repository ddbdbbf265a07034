"""vanish - reversible file deletion.

Files and directories are moved into a managed cache instead of being
destroyed, and can later be restored, purged after a retention window,
or cleared entirely.
"""

__version__ = "0.1.0"
