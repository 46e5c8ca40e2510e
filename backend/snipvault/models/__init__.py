"""Aggregate model imports for Alembic auto-detection."""

# Code library
from snipvault.models.folder import Folder  # noqa: F401
from snipvault.models.category import Category  # noqa: F401
from snipvault.models.snippet import Snippet  # noqa: F401

# Media library
from snipvault.models.media import MediaCategory, MediaFile, MediaFolder  # noqa: F401

# Audit
from snipvault.models.activity_log import ActivityLog  # noqa: F401
