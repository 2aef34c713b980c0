# ==============================================================================
# app/api/__init__.py
# ------------------------------------------------------------------------------
# The JSON API blueprint, mounted under /api.
# ==============================================================================

from flask import Blueprint

bp = Blueprint('api', __name__)

# Import routes at the bottom
from app.api import routes
