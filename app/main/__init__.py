# ==============================================================================
# app/main/__init__.py
# ------------------------------------------------------------------------------
# The blueprint of the HTML pages (PEX, Vendas and the admin area).
# ==============================================================================

from flask import Blueprint, session
from datetime import datetime

bp = Blueprint('main', __name__)

# 'now' feeds the footer timestamp; 'is_admin' toggles the logout button
@bp.app_context_processor
def inject_globals():
    return {'now': datetime.now(), 'is_admin': bool(session.get('admin_logged_in'))}

# Import routes, filters, and forms at the bottom
from app.main import routes, filters, forms
