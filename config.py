# ==============================================================================
# config.py
# ------------------------------------------------------------------------------
# Configuration settings for the Flask application.
# Uses environment variables for sensitive data to keep them out of version control.
# ==============================================================================

import os
from dotenv import load_dotenv

# Determine the absolute path of the project directory
basedir = os.path.abspath(os.path.dirname(__file__))

# Load environment variables from a .env file located in the project root
load_dotenv(os.path.join(basedir, '.env'))

class Config:
    """
    Base configuration class. Contains default settings that can be overridden
    by environment-specific configurations.
    """
    # --- Security ---
    # Session cookies and CSRF tokens are signed with this key.
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-should-really-set-a-secret-key-in-your-env-file'

    # Password for the parameters (admin) area
    ADMIN_PASSWORD = os.environ.get('ADMIN_PASSWORD') or 'change-this-default-password'

    # --- Google Sheets ---
    # PEX spreadsheet (DEVERIA, HISTORICO, CRITERIOS RANKING, METAS POR CLUSTER, UNI CONS)
    GOOGLE_SHEET_ID = os.environ.get('GOOGLE_SHEET_ID')

    # Service account JSON, base64-encoded so it fits in a single env variable
    GOOGLE_SERVICE_ACCOUNT_BASE64 = os.environ.get('GOOGLE_SERVICE_ACCOUNT_BASE64')

    # Sales (Vendas) spreadsheets
    SALES_SPREADSHEET_ID = os.environ.get('SALES_SPREADSHEET_ID')
    SALES_SHEET_NAME = os.environ.get('SALES_SHEET_NAME') or 'ADESOES'
    SALES_GOALS_SPREADSHEET_ID = os.environ.get('SALES_GOALS_SPREADSHEET_ID') or SALES_SPREADSHEET_ID
    SALES_GOALS_SHEET_NAME = os.environ.get('SALES_GOALS_SHEET_NAME') or 'metas'

    # Lead funnel spreadsheet (optional; without it leads and meetings count zero)
    FUNNEL_SPREADSHEET_ID = os.environ.get('FUNNEL_SPREADSHEET_ID')
    FUNNEL_SHEET_NAME = os.environ.get('FUNNEL_SHEET_NAME') or 'base'

    # --- Dashboard rules ---
    QUARTERS = ('1', '2', '3', '4')
    TABLE_PAGE_SIZE = int(os.environ.get('TABLE_PAGE_SIZE') or 10)

    # Internal goal is 85% of the official one
    INTERNAL_GOAL_MULTIPLIER = 0.85

    # Weights of the seven indicators must add up to this value in every quarter
    MAX_WEIGHT_TOTAL = 10
    MAX_WEIGHT_PER_INDICATOR = 5
