# ==============================================================================
# app/__init__.py
# ------------------------------------------------------------------------------
# Application factory for creating and configuring the Flask app instance.
# ==============================================================================

import logging
from flask import Flask
from config import Config


def create_app(config_class=Config):
    """
    Application factory function. Creates and configures the Flask application.

    Args:
        config_class (class): The configuration class to use.

    Returns:
        Flask: The configured Flask application instance.
    """
    app = Flask(__name__)
    app.config.from_object(config_class)

    # Configure logging
    logging.basicConfig(level=logging.INFO,
                        format='%(asctime)s [%(levelname)s] %(name)s: %(message)s')

    if not app.config.get('GOOGLE_SHEET_ID') or not app.config.get('GOOGLE_SERVICE_ACCOUNT_BASE64'):
        app.logger.warning('GOOGLE_SHEET_ID or GOOGLE_SERVICE_ACCOUNT_BASE64 is not set; '
                           'pages will show a configuration error until they are.')

    # Register blueprints with the application
    from app.main import bp as main_bp
    app.register_blueprint(main_bp)

    from app.api import bp as api_bp
    app.register_blueprint(api_bp, url_prefix='/api')

    @app.cli.command("check-sheets")
    def check_sheets():
        """Reads every configured range once and logs how many rows came back."""
        from app.sheets import get_store, sales_rows, sales_goal_rows, funnel_rows
        from app.sheets.errors import SheetsError

        store = get_store()
        readers = [
            ('DEVERIA', store.results_rows),
            ('HISTORICO', store.history_rows),
            ('CRITERIOS RANKING', store.weight_rows),
            ('METAS POR CLUSTER', store.goal_rows),
            ('UNI CONS', store.unit_rows),
            ('ADESOES', sales_rows),
            ('metas', sales_goal_rows),
            ('funil', funnel_rows),
        ]
        failures = 0
        for name, read in readers:
            try:
                app.logger.info(f"{name}: {len(read())} rows")
            except SheetsError as e:
                failures += 1
                app.logger.error(f"{name}: {e.message}")
        if failures:
            raise SystemExit(1)

    app.logger.info('PEX & Vendas dashboards startup complete')

    return app
