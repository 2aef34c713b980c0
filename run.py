# ==============================================================================
# run.py
# ------------------------------------------------------------------------------
# The main entry point to launch the Flask application.
# ==============================================================================

from app import create_app
from app.sheets import get_client, get_store

# Create the Flask application instance using the factory function
app = create_app()

@app.shell_context_processor
def make_shell_context():
    """Provides a shell context for the `flask shell` command."""
    return {
        'get_client': get_client,
        'get_store': get_store,
    }

if __name__ == '__main__':
    app.run(debug=True)
