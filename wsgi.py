"""
Production WSGI Entry Point
Used by gunicorn and other WSGI servers
"""
import os
from olpm import create_app

# Create Flask app
app = create_app()

# For development server
if __name__ == '__main__':
    # Development mode only
    # In production, use: gunicorn -w 4 wsgi:app
    port = int(os.getenv('PORT', 5000))

    app.run(
        host='0.0.0.0',
        port=port,
        debug=app.config.get('DEBUG', False),
    )
