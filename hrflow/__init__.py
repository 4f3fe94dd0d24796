"""HRFlow: attendance tracking with geofenced check-in."""
import logging
import os

from flask import Flask

from hrflow.config import Config

logger = logging.getLogger(__name__)


def configure_logging(app):
    handlers = [logging.StreamHandler()]  # Output to terminal
    if app.config.get('HRFLOW_LOG_FILE'):
        handlers.append(logging.FileHandler(app.config['HRFLOW_LOG_FILE']))  # Save to file

    logging.basicConfig(
        level=app.config.get('HRFLOW_LOG_LEVEL', 'INFO'),
        format='%(asctime)s - %(levelname)s - %(message)s',
        handlers=handlers
    )


def create_app(config_object=Config):
    app = Flask(__name__, instance_relative_config=True)
    app.config.from_object(config_object)

    configure_logging(app)

    if not app.config.get('TESTING'):
        os.makedirs(app.instance_path, exist_ok=True)

    from hrflow.api import register_blueprints
    from hrflow.auth import login_manager
    from hrflow.cli import register_commands
    from hrflow.errors import register_error_handlers
    from hrflow.models import db

    db.init_app(app)
    login_manager.init_app(app)
    register_error_handlers(app, db)
    register_blueprints(app)
    register_commands(app)

    logger.debug(f"HRFlow app created with {config_object.__name__}")
    return app
