"""Flask application entry point."""
import logging
import os

from flask import Flask, current_app
from flask_cors import CORS
from flask_migrate import Migrate

from hivemind.config import config
from hivemind.models import db
from hivemind.game_data_loader import get_game_data_loader
from hivemind.save_system import SaveSystem
from hivemind.simulation import SimulationContext, wall_clock_ms
from hivemind.storage import DatabaseStore, MemoryStore

def create_app(config_name=None, clock=None):
    """Create and configure Flask application."""
    app = Flask(__name__)

    # Load configuration
    if config_name is None:
        config_name = os.environ.get('FLASK_ENV', 'development')
    app.config.from_object(config[config_name])

    logging.basicConfig(level=app.config['LOG_LEVEL'],
                        format='%(asctime)s %(levelname)s %(name)s: %(message)s')
    app.logger.setLevel(app.config['LOG_LEVEL'])

    # Initialize extensions
    db.init_app(app)
    CORS(app)
    Migrate(app, db)

    with app.app_context():
        db.create_all()

        # Initialize game data loader
        data_loader = get_game_data_loader()
        errors = data_loader.validate_data()
        if errors:
            app.logger.warning(f"Game data validation warnings: {errors}")

    app.extensions['hivemind'] = build_simulation(app, clock)

    # Register blueprints
    from hivemind.api import game_bp, saves_bp
    app.register_blueprint(game_bp, url_prefix='/api/game')
    app.register_blueprint(saves_bp, url_prefix='/api/saves')

    # Error handlers
    @app.errorhandler(404)
    def not_found(error):
        return {'error': 'Not found'}, 404

    @app.errorhandler(500)
    def internal_error(error):
        db.session.rollback()
        return {'error': 'Internal server error'}, 500

    return app

def build_simulation(app, clock=None):
    """Create the simulation context owned by this app."""
    capacity = app.config['SAVE_STORAGE_CAPACITY']
    if app.config['STORAGE_BACKEND'] == 'memory':
        store = MemoryStore(capacity)
    else:
        store = DatabaseStore(db, capacity)

    context = SimulationContext(SaveSystem(store, clock or wall_clock_ms), clock=clock)
    app.logger.info(f"Simulation context created with {app.config['STORAGE_BACKEND']} storage")
    return context

def get_simulation():
    """Simulation context for the current app, started up on first use."""
    context = current_app.extensions['hivemind']
    if not context.started_up:
        context.start_up()
    return context

if __name__ == '__main__':
    app = create_app()
    port = int(os.environ.get('PORT', 5001))
    app.run(debug=True, host='0.0.0.0', port=port)
