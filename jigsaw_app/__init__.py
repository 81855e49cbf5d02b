from flask import Flask
import os

from jigsaw_app.main.puzzle_solver.solver.config import SolverConfig


def create_app(config: SolverConfig = None, output_dir: str = None):
    """Flask application factory."""
    app = Flask(__name__)

    app.config['SOLVER_CONFIG'] = config or SolverConfig()
    app.config['OUTPUT_FOLDER'] = output_dir or os.path.join(app.instance_path, 'output')

    # Create necessary directories
    os.makedirs(app.config['OUTPUT_FOLDER'], exist_ok=True)

    # Register blueprints
    from jigsaw_app.main import main_bp
    app.register_blueprint(main_bp)

    return app
