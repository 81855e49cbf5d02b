from dataclasses import asdict
import io
import os

import cv2
from flask import current_app, jsonify, request, send_file, send_from_directory
from werkzeug.utils import secure_filename

from jigsaw_app.main import main_bp
from jigsaw_app.main.puzzle_solver.solver.config import SolverConfig
from jigsaw_app.main.puzzle_solver.solver.solver import PuzzleAssembler
from jigsaw_app.main.puzzle_solver.solver.solver_visualizer import SolutionVisualizer
from jigsaw_app.main.puzzle_solver.solver.utils.conversion import (
    pieces_from_payload,
    scorer_from_payload,
    solution_to_dict,
)


def _solver_config(payload):
    """App default SolverConfig with the payload's "config" overrides applied."""
    overrides = payload.get('config') or {}
    if not isinstance(overrides, dict):
        raise ValueError("config must be an object")
    values = asdict(current_app.config['SOLVER_CONFIG'])
    values.update(overrides)
    return SolverConfig.from_dict(values)


def _solve_from_request():
    """Parse the JSON body and run the solver. Raises ValueError on bad input."""
    payload = request.get_json(silent=True)
    if not isinstance(payload, dict):
        raise ValueError('Expected a JSON object body')
    if 'pieces' not in payload:
        raise ValueError("Payload needs 'pieces'")

    pieces = pieces_from_payload(payload['pieces'])
    scorer = scorer_from_payload(payload, n_edges=4 * len(pieces))
    assembler = PuzzleAssembler(pieces, scorer, _solver_config(payload))
    assembler.solve()
    return payload, assembler


@main_bp.route('/')
def index():
    return jsonify({
        'service': 'jigsaw grid assembler',
        'endpoints': {
            'POST /api/solve': 'Solve from piece list + edge scores, returns grid JSON',
            'POST /api/solve/diagram': 'Same body, returns the layout diagram as PNG',
            'GET /output/<filename>': 'Images saved by /api/solve when "name" is given',
        }
    })


@main_bp.route('/api/solve', methods=['POST'])
def solve():
    """Solve a puzzle from precomputed edge scores."""
    try:
        payload, assembler = _solve_from_request()
    except (ValueError, TypeError) as e:
        return jsonify({'error': str(e)}), 400

    try:
        result = solution_to_dict(assembler.solution, assembler.success)

        name = payload.get('name')
        if name:
            visualizer = SolutionVisualizer(output_dir=current_app.config['OUTPUT_FOLDER'])
            result['images'] = assembler.save_image(secure_filename(str(name)), visualizer)

        current_app.logger.info("Solved %d pieces: %s", len(assembler.pieces), assembler.status.value)
        return jsonify(result)

    except Exception as e:
        current_app.logger.exception("Solve failed")
        return jsonify({'error': str(e)}), 500


@main_bp.route('/api/solve/diagram', methods=['POST'])
def solve_diagram():
    """Solve and return the layout diagram PNG."""
    try:
        _, assembler = _solve_from_request()
    except (ValueError, TypeError) as e:
        return jsonify({'error': str(e)}), 400

    img = SolutionVisualizer().render_grid_diagram(assembler.solution)
    ok, buffer = cv2.imencode('.png', img)
    if not ok:
        return jsonify({'error': 'Failed to encode diagram'}), 500

    return send_file(io.BytesIO(buffer.tobytes()), mimetype='image/png')


@main_bp.route('/output/<filename>')
def output_file(filename):
    folder = current_app.config['OUTPUT_FOLDER']
    if not os.path.exists(os.path.join(folder, secure_filename(filename))):
        return jsonify({'error': 'File not found'}), 404
    return send_from_directory(folder, secure_filename(filename))
