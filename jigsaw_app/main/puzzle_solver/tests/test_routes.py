"""
Tests for the Flask API (jigsaw_app/main/routes.py).

Test Groups:
- W1-W8: /, /api/solve, /api/solve/diagram, /output/<filename>
"""

import json

import pytest

from jigsaw_app import create_app
from jigsaw_app.main.puzzle_solver.solver.config import SolverConfig


SCORES_2X2 = [[1, 7, 0.1], [2, 8, 0.11], [6, 12, 0.12], [10, 15, 0.13]]


@pytest.fixture
def client(tmp_path):
    app = create_app(output_dir=str(tmp_path / "output"))
    app.config['TESTING'] = True
    return app.test_client()


def test_W1_index(client):
    """W1: Index lists the endpoints"""
    response = client.get('/')

    assert response.status_code == 200
    assert 'POST /api/solve' in response.get_json()['endpoints']


def test_W2_solve_2x2(client):
    """W2: Score triples solve a 2x2 puzzle"""
    print("\nTest W2: /api/solve...", end=" ")

    response = client.post('/api/solve', json={'pieces': 4, 'scores': SCORES_2X2})

    assert response.status_code == 200
    data = response.get_json()
    assert data['success'] is True
    assert data['status'] == 'SOLVED'
    assert data['grid'] == [[0, 1], [2, 3]]
    assert data['unplaced_pieces'] == []
    assert len(data['joins']) == 3

    print("✓")


def test_W3_partial_with_config_override(client):
    """W3: Config overrides reach the solver (score cutoff -> partial)"""
    response = client.post('/api/solve', json={
        'pieces': 3,
        'scores': [[1, 7, 0.1], [5, 11, 5.0]],
        'config': {'max_score': 1.0},
    })

    data = response.get_json()
    assert response.status_code == 200
    assert data['success'] is False
    assert data['status'] == 'PARTIAL'
    assert data['unplaced_pieces'] == [2]


@pytest.mark.parametrize("payload", [
    {'scores': SCORES_2X2},
    {'pieces': 0, 'scores': []},
    {'pieces': 2},
    {'pieces': 2, 'scores': [[0, 99, 1.0]]},
    {'pieces': 2, 'scores': [], 'config': {'beam_width': 3}},
    {'pieces': 2, 'scores': [], 'config': {'max_workers': 0}},
    {'pieces': 2, 'scores': [], 'config': {'max_workers': '2'}},
    {'pieces': 2, 'scores': [], 'config': {'max_score': None}},
    {'pieces': 2, 'scores': [], 'config': {'apply_rotations': 'yes'}},
    {'pieces': 2, 'scores': 5},
    {'pieces': 2, 'scores': [[None, 1, 0.5]]},
    {'pieces': 2, 'score_matrix': 7},
])
def test_W4_bad_request(client, payload):
    """W4: Malformed payloads return 400 with an error message"""
    response = client.post('/api/solve', json=payload)

    assert response.status_code == 400
    assert 'error' in response.get_json()


def test_W5_named_solve_saves_images(client):
    """W5: "name" writes both PNGs, served under /output"""
    response = client.post('/api/solve', json={
        'pieces': 4, 'scores': SCORES_2X2, 'name': 'demo run',
    })

    images = response.get_json()['images']
    assert images == ['solution_assembled_demo_run.png', 'solution_grid_demo_run.png']

    served = client.get(f'/output/{images[1]}')
    assert served.status_code == 200
    assert served.data[:8] == b'\x89PNG\r\n\x1a\n'

    assert client.get('/output/missing.png').status_code == 404


def test_W6_diagram_png(client):
    """W6: Diagram endpoint returns a PNG"""
    response = client.post('/api/solve/diagram', json={'pieces': 4, 'scores': SCORES_2X2})

    assert response.status_code == 200
    assert response.mimetype == 'image/png'
    assert response.data[:4] == b'\x89PNG'


def test_W7_app_config_default(tmp_path):
    """W7: App-wide SolverConfig is the base for every request"""
    app = create_app(config=SolverConfig(max_score=0.05), output_dir=str(tmp_path))
    client = app.test_client()

    data = client.post('/api/solve', json={'pieces': 4, 'scores': SCORES_2X2}).get_json()

    assert data['success'] is False
    assert data['grid'] == [[0]]


def _reject_constant(name):
    raise ValueError(f"non-standard JSON constant {name}")


def test_W8_infinite_join_scores_are_null(client):
    """W8: Joins made through unscored (inf) pairs serialize as null, body is strict JSON"""
    print("\nTest W8: Strict JSON body...", end=" ")

    response = client.post('/api/solve', json={'pieces': 3, 'scores': [[1, 7, 0.1]]})

    assert response.status_code == 200
    data = json.loads(response.get_data(as_text=True), parse_constant=_reject_constant)
    assert data['success'] is True
    assert data['joins'][0] == {'edge_a': 1, 'edge_b': 7, 'score': 0.1}
    assert data['joins'][-1]['score'] is None

    print("✓")
