import os
import logging

from flask import Blueprint, jsonify, request, abort, current_app
from werkzeug.utils import secure_filename

from backend.core_graph_managers.graphErrors import NetworkBuildError
from backend.services.network_graph_service import NetworkGraphService
from backend.services.network_analysis_service import NetworkAnalysisService
from backend.Utils.file_utils import allowed_file, ALLOWED_EXTENSIONS

logger = logging.getLogger(__name__)

# Create API blueprint
network_api = Blueprint('network_api', __name__, url_prefix='/api/networks')
network_service = NetworkGraphService()
analysis_service = NetworkAnalysisService()

CENTRALITY_MEASURES = {
    'degree': lambda graph, weighted: analysis_service.degree(graph),
    'betweenness': lambda graph, weighted: analysis_service.betweenness(graph, use_weights=weighted),
    'closeness': lambda graph, weighted: analysis_service.closeness(graph, use_weights=weighted),
    'pagerank': lambda graph, weighted: analysis_service.pagerank(graph, use_weights=weighted),
}


def parse_flag(value, default=False):
    """Read a boolean from JSON or form data ('true', '1', 'yes', 'on')."""
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in {'true', '1', 'yes', 'on'}


def _created(graph_id):
    return jsonify({
        "success": True,
        "graph_id": graph_id,
        "summary": network_service.get_summary(graph_id)
    }), 201


@network_api.errorhandler(NetworkBuildError)
def handle_build_error(e):
    return jsonify({
        "success": False,
        "error_type": e.kind,
        "error": str(e)
    }), 400


@network_api.route('/', methods=['GET'])
def list_networks():
    """API endpoint to list every registered network"""
    return jsonify({
        "success": True,
        "graphs": network_service.get_all_graphs()
    })


@network_api.route('/edge-pairs', methods=['POST'])
def build_edge_pairs():
    payload = request.get_json(silent=True) or {}
    if 'tokens' not in payload:
        return jsonify({"success": False, "error": "Missing 'tokens'."}), 400

    graph_id = network_service.build_from_edge_pairs(payload['tokens'],
                                                     directed=parse_flag(payload.get('directed')))
    return _created(graph_id)


@network_api.route('/matrix', methods=['POST'])
def build_matrix():
    payload = request.get_json(silent=True) or {}
    if 'matrix' not in payload:
        return jsonify({"success": False, "error": "Missing 'matrix'."}), 400

    try:
        graph_id = network_service.build_from_matrix(payload['matrix'],
                                                     labels=payload.get('labels'),
                                                     mode=payload.get('mode', 'undirected'),
                                                     weighted=parse_flag(payload.get('weighted')))
    except NetworkBuildError:
        raise
    except ValueError as e:
        return jsonify({"success": False, "error": str(e)}), 400
    return _created(graph_id)


@network_api.route('/tables', methods=['POST'])
def build_tables():
    payload = request.get_json(silent=True) or {}
    if 'nodes' not in payload or 'edges' not in payload:
        return jsonify({"success": False, "error": "Both 'nodes' and 'edges' tables are required."}), 400

    graph_id = network_service.build_from_tables(payload['nodes'], payload['edges'],
                                                 directed=parse_flag(payload.get('directed')),
                                                 weight_column=payload.get('weight_column') or None)
    return _created(graph_id)


@network_api.route('/upload', methods=['POST'])
def upload_tables():
    # Check if both files are present in request
    if 'nodes_file' not in request.files or 'edges_file' not in request.files:
        return jsonify({"success": False, "error": "Both nodes_file and edges_file are required."}), 400

    nodes_file = request.files['nodes_file']
    edges_file = request.files['edges_file']

    # Check file types
    if not (allowed_file(nodes_file.filename) and allowed_file(edges_file.filename)):
        return jsonify({
            "success": False,
            "error": f"Supported file types are: {', '.join(sorted(ALLOWED_EXTENSIONS))}"
        }), 400

    upload_folder = current_app.config['UPLOAD_FOLDER']
    os.makedirs(upload_folder, exist_ok=True)

    nodes_path = os.path.join(upload_folder, secure_filename(nodes_file.filename))
    edges_path = os.path.join(upload_folder, secure_filename(edges_file.filename))
    nodes_file.save(nodes_path)
    edges_file.save(edges_path)
    logger.info("Saved uploaded tables %s and %s", nodes_path, edges_path)

    graph_id = network_service.build_from_csv(nodes_path, edges_path,
                                              directed=parse_flag(request.form.get('directed')),
                                              weight_column=request.form.get('weight_column') or None)
    return _created(graph_id)


@network_api.route('/compare', methods=['GET'])
def compare_networks():
    first_id, second_id = request.args.get('a'), request.args.get('b')
    result = network_service.compare(first_id, second_id)
    if result is None:
        abort(404)
    return jsonify({"success": True, "edges_equal": result})


@network_api.route('/<graph_id>', methods=['GET'])
def get_network(graph_id):
    """API endpoint to get graph data as JSON"""
    graph_data = network_service.get_graph_data(graph_id)
    if not graph_data:
        abort(404)
    return jsonify(graph_data)


@network_api.route('/<graph_id>', methods=['DELETE'])
def delete_network(graph_id):
    if not network_service.remove_graph(graph_id):
        abort(404)
    return jsonify({"success": True})


@network_api.route('/<graph_id>/stats', methods=['GET'])
def network_stats(graph_id):
    stats = network_service.get_summary(graph_id)
    if stats is None:
        abort(404)
    return jsonify({"success": True, "stats": stats})


@network_api.route('/<graph_id>/simplify', methods=['POST'])
def simplify_network(graph_id):
    removed = network_service.simplify(graph_id)
    if removed is None:
        abort(404)
    return jsonify({
        "success": True,
        "removed_edges": removed,
        "summary": network_service.get_summary(graph_id)
    })


@network_api.route('/<graph_id>/centrality/<measure>', methods=['GET'])
def network_centrality(graph_id, measure):
    graph = network_service.get_graph(graph_id)
    if graph is None or measure not in CENTRALITY_MEASURES:
        abort(404)

    scores = CENTRALITY_MEASURES[measure](graph, parse_flag(request.args.get('weighted')))
    return jsonify({"success": True, "measure": measure, "scores": scores})


@network_api.route('/<graph_id>/path', methods=['GET'])
def network_path(graph_id):
    graph = network_service.get_graph(graph_id)
    if graph is None:
        abort(404)

    source, target = request.args.get('from'), request.args.get('to')
    if not source or not target:
        return jsonify({"success": False, "error": "Both 'from' and 'to' are required."}), 400

    path = analysis_service.shortest_path(graph, source, target,
                                          use_weights=parse_flag(request.args.get('weighted')))
    return jsonify({"success": True, "path": path})
