# app/app.py - application factory for the network construction API
import logging

from flask import Flask, jsonify


def create_app(config_name='development'):
    # Initialize Flask app
    app = Flask(__name__)

    # Load configuration
    from app.config import config_by_name, log_level
    config_class = config_by_name[config_name]
    app.config['JSON_AS_ASCII'] = False
    app.config.from_object(config_class)

    logging.basicConfig(
        level=log_level(config_class),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    # Register blueprints
    from app.api.network_api import network_api, network_service
    network_service.matrix_size_warning = app.config['MATRIX_SIZE_WARNING']
    app.register_blueprint(network_api)

    # Setup error handlers
    @app.errorhandler(404)
    def page_not_found(e):
        return jsonify({"success": False, "error": "Not found"}), 404

    @app.errorhandler(500)
    def internal_server_error(e):
        return jsonify({"success": False, "error": "Internal server error"}), 500

    return app


if __name__ == '__main__':
    app = create_app()
    app.run(host='127.0.0.3', port=5002, debug=app.config['DEBUG'])
