"""
Text Compare - Flask Application
Side-by-side comparison of two text documents.
"""
from typing import Optional

from flask import Flask, jsonify, g

from config_logging import (
    AppConfig, get_config, get_logger, new_correlation_id, VERSION, APP_NAME
)
from text_compare.routes import tc_blueprint

logger = get_logger('text_compare.app')


def create_app(config: Optional[AppConfig] = None) -> Flask:
    """Build the Flask application."""
    config = config or get_config()

    is_valid, errors = config.validate()
    if not is_valid:
        for error in errors:
            logger.warning(f"Config problem: {error}")

    app = Flask(__name__)
    app.config['MAX_CONTENT_LENGTH'] = config.max_input_bytes
    app.config['TC_CONFIG'] = config

    app.register_blueprint(tc_blueprint, url_prefix='/api/compare')

    @app.before_request
    def assign_correlation_id():
        g.correlation_id = new_correlation_id()

    @app.route('/api/health')
    def health():
        """Health check"""
        return jsonify({
            'status': 'healthy',
            'service': APP_NAME,
            'version': VERSION
        })

    @app.errorhandler(404)
    def not_found(_error):
        return jsonify({
            'success': False,
            'error': {'code': 'NOT_FOUND', 'message': 'Resource not found'}
        }), 404

    @app.errorhandler(413)
    def too_large(_error):
        return jsonify({
            'success': False,
            'error': {
                'code': 'VALIDATION_ERROR',
                'message': f'Request body exceeds {config.max_input_bytes} bytes'
            }
        }), 413

    return app


if __name__ == '__main__':
    config = get_config()
    print("=" * 60)
    print(f"  {APP_NAME} v{VERSION}")
    print(f"  Starting server at http://{config.host}:{config.port}")
    print("=" * 60)
    create_app(config).run(host=config.host, port=config.port, debug=config.debug)
