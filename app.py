"""
Flask Web Application for the intake assistant

HTTP surface over the same SessionDriver the console uses. One live
session per process, held on the app object.
"""

import logging

from flask import Flask, current_app, jsonify, request

from intake_console.config import ClientConfig
from intake_console.core.session_driver import SessionDriver
from intake_console.results import TurnKind
from intake_console.utils.conversation_modes import Mode, to_mode
from intake_console.utils.gigachat_client import GigaChatClient

logger = logging.getLogger(__name__)

DRIVER_KEY = 'intake_driver'


def build_gateway(config):
    """Create and authenticate the GigaChat client (fatal on failure)"""
    config.validate()
    client = GigaChatClient(config)
    client.authenticate()
    return client


def create_app(gateway=None, variant=None, config=None):
    """
    Build the Flask app.

    Args:
        gateway: Completion gateway; built from config and authenticated if None
        variant: Starting mode (defaults to config.mode)
        config: ClientConfig (loaded from the environment if None)

    Raises:
        AuthenticationError: If the gateway has to be built and auth fails
    """
    config = config or ClientConfig.from_env()
    if gateway is None:
        gateway = build_gateway(config)

    app = Flask(__name__)
    app.extensions[DRIVER_KEY] = SessionDriver(
        gateway,
        variant=to_mode(variant) if variant else config.mode,
        max_tokens=config.max_tokens,
    )

    @app.route('/api/start', methods=['POST'])
    def start_session():
        """Start a fresh session"""
        result = _driver().start()
        return jsonify({'success': True, **result.to_json()})

    @app.route('/api/message', methods=['POST'])
    def send_message():
        """Process one line of operator input (commands included)"""
        data = request.get_json(silent=True) or {}
        text = data.get('text', '')
        if not isinstance(text, str):
            return jsonify({'success': False, 'error': "'text' must be a string"}), 400

        result = _driver().handle_input(text)
        if result.kind == TurnKind.ERROR:
            # Session survives; the operator may resubmit
            return jsonify({'success': False, **result.to_json()}), 502

        return jsonify({'success': True, **result.to_json()})

    @app.route('/api/summary', methods=['GET'])
    def get_summary():
        """Collected patient record (guided-intake only)"""
        driver = _driver()
        if driver.session.mode != Mode.GUIDED_INTAKE:
            return jsonify({
                'success': False,
                'error': 'Summary is only available in guided-intake mode'
            }), 400

        return jsonify({'success': True, 'record': driver.session.record.to_dict()})

    return app


def _driver():
    return current_app.extensions[DRIVER_KEY]


if __name__ == '__main__':
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    app = create_app()

    print("\n" + "=" * 60)
    print("GIGACHAT INTAKE ASSISTANT - WEB INTERFACE")
    print("=" * 60)
    print("\nServer starting on http://localhost:5000")
    print("Press Ctrl+C to stop the server")
    print("=" * 60 + "\n")

    app.run(debug=False, host='0.0.0.0', port=5000)
