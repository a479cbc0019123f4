"""
Flask application exposing the translation service over HTTP.

Routes:
    GET  /api/health     -> {"ok": true}
    POST /api/translate  -> {explanation, commands, needClarification, mode[, raw]}
"""

import json
import logging
import os
from typing import Any, Optional

from flask import Flask, jsonify, request
from flask_cors import CORS
from werkzeug.exceptions import InternalServerError

from config.config_manager import ConfigManager
from config.logging_setup import configure_logging
from config.settings import SystemSettings
from services.command_translator import GeometryCommandTranslator, InputValidationError
from services.llm_client import LLMServiceError


logger = logging.getLogger(__name__)


GENERIC_UPSTREAM_ERROR = 'AI 服务异常'
EMPTY_TEXT_ERROR = 'text 不能为空'


def upstream_error_message(error: LLMServiceError) -> str:
    """Best-effort description of an upstream failure for the client."""
    detail = getattr(error, 'detail', None)
    if isinstance(detail, (dict, list)):
        return json.dumps(detail, ensure_ascii=False)
    if isinstance(detail, str) and detail.strip():
        return detail.strip()
    return str(error) or GENERIC_UPSTREAM_ERROR


def create_app(
    settings: Optional[SystemSettings] = None,
    translator: Optional[GeometryCommandTranslator] = None
) -> Flask:
    """
    Build the Flask application.

    Args:
        settings: System settings; defaults (fallback mode) when omitted
        translator: Translator to serve; built from settings when omitted

    Returns:
        Flask: Configured application
    """
    settings = settings or SystemSettings()
    translator = translator or GeometryCommandTranslator(settings)

    app = Flask(__name__)
    app.config['MAX_CONTENT_LENGTH'] = settings.web_interface.max_content_length
    app.json.ensure_ascii = False
    app.extensions['translator'] = translator
    app.extensions['system_settings'] = settings

    if settings.web_interface.cors_enabled:
        CORS(app)

    @app.get('/api/health')
    def health():
        return jsonify({'ok': True})

    @app.post('/api/translate')
    async def translate():
        body: Any = request.get_json(silent=True)
        text = body.get('text') if isinstance(body, dict) else None
        if not isinstance(text, str) or not text.strip():
            return jsonify({'error': EMPTY_TEXT_ERROR}), 400

        try:
            result = await translator.translate(text.strip(), body.get('history'))
        except InputValidationError as e:
            return jsonify({'error': str(e)}), 400
        except LLMServiceError as e:
            logger.error(f"Translation failed upstream: {e}")
            return jsonify({'error': upstream_error_message(e)}), 500

        return jsonify(result.to_response(include_raw=settings.web_interface.return_raw))

    @app.errorhandler(InternalServerError)
    def internal_error(error):
        logger.error(f"Unhandled error: {getattr(error, 'original_exception', error)}")
        return jsonify({'error': GENERIC_UPSTREAM_ERROR}), 500

    return app


def main():
    """Load configuration and run the development server."""
    config_manager = ConfigManager(os.getenv('CONFIG_DIR', 'config'))
    if not config_manager.load_config(os.getenv('CONFIG_FILE', 'system_config.yaml')):
        raise SystemExit("Failed to load configuration")

    settings = config_manager.get_settings()
    configure_logging(settings.logging)
    if not config_manager.validate_config():
        raise SystemExit("Invalid configuration")

    app = create_app(settings)
    web = settings.web_interface
    logger.info(f"[server] listening on http://{web.host}:{web.port}")
    app.run(host=web.host, port=web.port, debug=web.debug)


if __name__ == '__main__':
    main()
