"""
Text Comparison Flask Routes
============================
API endpoints for comparing texts and files side by side.
"""

import time
from functools import wraps
from typing import Tuple

from flask import Blueprint, request, jsonify, g, current_app

from config_logging import (
    get_logger, get_config, TextCompareError, ValidationError, FileError
)

from .differ import TextDiffer
from .files import (
    ComparisonRegistry, read_text_file, save_text_file, comparison_title, resolve_in_root
)
from .models import CompareOptions
from .renderer import render_columns

logger = get_logger('text_compare')

tc_blueprint = Blueprint('text_compare', __name__)


@tc_blueprint.record_once
def _init_comparisons(state):
    state.app.extensions.setdefault('tc_comparisons', ComparisonRegistry())


# =============================================================================
# STANDARDIZED ERROR HANDLING DECORATOR
# =============================================================================

def _error_response(error: TextCompareError):
    body = error.to_dict()
    body['error']['correlation_id'] = getattr(g, 'correlation_id', 'unknown')
    return jsonify(body), error.status_code


def handle_tc_errors(f):
    """
    Decorator for standardized API error handling in Text Compare routes.
    """
    @wraps(f)
    def decorated(*args, **kwargs):
        start_time = time.time()
        try:
            result = f(*args, **kwargs)

            elapsed = time.time() - start_time
            if elapsed > 5.0:
                logger.warning(f"Slow TC API call: {f.__name__} took {elapsed:.1f}s")

            return result

        except ValidationError as e:
            logger.warning(f"Validation error in {f.__name__}: {e}")
            return _error_response(e)
        except FileError as e:
            logger.warning(f"File error in {f.__name__}: {e}")
            return _error_response(e)
        except TextCompareError as e:
            logger.error(f"{e.code} in {f.__name__}: {e}")
            return _error_response(e)
        except Exception as e:
            logger.exception(f"Unexpected error in {f.__name__}: {e}")
            return _error_response(TextCompareError(
                'An unexpected error occurred', code='INTERNAL_ERROR', status_code=500))

    return decorated


# =============================================================================
# REQUEST HELPERS
# =============================================================================

def _config():
    """The AppConfig the running app was created with."""
    return current_app.config.get('TC_CONFIG') or get_config()


def _get_json() -> dict:
    """Parse the request body, enforcing the configured size cap."""
    config = _config()
    if request.content_length and request.content_length > config.max_input_bytes:
        raise ValidationError(
            f"Request body exceeds {config.max_input_bytes} bytes",
            field='body'
        )
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object", field='body')
    return data


def _require_str(data: dict, key: str) -> str:
    value = data.get(key)
    if not isinstance(value, str):
        raise ValidationError(f"'{key}' is required and must be a string", field=key)
    return value


def _options_from(data: dict) -> CompareOptions:
    """Resolve options: request values override configured defaults."""
    defaults = CompareOptions.from_config(_config())
    resolved = {}
    for key in ('ignore_whitespace', 'ignore_case'):
        value = data.get(key, getattr(defaults, key))
        if not isinstance(value, bool):
            raise ValidationError(f"'{key}' must be a boolean", field=key)
        resolved[key] = value
    return CompareOptions(**resolved)


def _comparisons() -> ComparisonRegistry:
    """Comparisons opened through /files in this app."""
    return current_app.extensions['tc_comparisons']


def _differ() -> TextDiffer:
    return TextDiffer(word_diff_timeout=_config().word_diff_timeout)


def _texts_from(data: dict) -> Tuple[str, str]:
    return _require_str(data, 'old_text'), _require_str(data, 'new_text')


# =============================================================================
# ROUTES
# =============================================================================

@tc_blueprint.route('/texts', methods=['POST'])
@handle_tc_errors
def compare_text_bodies():
    """
    Compare two texts.

    Request body:
        { old_text: str, new_text: str, ignore_whitespace?: bool, ignore_case?: bool }

    Returns:
        { success: true, result: { left: [...], right: [...], options, stats } }
    """
    data = _get_json()
    old_text, new_text = _texts_from(data)
    result = _differ().compare(old_text, new_text, _options_from(data))

    return jsonify({
        'success': True,
        'result': result.to_dict()
    })


@tc_blueprint.route('/files', methods=['POST'])
@handle_tc_errors
def compare_files():
    """
    Compare two files under the configured file root.

    Request body:
        { old_path: str, new_path: str, ignore_whitespace?: bool, ignore_case?: bool }

    Returns:
        { success: true, comparison_id: str, title: str, result: {...} }
    """
    data = _get_json()
    root = _config().file_root
    old_path = resolve_in_root(_require_str(data, 'old_path'), root)
    new_path = resolve_in_root(_require_str(data, 'new_path'), root)

    old_text = read_text_file(old_path)
    new_text = read_text_file(new_path)
    result = _differ().compare(old_text, new_text, _options_from(data))
    comparison_id = _comparisons().register(old_path, new_path)

    return jsonify({
        'success': True,
        'comparison_id': comparison_id,
        'title': comparison_title(old_path, new_path),
        'identical': not result.has_changes,
        'result': result.to_dict()
    })


@tc_blueprint.route('/render', methods=['POST'])
@handle_tc_errors
def render_comparison():
    """
    Compare two texts and return both columns as HTML fragments.

    Request body:
        same as /texts

    Returns:
        { success: true, left_html: str, right_html: str, stats: {...} }
    """
    data = _get_json()
    old_text, new_text = _texts_from(data)
    result = _differ().compare(old_text, new_text, _options_from(data))
    left_html, right_html = render_columns(result, _config().colors)

    return jsonify({
        'success': True,
        'left_html': left_html,
        'right_html': right_html,
        'stats': result.stats
    })


@tc_blueprint.route('/save', methods=['POST'])
@handle_tc_errors
def save_file():
    """
    Write an edited column back to one of the files of a comparison.

    Request body:
        { comparison_id: str, side: 1 | 2, content: str }

    Returns:
        { success: true, side: int, saved: str, chars: int }
    """
    data = _get_json()
    comparison_id = _require_str(data, 'comparison_id')
    content = _require_str(data, 'content')
    side = data.get('side')

    path = _comparisons().path_for(comparison_id, side)
    written = save_text_file(resolve_in_root(path, _config().file_root), content)

    return jsonify({
        'success': True,
        'side': side,
        'saved': path.name,
        'chars': written
    })
