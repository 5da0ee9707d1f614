#!/usr/bin/env python3
"""
Text Compare Test Suite v1.0.0
==============================
Validates configuration, logging, error types and API endpoints.

Run with: python -m pytest tests.py -v
Or standalone: python tests.py
"""

import os
import sys
import json
import logging
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent))

from app import create_app
from config_logging import (
    AppConfig, get_config, reset_config, get_logger, JsonFormatter,
    StructuredLogger, new_correlation_id, current_correlation_id,
    TextCompareError, ValidationError, FileError,
    ProcessingError, VERSION,
)


def _test_config(**overrides) -> AppConfig:
    """Config that logs to stderr only."""
    values = {'log_to_file': False, 'log_level': 'WARNING'}
    values.update(overrides)
    return AppConfig(**values)


class TestConfigDefaults(unittest.TestCase):
    """Test configuration defaults and environment loading."""

    def tearDown(self):
        reset_config()

    def test_comparison_options_default_off(self):
        """Both preprocessing options are disabled unless configured."""
        config = AppConfig()
        self.assertFalse(config.ignore_whitespace)
        self.assertFalse(config.ignore_case)

    def test_default_colors(self):
        """Default highlight colors match the classic green/red/yellow."""
        config = AppConfig()
        self.assertEqual(config.colors, {
            'added': '#28a745',
            'removed': '#d73a49',
            'modified': '#f9c513'
        })

    def test_default_host_is_localhost(self):
        """Server binds to localhost by default."""
        self.assertEqual(AppConfig().host, '127.0.0.1')

    def test_from_env(self):
        """TC_* variables override defaults."""
        env = {
            'TC_IGNORE_WHITESPACE': 'true',
            'TC_IGNORE_CASE': '1',
            'TC_HIGHLIGHT_ADDITIONS': '#00ff00',
            'TC_WORD_DIFF_TIMEOUT': '0.5',
            'TC_PORT': '9000',
            'TC_FILE_ROOT': '/srv/docs',
        }
        with patch.dict(os.environ, env):
            config = AppConfig.from_env()
        self.assertTrue(config.ignore_whitespace)
        self.assertTrue(config.ignore_case)
        self.assertEqual(config.highlight_additions, '#00ff00')
        self.assertEqual(config.word_diff_timeout, 0.5)
        self.assertEqual(config.port, 9000)
        self.assertEqual(config.file_root, Path('/srv/docs'))

    def test_get_config_is_cached(self):
        """get_config returns one instance until reset."""
        reset_config()
        first = get_config()
        self.assertIs(first, get_config())
        reset_config()
        self.assertIsNot(first, get_config())

    def test_validate_default_config(self):
        """Default configuration is valid."""
        is_valid, errors = AppConfig().validate()
        self.assertTrue(is_valid, errors)

    def test_validate_rejects_bad_values(self):
        """Malformed colors and negative limits are reported."""
        config = AppConfig(highlight_deletions='red', word_diff_timeout=-1,
                           max_input_bytes=0, log_format='xml')
        is_valid, errors = config.validate()
        self.assertFalse(is_valid)
        self.assertEqual(len(errors), 4)
        self.assertTrue(any('highlight_deletions' in e for e in errors))

    def test_validate_rejects_missing_file_root(self):
        """file_root must be an existing directory."""
        with tempfile.TemporaryDirectory() as tmp:
            missing = Path(tmp) / 'gone'
            is_valid, errors = AppConfig(file_root=missing).validate()
        self.assertFalse(is_valid)
        self.assertTrue(any('file_root' in e for e in errors))


class TestStructuredLogging(unittest.TestCase):
    """Test the structured logger and JSON formatter."""

    def tearDown(self):
        reset_config()

    def test_json_formatter_includes_extra_fields(self):
        """Extra fields are serialized alongside the message."""
        record = logging.makeLogRecord({
            'name': 'text_compare.test',
            'levelname': 'INFO',
            'msg': 'compare done',
            'rows': 4,
        })
        data = json.loads(JsonFormatter().format(record))
        self.assertEqual(data['message'], 'compare done')
        self.assertEqual(data['logger'], 'text_compare.test')
        self.assertEqual(data['rows'], 4)
        self.assertIn('ts', data)
        self.assertEqual(data['app'], 'TextCompare')

    def test_correlation_id_roundtrip(self):
        """A new correlation ID becomes the current one."""
        correlation_id = new_correlation_id()
        self.assertEqual(current_correlation_id(), correlation_id)

    def test_get_logger_reuses_instance(self):
        """get_logger returns the same wrapper for the same name."""
        self.assertIs(get_logger('text_compare.x'), get_logger('text_compare.x'))

    def test_log_operation_reraises(self):
        """log_operation logs the failure and re-raises it."""
        logger = StructuredLogger('text_compare.op', _test_config(log_level='CRITICAL'))
        with self.assertRaises(RuntimeError):
            with logger.log_operation('boom'):
                raise RuntimeError('failed')


class TestErrorTypes(unittest.TestCase):
    """Test the exception hierarchy."""

    def test_validation_error_structure(self):
        """ValidationError serializes to the API error shape."""
        error = ValidationError("bad input", field='old_text')
        data = error.to_dict()
        self.assertFalse(data['success'])
        self.assertEqual(data['error']['code'], 'VALIDATION_ERROR')
        self.assertEqual(data['error']['details']['field'], 'old_text')
        self.assertEqual(error.status_code, 400)

    def test_file_error_status(self):
        """FileError carries a configurable status code."""
        self.assertEqual(FileError("x").status_code, 400)
        self.assertEqual(FileError("x", status_code=404).status_code, 404)
        self.assertEqual(FileError("x", status_code=404).code, 'FILE_NOT_FOUND')

    def test_hierarchy(self):
        """All errors share one base class."""
        for cls in (ValidationError, FileError, ProcessingError):
            self.assertTrue(issubclass(cls, TextCompareError))


class TestAPIEndpoints(unittest.TestCase):
    """Test the Flask comparison API."""

    def setUp(self):
        self.tmpdir = tempfile.TemporaryDirectory()
        self.config = _test_config(file_root=Path(self.tmpdir.name))
        self.app = create_app(self.config)
        self.app.config['TESTING'] = True
        self.client = self.app.test_client()

    def tearDown(self):
        self.tmpdir.cleanup()

    def _write(self, name: str, content: str) -> str:
        path = Path(self.tmpdir.name) / name
        path.write_text(content, encoding='utf-8')
        return str(path)

    def test_health_endpoint(self):
        """Health endpoint reports service and version."""
        response = self.client.get('/api/health')
        self.assertEqual(response.status_code, 200)
        data = response.get_json()
        self.assertEqual(data['status'], 'healthy')
        self.assertEqual(data['version'], VERSION)

    def test_404_returns_json(self):
        """Unknown routes return a JSON error."""
        response = self.client.get('/api/nope')
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.get_json()['error']['code'], 'NOT_FOUND')

    def test_compare_texts(self):
        """Texts endpoint returns aligned columns."""
        response = self.client.post('/api/compare/texts', json={
            'old_text': 'x\nsame\n',
            'new_text': 'same\ny\n'
        })
        self.assertEqual(response.status_code, 200)
        result = response.get_json()['result']
        self.assertEqual(len(result['left']), len(result['right']))
        self.assertEqual(result['left'][0]['status'], 'removed')
        self.assertTrue(result['left'][2]['placeholder'])
        self.assertEqual(result['right'][2]['status'], 'added')

    def test_compare_texts_with_options(self):
        """Request options are applied before diffing."""
        response = self.client.post('/api/compare/texts', json={
            'old_text': 'Hello',
            'new_text': 'hello',
            'ignore_case': True
        })
        result = response.get_json()['result']
        self.assertEqual(result['left'][0]['status'], 'unchanged')
        self.assertTrue(result['options']['ignore_case'])

    def test_compare_texts_missing_field(self):
        """Missing text yields a validation error."""
        response = self.client.post('/api/compare/texts', json={'old_text': 'a'})
        self.assertEqual(response.status_code, 400)
        error = response.get_json()['error']
        self.assertEqual(error['code'], 'VALIDATION_ERROR')
        self.assertIn('correlation_id', error)

    def test_compare_texts_bad_option_type(self):
        """Options must be booleans."""
        response = self.client.post('/api/compare/texts', json={
            'old_text': 'a', 'new_text': 'b', 'ignore_case': 'yes'
        })
        self.assertEqual(response.status_code, 400)

    def test_non_json_body(self):
        """A body that is not a JSON object is rejected."""
        response = self.client.post('/api/compare/texts', data='plain',
                                    content_type='text/plain')
        self.assertEqual(response.status_code, 400)

    def test_body_size_cap(self):
        """Bodies over max_input_bytes are rejected before diffing."""
        app = create_app(_test_config(max_input_bytes=64))
        client = app.test_client()
        response = client.post('/api/compare/texts', json={
            'old_text': 'a' * 100, 'new_text': 'b'
        })
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.get_json()['error']['code'], 'VALIDATION_ERROR')

    def test_compare_files(self):
        """Files endpoint reads both documents from disk."""
        old_path = self._write('left.txt', 'one\ntwo\n')
        new_path = self._write('right.txt', 'one\n2\n')
        response = self.client.post('/api/compare/files', json={
            'old_path': old_path, 'new_path': new_path
        })
        self.assertEqual(response.status_code, 200)
        data = response.get_json()
        self.assertEqual(data['title'], 'Compare: left.txt ↔ right.txt')
        self.assertEqual(data['result']['stats']['modified'], 1)
        self.assertFalse(data['identical'])
        self.assertTrue(data['comparison_id'])

    def test_compare_files_missing(self):
        """A missing file maps to FILE_NOT_FOUND."""
        old_path = self._write('left.txt', 'one\n')
        response = self.client.post('/api/compare/files', json={
            'old_path': old_path,
            'new_path': str(Path(self.tmpdir.name) / 'missing.txt')
        })
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.get_json()['error']['code'], 'FILE_NOT_FOUND')

    def test_compare_files_outside_root(self):
        """Files outside the configured root are refused."""
        with tempfile.TemporaryDirectory() as elsewhere:
            outside = Path(elsewhere) / 'secret.txt'
            outside.write_text('secret\n', encoding='utf-8')
            response = self.client.post('/api/compare/files', json={
                'old_path': self._write('left.txt', 'one\n'),
                'new_path': str(outside)
            })
        self.assertEqual(response.status_code, 403)
        self.assertEqual(response.get_json()['error']['code'], 'FILE_FORBIDDEN')

    def test_render(self):
        """Render endpoint returns both columns as HTML."""
        response = self.client.post('/api/compare/render', json={
            'old_text': '', 'new_text': 'added line\n'
        })
        data = response.get_json()
        self.assertTrue(data['success'])
        self.assertIn('empty-line', data['left_html'])
        self.assertIn('#28a74520', data['right_html'])

    def _open_comparison(self) -> tuple:
        old_path = self._write('left.txt', 'before\n')
        new_path = self._write('right.txt', 'after\n')
        response = self.client.post('/api/compare/files', json={
            'old_path': old_path, 'new_path': new_path
        })
        return response.get_json()['comparison_id'], old_path, new_path

    def test_save(self):
        """Save endpoint writes an edited column back to its file."""
        comparison_id, old_path, new_path = self._open_comparison()
        response = self.client.post('/api/compare/save', json={
            'comparison_id': comparison_id, 'side': 1, 'content': 'edited\r\n'
        })
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.get_json()['saved'], 'left.txt')
        self.assertEqual(Path(old_path).read_bytes(), b'edited\r\n')
        self.assertEqual(Path(new_path).read_text(encoding='utf-8'), 'after\n')

    def test_save_right_side(self):
        """Side 2 targets the new document."""
        comparison_id, old_path, new_path = self._open_comparison()
        self.client.post('/api/compare/save', json={
            'comparison_id': comparison_id, 'side': 2, 'content': 'x\n'
        })
        self.assertEqual(Path(new_path).read_text(encoding='utf-8'), 'x\n')
        self.assertEqual(Path(old_path).read_text(encoding='utf-8'), 'before\n')

    def test_save_cannot_name_arbitrary_path(self):
        """A raw path in the body does not select the file to write."""
        unrelated = self._write('settings.ini', 'key=value\n')
        response = self.client.post('/api/compare/save', json={
            'path': unrelated, 'content': 'overwritten'
        })
        self.assertEqual(response.status_code, 400)
        self.assertEqual(Path(unrelated).read_text(encoding='utf-8'), 'key=value\n')

    def test_save_unknown_comparison(self):
        """Saving needs a comparison opened through /files."""
        response = self.client.post('/api/compare/save', json={
            'comparison_id': 'deadbeef', 'side': 1, 'content': 'x'
        })
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.get_json()['error']['code'], 'COMPARISON_NOT_FOUND')

    def test_save_rejects_bad_side(self):
        """Only sides 1 and 2 exist."""
        comparison_id, old_path, _ = self._open_comparison()
        for side in (0, 3, True, '1'):
            response = self.client.post('/api/compare/save', json={
                'comparison_id': comparison_id, 'side': side, 'content': 'x'
            })
            self.assertEqual(response.status_code, 400, side)
        self.assertEqual(Path(old_path).read_text(encoding='utf-8'), 'before\n')

    def test_save_file_removed_after_compare(self):
        """A compared file that has since been deleted is not recreated."""
        comparison_id, old_path, _ = self._open_comparison()
        Path(old_path).unlink()
        response = self.client.post('/api/compare/save', json={
            'comparison_id': comparison_id, 'side': 1, 'content': 'x'
        })
        self.assertEqual(response.status_code, 404)
        self.assertFalse(Path(old_path).exists())


class TestCodeQuality(unittest.TestCase):
    """Static checks over the source tree."""

    def test_no_bare_except(self):
        """No bare 'except:' clauses in package code."""
        import re
        root = Path(__file__).parent
        sources = [root / 'app.py', root / 'config_logging.py']
        sources += sorted((root / 'text_compare').glob('*.py'))
        for source in sources:
            content = source.read_text(encoding='utf-8')
            self.assertIsNone(
                re.search(r'except\s*:', content),
                f"Bare except found in {source.name}"
            )


if __name__ == '__main__':
    unittest.main(verbosity=2)
