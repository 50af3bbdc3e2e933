"""
Unit tests for apisnip.cli module. The terminal loop is replaced by a stub
that drives the model the way key presses would.
"""

import json
import shutil
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

import yaml

from apisnip.app import Action, Message
from apisnip.cli import create_parser, main
from apisnip.config import Settings
from apisnip.core import DEFAULT_OUTPUT_FILE


SPEC = {
    'openapi': '3.0.0',
    'info': {'title': 'CLI', 'version': '1'},
    'paths': {
        '/keep': {'get': {'responses': {'200': {'$ref': '#/components/responses/Ok'}}}},
        '/drop': {'get': {'responses': {'200': {'$ref': '#/components/responses/Gone'}}}},
    },
    'components': {
        'responses': {
            'Ok': {'description': 'ok'},
            'Gone': {'description': 'gone'},
        }
    },
}


def select_keep_and_write(model, verbose=False):
    # '/drop' sorts first, so move down once before snipping
    model.update(Action(Message.SELECT_NEXT))
    model.update(Action(Message.TOGGLE_AND_SELECT_NEXT))
    model.update(Action(Message.WRITE_AND_QUIT))
    return model


def just_quit(model, verbose=False):
    model.update(Action(Message.QUIT))
    return model


@patch('apisnip.cli.load_config', return_value=Settings())
class TestCli(unittest.TestCase):
    """Test cases for the command-line entry point."""

    def setUp(self):
        """Set up test fixtures."""
        self.temp_dir = tempfile.mkdtemp()
        self.input_file = Path(self.temp_dir) / 'spec.yaml'
        with open(self.input_file, 'w') as f:
            yaml.dump(SPEC, f, sort_keys=False)

    def tearDown(self):
        """Clean up test fixtures."""
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def test_parser_defaults(self, _):
        args = create_parser().parse_args(['spec.yaml'])

        self.assertEqual(args.input, 'spec.yaml')
        self.assertEqual(args.output, DEFAULT_OUTPUT_FILE)
        self.assertFalse(args.verbose)

    @patch('apisnip.cli.run_tui', side_effect=select_keep_and_write)
    def test_write_and_quit(self, _, __):
        output_file = Path(self.temp_dir) / 'out.json'

        main([str(self.input_file), str(output_file)])

        with open(output_file) as f:
            written = json.load(f)
        self.assertEqual(list(written['paths']), ['/keep'])
        self.assertEqual(list(written['components']['responses']), ['Ok'])

    @patch('apisnip.cli.run_tui', side_effect=just_quit)
    def test_quit_writes_nothing(self, _, __):
        output_file = Path(self.temp_dir) / 'out.yaml'

        main([str(self.input_file), str(output_file)])

        self.assertFalse(output_file.exists())

    @patch('apisnip.cli.run_tui')
    def test_missing_input_exits_non_zero(self, mock_tui, _):
        with self.assertRaises(SystemExit) as ctx:
            main([str(Path(self.temp_dir) / 'missing.yaml')])

        self.assertEqual(ctx.exception.code, 1)
        mock_tui.assert_not_called()

    @patch('apisnip.cli.run_tui')
    def test_unsupported_input_exits_before_loop(self, mock_tui, _):
        with self.assertRaises(SystemExit) as ctx:
            main([str(Path(self.temp_dir) / 'spec.txt')])

        self.assertEqual(ctx.exception.code, 1)
        mock_tui.assert_not_called()

    @patch('apisnip.cli.run_tui')
    def test_missing_paths_exits_before_loop(self, mock_tui, _):
        no_paths = Path(self.temp_dir) / 'nopaths.json'
        no_paths.write_text('{"openapi": "3.0.0"}')

        with self.assertRaises(SystemExit) as ctx:
            main([str(no_paths)])

        self.assertEqual(ctx.exception.code, 1)
        mock_tui.assert_not_called()

    @patch('apisnip.cli.run_tui', side_effect=select_keep_and_write)
    def test_write_failure_exits_non_zero(self, _, __):
        output_file = Path(self.temp_dir) / 'out.xml'

        with self.assertRaises(SystemExit) as ctx:
            main([str(self.input_file), str(output_file)])

        self.assertEqual(ctx.exception.code, 1)
        self.assertFalse(output_file.exists())

    @patch('apisnip.cli.run_tui', side_effect=KeyboardInterrupt)
    def test_keyboard_interrupt(self, _, __):
        with self.assertRaises(SystemExit) as ctx:
            main([str(self.input_file)])

        self.assertEqual(ctx.exception.code, 130)


if __name__ == '__main__':
    unittest.main()
