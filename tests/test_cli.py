import contextlib
import io
import json
import logging
import os
import tempfile
import unittest

from planes.cli import *


PROBLEM = {
    'duration' : 5,
    'planes' : [{'name' : 'A0', 'pos' : [0.0, 0.0]}],
    'tasks' : [{'id' : 'T0', 'pos' : [2.0, 0.0]}]
}


class TestCommandLine(unittest.TestCase):
    def setUp(self) -> None:
        logging.getLogger('planes').setLevel(logging.CRITICAL)

    def run_main(self, argv : list) -> tuple:
        out = io.StringIO()
        with contextlib.redirect_stdout(out):
            code = main(argv)
        return code, out.getvalue()

    def test_dump_settings(self):
        code, out = self.run_main(['-d'])
        self.assertEqual(code, 0)
        self.assertIn('iterations = 20', out)
        self.assertIn('allocation = maxsum', out)

    def test_dry_run(self):
        code, out = self.run_main(['-t', '-q', '-o', 'iterations=3', '-o', 'allocation=greedy'])
        self.assertEqual(code, 0)
        self.assertIn('iterations = 3', out)
        self.assertIn('allocation = greedy', out)
        self.assertIn('quiet = True', out)

    def test_settings_file(self):
        with tempfile.TemporaryDirectory() as dir:
            path = os.path.join(dir, 'settings.properties')
            with open(path, 'w') as f:
                f.write('iterations = 4\ndamping = 0.2\n')

            # overrides take precedence over the settings file
            code, out = self.run_main(['-t', '-s', path, '-o', 'iterations=6'])
            self.assertEqual(code, 0)
            self.assertIn('iterations = 6', out)
            self.assertIn('damping = 0.2', out)

        with self.assertRaises(SystemExit):
            with contextlib.redirect_stderr(io.StringIO()):
                main(['-t', '-s', os.path.join('does', 'not', 'exist.properties')])

    def test_invalid_settings(self):
        code, _ = self.run_main(['-t', '-o', 'iterations=-1'])
        self.assertEqual(code, 2)

        code, _ = self.run_main(['-t', '-o', 'colour=red'])
        self.assertEqual(code, 2)

    def test_no_problem(self):
        code, out = self.run_main([])
        self.assertEqual(code, 1)
        self.assertIn('usage', out)

    def test_missing_problem(self):
        code, _ = self.run_main(['-q', os.path.join('does', 'not', 'exist.json')])
        self.assertEqual(code, 1)

    def test_run(self):
        with tempfile.TemporaryDirectory() as dir:
            problem_path = os.path.join(dir, 'problem.json')
            with open(problem_path, 'w') as f:
                json.dump(PROBLEM, f)
            results_path = os.path.join(dir, 'results')

            code, _ = self.run_main([problem_path, '-q', '-r', results_path, '--plot'])
            self.assertEqual(code, 0)
            for name in ['planes.csv', 'tasks.csv', 'assignments.csv', 'trajectories.png']:
                self.assertTrue(os.path.isfile(os.path.join(results_path, name)))
