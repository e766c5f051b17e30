"""
Pytest configuration and fixtures for the collector trigger tester.

Provides reusable fixtures for:
- Isolating tests from the GC_TESTER_* environment
- Writing fake collector runtimes that print canned output
"""

import os
import shlex
import sys
import textwrap
from pathlib import Path

import pytest

# captured before the autouse fixture clears it, for the end-to-end test
REAL_RUNTIME = os.environ.get('GC_TESTER_RUNTIME')

ROOT = Path(__file__).parent.parent


@pytest.fixture(autouse=True)
def clean_tester_env(monkeypatch):
    for name in list(os.environ):
        if name.startswith('GC_TESTER_'):
            monkeypatch.delenv(name)
    # children started with -m must be able to import gctester
    path = os.environ.get('PYTHONPATH')
    monkeypatch.setenv('PYTHONPATH', str(ROOT) + (os.pathsep + path if path else ''))


@pytest.fixture
def python_child():
    """
    Returns a function building a launch spec that runs the given Python
    source in a fresh interpreter.
    """
    def _child(source):
        return [sys.executable, '-c', textwrap.dedent(source)]
    return _child


@pytest.fixture
def fake_runtime(tmp_path, monkeypatch):
    """
    Fixture that installs a fake collector runtime. It ignores every flag it
    is given, prints the given text and exits with the given status.

    Usage:
        fake_runtime("Trigger (OLD): Old has overgrown\\n", exit_code=0)
    """
    def _install(text, exit_code=0):
        script = tmp_path / 'fake_collector.py'
        script.write_text(
            'import sys\n'
            'sys.stdout.write(%r)\n'
            'sys.stdout.flush()\n'
            'sys.exit(%d)\n' % (text, exit_code))
        runtime = ' '.join(shlex.quote(arg) for arg in [sys.executable, str(script)])
        monkeypatch.setenv('GC_TESTER_RUNTIME', runtime)
        return script
    return _install


@pytest.fixture
def real_runtime(monkeypatch):
    """
    The collector runtime named by GC_TESTER_RUNTIME when the session
    started. Skips the test when none was given.
    """
    if not REAL_RUNTIME:
        pytest.skip("GC_TESTER_RUNTIME does not name a collector runtime")
    monkeypatch.setenv('GC_TESTER_RUNTIME', REAL_RUNTIME)
    return REAL_RUNTIME
