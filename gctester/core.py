#
# core.py
#
# Wrapper TestUnit class which uses pexpect to launch the collector under
# test as a child process and check what it printed
#

import os
import shlex
import signal
import sys
from collections import namedtuple

import pexpect

# harness states
NOT_STARTED = 'not started'
LAUNCHED = 'launched'
COLLECTED = 'collected'
PASSED = 'passed'
FAILED = 'failed'

# assertion violations
NON_ZERO_EXIT = 'non-zero exit'
MISSING_MARKER = 'missing marker'

DEFAULT_TIMEOUT = 900

Result = namedtuple('Result', ['exit_code', 'output'])


class LaunchFailure(Exception):
    """
    The child process could not be spawned or did not finish in time.

    output holds whatever the child printed before it was killed.
    """

    def __init__(self, message, output=''):
        self.output = output
        if output:
            message += '\n--- child output ---\n' + output
        Exception.__init__(self, message)


class TriggerAssertionError(AssertionError):
    """
    One or more of the exit code and marker checks failed.

    violations lists which ones, output holds the captured child output.
    """

    def __init__(self, violations, messages, output):
        self.violations = violations
        self.output = output
        AssertionError.__init__(self, '\n'.join(messages) +
                                '\n--- child output ---\n' + output)


# user wants to stop the tester scripts, start shutdown cleanly
def shutdown(signum, frame):
    print("Stopping current script")
    sys.exit(1)


def install_signal_handlers():
    signal.signal(signal.SIGHUP, shutdown)  # 1
    signal.signal(signal.SIGINT, shutdown)  # 2
    signal.signal(signal.SIGQUIT, shutdown) # 3
    signal.signal(signal.SIGTERM, shutdown) # 15


def env_int(name, default):
    try:
        return int(os.environ[name])
    except (KeyError, ValueError):
        return default


def verbosity():
    return env_int('GC_TESTER_VERBOSE', 0)


class TestUnit(object):
    """
    Infrastructure for running a collector trigger test
    """

    def __init__(self, message):
        self.verbose = verbosity()
        runtime = os.environ.get('GC_TESTER_RUNTIME')
        if runtime:
            self.runtime = shlex.split(runtime)
        else:
            self.runtime = [sys.executable]
        self.vm_opts = shlex.split(os.environ.get('GC_TESTER_VM_OPTS', ''))
        self.timeout = env_int('GC_TESTER_TIMEOUT', DEFAULT_TIMEOUT)
        self.logpath = os.environ.get('GC_TESTER_LOGFILE')
        self.markpath = os.environ.get('GC_TESTER_MARKFILE')
        self.state = NOT_STARTED
        self.mark = 0
        self.total = 0
        self.message = message
        print(message)

    def set_timeout(self, timeout):
        self.timeout = timeout
        if self.verbose > 0:
            print('This test has a timeout of ' + str(timeout) + ' seconds')

    def build_launch_spec(self, base_flags, entry):
        """
        Full command line: runtime, runtime options, the caller's collector
        flags, then the workload entry point.
        """
        return self.runtime + self.vm_opts + list(base_flags) + list(entry)

    def _start(self, spec):
        if self.verbose > 1:
            print("RUNNING: " + ' '.join(shlex.quote(arg) for arg in spec))
        # open the log first so a bad path never leaves a child behind
        logfile = None
        if self.logpath:
            try:
                logfile = open(self.logpath, 'a')
            except OSError as e:
                raise LaunchFailure("could not open log %s: %s" % (self.logpath, e))
        try:
            child = pexpect.spawn(spec[0], spec[1:], timeout=self.timeout,
                                  encoding='utf-8', codec_errors='replace')
        except (pexpect.ExceptionPexpect, OSError) as e:
            if logfile is not None:
                logfile.close()
            raise LaunchFailure("could not launch %s: %s" % (spec[0], e))
        child.logfile_read = logfile
        return child

    def run(self, spec):
        """
        Launch the child and wait for it to exit.

        Standard output and standard error share the child's terminal, so
        the captured output has both, interleaved as they were written.
        """
        try:
            child = self._start(spec)
        except LaunchFailure:
            self.state = FAILED
            raise
        self.state = LAUNCHED
        try:
            child.expect(pexpect.EOF)
        except pexpect.TIMEOUT:
            partial = (child.before or '').replace('\r\n', '\n')
            child.close(force=True)
            self.state = FAILED
            raise LaunchFailure("%s did not exit within %s seconds" %
                                (spec[0], self.timeout), partial)
        finally:
            if child.logfile_read is not None:
                child.logfile_read.close()
        output = child.before.replace('\r\n', '\n')
        child.close()
        if child.exitstatus is not None:
            exit_code = child.exitstatus
        else:
            exit_code = -child.signalstatus
        self.state = COLLECTED
        return Result(exit_code, output)

    def assert_triggered(self, result, marker, exit_code=0):
        violations = []
        messages = []
        if result.exit_code != exit_code:
            violations.append(NON_ZERO_EXIT)
            messages.append('Expected exit code %d, got %d' %
                            (exit_code, result.exit_code))
        if self.verbose > 0:
            print("EXPECTING: " + marker)
        if marker in result.output:
            if self.verbose > 0:
                print("FOUND: " + marker)
        else:
            if self.verbose > 0:
                print("MISSING: " + marker)
            violations.append(MISSING_MARKER)
            messages.append('Expected to find %r in the output' % marker)
        if violations:
            self.state = FAILED
            raise TriggerAssertionError(violations, messages, result.output)
        self.state = PASSED

    def print_result(self, mark_obtained, mark):
        self.total += mark
        self.mark += mark_obtained
        if mark_obtained == mark:
            print("PASS")
        else:
            print("FAIL")

    def close(self):
        if self.total > 0:
            print('Mark for ' + self.message + ' is ' +
                  str(self.mark) + ' out of ' + str(self.total))
            if self.markpath:
                with open(self.markpath, 'a') as marker:
                    marker.write(self.message + ', ' + str(self.total) +
                                 ', ' + str(self.mark) + '\n')
