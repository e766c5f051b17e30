#
# old_growth_triggers.py
#
# tests that growth of the old generation triggers old generation marking.
# both guaranteed intervals are zeroed, so growth is the only thing that
# can start an old cycle
#

import os
import sys
from optparse import OptionParser

from gctester import core, workload

MARKER = 'Trigger (OLD): Old has overgrown'
ENTRY = ['-m', 'gctester.old_growth_triggers', 'test']

mark = 10


def make_old_allocations(args):
    parser = OptionParser(prog='old_growth_triggers test')
    parser.add_option("-n", "--pool-size", action = "store", type = "int", dest = "pool_size", default = workload.POOL_SIZE, help = "Number of long-lived integers kept in the pool")
    parser.add_option("-b", "--bit-width", action = "store", type = "int", dest = "bit_width", default = workload.BIT_WIDTH, help = "Size in bits of each freshly allocated integer")
    parser.add_option("-p", "--passes", action = "store", type = "int", dest = "passes", default = workload.REFILL_PASSES, help = "How many times the whole pool is repopulated")
    parser.add_option("-s", "--seed", action = "store", type = "int", dest = "seed", default = workload.SEED, help = "Seed for the random stream")
    (options, args) = parser.parse_args(args)
    workload.make_old_allocations(options.pool_size, options.bit_width,
                                  options.passes, options.seed,
                                  verbose=core.verbosity())


def test_old(*flags):
    test = core.TestUnit("old growth triggers")
    marker = os.environ.get('GC_TESTER_MARKER') or MARKER
    spec = test.build_launch_spec(flags, ENTRY)
    try:
        result = test.run(spec)
        test.assert_triggered(result, marker)
    except (core.LaunchFailure, core.TriggerAssertionError) as e:
        print(e)
        test.print_result(0, mark)
    else:
        test.print_result(mark, mark)
    finally:
        test.close()
    return test.state == core.PASSED


def main(argv=None):
    if argv is None:
        argv = sys.argv[1:]
    if len(argv) > 0 and argv[0] == "test":
        make_old_allocations(argv[1:])
        return 0

    core.install_signal_handlers()
    passed = test_old("-Xlog:gc",
                      "-Xms96m",
                      "-Xmx96m",
                      "-XX:+UnlockDiagnosticVMOptions",
                      "-XX:+UnlockExperimentalVMOptions",
                      "-XX:+UseShenandoahGC",
                      "-XX:ShenandoahGCMode=generational",
                      "-XX:ShenandoahGuaranteedYoungGCInterval=0",
                      "-XX:ShenandoahGuaranteedOldGCInterval=0")
    return 0 if passed else 1


if __name__ == "__main__":
    sys.exit(main())
