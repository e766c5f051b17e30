#
# workload.py
#
# allocation pattern that keeps the old generation growing: a large pool
# of long-lived integers that gets repopulated in place many times over,
# so most entries are promoted and most eventually become garbage in old
#

import math
import operator
import random

POOL_SIZE = 512 * 1024    # 512K entries
BIT_WIDTH = 128
REFILL_PASSES = 64
SEED = 46

KIND_NAMES = ('max', 'min', 'gcd', 'multiply')

OPERATIONS = (
    max,           # 50% chance of creating garbage
    min,           # 50% chance of creating garbage
    math.gcd,      # new value, releases the old one, ephemeral data while computing
    operator.mul,  # new, usually larger, value; releases the old one
)


def kind_for(position):
    return position & 0x3


def initialize(pool_size, bit_width, rng):
    return [rng.getrandbits(bit_width) for _ in range(pool_size)]


def plan(pool_size, passes, rng):
    """
    Yield (position, replace_index, derive_index, kind) for every step of
    every refill pass. Each pass visits every position once.
    """
    for _ in range(passes):
        for position in range(pool_size):
            replace_index = rng.randrange(pool_size)
            derive_index = rng.randrange(pool_size)
            yield position, replace_index, derive_index, kind_for(position)


def refill(pool, rng, passes, progress=None):
    pool_size = len(pool)
    for position, replace_index, derive_index, kind in plan(pool_size, passes, rng):
        pool[replace_index] = OPERATIONS[kind](pool[replace_index],
                                               pool[derive_index])
        if progress is not None and position == pool_size - 1:
            progress(pool)
    return pool


def pool_bits(pool):
    return sum(value.bit_length() for value in pool)


def make_old_allocations(pool_size=POOL_SIZE, bit_width=BIT_WIDTH,
                         passes=REFILL_PASSES, seed=SEED, verbose=0):
    rng = random.Random(seed)
    pool = initialize(pool_size, bit_width, rng)
    progress = None
    if verbose > 1:
        done = [0]

        def progress(pool):
            done[0] += 1
            print("REFILL %d/%d: %d bits live" % (done[0], passes, pool_bits(pool)))
    return refill(pool, rng, passes, progress)
