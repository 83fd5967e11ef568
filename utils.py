import sys
import logging

logger = logging.getLogger('matmul_bench')
logger.setLevel(level=logging.DEBUG)
fh = logging.StreamHandler()
fh.setFormatter(logging.Formatter('%(asctime)s %(levelname)s %(message)s'))
logger.addHandler(fh)

def error(msg):
    logger.error(msg)
    sys.exit(1)

def exponent_parser(string):
    """Parse "lo,hi" into range(lo, hi)."""
    min_v, max_v = (int(n) for n in string.split(','))
    if min_v < 0 or max_v < min_v:
        raise ValueError('invalid exponent range %s' % string)
    return range(min_v, max_v)

def mean(l):
    return sum(l)/len(l)
