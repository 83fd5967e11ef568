import sys
import time
import numpy

from matmul_bench import ELEMENT_TYPES, element_type_name, format_duration

# Every way numpy offers to multiply two matrices, timed one after the other by measure_all.
METHODS = [
    ('matmul', lambda a, b: a @ b),
    ('dot', numpy.dot),
    ('einsum', lambda a, b: numpy.einsum('ij,jk->ik', a, b)),
]

TOLERANCES = {
    'double': 1e-9,
    'single': 1e-3,
}

class ResultMismatch(Exception):
    pass

def generate_matrix(width, height, filename, element_type='single', seed=None):
    if width < 0 or height < 0:
        raise ValueError('Matrix dimensions must be non-negative, got %dx%d.' % (width, height))
    dtype = ELEMENT_TYPES[element_type_name(element_type)]
    matrix = numpy.random.default_rng(seed).random((height, width), dtype=dtype)
    with open(filename, 'wb') as f: # numpy.save would append .npy to a bare path
        numpy.save(f, matrix)
    return matrix

def load_matrix(filename):
    matrix = numpy.load(filename, allow_pickle=False)
    if matrix.ndim != 2:
        raise ValueError('%s does not hold a matrix (got %d dimensions).' % (filename, matrix.ndim))
    element_type_name(matrix.dtype)
    return matrix

def show_matrix(matrix, output=None):
    for row in matrix:
        print(' '.join('%.3f' % x for x in row), file=output or sys.stdout)

def measure(name, func, output=None, clock=time.perf_counter):
    start = clock()
    result = func()
    duration = clock() - start
    print('%s: %s' % (name, format_duration(duration)), file=output or sys.stdout, flush=True)
    return result

def measure_all(a, b, output=None, clock=time.perf_counter):
    """
    Multiply a by b with each of METHODS, printing one "name: seconds.milliseconds"
    line per method. Raise ResultMismatch when a method disagrees with the first one.
    """
    if a.shape[1] != b.shape[0]:
        raise ValueError('Cannot multiply a %dx%d matrix by a %dx%d matrix.' % (a.shape + b.shape))
    rtol = max(TOLERANCES[element_type_name(a.dtype)], TOLERANCES[element_type_name(b.dtype)])
    results = {}
    reference_name = reference = None
    for name, method in METHODS:
        result = measure(name, lambda: method(a, b), output, clock)
        if reference is None:
            reference_name, reference = name, result
        else:
            atol = rtol * (numpy.abs(reference).max() if reference.size else 0)
            if not numpy.allclose(result, reference, rtol=rtol, atol=atol):
                raise ResultMismatch('%s and %s give different results.' % (name, reference_name))
        results[name] = result
    return results
