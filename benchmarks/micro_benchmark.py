import timeit

# Compare the two evaluation strategies for the same basis: one point at a
# time through HermiteEvaluator, or every pixel at once through ModelBuilder.

setup = """
import numpy as np
from shapester.ellipses import Axes
from shapester.hermite import HermiteEvaluator
from shapester.model import ModelBuilder
from shapester.packed import compute_size

order = 8
core = Axes(a=4.0, b=3.0, theta=0.3)
yy, xx = np.mgrid[-32:32, -32:32]
x, y = xx.ravel().astype(float), yy.ravel().astype(float)
transform = core.get_grid_transform()
xt, yt = transform @ np.vstack([x, y])

evaluator = HermiteEvaluator(order)
target = np.zeros(compute_size(order))
matrix = np.zeros((len(x), compute_size(order)))

def scalar():
    for k in range(len(x)):
        evaluator.fill_evaluation(target, xt[k], yt[k])
        matrix[k] = target * core.determinant

builder = ModelBuilder(order, x, y)
builder.update(core)

def vectorized():
    builder.update(core)
    matrix[:] = 0.0
    builder.add_model_matrix(order, matrix)

fast = ModelBuilder(order, x, y, use_approximate_exp=True)

def vectorized_fast_exp():
    fast.update(core)
    matrix[:] = 0.0
    fast.add_model_matrix(order, matrix)

scalar()
"""

n = 20
t1 = timeit.timeit("scalar()", setup=setup, number=n)
print(f"Point evaluator, 4096 pixels, order 8: {t1/n*1e3:.3f} ms per matrix")

t2 = timeit.timeit("vectorized()", setup=setup, number=n)
print(f"Model builder,   4096 pixels, order 8: {t2/n*1e3:.3f} ms per matrix")

t3 = timeit.timeit("vectorized_fast_exp()", setup=setup, number=n)
print(f"Model builder with fast_exp:           {t3/n*1e3:.3f} ms per matrix")

# Conclusion:
# The point evaluator pays Python call overhead per pixel, the model builder
# pays it per basis function, so the builder wins by orders of magnitude on
# full images while the point evaluator stays convenient for scattered points.
