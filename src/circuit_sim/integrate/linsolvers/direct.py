"""Direct solvers for small dense linear systems."""

from flax import nnx
from jax import Array
import jax.numpy as jnp

from ..errors import SingularSystemError

DEFAULT_SINGULAR_TOL = 1e-12


def _as_matrix(A: Array) -> Array:
    if callable(A):
        raise TypeError(
            "Direct solvers require a dense matrix, not a linear operator. "
            "Please provide the coefficient matrix or Jacobian explicitly."
        )
    A = jnp.asarray(A, dtype=float)
    if A.ndim != 2 or A.shape[0] != A.shape[1]:
        raise ValueError(f"Expected a square matrix, got shape {A.shape}")
    return A


def _invert_2x2(A: Array, tol: float) -> Array:
    a00, a01 = A[0, 0], A[0, 1]
    a10, a11 = A[1, 0], A[1, 1]

    det = a00 * a11 - a01 * a10

    # Relative to the size of the products that cancel in det
    scale = max(abs(float(a00 * a11)), abs(float(a01 * a10)))
    if float(det) == 0.0 or abs(float(det)) <= tol * scale:
        raise SingularSystemError(float(det), tol, 2, scale)

    return jnp.array([
        [a11 / det, (-1.0 * a01) / det],
        [(-1.0 * a10) / det, a00 / det],
    ])


def _gaussian_elimination(A: Array, B: Array, tol: float) -> Array:
    """
    Solve A X = B by Gaussian elimination with partial pivoting.

    B may hold a single right-hand side (shape (n,)) or several
    (shape (n, m)); the solution has the same shape as B.
    """
    n = A.shape[0]
    scale = float(jnp.max(jnp.abs(A)))

    # Forward elimination
    for k in range(n):
        p = k + int(jnp.argmax(jnp.abs(A[k:, k])))
        pivot = float(A[p, k])
        if pivot == 0.0 or abs(pivot) <= tol * scale:
            raise SingularSystemError(pivot, tol, n, scale)

        if p != k:
            A = A.at[jnp.array([k, p])].set(A[jnp.array([p, k])])
            B = B.at[jnp.array([k, p])].set(B[jnp.array([p, k])])

        factors = A[k + 1:, k] / A[k, k]
        A = A.at[k + 1:].add(-factors[:, None] * A[k])
        B = B.at[k + 1:].add(
            -factors.reshape((-1,) + (1,) * (B.ndim - 1)) * B[k]
        )

    # Back substitution
    X = jnp.zeros_like(B)
    for k in reversed(range(n)):
        X = X.at[k].set((B[k] - A[k, k + 1:] @ X[k + 1:]) / A[k, k])

    return X


def invert(A: Array, tol: float = DEFAULT_SINGULAR_TOL) -> Array:
    """
    Invert a square matrix.

    Uses the closed form $A^{-1} = \\frac{1}{\\det A}
    \\begin{pmatrix} a_{11} & -a_{01} \\\\ -a_{10} & a_{00} \\end{pmatrix}$
    for 2x2 matrices and Gauss-Jordan elimination otherwise.

    Args:
        A: Square matrix.
        tol: Relative tolerance below which the determinant (2x2) or a pivot
            (general case) is treated as zero.

    Returns:
        Inverse of A.

    Raises:
        SingularSystemError: If A is singular within tolerance.
    """
    A = _as_matrix(A)
    if A.shape[0] == 2:
        return _invert_2x2(A, tol)
    return _gaussian_elimination(A, jnp.eye(A.shape[0], dtype=A.dtype), tol)


def multiply(A: Array, x: Array) -> Array:
    """
    Matrix-vector product A*x.

    Args:
        A: Square matrix, shape (n, n).
        x: Vector, shape (n,).

    Returns:
        Vector of shape (n,).
    """
    A = _as_matrix(A)
    x = jnp.asarray(x, dtype=float)
    if x.shape != (A.shape[1],):
        raise ValueError(
            f"Cannot multiply matrix of shape {A.shape} with vector of shape {x.shape}"
        )

    if A.shape[0] == 2:
        return jnp.array([
            A[0, 0] * x[0] + A[0, 1] * x[1],
            A[1, 0] * x[0] + A[1, 1] * x[1],
        ])
    return A @ x


def solve(A: Array, b: Array, tol: float = DEFAULT_SINGULAR_TOL) -> Array:
    """
    Solve A*x = b.

    2x2 systems take the closed-form inverse, so the result is identical to
    `multiply(invert(A), b)`. Larger systems are solved by Gaussian
    elimination with partial pivoting without forming the inverse.

    Args:
        A: Square coefficient matrix, shape (n, n).
        b: Right-hand side vector, shape (n,).
        tol: Relative singularity tolerance (see `invert`).

    Returns:
        Solution x, shape (n,).

    Raises:
        SingularSystemError: If A is singular within tolerance.
    """
    A = _as_matrix(A)
    b = jnp.asarray(b, dtype=float)
    if b.shape != (A.shape[0],):
        raise ValueError(
            f"Right-hand side of shape {b.shape} does not match matrix of shape {A.shape}"
        )

    if A.shape[0] == 2:
        return multiply(_invert_2x2(A, tol), b)
    return _gaussian_elimination(A, b, tol)


class DirectDense(nnx.Module):
    """
    Direct solver for dense linear systems.

    Dispatches to `solve`: Gaussian elimination with partial pivoting, with a
    closed-form path for 2x2 systems.
    Only suitable for small systems where the matrix is provided explicitly.

    Attributes:
        tol: Relative singularity tolerance
    """

    def __init__(self, tol: float = DEFAULT_SINGULAR_TOL):
        self.tol = tol

    def __call__(self, A: Array, b: Array) -> Array:
        """
        Solve A*x = b.

        Args:
            A: Dense matrix
            b: Right-hand side vector

        Returns:
            Solution x

        Raises:
            TypeError: If A is a callable (linear operator) instead of a matrix
            SingularSystemError: If A is singular within tolerance
        """
        return solve(A, b, self.tol)


class ExplicitInverse(nnx.Module):
    """
    Solve A*x = b by forming A^{-1} and multiplying.

    Reproduces the invert-then-multiply formulation used for the two-node
    circuit. Prefer `DirectDense` for anything larger than 2x2.

    Attributes:
        tol: Relative singularity tolerance
    """

    def __init__(self, tol: float = DEFAULT_SINGULAR_TOL):
        self.tol = tol

    def __call__(self, A: Array, b: Array) -> Array:
        return multiply(invert(A, self.tol), b)
