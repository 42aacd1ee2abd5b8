""" Projection of robot states onto a low-dimensional space for spatial indexing. """

import numpy as np


class RobotProjectionEvaluatorOptions:
    """Options for robot state projections."""

    def __init__(self, dimension=None, cells_per_extent=20.0, rng_seed=None):
        """
        Initializes a set of robot projection options.

        Parameters
        ----------
            dimension : int, optional
                The dimension of the projection.
                If not specified, it is chosen from the dimension of the state space.
            cells_per_extent : float
                Number of default cells spanning the reachable extent of each projected axis.
            rng_seed : int, optional
                Sets the seed for generating the random projection matrix.
                Use to generate deterministic results.
        """
        self.dimension = dimension
        self.cells_per_extent = cells_per_extent
        self.rng_seed = rng_seed


class RobotProjectionEvaluator:
    """
    Linear projection of robot states, used by planners that discretize the state space into cells.

    The evaluator borrows its state space, which must outlive it.
    The projection matrix is computed once in `setup` and does not depend on the robot model,
    so it can be used before any collision checking is set up.
    """

    def __init__(self, state_space, options=RobotProjectionEvaluatorOptions()):
        """
        Creates a robot projection evaluator.

        Parameters
        ----------
            state_space : `robospace.spaces.robot_state_space.RobotStateSpace`
                The state space to project from.
            options : `RobotProjectionEvaluatorOptions`, optional
                The options to use for the projection. If not specified, default options are used.
        """
        self.state_space = state_space
        self.options = options

        space_dim = state_space.get_dimension()
        if options.dimension is not None and not (1 <= options.dimension <= space_dim):
            raise ValueError(
                f"Projection dimension must be between 1 and {space_dim}, got {options.dimension}."
            )
        if options.cells_per_extent <= 0.0:
            raise ValueError("Cells per extent must be positive.")

        self._projection_matrix = None
        self._cell_sizes = None

    def get_dimension(self):
        """
        Returns the dimension of the projection.

        Small spaces are projected onto themselves. Larger spaces use a logarithmic number of dimensions.

        Returns
        -------
            int
                The dimension of the projection, never larger than the dimension of the state space.
        """
        if self.options.dimension is not None:
            return self.options.dimension
        space_dim = self.state_space.get_dimension()
        if space_dim <= 2:
            return space_dim
        return min(space_dim, max(2, int(np.ceil(np.log(space_dim)))))

    @property
    def projection_matrix(self):
        return self._projection_matrix

    @property
    def cell_sizes(self):
        return self._cell_sizes

    def is_setup(self):
        return self._projection_matrix is not None

    def setup(self):
        """
        Computes the projection matrix and default cell sizes.

        Calling this more than once keeps the existing projection matrix.
        """
        if self.is_setup():
            return

        # Fails early if bounded coordinates have no bounds yet.
        self.state_space.get_extents()

        space_dim = self.state_space.get_dimension()
        proj_dim = self.get_dimension()
        if proj_dim == space_dim:
            matrix = np.eye(space_dim)
        else:
            # Random matrix with orthonormal rows.
            rng = np.random.default_rng(self.options.rng_seed)
            gaussian = rng.normal(size=(space_dim, proj_dim))
            q, _ = np.linalg.qr(gaussian)
            matrix = q.T
        matrix.setflags(write=False)
        self._projection_matrix = matrix
        self.default_cell_sizes()

    def default_cell_sizes(self):
        """
        Computes default cell sizes from the extent reachable along each projected axis.

        Coordinates with wider ranges yield proportionally larger cells.
        """
        if self._projection_matrix is None:
            raise RuntimeError("Projection evaluator must be set up first.")
        extents = self.state_space.get_extents()
        projected_extents = np.abs(self._projection_matrix) @ extents
        cell_sizes = projected_extents / self.options.cells_per_extent
        # Degenerate axes (zero-width bounds) still need a positive cell size.
        cell_sizes[cell_sizes <= 0.0] = 1.0 / self.options.cells_per_extent
        cell_sizes.setflags(write=False)
        self._cell_sizes = cell_sizes

    def project(self, state, projection=None):
        """
        Projects a state onto the projection space.

        Parameters
        ----------
            state : array-like
                The state to project.
            projection : array-like, optional
                An output array of the projection dimension to write to.

        Returns
        -------
            array-like
                The projection of the state.
        """
        if self._projection_matrix is None:
            raise RuntimeError("Projection evaluator must be set up first.")
        values = self.state_space.to_joint_values(state)
        return np.dot(self._projection_matrix, values, out=projection)

    def compute_coordinates(self, state):
        """
        Returns the integer cell coordinates of a state in the projection space.

        Parameters
        ----------
            state : array-like
                The state to locate.

        Returns
        -------
            array-like
                The integer cell coordinates.
        """
        return np.floor(self.project(state) / self._cell_sizes).astype(int)
