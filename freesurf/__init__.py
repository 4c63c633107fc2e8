from freesurf.param import Param
from freesurf.grid import Grid
from freesurf.lateral_areas import LateralAreas
from freesurf.operators import StencilOperator, create_matrix, \
    implicit_free_surface_linear_operation
from freesurf.rhs import implicit_free_surface_right_hand_side
from freesurf.implicit_solver import ImplicitFreeSurfaceSolver
from freesurf.freesurface import ImplicitFreeSurface
from freesurf.diagnostics import Diag
