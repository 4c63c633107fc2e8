import numpy as np
import pytest

from freesurf.implicit_solver import ImplicitFreeSurfaceSolver
from freesurf.operators import create_matrix

g = 9.80665


def test_initial_state(param, grid):
    solver = ImplicitFreeSurfaceSolver(param, grid)
    assert solver.previous_dt is None
    assert solver.nrebuild == 0
    assert solver.operator_state(600.) == 'stale'
    assert solver.gravity == pytest.approx(g)


def test_gravity_can_be_overridden(param, grid):
    solver = ImplicitFreeSurfaceSolver(param, grid,
                                       gravitational_acceleration=3.7)
    assert solver.gravity == 3.7


def test_rebuild_only_when_dt_changes(param, grid):
    solver = ImplicitFreeSurfaceSolver(param, grid)
    eta = np.zeros((grid.nyl, grid.nxl))
    rhs = np.zeros_like(eta)

    solver.solve(eta, rhs, g, 600.)
    assert solver.nrebuild == 1
    assert solver.previous_dt == 600.
    assert solver.operator_state(600.) == 'current'
    assert solver.operator_state(300.) == 'stale'

    solver.solve(eta, rhs, g, 600.)
    assert solver.nrebuild == 1

    solver.solve(eta, rhs, g, 300.)
    assert solver.nrebuild == 2
    assert solver.previous_dt == 300.


def test_rebuild_count_over_a_sequence(param, grid):
    solver = ImplicitFreeSurfaceSolver(param, grid)
    eta = np.zeros((grid.nyl, grid.nxl))
    rhs = np.zeros_like(eta)
    for dt in [600., 600., 300., 300., 600., 600.1, 600.1]:
        solver.solve(eta, rhs, g, dt)
    assert solver.nrebuild == 4


def test_operator_follows_dt(param, seamount):
    grid = seamount
    solver = ImplicitFreeSurfaceSolver(param, grid)
    eta = np.zeros((grid.nyl, grid.nxl))
    rhs = np.zeros_like(eta)
    areas = solver.vertically_integrated_lateral_areas
    for dt in [600., 300.]:
        solver.solve(eta, rhs, g, dt)
        op = create_matrix(grid, areas.x, areas.y, g, dt)
        assert np.array_equal(solver.multigrid_solver.operator.A, op.A)
        assert solver.multigrid_solver.operator.dt == dt


def test_zero_forcing_gives_flat_surface(param, grid):
    solver = ImplicitFreeSurfaceSolver(param, grid)
    eta = np.zeros((grid.nyl, grid.nxl))
    eta[grid.interior] = 0.3
    rhs = np.zeros_like(eta)
    solver.solve(eta, rhs, g, 600.)
    assert np.all(eta == 0.)


def test_solution_satisfies_the_equation(param, seamount, bump):
    grid = seamount
    solver = ImplicitFreeSurfaceSolver(param, grid)
    dt = 600.
    qu = np.zeros((grid.nyl, grid.nxl))
    qv = np.zeros_like(qu)
    rhs = solver.compute_right_hand_side(g, dt, (qu, qv), bump)
    assert rhs is solver.right_hand_side

    eta = bump.copy()
    solver.solve(eta, rhs, g, dt)
    assert solver.res <= param.tol

    op = solver.multigrid_solver.operator
    y = np.zeros_like(eta)
    op.apply(eta, y)
    r = (rhs-y)[grid.interior]
    assert np.sqrt((r**2).sum()) <= 1e-8*np.sqrt((rhs**2).sum())


def test_reuse_is_idempotent(param, seamount, bump):
    """ with the operator reused, different first guesses converge to
    the same surface """
    grid = seamount
    solver = ImplicitFreeSurfaceSolver(param, grid)
    dt = 600.
    qu = np.zeros((grid.nyl, grid.nxl))
    qv = np.zeros_like(qu)
    rhs = solver.compute_right_hand_side(g, dt, (qu, qv), bump).copy()

    eta1 = np.zeros_like(bump)
    solver.solve(eta1, rhs, g, dt)
    rng = np.random.RandomState(3)
    eta2 = 5*rng.standard_normal(bump.shape)
    solver.solve(eta2, rhs, g, dt)
    assert solver.nrebuild == 1
    assert solver.res <= param.tol
    scale = abs(eta1[grid.interior]).max()
    diff = abs(eta2[grid.interior]-eta1[grid.interior]).max()
    assert diff <= 1e-7*scale


def test_right_hand_side(param, grid):
    solver = ImplicitFreeSurfaceSolver(param, grid)
    dt = 100.
    nh = grid.nh
    eta = np.zeros((grid.nyl, grid.nxl))
    qu = np.zeros_like(eta)
    qv = np.zeros_like(eta)
    # one unit of flux leaving cell (10, 10) through its east face
    qu[nh+10, nh+11] = 1.
    eta[nh+5, nh+5] = 2.
    rhs = solver.compute_right_hand_side(g, dt, (qu, qv), eta)
    assert rhs[nh+10, nh+10] == pytest.approx(grid.dy/(g*dt))
    assert rhs[nh+10, nh+11] == pytest.approx(-grid.dy/(g*dt))
    assert rhs[nh+5, nh+5] == pytest.approx(-2*grid.Az/(g*dt**2))
    assert rhs[nh+20, nh+20] == 0.


def test_negative_time_step(param, grid):
    solver = ImplicitFreeSurfaceSolver(param, grid)
    eta = np.zeros((grid.nyl, grid.nxl))
    rhs = np.zeros_like(eta)
    solver.solve(eta, rhs, g, 600.)
    solver.solve(eta, rhs, g, -600.)
    assert solver.nrebuild == 2
    assert solver.previous_dt == -600.
    assert solver.operator_state(-600.) == 'current'
    assert solver.operator_state(600.) == 'stale'


def test_zero_time_step_is_rejected(param, grid):
    solver = ImplicitFreeSurfaceSolver(param, grid)
    eta = np.zeros((grid.nyl, grid.nxl))
    with pytest.raises(ValueError):
        solver.solve(eta, eta.copy(), g, 0.)
    assert solver.previous_dt is None
    assert solver.nrebuild == 0


def test_bookkeeping(param, seamount, bump, capsys):
    grid = seamount
    solver = ImplicitFreeSurfaceSolver(param, grid)
    qu = np.zeros((grid.nyl, grid.nxl))
    qv = np.zeros_like(qu)
    for dt in [600., 600., 300.]:
        rhs = solver.compute_right_hand_side(g, dt, (qu, qv), bump)
        eta = bump.copy()
        solver.solve(eta, rhs, g, dt)
    assert solver.ncalls['operator'] == 2
    assert solver.ncalls['solve'] == 3
    assert solver.ncalls['rhs'] == 3
    assert solver.nite_total > 0
    solver.print_timers()
    out = capsys.readouterr().out
    assert 'operator rebuilds = 2 / solves = 3' in out
