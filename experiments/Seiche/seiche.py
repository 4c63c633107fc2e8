"""
seiche in a closed basin with a seamount

a gaussian bump of the free surface relaxes under gravity. The time
step alternates between two values to exercise the rebuild of the
elliptic operator. Volume is conserved to the solver tolerance.

"""
from freesurf.param import Param
from freesurf.grid import Grid
from freesurf.freesurface import ImplicitFreeSurface
from numpy import exp, zeros

param = Param()

# domain and resolution
param.nx = 64
param.ny = 64
param.Lx = 1000e3
param.Ly = 1000e3
param.npx = 1
param.npy = 1
param.geometry = 'closed'

# vertical
param.nz = 10
param.bottom_cells = 'full'

# solver
param.cycle = 'mgpcg'
param.tol = 1e-10
param.maxite = 100

# time
nsteps = 20
dts = [600., 1200.]

grid = Grid(param)

# seamount
xr, yr = grid.xr, grid.yr
r2 = (xr-500e3)**2+(yr-500e3)**2
grid.set_depth(4000.-2500.*exp(-r2/(150e3)**2))

fs = ImplicitFreeSurface(param, grid)

# initial free surface
r2 = (xr-300e3)**2+(yr-600e3)**2
fs.set_eta(exp(-r2/(80e3)**2))

qu = zeros((grid.nyl, grid.nxl))
qv = zeros((grid.nyl, grid.nxl))

fs.diag.integrals(fs.eta)
vol0 = fs.diag.vol
if param.myrank == 0:
    print('-'*50)
    print(' step      dt        volume       pe       etamax  nite')
    print('-'*50)

t = 0.
for kt in range(nsteps):
    dt = dts[(kt//5) % 2]
    eta_old = fs.eta.copy()
    qu, qv = fs.step(qu, qv, dt)
    t += dt

    fs.diag.integrals(fs.eta)
    res = fs.diag.continuity_residual(fs.eta, eta_old, qu, qv, dt)
    if param.myrank == 0:
        print('%4i  %7.1f  %12.6e  %10.4e  %7.4f  %3i  %.1e' %
              (kt, dt, fs.diag.vol, fs.diag.pe, fs.diag.etamax,
               fs.solver.nite, res))

if param.myrank == 0:
    print('-'*50)
    print('time = %g s' % t)
    print('relative volume change = %.2e' % ((fs.diag.vol-vol0)/vol0))
    fs.solver.print_timers()
    fs.solver.multigrid_solver.print_timers()
