import numpy as np
from freesurf.param import Param
try:
    from mpi4py import MPI
except ImportError:
    MPI = 0
from freesurf.gmg.halo import Halo, set_neighbours


class Grid(Param):

    def __init__(self, param):
        param.checkall()

        param.nbproc = param.npx*param.npy
        if (type(MPI) == int) or (param.nbproc == 1):
            param.myrank = 0
        else:
            param.myrank = MPI.COMM_WORLD.Get_rank()

        param.nx = int(param.nx)
        param.ny = int(param.ny)
        self.list_param = ['nx', 'ny', 'npx', 'npy', 'nbproc',
                           'Lx', 'Ly', 'myrank', 'nh', 'geometry',
                           'nz', 'Lz', 'bottom_cells']
        param.copy(self, self.list_param)
        # Lz follows the bathymetry unless it is prescribed
        self.Lz_from_depth = self.Lz is None

        if (self.nx % self.npx != 0) or (self.ny % self.npy != 0):
            raise ValueError('nx and ny should be divisible by npx and npy')
        if (self.nx//self.npx < self.nh) or (self.ny//self.npy < self.nh):
            raise ValueError('subdomains are smaller than the halo width')

        self.nxl = self.nx//self.npx+2*self.nh
        self.nyl = self.ny//self.npy+2*self.nh
        # local position of the rank in the matrix of subdomains
        self.i0 = self.myrank % self.npx
        self.j0 = (self.myrank // self.npx) % self.npy
        # grid size
        self.dx = self.Lx/self.nx
        self.dy = self.Ly/self.ny
        self.Az = self.dx*self.dy

        ishift = self.i0*self.nx//self.npx
        jshift = self.j0*self.ny//self.npy
        self.x1d = (np.arange(self.nxl)+0.5-self.nh+ishift)*self.dx
        self.y1d = (np.arange(self.nyl)+0.5-self.nh+jshift)*self.dy

        self.xr, self.yr = np.meshgrid(self.x1d, self.y1d)

        nh = self.nh
        self.interior = (slice(nh, self.nyl-nh), slice(nh, self.nxl-nh))

        # method for halo fill
        if self.nbproc == 1:
            self.halomethod = 0  # fill halo with itself
        else:
            self.halomethod = 1  # use MPI communications
        self.neighbours = set_neighbours(self.myrank, self.npx, self.npy)
        self.halo = Halo(nh, self.nxl, self.nyl, self.neighbours,
                         method=self.halomethod)
        self.fill_halo = self.halo.fill

        self.H = None
        self.set_msk()

    @property
    def topology(self):
        """ (x, y) topology, each being 'periodic' or 'bounded' """
        xtopo = 'periodic'
        ytopo = 'periodic'
        if self.geometry in ['yperio', 'closed']:
            xtopo = 'bounded'
        if self.geometry in ['xperio', 'closed']:
            ytopo = 'bounded'
        return (xtopo, ytopo)

    def set_msk(self):
        """Set the mask array to default value

        according to param.geometry. Walls are obtained by masking
        the halo of the subdomains touching the domain boundary. The
        mask is later combined with the bathymetry in set_depth

        """
        npx = self.npx
        npy = self.npy
        nxl = self.nxl
        nyl = self.nyl
        nh = self.nh

        self.mskwall = np.ones((nyl, nxl), dtype=np.int8)

        xtopo, ytopo = self.topology

        if ytopo == 'bounded':
            if self.j0 == npy-1:  # northern boundary
                self.mskwall[-nh:, :] = 0
            if self.j0 == 0:  # southern boundary
                self.mskwall[:nh, :] = 0

        if xtopo == 'bounded':
            if self.i0 == npx-1:  # east
                self.mskwall[:, -nh:] = 0
            if self.i0 == 0:  # west
                self.mskwall[:, :nh] = 0

        self.msk = self.mskwall.copy()
        self.finalize_msk()

    def set_depth(self, H):
        """Set the fluid depth H [m, positive] at cell centres

        H is either a scalar, an array with the local shape (nyl, nxl)
        or an array with the interior shape. Cells with H <= 0 are
        land. The halo of H is filled here.
        """
        depth = np.zeros((self.nyl, self.nxl))
        if np.isscalar(H):
            depth[:, :] = H
        else:
            H = np.asarray(H, dtype=float)
            if H.shape == depth.shape:
                depth[:, :] = H
            elif H.shape == depth[self.interior].shape:
                depth[self.interior] = H
            else:
                raise ValueError('depth has shape %s, expected %s or %s'
                                 % (H.shape, depth.shape,
                                    depth[self.interior].shape))
        if np.any(np.isnan(depth[self.interior])):
            raise ValueError('depth contains NaNs')

        depth[depth < 0] = 0.
        self.fill_halo(depth)

        self.msk = self.mskwall*(depth > 0).astype(np.int8)
        self.H = depth*self.msk

        if self.Lz_from_depth:
            self.Lz = self.allreduce(self.H[self.interior].max(), 'max')
        if self.Lz <= 0:
            raise ValueError('Lz should be positive, got %g' % self.Lz)
        if self.nz < 1:
            raise ValueError('nz should be at least 1')
        self.dz = self.Lz/self.nz

        self.finalize_msk()

    def finalize_msk(self):
        """ Define grid quantities that depend on the mask

        should be after the mask array has been touched"""
        msk = self.msk

        self.area = self.domain_integration(msk)*self.Az
        if self.H is not None:
            self.volume = self.domain_integration(self.H)*self.Az

    def domain_integration(self, z2d):
        """Define the domain integral function on grid cells"""

        integral = np.sum(z2d[self.interior])*1.

        return self.allreduce(integral)

    def allreduce(self, local, op='sum'):
        """ reduce a local scalar over all the subdomains, op is
        'sum' or 'max'"""
        if op not in ['sum', 'max']:
            raise ValueError('unknown reduction "%s"' % op)
        if self.halomethod == 0:
            return float(local)
        if op == 'sum':
            return MPI.COMM_WORLD.allreduce(local, op=MPI.SUM)
        else:
            return MPI.COMM_WORLD.allreduce(local, op=MPI.MAX)


if __name__ == "__main__":

    param = Param()
    param.nx = 10
    param.ny = 10
    param.geometry = 'closed'
    grid = Grid(param)
    grid.set_depth(1000.)

    print("myrank is :", param.myrank)
    print(grid.xr[0, :])
    print(grid.yr[:, 0])
    print(grid.msk)
    print('topology (x, y) = (%s, %s)' % grid.topology)
    print('global domain area        =%g' % grid.area)
