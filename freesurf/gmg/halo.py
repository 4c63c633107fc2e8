############################################################
#
# functions relative to halo
#
############################################################
try:
    from mpi4py import MPI
except ImportError:
    MPI = 0

from numpy import zeros


def set_neighbours(myrank, np, mp, ix=1, iy=1):
    """ return the ranks of the 8 neighbours of myrank

    the subdomains are arranged in a np x mp periodic matrix, ordered as
    [sw, s, se, w, e, nw, n, ne]"""
    i = myrank % np
    j = myrank//np
    im = (i-ix) % np
    jm = (j-iy) % mp
    ip = (i+ix) % np
    jp = (j+iy) % mp

    sw = im+jm*np
    s = i + jm*np
    se = ip+jm*np

    w = im+j*np
    e = ip+j*np

    nw = im+jp*np
    n = i + jp*np
    ne = ip+jp*np

    return [sw, s, se, w, e, nw, n, ne]


def fillhalo(x, nh):
    """ fill the halo of x with its own interior (doubly periodic) """
    x[:nh, :] = x[-2*nh:-nh, :]
    x[-nh:, :] = x[nh:2*nh, :]
    # corners are done by the second pass
    x[:, :nh] = x[:, -2*nh:-nh]
    x[:, -nh:] = x[:, nh:2*nh]


def halo_slices(nh):
    """ return the interior regions sent to the 8 neighbours and the
    halo regions where the messages are received """
    n = nh
    send = [(slice(n, 2*n), slice(n, 2*n)),
            (slice(n, 2*n), slice(n, -n)),
            (slice(n, 2*n), slice(-2*n, -n)),
            (slice(n, -n), slice(n, 2*n)),
            (slice(n, -n), slice(-2*n, -n)),
            (slice(-2*n, -n), slice(n, 2*n)),
            (slice(-2*n, -n), slice(n, -n)),
            (slice(-2*n, -n), slice(-2*n, -n))]
    # message k comes from neighbour 7-k, i.e. the opposite direction
    recv = [(slice(-n, None), slice(-n, None)),
            (slice(-n, None), slice(n, -n)),
            (slice(-n, None), slice(None, n)),
            (slice(n, -n), slice(-n, None)),
            (slice(n, -n), slice(None, n)),
            (slice(None, n), slice(-n, None)),
            (slice(None, n), slice(n, -n)),
            (slice(None, n), slice(None, n))]
    return send, recv


class Halo(object):
    def __init__(self, nh, n, m, neighbours, method=0):
        self.n = n  # number of points in x, including halo
        self.m = m  # number of points in y, including halo
        self.nh = nh  # halo width
        self.method = method
        self.neighbours = neighbours

        if self.method == 0:
            # the whole domain is known locally
            self.myrank = 0
            return

        if type(MPI) == int:
            raise ValueError('mpi4py is required to exchange halos'
                             ' between subdomains')

        self.comm = MPI.COMM_WORLD
        self.myrank = self.comm.Get_rank()

        n2 = n-2*nh  # inner point = without halo
        m2 = m-2*nh
        self.shapes = [(nh, nh), (nh, n2), (nh, nh), (m2, nh),
                       (m2, nh), (nh, nh), (nh, n2), (nh, nh)]
        self.send, self.recv = halo_slices(nh)

        # preallocated buffers
        self.sbuff = []
        self.rbuff = []
        for k in range(8):
            self.sbuff.append(zeros(self.shapes[k]))
            self.rbuff.append(zeros(self.shapes[k]))

        self.reqs = []
        self.reqr = []
        for k in range(8):
            self.reqs.append(self.comm.Send_init(
                self.sbuff[k], neighbours[k], k))
            self.reqr.append(self.comm.Recv_init(
                self.rbuff[k], neighbours[7-k], k))

    def fill(self, x):
        """ fill the halo of x"""
        if self.method == 0:
            fillhalo(x, self.nh)

        elif self.method == 1:
            MPI.Prequest.Startall(self.reqr)

            # the [:] is mandatory to stream the data
            # in the preallocated buffers
            for k in range(8):
                self.sbuff[k][:, :] = x[self.send[k]]
            MPI.Prequest.Startall(self.reqs)

            MPI.Prequest.Waitall(self.reqr)
            for k in range(8):
                x[self.recv[k]] = self.rbuff[k]

            MPI.Prequest.Waitall(self.reqs)
