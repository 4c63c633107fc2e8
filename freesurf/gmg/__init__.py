from freesurf.gmg.hierarchy import Gmg
