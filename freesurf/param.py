import json
import os.path as path


class Param(object):
    """ settings of the free surface solver

    the defaults live in defaults.json, grouped by section (domain,
    vertical, physics, multigrid). Each entry has a 'default', a 'doc'
    and optionally
     - 'avail': the list of accepted values
     - 'min', 'max': inclusive bounds
     - 'positive': true if the value should be > 0

    objects pull the settings they need with param.copy(self, list_param)

    param = Param()
    param.man('cycle')
    """

    def __init__(self, defaultfile=None):
        if defaultfile is None:
            defaultfile = path.join(path.dirname(__file__), 'defaults.json')

        with open(defaultfile) as f:
            namelist = json.load(f)

        self.set_parameters(namelist)

    def set_parameters(self, namelist):
        self.avail = {}
        self.doc = {}
        self.bounds = {}
        for section in namelist.values():
            for name, entry in section.items():
                setattr(self, name, entry['default'])
                if 'avail' in entry:
                    self.avail[name] = entry['avail']
                if 'doc' in entry:
                    self.doc[name] = entry['doc']
                bounds = (entry.get('min'), entry.get('max'),
                          entry.get('positive', False))
                if bounds != (None, None, False):
                    self.bounds[name] = bounds

    def man(self, name):
        helpstr = self.doc.get(name, 'no manual for this parameter')
        if name in self.avail:
            availstr = ', '.join([str(v) for v in self.avail[name]])
            helpstr += ' / available values = ['+availstr+']'
        if name in self.bounds:
            vmin, vmax, positive = self.bounds[name]
            if positive:
                helpstr += ' / should be > 0'
            if vmin is not None:
                helpstr += ' / min = %s' % vmin
            if vmax is not None:
                helpstr += ' / max = %s' % vmax

        name = '\033[0;32;40m' + name + '\033[0m'
        print('  - "%s" : %s\n' % (name, helpstr))

    def manall(self):
        for p in self.listall():
            self.man(p)

    def checkall(self):
        """ raise a ValueError on the first parameter out of its
        available values or bounds """
        for p, avail in self.avail.items():
            if getattr(self, p) not in avail:
                raise ValueError('parameter "%s" should be in %s'
                                 % (p, avail))

        for p, (vmin, vmax, positive) in self.bounds.items():
            val = getattr(self, p)
            if val is None:
                # unset, the object using it picks a value
                continue
            if positive and not(val > 0):
                raise ValueError('parameter "%s" should be > 0, got %s'
                                 % (p, val))
            if (vmin is not None) and not(val >= vmin):
                raise ValueError('parameter "%s" should be >= %s, got %s'
                                 % (p, vmin, val))
            if (vmax is not None) and not(val <= vmax):
                raise ValueError('parameter "%s" should be <= %s, got %s'
                                 % (p, vmax, val))

    def listall(self):
        """ return the list of all the parameters"""
        return [d for d in self.__dict__
                if d not in ['avail', 'doc', 'bounds']]

    def printvalues(self):
        for d in self.listall():
            print('%20s :' % d, getattr(self, d))

    def copy(self, obj, list_param):
        """ copy attributes listed in list_param to obj

        On output it returns missing attributes
        """
        missing = []
        for k in list_param:
            if hasattr(self, k):
                setattr(obj, k, getattr(self, k))
            else:
                missing.append(k)
        return missing


if __name__ == "__main__":
    param = Param()
    param.printvalues()
    param.man('bottom_cells')
    param.checkall()
