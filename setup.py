#python  setup.py develop
from setuptools import setup

setup(
    name='freesurf',
    version='0.1',
    license='GPL3',
    packages=['freesurf',
              'freesurf.gmg'],
    package_data={'freesurf': ['defaults.json']},
    install_requires=['numpy', 'scipy'],
    extras_require={'mpi': ['mpi4py'],
                    'test': ['pytest']})
