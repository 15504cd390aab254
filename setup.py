"""
Packaging for lsp-connector-py. Tests are run with `pytest` from the package root
after installing the test extra: `pip install -e .[test]`
"""

from setuptools import setup

setup(
    name='lsp-connector-py',
    version='0.0.1',
    description='Connects editor sessions to external language servers over TCP, one connection per language.',
    url='',
    author='',
    author_email='',
    license='LGPL',
    package_dir={'': 'src'},
    packages=['lspconnector', 'lspconnector.conduit', 'lspconnector.config', 'lspconnector.connector',
              'lspconnector.support'],
    package_data={'lspconnector.config': ['*.cfg']},
    python_requires='>=3.8',
    install_requires=[
        'configobj>=5.0.6',
    ],
    extras_require={
        'test': ['pytest', 'PyHamcrest', 'timeout-decorator'],
    },
    zip_safe=False,
)
