from setuptools import setup, find_packages

setup(
    name='cfgkit',
    version='0.1.0',
    packages=find_packages(where='src'),
    package_dir={'': 'src'},
    package_data={'cfgkit': ['resources/.cfgkitrc']},
    include_package_data=True,
    python_requires='>=3.10',
    install_requires=[
        'frozendict>=2.3.4',
        'orderedset>=2.0.3',
        'returns>=0.19.0',
        'toml>=0.10.2',
    ],
    extras_require={
        'test': ['pytest>=7.1.2'],
    },
    license='GNU GPLv3',
    description='Context-free grammars: Chomsky Normal Form and derivation search'
)
