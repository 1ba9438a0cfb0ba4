from setuptools import setup, find_packages

setup(
    name='envd-compiler',
    version='0.1',
    package_dir={'': 'src'},
    packages=find_packages('src'),
    install_requires=[
        'Click',
        'PyYAML',
        'pydantic>=2',
        'Jinja2',
    ],
    extras_require={
        'test': ['pytest', 'pytest-mock'],
    },
    entry_points='''
        [console_scripts]
        envd-compile=envd_compiler.cli:cli
    ''',
)
