""" A setuptools-based setup module. """

from os import path
from setuptools import setup, find_packages

here = path.abspath(path.dirname(__file__))

# Get the long description from the README file
with open(path.join(here, 'README.md'), encoding='utf-8') as f:
    long_description = f.read()

setup(
    name='tableaupublic', # Required

    # Versions should comply with PEP 440:
    # https://www.python.org/dev/peps/pep-0440/
    version='0.0.1',  # Required

    # A one-line description of what this project does.
    description='A tool for backing up workbooks from Tableau Public',  # Optional

    # An optional longer description of the project. PyPI uses this for the
    # body of text it shows users. This is the same as the README.
    long_description=long_description,  # Optional

    # The README is in Markdown.
    long_description_content_type='text/markdown',  # Optional

    author='Christopher Scott',  # Optional

    author_email='christopher@christopherscott.ca',  # Optional

    # For a list of valid classifiers, see https://pypi.org/classifiers/
    classifiers=[  # Optional
        'Development Status :: 3 - Alpha',

        'Intended Audience :: End Users/Desktop',
        'Topic :: Internet :: WWW/HTTP',
        'Topic :: System :: Archiving :: Backup',

        'License :: Other/Proprietary License',

        'Programming Language :: Python :: 3',
        'Programming Language :: Python :: 3.9',
        'Programming Language :: Python :: 3.10',
        'Programming Language :: Python :: 3.11',
        'Programming Language :: Python :: 3.12',

        'Natural Language :: English'
    ],

    # This field adds keywords for your project which will appear on the
    # project page. What does your project relate to?
    keywords='tableau tableau-public twb twbx backup',  # Optional

    packages=find_packages(exclude=['contrib', 'docs', 'test', 'tests']),  # Required

    python_requires='>=3.9',

    # Everything needed at runtime is in the standard library.
    install_requires=[],  # Optional

    # List additional groups of dependencies here (e.g. development
    # dependencies). The tests use `unittest`; pytest can also run them.
    extras_require={  # Optional
        'test': ['pytest'],
    },

    # Provides a command called `tableaupublic` which executes the function
    # `main` from `tableaupublic.script`.
    entry_points={  # Optional
        'console_scripts': [
            'tableaupublic=tableaupublic.script:main',
        ],
    },

    project_urls={  # Optional
        'Bug Reports': 'https://github.com/ChrisCScott/tableaupublic/issues',
        'Source': 'https://github.com/ChrisCScott/tableaupublic/',
    },
)
