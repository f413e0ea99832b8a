# SPDX-License-Identifier: GPL-3.0-only

"""setup
setuptools invocation for packaging the preoccupied.envsync distribution.

:author: Christopher O'Brien <obriencj@preoccupied.net>
:license: GNU General Public License v3
"""

from setuptools import find_namespace_packages, setup


if __name__ == "__main__":
    setup(
        name="preoccupied.envsync",
        version="0.1.0",
        description="Persistent, tmux-synchronized shared environment variables",
        author="Christopher O'Brien",
        author_email="obriencj@preoccupied.net",
        license="GPL-3.0-only",
        python_requires=">=3.9",
        packages=find_namespace_packages(include=["preoccupied.*"]),
        install_requires=[
            "click>=8.0",
            "pydantic>=2.0",
            "PyYAML>=6.0",
        ],
        extras_require={
            "test": [
                "pytest>=7.0",
            ],
        },
        entry_points={
            "console_scripts": [
                "envsync = preoccupied.envsync.cli:main",
            ],
        },
    )

# The end.
