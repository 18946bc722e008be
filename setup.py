# -*- coding: utf-8 -*-
import setuptools
import pathlib
import site
import sys

# odd bug with develop (editable) installs, see: https://github.com/pypa/pip/issues/7953
site.ENABLE_USER_SITE = "--user" in sys.argv[1:]

required = [
    "numpy",
    "mashumaro",
    "loguru",
    "rich>=13.0.0",
    "click>=8.0.0",
]

extras = {
    "test": ["pytest"],
}

here = pathlib.Path(__file__).parent.resolve()

long_description = (here / "README.md").read_text(encoding="utf-8")

# Read version
version = {}
with open("src/gocator/_version.py", "r") as f:
    exec(f.read(), version)

if __name__ == "__main__":
    setuptools.setup(
        name="gocator",
        version=version["__version__"],
        description="Client, self-test and emulator for 3D profile sensors.",
        long_description=long_description,
        long_description_content_type="text/markdown",
        keywords=[
            "Gocator",
            "profile sensor",
            "laser profiler",
            "TCP",
        ],
        classifiers=[
            "Development Status :: 3 - Alpha",
        ],
        package_dir={"": "src"},
        packages=setuptools.find_packages(
            where="src",
            exclude=["*.test", "*.test.*", "test.*", "test", "test_*"],
        ),
        entry_points={
            "console_scripts": [
                "gocator=gocator.cli:cli",
            ],
        },
        install_requires=required,
        extras_require=extras,
        python_requires=">= 3.11",
        package_data={"": ["*.md"], "gocator": ["sysconfig/fleets/*.ini"]},
        setup_requires=["wheel"],  # force install of wheel first
    )
# https://setuptools.readthedocs.io/en/latest/userguide/datafiles.html
