
from setuptools import setup

setup(
    name = "portmake",
    packages = ["portmake", "portmake.tests"],
    version = "0.1.0",
    description = "Generates portable Makefiles for C projects (GNU, MSVC, Sun C; ELF, Mach-O, PE)",
    author = "Michel Mooij",
    author_email = "michel.mooij7@gmail.com",
    keywords = ["waf", "make", "makefile", "c", "shared library", "build"],
    install_requires = ["waflib", "pygments"],
    extras_require = {
        "test": ["pytest"],
    },
    entry_points = {
        "console_scripts": ["portmake = portmake.cli:main"],
    },
    classifiers = [
        "Programming Language :: Python",
        "Programming Language :: Python :: 3",
        "Development Status :: 4 - Beta",
        "Environment :: Console",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: GNU Library or Lesser General Public License (LGPL)",
        "Operating System :: OS Independent",
        "Topic :: Software Development :: Build Tools",
        ],
    long_description = """\
portmake turns a python build description into a flat Makefile with
compiler flags, library names and shell commands spelled for the
detected compiler, binary format and shell.
"""
)
