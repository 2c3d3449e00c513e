#! /usr/bin/env python
# -*- encoding: utf-8 -*-
# Michel Mooij, michel.mooij7@gmail.com

'''Makefile generator for portable C builds.

Translates executables, shared libraries, static libraries and generated
sources into a flat Makefile for GNU, MSVC, Sun C and generic POSIX
compilers on ELF, Mach-O and PE systems.
'''

from waflib import Logs

version = "0.1.0"

if Logs.log is None:
	Logs.init_log()
