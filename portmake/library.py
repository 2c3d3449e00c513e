#! /usr/bin/env python
# -*- encoding: utf-8 -*-
# Michel Mooij, michel.mooij7@gmail.com

'''Filenames of executables and libraries.

Shared libraries come in up to three names per binary format:

	========  ===================  =================  ===============
	format    no version           major version      full version
	========  ===================  =================  ===============
	ELF       libfoo.so            libfoo.so.1        libfoo.so.1.2.3
	Mach-O    libfoo.dylib         libfoo.1.dylib     libfoo.1.2.3.dylib
	PE        libfoo.dll           libfoo-1.dll       libfoo-1.2.3.dll
	========  ===================  =================  ===============

Import libraries and export files are always named after the major
version.
'''

from portmake.env import BinaryFormat


def lib_prefix(env):
	return env.lib_prefix


def join(env, dir, name):
	if dir is None or dir == '.':
		return name
	return '%s%s%s' % (dir, env.dir_sep, name)


def versioned_filename(env, dir, basename, version, ext):
	prefix = env.lib_prefix
	if version is None:
		name = prefix + basename + ext
	elif env.binfmt == BinaryFormat.PE:
		name = '%s%s-%s%s' % (prefix, basename, version, ext)
	elif env.binfmt == BinaryFormat.MACHO:
		name = '%s%s.%s%s' % (prefix, basename, version, ext)
	else:
		name = '%s%s%s.%s' % (prefix, basename, ext, version)
	return join(env, dir, name)


def shared_lib_filename(env, dir, basename, version=None):
	return versioned_filename(env, dir, basename, version, env.shared_lib_ext)


def import_lib_filename(env, dir, basename, major_version):
	return versioned_filename(env, dir, basename, major_version, env.import_lib_ext)


def export_filename(env, dir, basename, major_version):
	return versioned_filename(env, dir, basename, major_version, env.export_ext)


def static_lib_filename(env, dir, basename):
	# archives keep 'lib' on Cygwin too, -lfoo looks for libfoo.a
	prefix = '' if env.msvc else 'lib'
	return join(env, dir, prefix + basename + env.static_lib_ext)


def exe_filename(env, dir, basename):
	return join(env, dir, basename + env.exe_ext)
