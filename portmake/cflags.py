#! /usr/bin/env python
# -*- encoding: utf-8 -*-
# Michel Mooij, michel.mooij7@gmail.com

'''Compiler and linker flags spelled for a specific compiler style.

A :py:class:`CFlags` object collects flags as a single, space separated
string. The semantic operations (optimize, link a shared library, ...)
append whatever the compiler in use understands, or raise
:py:class:`portmake.errors.UnsupportedCombination` when there is no
sensible spelling.
'''

from waflib import Logs
from portmake.env import CompilerStyle, BinaryFormat
from portmake.errors import UnsupportedCombination
from portmake import library

# oldest Sun C compiler (__SUNPRO_C) accepting -xldscope
SUN_C_LDSCOPE_VERSION = '0x550'


class CFlags(object):
	def __init__(self, env):
		self.env = env
		self.style = env.style
		self.string = ''

	def __str__(self):
		return self.string

	def get(self):
		return self.string

	def is_empty(self):
		return not self.string

	def append(self, flag):
		if not flag:
			return
		if self.string:
			self.string = '%s %s' % (self.string, flag)
		else:
			self.string = flag

	def clear(self):
		self.string = ''

	def unsupported(self, operation):
		raise UnsupportedCombination(self.style, operation)

	def set_output_obj(self, filename):
		if self.style == CompilerStyle.MSVC:
			self.append('/c /Fo%s' % filename)
		else:
			self.append('-c -o %s' % filename)

	def set_output_exe(self, filename):
		if self.style == CompilerStyle.MSVC:
			self.append('/Fe%s' % filename)
		else:
			self.append('-o %s' % filename)

	def add_define(self, name, value=None):
		flag = '/D' if self.style == CompilerStyle.MSVC else '-D'
		if value is None:
			self.append('%s %s' % (flag, name))
		else:
			self.append('%s %s=%s' % (flag, name, value))

	def add_include_dir(self, path):
		if self.style == CompilerStyle.MSVC:
			self.append('/I %s' % path)
		else:
			self.append('-I %s' % path)

	def enable_optimization(self):
		if self.style == CompilerStyle.MSVC:
			self.append('/O2')
		elif self.style == CompilerStyle.GNU:
			self.append('-O2')
		elif self.style == CompilerStyle.SUN_C:
			self.append('-xO4')
		else:
			# POSIX c99 only knows -O with a level
			self.append('-O 1')

	def enable_debugging(self):
		if self.style in (CompilerStyle.GNU, CompilerStyle.SUN_C):
			self.append('-g')

	def disable_strict_aliasing(self):
		if self.style == CompilerStyle.MSVC:
			return
		if self.style == CompilerStyle.GNU:
			self.append('-fno-strict-aliasing')
		elif self.style == CompilerStyle.SUN_C:
			self.append('-xalias_level=any')
		else:
			self.unsupported('disable strict aliasing')

	def set_warnings_as_errors(self):
		if self.style == CompilerStyle.MSVC:
			self.append('/WX')
		elif self.style == CompilerStyle.GNU:
			self.append('-Werror')
		elif self.style == CompilerStyle.SUN_C:
			self.append('-errwarn=%all')
		else:
			self.unsupported('warnings as errors')

	def compile_shared_library(self):
		'''position independent code for objects ending up in a shared library'''
		binfmt = self.env.binfmt
		if self.style == CompilerStyle.MSVC:
			self.append('/MD')
		elif self.style == CompilerStyle.GNU:
			if binfmt == BinaryFormat.MACHO:
				self.append('-fno-common')
			elif binfmt == BinaryFormat.ELF:
				self.append('-fPIC')
		elif self.style == CompilerStyle.SUN_C:
			self.append('-KPIC')

	def hide_symbols(self):
		if self.style == CompilerStyle.GNU:
			if self.env.binfmt != BinaryFormat.PE:
				self.append('-fvisibility=hidden')
		elif self.style == CompilerStyle.SUN_C:
			probe = self.env.probe
			if probe is None:
				Logs.debug('portmake: no compiler probe, cannot check for -xldscope')
			elif probe.sun_c_version_at_least(SUN_C_LDSCOPE_VERSION):
				self.append('-xldscope=hidden')

	def link_shared_library(self, basename, version, major_version, dir=None):
		'''
		:param basename: library name without prefix or extension
		:type basename: str
		:param version: full version, e.g. '1.2.3'
		:type version: str
		:param major_version: ABI version, e.g. '1'
		:type major_version: str
		:param dir: output directory of the library, used for the
			import library written by GNU compilers on PE
		:type dir: str
		'''
		env = self.env
		if self.style == CompilerStyle.MSVC:
			self.append('/DLL')
		elif self.style == CompilerStyle.GNU:
			if env.binfmt == BinaryFormat.MACHO:
				self.append('-dynamiclib -current_version %s -compatibility_version %s' % (version, major_version))
			elif env.binfmt == BinaryFormat.ELF:
				soname = library.shared_lib_filename(env, None, basename, major_version)
				self.append('-shared -Wl,-soname,%s' % soname)
			elif env.binfmt == BinaryFormat.PE:
				implib = library.import_lib_filename(env, dir, basename, major_version)
				self.append('-shared -Wl,--out-implib,%s' % implib)
			else:
				raise UnsupportedCombination(env.binfmt, 'link shared library')
		elif self.style == CompilerStyle.SUN_C:
			soname = library.shared_lib_filename(env, None, basename, major_version)
			self.append('-G -h %s' % soname)
		else:
			self.unsupported('link shared library')

	def set_link_output(self, filename):
		if self.style == CompilerStyle.MSVC:
			self.append('/OUT:%s' % filename)
		else:
			self.append('-o %s' % filename)

	def add_library_path(self, path):
		if self.style == CompilerStyle.MSVC:
			# link.exe always searches the current directory
			if path != '.':
				self.append('/LIBPATH:%s' % path)
		else:
			self.append('-L %s' % path)

	def add_external_lib(self, lib):
		if self.style == CompilerStyle.MSVC:
			self.append('%s.lib' % lib)
		else:
			self.append('-l%s' % lib)

	def add_shared_lib(self, dir, basename, major_version):
		'''link against a shared library built by the same Makefile'''
		env = self.env
		if env.binfmt == BinaryFormat.PE:
			self.append(library.import_lib_filename(env, dir, basename, major_version))
		else:
			self.append(library.shared_lib_filename(env, dir, basename, major_version))

	def add_rpath(self, path):
		if self.env.binfmt != BinaryFormat.ELF:
			return
		if self.style == CompilerStyle.GNU:
			self.append('-Wl,-rpath,%s' % path)
		elif self.style == CompilerStyle.SUN_C:
			self.append('-R %s' % path)
		else:
			self.unsupported('rpath')

	def enable_code_coverage(self):
		if self.style == CompilerStyle.GNU:
			self.append('--coverage')
		else:
			self.unsupported('code coverage')
