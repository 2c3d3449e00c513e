#! /usr/bin/env python
# -*- encoding: utf-8 -*-
# Michel Mooij, michel.mooij7@gmail.com

'''Compiler probing primitives.

Compiles (and optionally runs) tiny test programs to find out which
compiler style and binary format are in use. Nothing here writes to the
Makefile; the results end up in a :py:class:`portmake.env.Environment`.
'''

import os
import subprocess
from waflib import Utils, Logs
from portmake.env import CompilerStyle, BinaryFormat
from portmake.errors import PortmakeError

TRY_NAME = '_portmake_try'

TRY_MINIMAL = '''
int main(void) {
	return 0;
}
'''

TRY_CONDITION = '''
#if !(%s)
#error condition not met
#endif
int portmake_dummy;
'''


class CompilerProbe(object):
	'''
	:param cc: compiler command, e.g. 'gcc' or 'cc -m32'
	:type cc: str or list
	:param cflags: extra flags for every probe
	:type cflags: str or list
	:param workdir: directory for the temporary probe files
	:type workdir: str
	'''
	def __init__(self, cc, cflags=None, workdir='.'):
		self.cc = Utils.to_list(cc)
		self.cflags = Utils.to_list(cflags or [])
		self.workdir = workdir
		self.style = None
		self.cache = {}

	def path(self, name):
		return os.path.join(self.workdir, name)

	def get_command(self, source, output, link):
		cmd = self.cc + self.cflags
		if self.style == CompilerStyle.MSVC:
			cmd += ['/nologo', source]
			if link:
				cmd.append('/Fe%s' % output)
			else:
				cmd += ['/c', '/Fo%s' % output]
		else:
			cmd.append(source)
			if not link:
				cmd.append('-c')
			cmd += ['-o', output]
		return cmd

	def cleanup(self, names):
		for name in names:
			path = self.path(name)
			if os.path.exists(path):
				os.remove(path)

	def compile(self, code, output, link):
		source = '%s.c' % TRY_NAME
		Utils.writef(self.path(source), code)
		cmd = self.get_command(source, output, link)
		try:
			status, out, _ = Utils.run_regular_process(cmd, {'cwd': self.workdir,
				'stdout': subprocess.PIPE, 'stderr': subprocess.STDOUT})
		except OSError as e:
			raise PortmakeError('cannot run compiler %s' % ' '.join(self.cc), e)
		if status:
			Logs.debug('portmake: %s failed: %s' % (' '.join(cmd), out.decode(Utils.console_encoding(), 'replace')))
		return status == 0

	def test_compile(self, code):
		'''compiles code into an object file; True when that works'''
		obj = TRY_NAME + ('.obj' if self.style == CompilerStyle.MSVC else '.o')
		try:
			return self.compile(code, obj, False)
		finally:
			self.cleanup(['%s.c' % TRY_NAME, obj])

	def compile_and_capture(self, code):
		'''
		compiles, links and runs code

		:returns: standard output of the program or None when any step fails
		'''
		exe = '%s.exe' % TRY_NAME
		garbage = ['%s.c' % TRY_NAME, exe, '%s.obj' % TRY_NAME, '%s.o' % TRY_NAME]
		try:
			if not self.compile(code, exe, True):
				return None
			cmd = [os.path.abspath(self.path(exe))]
			try:
				status, out, _ = Utils.run_regular_process(cmd, {'cwd': self.workdir, 'stdout': subprocess.PIPE})
			except OSError as e:
				Logs.debug('portmake: cannot run %s: %s' % (exe, e))
				return None
			if status:
				return None
			return out.decode(Utils.console_encoding(), 'replace')
		finally:
			self.cleanup(garbage)

	def check_condition(self, expr):
		'''True when the preprocessor expression holds for this compiler'''
		return self.test_compile(TRY_CONDITION % expr)

	def has_macro(self, name):
		return self.check_condition('defined(%s)' % name)

	def detect_style(self):
		'''
		Finds out how to talk to the compiler: GNU style output flags are
		tried first, MSVC ones second; predefined macros tell the rest.
		'''
		for style in (CompilerStyle.GNU, CompilerStyle.MSVC):
			self.style = style
			if self.test_compile(TRY_MINIMAL):
				break
		else:
			self.style = None
			raise PortmakeError("compiler '%s' failed to compile a trivial program" % ' '.join(self.cc))

		if self.style == CompilerStyle.MSVC:
			pass
		elif self.has_macro('__GNUC__'):
			self.style = CompilerStyle.GNU
		elif self.has_macro('_MSC_VER'):
			self.style = CompilerStyle.MSVC
		elif self.has_macro('__SUNPRO_C'):
			self.style = CompilerStyle.SUN_C
		else:
			self.style = CompilerStyle.POSIX
		Logs.debug('portmake: compiler style %s' % self.style)
		return self.style

	def detect_binfmt(self):
		if self.check_condition('defined(__APPLE__) && defined(__MACH__)'):
			binfmt = BinaryFormat.MACHO
		elif self.check_condition('defined(_WIN32) || defined(__CYGWIN__)'):
			binfmt = BinaryFormat.PE
		elif self.check_condition('defined(__ELF__) || defined(__sun)'):
			binfmt = BinaryFormat.ELF
		else:
			binfmt = BinaryFormat.UNKNOWN
		Logs.debug('portmake: binary format %s' % binfmt)
		return binfmt

	def is_cygwin(self):
		return self.has_macro('__CYGWIN__')

	def sun_c_version_at_least(self, version):
		'''
		:param version: version number as written by __SUNPRO_C, e.g. '0x550'
		:type version: str
		'''
		key = ('sun_c', version)
		if key not in self.cache:
			self.cache[key] = self.check_condition('defined(__SUNPRO_C) && __SUNPRO_C >= %s' % version)
		return self.cache[key]
