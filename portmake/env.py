#! /usr/bin/env python
# -*- encoding: utf-8 -*-
# Michel Mooij, michel.mooij7@gmail.com

'''Facts about the build environment a Makefile is generated for.

An :py:class:`Environment` is created once, after probing or from the
command line, and handed to every object that needs to know how flags,
filenames or shell commands are spelled.
'''

import collections
from waflib import Utils
from portmake.errors import PortmakeError


class Choice(object):
	ALL = ()

	@classmethod
	def check(cls, value):
		if value not in cls.ALL:
			raise PortmakeError("unknown %s '%s' (expected one of: %s)" % (cls.__name__, value, ', '.join(cls.ALL)))
		return value


class CompilerStyle(Choice):
	'''command line dialect of the C compiler'''
	MSVC = 'msvc'
	GNU = 'gnu'
	SUN_C = 'sun_c'
	POSIX = 'posix'
	ALL = (MSVC, GNU, SUN_C, POSIX)


class BinaryFormat(Choice):
	'''object file container, uses the same names as waf's DEST_BINFMT'''
	ELF = 'elf'
	MACHO = 'mac-o'
	PE = 'pe'
	UNKNOWN = 'unknown'
	ALL = (ELF, MACHO, PE, UNKNOWN)


class ShellType(Choice):
	'''shell used by make to run commands'''
	POSIX = 'posix'
	CMD_EXE = 'cmd.exe'
	ALL = (POSIX, CMD_EXE)


# waf compiler names (CC_NAME) to compiler styles
CC_NAME_STYLES = {
	'msvc' : CompilerStyle.MSVC,
	'gcc' : CompilerStyle.GNU,
	'clang' : CompilerStyle.GNU,
	'icc' : CompilerStyle.GNU,
	'suncc' : CompilerStyle.SUN_C,
}


_fields = 'cc cflags style binfmt shell make pattern_rules cygwin ranlib probe'

class Environment(collections.namedtuple('Environment', _fields)):
	'''Immutable description of compiler, binary format and shell.

	:param cc: compiler command
	:type cc: str
	:param cflags: compiler flags used for every source
	:type cflags: str
	:param style: one of :py:class:`CompilerStyle`
	:param binfmt: one of :py:class:`BinaryFormat`
	:param shell: one of :py:class:`ShellType`
	:param make: name of a working make utility or None
	:param pattern_rules: True when make understands '%' pattern rules
	:param cygwin: use the 'cyg' prefix for library names
	:param ranlib: command used to index static libraries or None
	:param probe: :py:class:`portmake.compiler.CompilerProbe` used for
		lazy checks, may be None
	'''
	__slots__ = ()

	@classmethod
	def create(cls, cc, style, binfmt, shell=ShellType.POSIX, cflags='', make=None,
			pattern_rules=False, cygwin=False, ranlib=None, probe=None):
		CompilerStyle.check(style)
		BinaryFormat.check(binfmt)
		ShellType.check(shell)
		cflags = ' '.join(Utils.to_list(cflags))
		return cls(cc.strip(), cflags, style, binfmt, shell, make, bool(pattern_rules),
			bool(cygwin), ranlib, probe)

	@classmethod
	def from_configset(cls, cfg, shell=None, make=None, pattern_rules=False):
		'''Creates an environment from a waf ConfigSet (e.g. a c4che cache file).'''
		cc = ' '.join(Utils.to_list(cfg.CC))
		if not cc:
			raise PortmakeError('no C compiler (CC) in configuration set')
		style = CC_NAME_STYLES.get(cfg.CC_NAME or '', CompilerStyle.POSIX)
		binfmt = cfg.DEST_BINFMT
		if not binfmt:
			if cfg.DEST_OS:
				binfmt = Utils.destos_to_binfmt(cfg.DEST_OS)
			else:
				binfmt = host_binfmt()
		if binfmt not in BinaryFormat.ALL:
			binfmt = BinaryFormat.UNKNOWN
		if shell is None:
			shell = host_shell()
		return cls.create(cc, style, binfmt, shell=shell, cflags=cfg.CFLAGS, make=make,
			pattern_rules=pattern_rules, cygwin=(cfg.DEST_OS == 'cygwin'))

	def replace(self, **kw):
		return self._replace(**kw)

	@property
	def msvc(self):
		return self.style == CompilerStyle.MSVC

	@property
	def cmd_exe(self):
		return self.shell == ShellType.CMD_EXE

	@property
	def obj_ext(self):
		return '.obj' if self.msvc else '.o'

	@property
	def exe_ext(self):
		return '.exe' if self.binfmt == BinaryFormat.PE else ''

	@property
	def shared_lib_ext(self):
		if self.binfmt == BinaryFormat.PE:
			return '.dll'
		if self.binfmt == BinaryFormat.MACHO:
			return '.dylib'
		return '.so'

	@property
	def static_lib_ext(self):
		return '.lib' if self.msvc else '.a'

	@property
	def import_lib_ext(self):
		return '.lib' if self.msvc else '.dll.a'

	@property
	def export_ext(self):
		return '.exp'

	@property
	def dir_sep(self):
		return '\\' if self.cmd_exe else '/'

	@property
	def link(self):
		return 'link' if self.msvc else self.cc

	@property
	def lib_prefix(self):
		if self.msvc:
			return ''
		if self.cygwin:
			return 'cyg'
		return 'lib'


def host_shell():
	'''shell make uses on this host, without running anything'''
	if Utils.is_win32:
		return ShellType.CMD_EXE
	return ShellType.POSIX


def host_binfmt():
	return Utils.destos_to_binfmt(Utils.unversioned_sys_platform())
