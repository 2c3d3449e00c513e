#! /usr/bin/env python
# -*- encoding: utf-8 -*-
# Michel Mooij, michel.mooij7@gmail.com

'''Makefile synthesis.

A :py:class:`MakeFile` collects variables, rules and binaries (executables,
static and shared libraries) and renders them, exactly once, into the text
of a Makefile. All commands are spelled for the compiler style, binary
format and shell of the :py:class:`portmake.env.Environment` it was
created with.

Example::

	mk = MakeFile(env)
	mk.add_rule('all', '$(APP_EXE)')
	app = mk.add_exe(None, 'app')
	app.add_src_file('src', 'main.c')
	mk.write()
'''

import os
import re
import collections
from waflib import Utils, Logs, Context
import portmake
from portmake.env import BinaryFormat, ShellType
from portmake.cflags import CFlags
from portmake.errors import PortmakeError, UnsupportedCombination
from portmake import library


class MakeVar(object):
	'''A named value; more than one element is written as a continued list.'''
	def __init__(self, name, value=None):
		self.name = name
		self.value = ''
		self.num_elements = 0
		self.append(value)

	def append(self, element):
		if not element:
			return
		if self.num_elements == 0:
			self.value = element
		elif self.num_elements == 1:
			self.value = '\\\n    %s \\\n    %s' % (self.value, element)
		else:
			self.value = '%s \\\n    %s' % (self.value, element)
		self.num_elements += 1

	def render(self):
		return '%s = %s\n' % (self.name, self.value)


class MakeRule(object):
	'''Targets, prerequisites and the commands building the targets.'''
	def __init__(self, env, target, prereq=None):
		self.env = env
		self.targets = ''
		self.prereqs = ''
		self.commands = []
		self.add_target(target)
		self.add_prereq(prereq)

	def add_target(self, target):
		self.targets = join(self.targets, target)

	def add_prereq(self, prereq):
		self.prereqs = join(self.prereqs, prereq)

	def add_command(self, command):
		self.commands.append(command)

	def prepend_commands(self, commands):
		self.commands[0:0] = commands

	def add_rm_command(self, files):
		if self.env.shell == ShellType.POSIX:
			cmd = 'rm -f %s' % files
		elif self.env.shell == ShellType.CMD_EXE:
			cmd = 'for %%%%i in (%s) do @if exist %%%%i del /f %%%%i' % files
		else:
			raise UnsupportedCombination(self.env.shell, 'rm')
		self.add_command(cmd)

	def add_recursive_rm_command(self, dirs):
		if self.env.shell == ShellType.POSIX:
			cmd = 'rm -rf %s' % dirs
		elif self.env.shell == ShellType.CMD_EXE:
			cmd = 'for %%%%i in (%s) do @if exist %%%%i rmdir /s /q %%%%i' % dirs
		else:
			raise UnsupportedCombination(self.env.shell, 'recursive rm')
		self.add_command(cmd)

	def add_mkdir_command(self, dir):
		if self.env.shell == ShellType.POSIX:
			cmd = 'mkdir -p "%s"' % dir
		elif self.env.shell == ShellType.CMD_EXE:
			cmd = 'if not exist "%s" mkdir "%s"' % (dir, dir)
		else:
			raise UnsupportedCombination(self.env.shell, 'mkdir')
		self.add_command(cmd)

	def add_make_command(self, dir, target=None):
		make = '$(MAKE)'
		if target:
			make = '$(MAKE) %s' % target
		if self.env.shell == ShellType.POSIX:
			cmd = '(cd %s && %s)' % (dir, make)
		elif self.env.shell == ShellType.CMD_EXE:
			cmd = 'pushd %s && %s && popd' % (dir, make)
		else:
			raise UnsupportedCombination(self.env.shell, 'make')
		self.add_command(cmd)

	def add_symlink_command(self, src, link):
		if self.env.shell != ShellType.POSIX:
			raise UnsupportedCombination(self.env.shell, 'symlink')
		self.add_command('ln -sf %s %s' % (src, link))

	def add_command_with_libpath(self, command, dirs):
		'''runs command with the given directories on the shared library search path'''
		env = self.env
		dirs = Utils.to_list(dirs)
		if env.shell == ShellType.CMD_EXE:
			cmd = 'path %s;%%path%% && %s' % (';'.join(dirs), command)
		elif env.shell == ShellType.POSIX:
			if env.binfmt == BinaryFormat.ELF:
				var = 'LD_LIBRARY_PATH'
			elif env.binfmt == BinaryFormat.MACHO:
				var = 'DYLD_LIBRARY_PATH'
			elif env.binfmt == BinaryFormat.PE:
				var = 'PATH'
			else:
				raise UnsupportedCombination(env.binfmt, 'library path')
			cmd = '%s=%s:$$%s %s' % (var, ':'.join(dirs), var, command)
		else:
			raise UnsupportedCombination(env.shell, 'library path')
		self.add_command(cmd)

	def render(self):
		s = '%s :' % self.targets
		if self.prereqs:
			s += ' %s' % self.prereqs
		s += '\n'
		for command in self.commands:
			s += '\t%s\n' % command
		s += '\n'
		return s


def join(s, item):
	if not item:
		return s
	if not s:
		return item
	return '%s %s' % (s, item)


class MakeBinary(object):
	'''An executable or library built by the Makefile.

	Never created directly, use :py:meth:`MakeFile.add_exe`,
	:py:meth:`MakeFile.add_static_lib` or :py:meth:`MakeFile.add_shared_lib`.
	'''
	EXE = 'exe'
	STATIC_LIB = 'static_lib'
	SHARED_LIB = 'shared_lib'

	DECLARED = 'declared'
	SOURCED = 'sourced'
	FINALIZED = 'finalized'
	WRITTEN = 'written'

	def __init__(self, makefile, kind, dir, basename, target, install=False):
		self.makefile = makefile
		self.env = makefile.env
		self.kind = kind
		self.dir = dir
		self.basename = basename
		self.target = target
		self.install = install
		self.version = None
		self.major_version = None
		self.path = None
		self.mpath = None
		self.state = MakeBinary.DECLARED

		self.sources = []
		self.single_sources = []
		self.source_dirs = []

		name = '%s_%s' % (basename.upper(), kind.upper())
		self.target_var = MakeVar(name, target)
		self.obj_var = MakeVar('%s_OBJS' % name)
		self.cflags_var = MakeVar('%s_CFLAGS' % name)
		self.ldflags_var = MakeVar('%s_LDFLAGS' % name)

		self.compile_flags = CFlags(self.env)
		self.link_flags = CFlags(self.env)
		self.rule = MakeRule(self.env, target, self.obj_string())

	def __repr__(self):
		return '<MakeBinary %s %s>' % (self.kind, self.target)

	def get_target(self):
		return self.target

	def get_compile_flags(self):
		return self.compile_flags

	def get_link_flags(self):
		return self.link_flags

	def obj_string(self):
		return '$(%s)' % self.obj_var.name

	def add_prereq(self, prereq):
		self.rule.add_prereq(prereq)

	def check_open(self):
		if self.state not in (MakeBinary.DECLARED, MakeBinary.SOURCED):
			raise PortmakeError('cannot add sources to %s, it is %s' % (self.target, self.state))
		self.state = MakeBinary.SOURCED

	def add_source(self, path):
		obj = self.makefile.obj_path(path)
		if obj is None:
			Logs.warn('Invalid source filename: %s' % path)
			return
		self.sources.append(path)
		self.obj_var.append(obj)

	def add_src_file(self, dir, filename):
		'''adds a single source file; it always gets its own compile rule'''
		self.check_open()
		if dir is None or dir == '.':
			path = filename
		else:
			path = '%s%s%s' % (dir, self.env.dir_sep, filename)
		self.single_sources.append(path)
		self.add_source(path)

	def add_src_dir(self, path):
		'''adds every C source below path'''
		self.check_open()
		self.source_dirs.append(path)
		for src in self.list_sources(path):
			self.add_source(src)

	def add_filtered_src_dir(self, path, accept):
		'''
		adds the C sources below path for which accept(dir, filename)
		returns True
		'''
		self.check_open()
		sep = self.env.dir_sep
		for src in self.list_sources(path):
			dir, filename = src.rsplit(sep, 1)
			if accept(dir, filename):
				self.single_sources.append(src)
				self.add_source(src)

	def list_sources(self, path):
		ctx = Context.Context(run_dir=os.path.abspath(path))
		node = ctx.path
		if node is None:
			raise PortmakeError('source directory not found: %s' % path)
		files = [n.path_from(node).replace(os.sep, '/') for n in node.ant_glob('**/*.c')]
		sep = self.env.dir_sep
		return [path + sep + f.replace('/', sep) for f in sorted(files)]

	def finalize(self):
		if self.state in (MakeBinary.FINALIZED, MakeBinary.WRITTEN):
			raise PortmakeError('%s has already been finalized' % self.target)
		if self.kind == MakeBinary.EXE:
			self.finalize_exe()
		elif self.kind == MakeBinary.STATIC_LIB:
			self.finalize_static_lib()
		else:
			self.finalize_shared_lib()
		self.cflags_var.append(self.compile_flags.get())
		self.ldflags_var.append(self.link_flags.get())
		self.state = MakeBinary.FINALIZED

	def link_command(self, flags):
		return '$(LINK) %s %s $(%s)' % (flags, self.obj_string(), self.ldflags_var.name)

	def finalize_exe(self):
		env = self.env
		flags = CFlags(env)
		if env.msvc:
			flags.append('/nologo')
		flags.set_link_output('$@')
		self.rule.add_command(self.link_command(flags))
		if self.install:
			self.makefile.add_install(self.target, '$(BINDIR)')

	def finalize_static_lib(self):
		env = self.env
		if env.msvc:
			self.rule.add_command('lib /nologo /OUT:$@ %s' % self.obj_string())
		else:
			self.rule.add_command('ar rcs $@ %s' % self.obj_string())
		if env.ranlib:
			self.rule.add_command('%s $@' % env.ranlib)
		if self.install:
			self.makefile.add_install(self.target, '$(LIBDIR)')

	def finalize_shared_lib(self):
		env = self.env
		mk = self.makefile
		binfmt = env.binfmt
		name = library.shared_lib_filename(env, None, self.basename)
		mname = library.shared_lib_filename(env, None, self.basename, self.major_version)
		vname = library.shared_lib_filename(env, None, self.basename, self.version)

		self.compile_flags.compile_shared_library()

		flags = CFlags(env)
		if env.msvc:
			flags.append('/nologo')
		flags.set_link_output('$@')
		flags.link_shared_library(self.basename, self.version, self.major_version, dir=self.dir)
		if binfmt == BinaryFormat.MACHO:
			# corrected by install_name_tool when installed
			flags.append('-install_name "$(CURDIR)/%s"' % self.mpath)
		self.rule.add_command(self.link_command(flags))

		if self.install:
			if binfmt == BinaryFormat.PE:
				mk.add_install(self.target, '$(BINDIR)')
			else:
				mk.add_install(self.target, '$(LIBDIR)')

		if binfmt in (BinaryFormat.ELF, BinaryFormat.MACHO):
			# Mach-O links the unversioned name straight to the real file
			if binfmt == BinaryFormat.MACHO:
				ltarget = vname
			else:
				ltarget = mname
			# version equal to the major version: the target is the major name
			collapsed = (vname == mname)
			if not collapsed:
				self.rule.add_symlink_command(vname, self.mpath)
				mk.clean.add_rm_command(self.mpath)
			self.rule.add_symlink_command(ltarget, self.path)
			mk.clean.add_rm_command(self.path)
			if self.install:
				if not collapsed:
					mk.install.add_symlink_command(vname, '"$(LIBDIR)/%s"' % mname)
				mk.install.add_symlink_command(ltarget, '"$(LIBDIR)/%s"' % name)
				if binfmt == BinaryFormat.MACHO:
					mk.install.add_command('install_name_tool -id "$(LIBDIR)/%s" "$(LIBDIR)/%s"' % (mname, vname))
		elif binfmt == BinaryFormat.PE:
			implib = library.import_lib_filename(env, self.dir, self.basename, self.major_version)
			mk.clean.add_rm_command(implib)
			if self.install:
				mk.add_install(implib, '$(LIBDIR)')

		if env.msvc:
			mk.clean.add_rm_command(library.export_filename(env, self.dir, self.basename, self.major_version))

	def compile_rules(self):
		'''
		rules compiling the sources with the flags of this binary; without
		extra flags the default suffix rule does the job
		'''
		env = self.env
		if self.compile_flags.is_empty():
			return ''

		cc = '$(CC)'
		if env.msvc:
			cc = '$(CC) /nologo'
		output = CFlags(env)
		output.set_output_obj('$@')
		cflags = '$(%s)' % self.cflags_var.name
		sep = env.dir_sep

		s = ''
		if not env.pattern_rules or env.cmd_exe:
			sources = self.sources
		else:
			for dir in self.source_dirs:
				rule = MakeRule(env, '%s%s%%%s' % (dir, sep, env.obj_ext), '%s%s%%.c' % (dir, sep))
				rule.add_command('%s $(CFLAGS) %s $< %s' % (cc, cflags, output))
				s += rule.render()
			sources = self.single_sources

		for src in sources:
			obj = self.makefile.obj_path(src)
			if obj is None:
				continue
			rule = MakeRule(env, obj, src)
			rule.add_command('%s $(CFLAGS) %s %s %s' % (cc, cflags, src, output))
			s += rule.render()
		return s


class MakeFile(object):
	'''Variables, rules and binaries of one Makefile.

	:param env: environment the Makefile is generated for
	:type env: :py:class:`portmake.env.Environment`
	:param generated: files removed by 'make distclean'
	:type generated: list or str
	'''
	def __init__(self, env, generated=('Makefile',)):
		self.env = env
		self.options = None
		self.vars = []
		self.rules = []
		self.binaries = []
		self.install_dirs = []
		self.rendered = False

		sep = env.dir_sep
		self.dirs = collections.OrderedDict()
		self.dirs['PREFIX'] = '/usr/local'
		self.dirs['BINDIR'] = '$(PREFIX)%sbin' % sep
		self.dirs['DATAROOTDIR'] = '$(PREFIX)%sshare' % sep
		self.dirs['DATADIR'] = '$(DATAROOTDIR)'
		self.dirs['LIBDIR'] = '$(PREFIX)%slib' % sep
		self.dirs['MANDIR'] = '$(DATAROOTDIR)%sman' % sep

		self.install = MakeRule(env, 'install', 'all')
		self.clean = MakeRule(env, 'clean')
		self.distclean = MakeRule(env, 'distclean', 'clean')
		self.add_generated(generated)

	def set_install_dir(self, name, value):
		'''default of an install directory variable, e.g. ('LIBDIR', '/opt/lib')'''
		if name not in self.dirs:
			raise PortmakeError('unknown install directory %s' % name)
		self.dirs[name] = value

	def reserved(self):
		return ['SHELL', 'CC', 'LINK', 'CFLAGS'] + list(self.dirs.keys())

	def get_var(self, name):
		for var in self.vars:
			if var.name == name:
				return var
		return None

	def add_var(self, name, value=None):
		if name in self.reserved() or self.get_var(name):
			raise PortmakeError('make variable %s has already been defined' % name)
		var = MakeVar(name, value)
		self.vars.append(var)
		return var

	def add_rule(self, target, prereq=None):
		rule = MakeRule(self.env, target, prereq)
		self.rules.append(rule)
		return rule

	def get_rule(self, target):
		for rule in self.rules:
			if rule.targets == target:
				return rule
		return None

	def install_rule(self):
		return self.install

	def clean_rule(self):
		return self.clean

	def distclean_rule(self):
		return self.distclean

	def add_generated(self, files):
		files = Utils.to_list(files)
		if files:
			self.distclean.add_rm_command(' '.join(files))

	def obj_path(self, src):
		'''
		object file for a source file, None when the filename has no
		extension
		'''
		seps = ('/', self.env.dir_sep)
		i = len(src) - 1
		while i >= 0:
			c = src[i]
			if c in seps:
				return None
			if c == '.':
				return src[:i] + self.env.obj_ext
			i -= 1
		return None

	def add_binary(self, kind, dir, basename, target, install=False):
		binary = MakeBinary(self, kind, dir, basename, target, install)
		for var in (binary.target_var, binary.obj_var, binary.cflags_var, binary.ldflags_var):
			if var.name in self.reserved() or self.get_var(var.name):
				raise PortmakeError('make variable %s has already been defined' % var.name)
			self.vars.append(var)
		self.clean.add_rm_command(binary.obj_string())
		self.clean.add_rm_command(target)
		self.binaries.append(binary)
		return binary

	def add_exe(self, dir, basename, install=False):
		target = library.exe_filename(self.env, dir, basename)
		return self.add_binary(MakeBinary.EXE, dir, basename, target, install)

	def add_static_lib(self, dir, basename, install=False):
		target = library.static_lib_filename(self.env, dir, basename)
		return self.add_binary(MakeBinary.STATIC_LIB, dir, basename, target, install)

	def add_shared_lib(self, dir, basename, version, major_version, install=False):
		env = self.env
		if not version or not major_version:
			raise PortmakeError('shared library %s needs a version and a major version' % basename)
		path = library.shared_lib_filename(env, dir, basename)
		if env.binfmt == BinaryFormat.PE:
			vpath = library.shared_lib_filename(env, dir, basename, major_version)
			mpath = None
		else:
			vpath = library.shared_lib_filename(env, dir, basename, version)
			mpath = library.shared_lib_filename(env, dir, basename, major_version)

		binary = self.add_binary(MakeBinary.SHARED_LIB, dir, basename, vpath, install)
		binary.version = version
		binary.major_version = major_version
		binary.path = path
		binary.mpath = mpath
		return binary

	def add_lemon_exe(self, dir):
		'''the lemon parser generator, built from dir/lemon.c'''
		exe = self.add_exe(dir, 'lemon')
		exe.add_src_file(dir, 'lemon.c')
		return exe

	def add_lemon_grammar(self, base):
		'''generates base.c and base.h from the grammar base.y'''
		c_file = '%s.c' % base
		h_file = '%s.h' % base
		y_file = '%s.y' % base

		rule = self.add_rule(c_file, y_file)
		rule.add_prereq('$(LEMON_EXE)')
		rule.add_command('$(LEMON_EXE) -q %s' % y_file)
		self.clean.add_rm_command(h_file)
		self.clean.add_rm_command(c_file)
		return rule

	def add_install_path(self, path):
		if path not in self.install_dirs:
			self.install_dirs.append(path)

	def install_path(self, root, dest):
		if dest:
			return '%s%s%s' % (root, self.env.dir_sep, dest)
		return root

	def add_install(self, src, root, dest=None):
		'''copies the file src into root/dest when running 'make install' '''
		path = self.install_path(root, dest)
		self.add_install_path(path)
		if self.env.shell == ShellType.POSIX:
			cmd = 'cp -f %s "%s"' % (src, path)
		elif self.env.shell == ShellType.CMD_EXE:
			cmd = 'copy /y %s "%s" >nul' % (src, path)
		else:
			raise UnsupportedCombination(self.env.shell, 'install')
		self.install.add_command(cmd)

	def add_install_dir(self, src, root, dest=None):
		'''copies the contents of directory src into root/dest'''
		path = self.install_path(root, dest)
		self.add_install_path(path)
		if self.env.shell == ShellType.POSIX:
			cmd = 'cp -Rf %s/* "%s"' % (src, path)
		elif self.env.shell == ShellType.CMD_EXE:
			cmd = 'xcopy /seiy %s "%s" >nul' % (src, path)
		else:
			raise UnsupportedCombination(self.env.shell, 'install directory')
		self.install.add_command(cmd)

	def add_install_pkgconfig(self, name, version, content):
		'''writes $(LIBDIR)/pkgconfig/name.pc when running 'make install' '''
		if self.env.shell != ShellType.POSIX:
			raise UnsupportedCombination(self.env.shell, 'pkg-config install')
		path = '$(LIBDIR)/pkgconfig'
		self.add_install_path(path)
		s = content.replace('\\', '\\\\')
		s = s.replace('%', '%%')
		s = s.replace("'", '\\047')
		s = s.replace('$', '$$')
		s = s.replace('\n', '\\n')
		cmd = "printf 'libdir=$(LIBDIR)\\nversion=%s\\n\\n%s' >\"%s/%s.pc\"" % (version, s, path, name)
		self.install.add_command(cmd)

	def populate(self, content):
		s = content
		s = re.sub('==VERSION==', portmake.version, s)
		s = re.sub('==STYLE==', self.env.style, s)
		s = re.sub('==BINFMT==', self.env.binfmt, s)
		s = re.sub('==SHELL==', self.env.shell, s)
		return s

	def suffix_rule(self):
		if self.env.msvc:
			return '.c.obj :\n\t$(CC) /nologo $(CFLAGS) /c $< /Fo$@\n\n'
		return '.c.o :\n\t$(CC) $(CFLAGS) -c $< -o $@\n\n'

	def render(self):
		'''
		Finalizes all binaries and returns the text of the Makefile. A
		MakeFile can be rendered only once.
		'''
		if self.rendered:
			raise PortmakeError('Makefile has already been rendered')
		self.rendered = True
		env = self.env

		for binary in self.binaries:
			binary.finalize()

		s = self.populate(MAKEFILE_HEADER)
		if env.cmd_exe:
			s += 'SHELL = cmd\n'
		s += MakeVar('CC', env.cc).render()
		s += MakeVar('LINK', env.link).render()
		s += MakeVar('CFLAGS', env.cflags).render()
		for name, value in self.dirs.items():
			s += MakeVar(name, value).render()
		for var in self.vars:
			s += var.render()
		s += '\n'

		for rule in self.rules:
			s += rule.render()
		for binary in self.binaries:
			s += binary.rule.render()
			s += binary.compile_rules()
			binary.state = MakeBinary.WRITTEN

		if self.install_dirs:
			rule = MakeRule(env, 'install')
			for path in self.install_dirs:
				rule.add_mkdir_command(path)
			self.install.prepend_commands(rule.commands)
		s += self.install.render()
		s += self.clean.render()
		s += self.distclean.render()
		s += self.suffix_rule()
		return s

	def write(self, path='Makefile'):
		'''renders the Makefile and stores it using UNIX newlines'''
		s = self.render()
		Utils.writef(path, s)
		Logs.debug('portmake: wrote %s' % path)
		return s


MAKEFILE_HEADER = \
'''#------------------------------------------------------------------------------
# PORTMAKE generated makefile
# version: ==VERSION==
# compiler: ==STYLE==, format: ==BINFMT==, shell: ==SHELL==
#------------------------------------------------------------------------------

'''
