#! /usr/bin/env python
# -*- encoding: utf-8 -*-
# Michel Mooij, michel.mooij7@gmail.com

'''
DESCRIPTION:
Generates a Makefile for a C project from a build description.

The build description (portfile.py by default) is a python script which
defines a makefile(mk) function and, optionally, an options(opt) function
adding its own command line options:

	def makefile(mk):
		mk.add_rule('all', '$(HELLO_EXE)')
		exe = mk.add_exe(None, 'hello', install=True)
		exe.add_src_dir('src')

USAGE:
	portmake --cc=CC [options] [-- extra compiler flags]
'''

import os
import sys
import optparse
from waflib import Context, ConfigSet, Errors, Logs
import portmake
from portmake.env import Environment, CompilerStyle, BinaryFormat, ShellType
from portmake.compiler import CompilerProbe
from portmake.shell import ShellProbe, detect_shell_type
from portmake.make import MakeFile
from portmake.report import MakefileReport
from portmake.errors import PortmakeError

DEFAULT_SCRIPT = 'portfile.py'
MAKEFILE = 'Makefile'

INSTALL_DIRS = ['prefix', 'bindir', 'datarootdir', 'datadir', 'libdir', 'mandir']


def options(opt):
	opt.add_option('--cc', dest='cc', default=None, action='store',
		help='C compiler command (required unless --waf-config is used)')

	opt.add_option('--make', dest='make', default=None, action='store',
		help='make utility to use (default=first working candidate)')

	opt.add_option('--style', dest='style', default=None, action='store',
		type='choice', choices=list(CompilerStyle.ALL),
		help='compiler style, skips detection (%s)' % ', '.join(CompilerStyle.ALL))

	opt.add_option('--binfmt', dest='binfmt', default=None, action='store',
		type='choice', choices=list(BinaryFormat.ALL),
		help='binary format, skips detection (%s)' % ', '.join(BinaryFormat.ALL))

	opt.add_option('--shell', dest='shell', default=None, action='store',
		type='choice', choices=list(ShellType.ALL),
		help='shell used by make, skips detection (%s)' % ', '.join(ShellType.ALL))

	opt.add_option('--waf-config', dest='waf_config', default=None, action='store',
		help='take compiler, flags and binary format from a waf configuration cache')

	opt.add_option('--script', dest='script', default=DEFAULT_SCRIPT, action='store',
		help='build description (default=%s)' % DEFAULT_SCRIPT)

	opt.add_option('--enable-coverage', dest='coverage', default=False,
		action='store_true', help='instrument all binaries for code coverage (default=False)')

	opt.add_option('--cygwin', dest='cygwin', default=False, action='store_true',
		help="use the 'cyg' prefix for library names (default=False)")

	opt.add_option('--ranlib', dest='ranlib', default=None, action='store',
		help='index static libraries with this command (default=none)')

	opt.add_option('--html', dest='html', default=None, action='store',
		help='also write an HTML view of the Makefile to this file')

	opt.add_option('-v', '--verbose', dest='verbose', default=0, action='count',
		help='verbosity level, -v shows probe details')

	for name in INSTALL_DIRS:
		opt.add_option('--%s' % name, dest=name, default=None, action='store',
			help='default of $(%s) in the Makefile' % name.upper())


def find_script(argv):
	'''the build description has to be loaded before parsing all options'''
	for (i, arg) in enumerate(argv):
		if arg == '--':
			break
		if arg.startswith('--script='):
			return arg[len('--script='):]
		if arg == '--script' and i + 1 < len(argv):
			return argv[i + 1]
	return DEFAULT_SCRIPT


def load_script(path):
	path = os.path.abspath(path)
	if not os.path.isfile(path):
		raise PortmakeError('build description not found: %s' % path)
	return Context.load_module(path)


def configure(opts, args):
	'''creates the environment from the options, probing whatever is not given'''
	cflags = ' '.join(args)
	if opts.waf_config:
		cfg = ConfigSet.ConfigSet(opts.waf_config)
		base = Environment.from_configset(cfg)
		cc = opts.cc or base.cc
		cflags = ' '.join([base.cflags, cflags]).strip()
		style = opts.style or base.style
		binfmt = opts.binfmt or base.binfmt
		cygwin = opts.cygwin or base.cygwin
	else:
		if not opts.cc:
			raise PortmakeError('no C compiler given, use --cc')
		cc = opts.cc
		style = opts.style
		binfmt = opts.binfmt
		cygwin = opts.cygwin

	probe = CompilerProbe(cc, cflags)
	if style:
		probe.style = style
	else:
		style = probe.detect_style()
	if not binfmt:
		binfmt = probe.detect_binfmt()
		cygwin = cygwin or probe.is_cygwin()

	shell = opts.shell or detect_shell_type()
	info = ShellProbe(shell).detect(opts.make)

	env = Environment.create(cc, style, binfmt, shell=shell, cflags=cflags, make=info.make,
		pattern_rules=info.pattern_rules, cygwin=cygwin, ranlib=opts.ranlib, probe=probe)
	Logs.info('compiler: %s (%s), binary format: %s, shell: %s, make: %s' %
		(env.cc, env.style, env.binfmt, env.shell, env.make or 'none'))
	return env


def generate(module, opts, env):
	fun = getattr(module, 'makefile', None)
	if fun is None:
		raise PortmakeError('%s does not define makefile(mk)' % opts.script)

	mk = MakeFile(env)
	mk.options = opts
	for name in INSTALL_DIRS:
		value = getattr(opts, name)
		if value:
			mk.set_install_dir(name.upper(), value)
	if opts.html:
		mk.add_generated(opts.html)

	fun(mk)

	if opts.coverage:
		for binary in mk.binaries:
			binary.get_compile_flags().enable_code_coverage()
			binary.get_link_flags().enable_code_coverage()
	return mk


def run(argv):
	module = load_script(find_script(argv))

	parser = optparse.OptionParser(usage=__doc__, version=portmake.version)
	options(parser)
	if hasattr(module, 'options'):
		module.options(parser)
	(opts, args) = parser.parse_args(argv)

	Logs.verbose = opts.verbose
	if opts.verbose:
		Logs.zones = ['portmake']

	env = configure(opts, args)
	mk = generate(module, opts, env)
	content = mk.write(MAKEFILE)
	Logs.info('wrote %s' % MAKEFILE)
	if opts.html:
		MakefileReport(mk, content).save(opts.html)
	return 0


def main(argv=None):
	if argv is None:
		argv = sys.argv[1:]
	try:
		return run(argv)
	except Errors.WafError as e:
		Logs.error(str(e))
		return 1


if __name__ == "__main__":
	sys.exit(main())
