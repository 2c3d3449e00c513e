#! /usr/bin/env python
# -*- encoding: utf-8 -*-
# Michel Mooij, michel.mooij7@gmail.com

'''Detection of the shell dialect and of a working make utility.

Candidates are auditioned by running them on a small probe Makefile whose
targets echo sentinel strings; a candidate is adopted when its sentinel
shows up in the captured output.
'''

import os
import subprocess
import collections
from waflib import Utils, Logs
from portmake.env import ShellType

PROBE_MAKEFILE = '_portmake_Makefile'
PROBE_OUTPUT = '_portmake_make_out'

DEFAULT_SENTINEL = '5fa6c03b11e9d42a'
PATTERN_SENTINEL = 'b8271d09e4f063c5'

MAKE_CANDIDATES = {
	ShellType.POSIX : ['make', 'gmake', 'dmake', 'mingw32-make'],
	ShellType.CMD_EXE : ['nmake', 'dmake', 'mingw32-make'],
}

MakeInfo = collections.namedtuple('MakeInfo', 'make pattern_rules')


def run(cmd, **kw):
	'''runs cmd, returns (status, stdout) with stderr merged into stdout'''
	kw.setdefault('stdout', subprocess.PIPE)
	kw.setdefault('stderr', subprocess.STDOUT)
	status, out, _ = Utils.run_regular_process(cmd, kw)
	if out is not None:
		out = out.decode(Utils.console_encoding(), 'replace')
	return (status, out)


def detect_shell_type():
	'''
	cmd.exe uses '^' as escape character, so 'echo foo\\^bar' yields
	'foo\\bar' there and leaves the caret in place in a POSIX shell
	'''
	try:
		_, out = run('echo foo\\^bar', shell=True)
	except OSError as e:
		Logs.debug('portmake: shell detection failed: %s' % e)
		return ShellType.POSIX
	if out and out.strip() == 'foo\\bar':
		return ShellType.CMD_EXE
	return ShellType.POSIX


class ShellProbe(object):
	'''
	:param shell: shell type make runs its commands in
	:type shell: str
	:param workdir: directory used for the probe files
	:type workdir: str
	'''
	def __init__(self, shell, workdir='.'):
		ShellType.check(shell)
		self.shell = shell
		self.workdir = workdir

	def candidates(self):
		return list(MAKE_CANDIDATES[self.shell])

	def probe_makefile(self):
		s = 'foo:\n\t@echo %s\n\n' % DEFAULT_SENTINEL
		s += '%%.ext:\n\t@echo %s\n' % PATTERN_SENTINEL
		return s

	def attempt(self, make, target, sentinel):
		makefile = os.path.join(self.workdir, PROBE_MAKEFILE)
		output = os.path.join(self.workdir, PROBE_OUTPUT)
		cmd = [make, '-f', PROBE_MAKEFILE]
		if target:
			cmd.append(target)
		try:
			Utils.writef(makefile, self.probe_makefile())
			with open(output, 'wb') as f:
				try:
					run(cmd, cwd=self.workdir, stdout=f, stdin=subprocess.DEVNULL)
				except OSError as e:
					Logs.debug('portmake: cannot run %s: %s' % (make, e))
					return False
			content = Utils.readf(output)
		finally:
			for name in (makefile, output):
				if os.path.exists(name):
					os.remove(name)
		return sentinel in content

	def audition(self, make):
		'''True when make runs the default target of a Makefile'''
		ok = self.attempt(make, None, DEFAULT_SENTINEL)
		Logs.debug('portmake: make candidate %s %s' % (make, 'works' if ok else 'failed'))
		return ok

	def supports_pattern_rules(self, make):
		return self.attempt(make, 'foo.ext', PATTERN_SENTINEL)

	def detect(self, make=None):
		'''
		Finds a working make utility, the one given by the user or the
		first working candidate for the shell type.

		:returns: MakeInfo(make, pattern_rules); make is None when nothing works
		'''
		if make:
			if self.audition(make):
				return MakeInfo(make, self.supports_pattern_rules(make))
			Logs.warn("Make utility '%s' doesn't appear to work" % make)
			return MakeInfo(None, False)

		for name in self.candidates():
			if self.audition(name):
				return MakeInfo(name, self.supports_pattern_rules(name))
		Logs.warn('No working make utility found')
		return MakeInfo(None, False)
