# Michel Mooij, michel.mooij7@gmail.com

"""Tests for portmake."""

import unittest
from portmake.env import Environment


class TestCase(unittest.TestCase):
	"""A portmake test case."""

	def make_env(self, style='gnu', binfmt='elf', shell='posix', cc='cc', **kw):
		return Environment.create(cc, style, binfmt, shell=shell, **kw)


def removed_files(rule):
	'''names removed by the rm commands of a rule'''
	names = []
	for cmd in rule.commands:
		if cmd.startswith('rm -f '):
			names.extend(cmd[len('rm -f '):].split())
		elif cmd.startswith('for %%i in ('):
			names.extend(cmd[len('for %%i in ('):cmd.index(')')].split())
	return names
