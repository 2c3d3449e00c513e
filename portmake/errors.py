#! /usr/bin/env python
# -*- encoding: utf-8 -*-
# Michel Mooij, michel.mooij7@gmail.com

from waflib import Errors


class PortmakeError(Errors.WafError):
	'''Base class of all errors raised while generating a Makefile.'''
	pass


class UnsupportedCombination(PortmakeError):
	'''The requested flag or command has no spelling for this environment.

	:param style: compiler style, binary format or shell type involved
	:type style: str
	:param operation: name of the requested operation
	:type operation: str
	'''
	def __init__(self, style, operation):
		self.style = style
		self.operation = operation
		msg = "unsupported combination: %s with '%s'" % (operation, style)
		super(UnsupportedCombination, self).__init__(msg)
