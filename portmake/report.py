#! /usr/bin/env python
# -*- encoding: utf-8 -*-
# Michel Mooij, michel.mooij7@gmail.com

'''HTML view of a generated Makefile.

Lists the binaries of the Makefile and shows the Makefile itself with
syntax highlighting; the rule of each binary is marked in the listing.
'''

import xml.etree.ElementTree as ElementTree
from xml.sax.saxutils import escape
import pygments
from pygments import formatters, lexers
from waflib import Utils, Logs
import portmake

KIND_NAMES = {
	'exe' : 'executable',
	'static_lib' : 'static library',
	'shared_lib' : 'shared library',
}


class MakefileReport(object):
	'''
	:param makefile: the rendered MakeFile
	:type makefile: :py:class:`portmake.make.MakeFile`
	:param content: text returned by MakeFile.render() or write()
	:type content: str
	'''
	def __init__(self, makefile, content):
		self.makefile = makefile
		self.content = content

	def html_clean(self, content):
		h = '<!DOCTYPE HTML PUBLIC "-//W3C//DTD HTML 4.01//EN" "http://www.w3.org/TR/html4/strict.dtd">'
		lines = [l for l in content.splitlines() if len(l.strip())]
		lines.insert(0, h)
		return '\n'.join(lines)

	def get_marks(self):
		'''line numbers of the binary rules in the Makefile'''
		marks = {}
		lines = self.content.splitlines()
		for binary in self.makefile.binaries:
			header = '%s :' % binary.rule.targets
			for (i, line) in enumerate(lines):
				if line.startswith(header):
					marks[i + 1] = '%s %s' % (KIND_NAMES.get(binary.kind, binary.kind), binary.target)
					break
		return marks

	def create_table(self, content):
		table = ElementTree.fromstring(MAKEFILE_HTML_TABLE)
		for binary in self.makefile.binaries:
			tr = ElementTree.SubElement(table, 'tr')
			for text in (binary.basename, KIND_NAMES.get(binary.kind, binary.kind), binary.target, binary.obj_string()):
				td = ElementTree.SubElement(tr, 'td')
				td.text = text
		content.append(table)

	def create_listing(self, content, marks):
		formatter = MakefileHtmlFormatter(marks, linenos=True, style='colorful', hl_lines=sorted(marks.keys()))
		lexer = pygments.lexers.MakefileLexer()
		s = pygments.highlight(self.content, lexer, formatter)
		content.append(ElementTree.fromstring(s))
		return formatter.get_style_defs('.highlight')

	def get_html(self):
		env = self.makefile.env
		root = ElementTree.fromstring(MAKEFILE_HTML_FILE)
		title = root.find('head/title')
		title.text = 'portmake - Makefile (%s, %s, %s)' % (env.style, env.binfmt, env.shell)

		body = root.find('body')
		for div in body.findall('div'):
			if div.get('id') == 'header':
				h1 = div.find('h1')
				h1.text = 'Makefile generated by portmake %s' % portmake.version
			if div.get('id') == 'content':
				self.create_table(div)
				css = self.create_listing(div, self.get_marks())
				root.find('head/style').text = '\n%s\n%s\n' % (MAKEFILE_CSS, css)

		content = ElementTree.tostring(root, method='html', encoding='unicode')
		return self.html_clean(content)

	def save(self, fname):
		Utils.writef(fname, self.get_html(), encoding='utf-8')
		Logs.info('wrote %s' % fname)
		return fname


class MakefileHtmlFormatter(pygments.formatters.HtmlFormatter):
	fmt = '<span style="background: #aaccff;padding: 3px;">&lt;--- %s</span>\n'

	def __init__(self, marks=None, **options):
		super(MakefileHtmlFormatter, self).__init__(**options)
		self.marks = dict(marks or {})

	def wrap(self, source, *args):
		line_no = 1
		for i, t in super(MakefileHtmlFormatter, self).wrap(source, *args):
			# only source lines get a mark
			if i == 1:
				if line_no in self.marks:
					t = t.replace('\n', self.fmt % escape(self.marks[line_no]))
				line_no = line_no + 1
			yield i, t


MAKEFILE_HTML_FILE = \
"""<html>
	<head>
		<title>portmake - Makefile</title>
		<style type="text/css"></style>
	</head>
	<body class="body">
		<div id="header">
			<h1>Makefile</h1>
		</div>
		<div id="content">
		</div>
	</body>
</html>
"""


MAKEFILE_HTML_TABLE = \
"""<table>
	<tr>
		<th>Name</th>
		<th>Kind</th>
		<th>Target</th>
		<th>Objects</th>
	</tr>
</table>
"""


MAKEFILE_CSS = """
body.body {
	font-family: Arial;
	font-size: 13px;
	padding: 0px;
	margin: 10px;
}

th, td {
	min-width: 100px;
	text-align: left;
}
"""
