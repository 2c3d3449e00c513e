import os
import shutil
import tempfile
from unittest import mock
from waflib import ConfigSet, Logs
from portmake.tests import TestCase
from portmake import cli
from portmake.shell import MakeInfo

PORTFILE = '''
def options(opt):
	opt.add_option('--with-tests', dest='with_tests', default=False, action='store_true')

def makefile(mk):
	mk.add_rule('all', '$(HELLO_EXE)')
	exe = mk.add_exe(None, 'hello', install=True)
	exe.add_src_file('src', 'hello.c')
	if mk.options.with_tests:
		rule = mk.add_rule('test', 'all')
		rule.add_command_with_libpath('./hello', '.')
'''

CROSS = ['--cc=gcc', '--style=gnu', '--binfmt=elf', '--shell=posix']


class CliTests(TestCase):

	def setUp(self):
		self.cwd = os.getcwd()
		self.tmp = tempfile.mkdtemp()
		os.chdir(self.tmp)
		with open(cli.DEFAULT_SCRIPT, 'w') as f:
			f.write(PORTFILE)
		patcher = mock.patch('portmake.cli.ShellProbe.detect', return_value=MakeInfo('make', True))
		self.detect = patcher.start()
		self.addCleanup(patcher.stop)
		patcher = mock.patch('waflib.Logs.info')
		patcher.start()
		self.addCleanup(patcher.stop)

	def tearDown(self):
		os.chdir(self.cwd)
		shutil.rmtree(self.tmp)

	def read_makefile(self):
		with open(cli.MAKEFILE) as f:
			return f.read()

	def test_find_script(self):
		self.assertEqual('portfile.py', cli.find_script(['--cc=gcc']))
		self.assertEqual('x.py', cli.find_script(['--script=x.py']))
		self.assertEqual('y.py', cli.find_script(['--script', 'y.py', '-v']))
		self.assertEqual('portfile.py', cli.find_script(['--', '--script=z.py']))

	def test_generate(self):
		self.assertEqual(0, cli.main(CROSS + ['--prefix=/opt/hello', '--', '-O2', '-Wall']))
		s = self.read_makefile()
		self.assertIn('CC = gcc\nLINK = gcc\nCFLAGS = -O2 -Wall\n', s)
		self.assertIn('PREFIX = /opt/hello\n', s)
		self.assertIn('HELLO_EXE = hello\n', s)
		self.assertIn('HELLO_EXE_OBJS = src/hello.o\n', s)
		self.assertIn('\tcp -f hello "$(BINDIR)"\n', s)
		self.assertNotIn('test : all', s)
		self.detect.assert_called_once_with(None)

	def test_script_options(self):
		self.assertEqual(0, cli.main(CROSS + ['--with-tests', '--make=gmake']))
		self.assertIn('test : all\n\tLD_LIBRARY_PATH=.:$$LD_LIBRARY_PATH ./hello\n', self.read_makefile())
		self.detect.assert_called_once_with('gmake')

	def test_verbose(self):
		with mock.patch.object(Logs, 'verbose', 0), mock.patch.object(Logs, 'zones', []):
			self.assertEqual(0, cli.main(CROSS + ['-v']))
			self.assertEqual(1, Logs.verbose)
			self.assertEqual(['portmake'], Logs.zones)

	def test_coverage(self):
		self.assertEqual(0, cli.main(CROSS + ['--enable-coverage']))
		s = self.read_makefile()
		self.assertIn('HELLO_EXE_CFLAGS = --coverage\n', s)
		self.assertIn('HELLO_EXE_LDFLAGS = --coverage\n', s)
		self.assertIn('src/hello.o : src/hello.c\n', s)

	def test_coverage_unsupported(self):
		with mock.patch('waflib.Logs.error') as error:
			self.assertEqual(1, cli.main(['--cc=cl', '--style=msvc', '--binfmt=pe', '--shell=cmd.exe', '--enable-coverage']))
		self.assertIn('code coverage', error.call_args[0][0])
		self.assertFalse(os.path.exists(cli.MAKEFILE))

	def test_missing_compiler(self):
		with mock.patch('waflib.Logs.error') as error:
			self.assertEqual(1, cli.main(['--style=gnu']))
		error.assert_called_once_with('no C compiler given, use --cc')

	def test_missing_script(self):
		with mock.patch('waflib.Logs.error') as error:
			self.assertEqual(1, cli.main(CROSS + ['--script=nothing.py']))
		self.assertIn('nothing.py', error.call_args[0][0])

	def test_script_without_makefile(self):
		with open('empty.py', 'w') as f:
			f.write('VERSION = 1\n')
		with mock.patch('waflib.Logs.error') as error:
			self.assertEqual(1, cli.main(CROSS + ['--script=empty.py']))
		self.assertIn('makefile(mk)', error.call_args[0][0])

	def test_html(self):
		self.assertEqual(0, cli.main(CROSS + ['--html=Makefile.html']))
		self.assertIn('\trm -f Makefile\n\trm -f Makefile.html\n', self.read_makefile())
		self.assertTrue(os.path.exists('Makefile.html'))

	def test_probing(self):
		probe = mock.Mock()
		probe.detect_style.return_value = 'sun_c'
		probe.detect_binfmt.return_value = 'elf'
		probe.is_cygwin.return_value = False
		with mock.patch('portmake.cli.CompilerProbe', return_value=probe):
			with mock.patch('portmake.cli.detect_shell_type', return_value='posix'):
				self.assertEqual(0, cli.main(['--cc=cc']))
		self.assertIn('compiler: sun_c, format: elf, shell: posix', self.read_makefile())

	def test_waf_config(self):
		cfg = ConfigSet.ConfigSet()
		cfg.CC = ['clang']
		cfg.CC_NAME = 'clang'
		cfg.CFLAGS = ['-g']
		cfg.DEST_BINFMT = 'mac-o'
		cfg.DEST_OS = 'darwin'
		cfg.store('cache.py')
		self.assertEqual(0, cli.main(['--waf-config=cache.py', '--shell=posix']))
		s = self.read_makefile()
		self.assertIn('CC = clang\n', s)
		self.assertIn('CFLAGS = -g\n', s)
		self.assertIn('compiler: gnu, format: mac-o, shell: posix', s)
