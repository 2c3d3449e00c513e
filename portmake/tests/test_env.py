from waflib import ConfigSet
from portmake.tests import TestCase
from portmake.env import Environment, CompilerStyle, BinaryFormat, ShellType
from portmake.errors import PortmakeError


class EnvironmentTests(TestCase):

	def test_create_checks_values(self):
		self.assertRaises(PortmakeError, Environment.create, 'cc', 'borland', 'elf')
		self.assertRaises(PortmakeError, Environment.create, 'cc', 'gnu', 'coff')
		self.assertRaises(PortmakeError, Environment.create, 'cc', 'gnu', 'elf', shell='zsh')

	def test_cflags_are_joined(self):
		env = self.make_env(cflags=['-O2', '-Wall'])
		self.assertEqual('-O2 -Wall', env.cflags)
		env = self.make_env(cflags='  -g   -O0 ')
		self.assertEqual('-g -O0', env.cflags)

	def test_gnu_elf(self):
		env = self.make_env()
		self.assertEqual('.o', env.obj_ext)
		self.assertEqual('', env.exe_ext)
		self.assertEqual('.so', env.shared_lib_ext)
		self.assertEqual('.a', env.static_lib_ext)
		self.assertEqual('/', env.dir_sep)
		self.assertEqual('cc', env.link)
		self.assertEqual('lib', env.lib_prefix)

	def test_msvc_pe_cmd(self):
		env = self.make_env(style='msvc', binfmt='pe', shell='cmd.exe', cc='cl')
		self.assertEqual('.obj', env.obj_ext)
		self.assertEqual('.exe', env.exe_ext)
		self.assertEqual('.dll', env.shared_lib_ext)
		self.assertEqual('.lib', env.static_lib_ext)
		self.assertEqual('.lib', env.import_lib_ext)
		self.assertEqual('\\', env.dir_sep)
		self.assertEqual('link', env.link)
		self.assertEqual('', env.lib_prefix)

	def test_macho(self):
		env = self.make_env(binfmt='mac-o')
		self.assertEqual('.dylib', env.shared_lib_ext)

	def test_cygwin_prefix(self):
		self.assertEqual('cyg', self.make_env(binfmt='pe', cygwin=True).lib_prefix)
		self.assertEqual('', self.make_env(style='msvc', binfmt='pe', cygwin=True).lib_prefix)

	def test_immutable(self):
		env = self.make_env()
		self.assertRaises(AttributeError, setattr, env, 'style', 'msvc')
		other = env.replace(style='sun_c')
		self.assertEqual('gnu', env.style)
		self.assertEqual('sun_c', other.style)


class ConfigSetTests(TestCase):

	def get_configset(self, **kw):
		cfg = ConfigSet.ConfigSet()
		cfg.CC = ['gcc']
		cfg.CC_NAME = 'gcc'
		cfg.CFLAGS = ['-O2', '-Wall']
		cfg.DEST_BINFMT = 'elf'
		cfg.DEST_OS = 'linux'
		for (key, value) in kw.items():
			cfg[key] = value
		return cfg

	def test_gcc(self):
		env = Environment.from_configset(self.get_configset(), shell=ShellType.POSIX)
		self.assertEqual('gcc', env.cc)
		self.assertEqual(CompilerStyle.GNU, env.style)
		self.assertEqual(BinaryFormat.ELF, env.binfmt)
		self.assertEqual('-O2 -Wall', env.cflags)
		self.assertFalse(env.cygwin)

	def test_msvc(self):
		cfg = self.get_configset(CC=['cl.exe'], CC_NAME='msvc', DEST_BINFMT='pe', DEST_OS='win32')
		env = Environment.from_configset(cfg, shell=ShellType.CMD_EXE)
		self.assertEqual(CompilerStyle.MSVC, env.style)
		self.assertEqual(BinaryFormat.PE, env.binfmt)

	def test_unknown_compiler(self):
		cfg = self.get_configset(CC_NAME='tcc')
		env = Environment.from_configset(cfg, shell=ShellType.POSIX)
		self.assertEqual(CompilerStyle.POSIX, env.style)

	def test_suncc(self):
		cfg = self.get_configset(CC_NAME='suncc', DEST_OS='sunos')
		self.assertEqual(CompilerStyle.SUN_C, Environment.from_configset(cfg, shell='posix').style)

	def test_binfmt_from_os(self):
		cfg = self.get_configset(DEST_BINFMT='', DEST_OS='darwin')
		self.assertEqual(BinaryFormat.MACHO, Environment.from_configset(cfg, shell='posix').binfmt)

	def test_cygwin(self):
		cfg = self.get_configset(DEST_BINFMT='pe', DEST_OS='cygwin')
		env = Environment.from_configset(cfg, shell='posix')
		self.assertTrue(env.cygwin)
		self.assertEqual('cyg', env.lib_prefix)

	def test_no_compiler(self):
		cfg = self.get_configset(CC=[])
		self.assertRaises(PortmakeError, Environment.from_configset, cfg, shell='posix')
