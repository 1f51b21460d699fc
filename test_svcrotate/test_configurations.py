import configparser
import logging
import os
import shutil
import tempfile
import unittest

from svcrotate.configurations import (ConfigManager, RotationSettings, iter_config_search_paths, load_config,
                                      parse_log_level)
from svcrotate.exceptions import InvalidConfigurationError


def make_manager(text):
    config = configparser.ConfigParser()
    config.read_string(text)
    return ConfigManager(config)


class TestLoaders(unittest.TestCase):

    def testParseLogLevel(self):
        self.assertEqual(parse_log_level('warning'), logging.WARNING)
        self.assertEqual(parse_log_level('15'), 15)
        with self.assertRaises(ValueError):
            parse_log_level('chatty')


class TestConfigManager(unittest.TestCase):

    def testLoadOption(self):
        manager = make_manager('[Inventory]\nMax Workers = 4\nEmpty =\n')
        self.assertEqual(manager.load_option('Inventory', 'Max Workers', 'int'), 4)
        self.assertEqual(manager.load_option('Inventory', 'Empty', 'int', None), None)
        self.assertEqual(manager.load_option('Inventory', 'Missing', 'int', 7), 7)
        with self.assertRaises(KeyError):
            manager.load_option('Inventory', 'Missing', 'int')

    def testInvalidValue(self):
        manager = make_manager('[Inventory]\nMax Workers = lots\n')
        with self.assertRaises(InvalidConfigurationError):
            manager.load_option('Inventory', 'Max Workers', 'int')

    def testLogFormatIsRaw(self):
        manager = make_manager('[Logging]\nFormat = %(levelname)s: %(message)s\n')
        self.assertEqual(manager.load_option('Logging', 'Format'), '%(levelname)s: %(message)s')


class TestRotationSettings(unittest.TestCase):

    def testDefaults(self):
        settings = RotationSettings.defaults()
        self.assertIsNone(settings.max_workers)
        self.assertEqual(settings.liveness_port, 135)
        self.assertEqual(settings.liveness_attempts, 1)
        self.assertEqual(settings.restart_wait_seconds, 30)
        self.assertEqual(settings.log_level, logging.INFO)
        self.assertIsNone(settings.vault_directory)

    def testLoad(self):
        manager = make_manager(
            '[Inventory]\n'
            'Max Workers = 8\n'
            'Liveness Attempts = 3\n'
            '[Vault]\n'
            'Vault Directory = D:\\Vaults\n'
            '[Logging]\n'
            'Level = DEBUG\n'
        )
        settings = RotationSettings.load(manager)
        self.assertEqual(settings.max_workers, 8)
        self.assertEqual(settings.liveness_attempts, 3)
        self.assertEqual(settings.vault_directory, 'D:\\Vaults')
        self.assertEqual(settings.log_level, logging.DEBUG)

    def testValidation(self):
        with self.assertRaises(InvalidConfigurationError):
            RotationSettings.load(make_manager('[Inventory]\nMax Workers = 0\n'))
        with self.assertRaises(InvalidConfigurationError):
            RotationSettings.load(make_manager('[Inventory]\nLiveness Port = 70000\n'))


class TestConfigFiles(unittest.TestCase):

    def setUp(self):
        self.high = tempfile.mkdtemp()
        self.low = tempfile.mkdtemp()

    def tearDown(self):
        shutil.rmtree(self.high)
        shutil.rmtree(self.low)

    def write(self, directory, name, text):
        path = os.path.join(directory, name)
        with open(path, 'w', encoding='utf-8') as file:
            file.write(text)
        return path

    def testSearchPaths(self):
        path = self.write(self.low, 'svcrotate.ini', '[Rotation]\n')
        found = list(iter_config_search_paths('svcrotate', [self.high, self.low]))
        self.assertEqual([os.path.normcase(p) for p in found], [os.path.normcase(path)])

    def testPrecedence(self):
        self.write(self.high, 'svcrotate.ini', '[Rotation]\nRestart Wait Seconds = 10\n')
        self.write(self.low, 'svcrotate.ini', '[Rotation]\nRestart Wait Seconds = 20\n[Vault]\nVault Directory = X\n')
        config = load_config('svcrotate', [self.high, self.low])
        self.assertEqual(config.get('Rotation', 'Restart Wait Seconds'), '10')
        self.assertEqual(config.get('Vault', 'Vault Directory'), 'X')

    def testExtraPathsTakePrecedence(self):
        self.write(self.low, 'svcrotate.ini', '[Rotation]\nRestart Wait Seconds = 20\n')
        extra = self.write(self.high, 'override.ini', '[Rotation]\nRestart Wait Seconds = 5\n')
        config = load_config('svcrotate', [self.low], extra_paths=[extra])
        self.assertEqual(config.get('Rotation', 'Restart Wait Seconds'), '5')

    def testMissingExtraPath(self):
        with self.assertRaises(FileNotFoundError):
            load_config('svcrotate', [self.low], extra_paths=[os.path.join(self.high, 'nope.ini')], error=True)


if __name__ == '__main__':
    unittest.main()
