# Copyright 2024 Acme Gating, LLC
#
# Licensed under the Apache License, Version 2.0 (the "License"); you may
# not use this file except in compliance with the License. You may obtain
# a copy of the License at
#
#      http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS, WITHOUT
# WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied. See the
# License for the specific language governing permissions and limitations
# under the License.

import os

import fixtures
import testtools

from selmachine import exceptions
from selmachine.driver import IntFlag, StringFlag
from selmachine.driver.selectel import SelectelDriver
from selmachine.driver.selectel.selectelmodel import SelectelDefaults
from tests.base import BaseTestCase


def make_options(key_path, **kw):
    options = {
        'os-auth-url': 'https://api.selvpc.example.com/identity/v3',
        'os-domain-name': '12345',
        'os-username': 'user',
        'os-password': 'secret',
        'os-project-id': 'fake-project',
        'os-availability-zone': 'ru-3a',
        'os-region': 'ru-3',
        'os-net-id': 'net-1',
        'sel-ssh-private-key-path': key_path,
    }
    for k, v in kw.items():
        options[k.replace('_', '-')] = v
    return options


class TestSelectelFlags(BaseTestCase):
    def test_create_flags(self):
        flags = {f.name: f for f in SelectelDriver().getCreateFlags()}
        self.assertEqual(23, len(flags))
        self.assertEqual('OS_NETWORK_ID', flags['os-net-id'].env_var)
        self.assertEqual('OS_PROJECT_DOMAIN_NAME',
                         flags['os-domain-name'].env_var)
        self.assertEqual('SEL_CPU_VALUE', flags['sel-cpu'].env_var)
        self.assertEqual('SEL_RAM_VALUE', flags['sel-ram'].env_var)
        self.assertIsInstance(flags['sel-ssh-port'], IntFlag)
        self.assertIsInstance(flags['sel-volume-size'], IntFlag)
        self.assertIsInstance(flags['os-auth-url'], StringFlag)
        self.assertEqual('root', flags['sel-ssh-user'].default)
        self.assertEqual(22, flags['sel-ssh-port'].default)
        self.assertEqual('docker-machine-key',
                         flags['sel-ssh-pair-name'].default)
        self.assertEqual(5, flags['sel-volume-size'].default)
        self.assertEqual(1, flags['sel-cpu'].default)
        self.assertEqual(512, flags['sel-ram'].default)
        self.assertIsNone(flags['os-image-name'].default)
        self.assertEqual('--os-auth-url', flags['os-auth-url'].option)
        self.assertEqual('os_auth_url', flags['os-auth-url'].attribute)

    def test_custom_defaults(self):
        driver = SelectelDriver(SelectelDefaults(cpu=2, ram=2048))
        flags = {f.name: f for f in driver.getCreateFlags()}
        self.assertEqual(2, flags['sel-cpu'].default)
        self.assertEqual(2048, flags['sel-ram'].default)


class TestSelectelConfig(BaseTestCase):
    def setUp(self):
        super().setUp()
        self.key_path = self.makeSSHKey()
        self.machine = SelectelDriver().getMachine(
            'test-machine', os.path.join(self.test_root, 'store'))

    def test_config_defaults(self):
        self.machine.setConfigFromFlags(make_options(self.key_path))
        m = self.machine
        self.assertEqual('https://api.selvpc.example.com/identity/v3',
                         m.auth_url)
        self.assertEqual('12345', m.domain_name)
        self.assertEqual('ru-3', m.region)
        self.assertEqual('net-1', m.network_id)
        self.assertEqual('test-machine', m.server_name)
        self.assertEqual('volume for test-machine', m.volume_name)
        self.assertEqual('fast.ru-3a', m.volume_type)
        self.assertEqual(5, m.volume_size)
        self.assertEqual(1, m.cpu)
        self.assertEqual(512, m.ram)
        self.assertEqual('root', m.ssh_user)
        self.assertEqual(22, m.ssh_port)
        self.assertEqual('docker-machine-key', m.ssh_key_name)
        self.assertEqual(self.key_path, m.ssh_key_path)
        self.assertEqual(self.key_path + '.pub', m.ssh_public_key_path)
        self.assertEqual('Ubuntu 16.04 LTS 64-bit', m.image_name)
        self.assertEqual('', m.image_id)
        self.assertEqual('', m.flavor_name)
        self.assertEqual('', m.flavor_id)

    def test_config_values(self):
        self.machine.setConfigFromFlags(make_options(
            self.key_path,
            sel_server_name='web',
            sel_volume_size='10',
            sel_ssh_port='2222',
            sel_cpu='4',
            sel_ram=4096,
            os_image_id='image-1',
            os_flavor_name='SL1.1-1024',
        ))
        m = self.machine
        self.assertEqual('web', m.server_name)
        self.assertEqual('volume for web', m.volume_name)
        self.assertEqual(10, m.volume_size)
        self.assertEqual(2222, m.ssh_port)
        self.assertEqual(2222, m.getSSHPort())
        self.assertEqual(4, m.cpu)
        self.assertEqual(4096, m.ram)
        self.assertEqual('image-1', m.image_id)
        # The default image name only applies when no image is given
        self.assertEqual('', m.image_name)
        self.assertEqual('SL1.1-1024', m.flavor_name)

    def test_config_unset_values(self):
        options = make_options(self.key_path, sel_volume_size=None,
                               sel_server_name=None)
        self.machine.setConfigFromFlags(options)
        self.assertEqual(5, self.machine.volume_size)
        self.assertEqual('test-machine', self.machine.server_name)

    def test_config_key_path_home(self):
        self.useFixture(fixtures.EnvironmentVariable('HOME', self.test_root))
        self.machine.setConfigFromFlags(make_options('~/id_rsa'))
        self.assertEqual(self.key_path, self.machine.ssh_key_path)
        self.assertEqual(self.key_path + '.pub',
                         self.machine.ssh_public_key_path)

    def test_config_missing_required(self):
        cases = [
            ('os-auth-url', 'Authentication URL', 'OS_AUTH_URL'),
            ('os-domain-name', 'Domain name', 'OS_PROJECT_DOMAIN_NAME'),
            ('os-username', 'Username', 'OS_USERNAME'),
            ('os-password', 'Password', 'OS_PASSWORD'),
            ('os-project-id', 'Project id', 'OS_PROJECT_ID'),
            ('os-availability-zone', 'Availability Zone',
             'OS_AVAILABILITY_ZONE'),
        ]
        for flag, description, env_var in cases:
            options = make_options(self.key_path)
            del options[flag]
            machine = SelectelDriver().getMachine('m', self.test_root)
            with testtools.ExpectedException(
                    exceptions.MissingOptionError,
                    '%s must be specified either using the environment '
                    'variable %s or the CLI option --%s' %
                    (description, env_var, flag)):
                machine.setConfigFromFlags(options)

    def test_config_flavor_exclusive(self):
        options = make_options(self.key_path,
                               os_flavor_name='SL1.1-1024',
                               os_flavor_id='flavor-1')
        with testtools.ExpectedException(
                exceptions.ExclusiveOptionsError,
                'Either Flavor name or Flavor id must be specified, '
                'not both'):
            self.machine.setConfigFromFlags(options)

    def test_config_image_exclusive(self):
        options = make_options(self.key_path,
                               os_image_name='Debian',
                               os_image_id='image-1')
        with testtools.ExpectedException(
                exceptions.ExclusiveOptionsError,
                'Either Image name or Image id must be specified, not both'):
            self.machine.setConfigFromFlags(options)

    def test_config_image_missing(self):
        self.machine.setConfigFromFlags(make_options(self.key_path))
        self.machine.image_name = ''
        with testtools.ExpectedException(
                exceptions.MissingOptionError,
                'Image name or Image id must be specified using the CLI '
                'option --os-image-name or --os-image-id'):
            self.machine.checkConfig()

    def test_config_network_missing(self):
        options = make_options(self.key_path)
        del options['os-net-id']
        with testtools.ExpectedException(
                exceptions.MissingOptionError,
                'Network id must be specified using the CLI option '
                '--os-net-id'):
            self.machine.setConfigFromFlags(options)

    def test_config_key_missing(self):
        options = make_options(os.path.join(self.test_root, 'missing'))
        with testtools.ExpectedException(
                exceptions.MissingOptionError,
                'KeyPairPath must be specified either using the '
                'environment variable SEL_SSH_PRIVATE_KEY_PATH or the '
                'CLI option --sel-ssh-private-key-path'):
            self.machine.setConfigFromFlags(options)

    def test_config_bad_integer(self):
        options = make_options(self.key_path, sel_ram='lots')
        with testtools.ExpectedException(
                exceptions.ConfigurationError,
                '.*--sel-ram must be a non-negative integer'):
            self.machine.setConfigFromFlags(options)

    def test_config_unknown_option(self):
        options = make_options(self.key_path)
        options['os-cloud'] = 'nope'
        self.assertRaises(exceptions.ConfigurationError,
                          self.machine.setConfigFromFlags, options)
