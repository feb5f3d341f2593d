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

from unittest import mock

import fixtures
import openstack
import testtools

from selmachine import exceptions
from selmachine.driver.selectel.selectelclient import OpenstackClient
from selmachine.driver.util import WaitResult

from tests.base import BaseTestCase
from tests.fake_openstack import (
    FakeOpenstackCloud,
    FakeOpenstackFloatingIp,
)


class TestOpenstackClient(BaseTestCase):
    def setUp(self):
        super().setUp()
        self.sleep = self.useFixture(
            fixtures.MockPatch('selmachine.driver.util.time.sleep')).mock
        self.cloud = FakeOpenstackCloud()
        self.client = OpenstackClient(self.cloud._getConnection(),
                                      project_id='fake-project')

    def test_floating_ips_filtered(self):
        self.cloud.floating_ips.append(FakeOpenstackFloatingIp(
            id='other', floating_ip_address='198.51.100.5',
            status='DOWN', project_id='other-project', port_id=None))
        self.cloud.floating_ips[0].status = 'ACTIVE'
        fips = self.client.getAllFloatingIP()
        self.assertEqual(['203.0.113.11'],
                         [f.floating_ip_address for f in fips])

    def test_attach_first_free_floating_ip(self):
        volume = self.client.createVolume('vol', 'fast.ru-3a', 5,
                                          'image', 'ru-3a')
        server = self.client.bootInstanceFromVolume(
            'server', '425e3203150e43d6b22792f86752533d', volume.id,
            'net-1', 'key', 'ru-3a')
        address = self.client.attachFirstFreeFloatingIP(server.id)
        self.assertEqual('203.0.113.10', address)
        self.assertEqual(server.id, self.cloud.floating_ips[0].port_id)
        # The next one is handed out afterwards
        self.assertEqual('203.0.113.11',
                         self.client.attachFirstFreeFloatingIP(server.id))
        with testtools.ExpectedException(exceptions.NoFreeFloatingIPError):
            self.client.attachFirstFreeFloatingIP(server.id)

    def test_wait_for_volume_status(self):
        self.cloud._fake_volume_ready_after = 2
        volume = self.client.createVolume('vol', 'fast.ru-3a', 5,
                                          'image', 'ru-3a')
        result = self.client.waitForVolumeStatus(volume.id, 'available')
        self.assertEqual(WaitResult.Status.SUCCEEDED, result.status)
        self.assertEqual(3, result.attempts)
        self.sleep.assert_called_with(1)

    def test_wait_for_missing_volume(self):
        result = self.client.waitForVolumeStatus('missing', 'available')
        self.assertEqual(WaitResult.Status.ERROR, result.status)
        self.assertEqual(1, result.attempts)
        self.assertIsInstance(result.error,
                              openstack.exceptions.ResourceNotFound)

    def test_wait_for_server_status(self):
        volume = self.client.createVolume('vol', 'fast.ru-3a', 5,
                                          'image', 'ru-3a')
        server = self.client.bootInstanceFromVolume(
            'server', '425e3203150e43d6b22792f86752533d', volume.id,
            'net-1', 'key', 'ru-3a')
        result = self.client.waitForServerStatus(server.id, 'ACTIVE')
        self.assertTrue(result.succeeded)
        self.assertEqual(2, result.attempts)
        self.sleep.assert_called_with(4)

    def test_wait_for_server_error_without_fault(self):
        self.cloud._fake_server_final_status = 'ERROR'
        volume = self.client.createVolume('vol', 'fast.ru-3a', 5,
                                          'image', 'ru-3a')
        server = self.client.bootInstanceFromVolume(
            'server', '425e3203150e43d6b22792f86752533d', volume.id,
            'net-1', 'key', 'ru-3a')
        result = self.client.waitForServerStatus(server.id, 'ACTIVE')
        self.assertEqual(WaitResult.Status.ERROR, result.status)
        with testtools.ExpectedException(exceptions.LaunchStatusException,
                                         'Server .* is in error state$'):
            result.check('server')

    def test_flavor_lookup(self):
        flavor = self.client.getFlavorBy(name='Fake Flavor')
        self.assertEqual('425e3203150e43d6b22792f86752533d', flavor.id)
        flavor = self.client.getFlavorBy(
            id='425e3203150e43d6b22792f86752533d')
        self.assertEqual('Fake Flavor', flavor.name)
        self.assertRaises(ValueError, self.client.getFlavorBy)
        self.assertRaises(openstack.exceptions.ResourceNotFound,
                          self.client.getFlavorBy, id='missing')

    def test_image_lookup(self):
        image = self.client.getImageBy(name='Ubuntu 16.04 LTS 64-bit')
        self.assertEqual('b5ff3a5c6b3a4a1e9d8a5ba33c8e8b0a', image.id)
        image = self.client.getImageBy(id=image.id)
        self.assertEqual('Ubuntu 16.04 LTS 64-bit', image.name)
        self.assertRaises(ValueError, self.client.getImageBy)

    def test_flavor_delete(self):
        flavor = self.client.createFlavor('private', 1, 512)
        self.client.deleteFlavor(flavor.id)
        self.assertNotIn(flavor.id, [f.id for f in self.cloud.flavors])
        self.assertRaises(openstack.exceptions.ForbiddenException,
                          self.client.deleteFlavor,
                          '425e3203150e43d6b22792f86752533d')

    def test_keypairs(self):
        self.assertRaises(openstack.exceptions.ResourceNotFound,
                          self.client.getPublicKey, 'key')
        self.client.createKeyPair('key', 'ssh-rsa AAAA')
        self.assertEqual('ssh-rsa AAAA', self.client.getPublicKey('key'))
        self.client.deleteKeyPair('key')
        self.assertRaises(openstack.exceptions.ResourceNotFound,
                          self.client.deleteKeyPair, 'key')


class TestOpenstackClientConnect(BaseTestCase):
    def setUp(self):
        super().setUp()
        self.cloud = FakeOpenstackCloud()
        self.connection = self.useFixture(fixtures.MockPatch(
            'openstack.connection.Connection',
            return_value=self.cloud._getConnection())).mock

    def connect(self, **kw):
        args = dict(
            auth_url='https://api.selvpc.example.com/identity/v3',
            username='user',
            password='secret',
            domain_name='12345',
            project_id='fake-project',
            region='ru-3',
        )
        args.update(kw)
        return OpenstackClient.connect(**args)

    def test_connect(self):
        client = self.connect()
        self.assertEqual('fake-project', client.project_id)
        self.connection.assert_called_once_with(
            session=mock.ANY, region_name='ru-3')
        sess = self.connection.call_args.kwargs['session']
        self.assertEqual('selmachine', sess.app_name)
        self.assertEqual({}, sess.session.proxies)

    def test_connect_proxy(self):
        self.connect(proxy='http://proxy.example.com:3128')
        sess = self.connection.call_args.kwargs['session']
        self.assertEqual({
            'http': 'http://proxy.example.com:3128',
            'https': 'http://proxy.example.com:3128',
        }, sess.session.proxies)

    def test_connect_auth_failure(self):
        self.cloud._fake_auth_error = openstack.exceptions.HttpException(
            "The request you have made requires authentication.")
        with testtools.ExpectedException(
                exceptions.AuthenticationError,
                'Unable to authenticate at https://api.selvpc'):
            self.connect()

    def test_check_proxy(self):
        self.assertEqual('http://proxy:3128',
                         OpenstackClient.checkProxy('http://proxy:3128'))
        self.assertRaises(exceptions.ConfigurationError,
                          OpenstackClient.checkProxy, 'proxy')
        self.assertRaises(exceptions.ConfigurationError,
                          OpenstackClient.checkProxy, 'http://[::1')
        self.assertRaises(exceptions.ConfigurationError,
                          OpenstackClient.checkProxy, 'http://proxy:port')
