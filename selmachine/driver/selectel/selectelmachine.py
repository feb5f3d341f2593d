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

import logging
import os
import uuid

import openstack
import voluptuous as vs

from selmachine import exceptions
from selmachine.driver import BaseMachine
from selmachine.driver.selectel.selectelclient import OpenstackClient
from selmachine.driver.selectel.selectelmodel import (
    SERVER_PASSWORD_HASH,
    SERVER_PASSWORD_HASH_KEY,
    SERVER_STATES,
    SelectelDefaults,
)
from selmachine.driver.util import join_host_port
from selmachine.lib.voluputil import Optional, drop_unset
from selmachine.model import MachineState


# Name, environment variable and flag of the options which must be
# supplied, in the order they are checked.
REQUIRED_OPTIONS = [
    ('auth_url', 'Authentication URL', 'OS_AUTH_URL', '--os-auth-url'),
    ('domain_name', 'Domain name', 'OS_PROJECT_DOMAIN_NAME',
     '--os-domain-name'),
    ('username', 'Username', 'OS_USERNAME', '--os-username'),
    ('password', 'Password', 'OS_PASSWORD', '--os-password'),
    ('project_id', 'Project id', 'OS_PROJECT_ID', '--os-project-id'),
    ('availability_zone', 'Availability Zone', 'OS_AVAILABILITY_ZONE',
     '--os-availability-zone'),
]

# Flag name -> machine attribute, where they differ
FLAG_ATTRIBUTES = {
    'os-auth-url': 'auth_url',
    'os-region': 'region',
    'os-availability-zone': 'availability_zone',
    'os-domain-name': 'domain_name',
    'os-username': 'username',
    'os-password': 'password',
    'os-project-id': 'project_id',
    'os-flavor-id': 'flavor_id',
    'os-flavor-name': 'flavor_name',
    'os-image-name': 'image_name',
    'os-image-id': 'image_id',
    'os-net-id': 'network_id',
    'sel-ssh-user': 'ssh_user',
    'sel-ssh-port': 'ssh_port',
    'sel-ssh-pair-name': 'ssh_key_name',
    'sel-ssh-private-key-path': 'ssh_key_path',
    'sel-volume-name': 'volume_name',
    'sel-volume-type': 'volume_type',
    'sel-volume-size': 'volume_size',
    'sel-server-name': 'server_name',
    'sel-proxy': 'proxy',
    'sel-cpu': 'cpu',
    'sel-ram': 'ram',
}

# Machine attribute -> key in the saved record
RECORD_KEYS = {
    'auth_url': 'AuthUrl',
    'domain_name': 'DomainName',
    'username': 'Username',
    'password': 'Password',
    'project_id': 'ProjectID',
    'region': 'Region',
    'availability_zone': 'AvailabilityZone',
    'server_id': 'ServerID',
    'volume_id': 'VolumeID',
    'proxy': 'Proxy',
    'ram': 'RAM',
    'cpu': 'CPU',
    'ssh_key_name': 'SSHKeyName',
    'ssh_public_key_path': 'SSHPublicKeyPath',
    'server_name': 'ServerName',
    'volume_name': 'VolumeName',
    'volume_size': 'VolumeSize',
    'volume_type': 'VolumeType',
    'flavor_name': 'FlavorName',
    'flavor_id': 'FlavorID',
    'flavor_created': 'FlavorCreated',
    'image_name': 'ImageName',
    'image_id': 'ImageID',
    'network_id': 'NetworkID',
}


class SelectelMachine(BaseMachine):
    """A machine booted from a block storage volume on Selectel"""

    base_log = logging.getLogger("selmachine.SelectelMachine")

    def __init__(self, machine_name, store_path, flags=(), defaults=None):
        super().__init__(machine_name, store_path)
        self.flags = list(flags)
        self.defaults = defaults or SelectelDefaults()
        self.client = None

        self.ssh_user = self.defaults.ssh_user
        self.ssh_port = self.defaults.ssh_port
        self.ssh_key_name = self.defaults.ssh_key_name
        self.ssh_public_key_path = ''

        self.auth_url = ''
        self.domain_name = ''
        self.username = ''
        self.password = ''
        self.project_id = ''
        self.region = ''
        self.availability_zone = ''
        self.proxy = ''

        self.flavor_name = ''
        self.flavor_id = ''
        self.flavor_created = False
        self.cpu = self.defaults.cpu
        self.ram = self.defaults.ram
        self.image_name = ''
        self.image_id = ''
        self.network_id = ''

        self.volume_name = ''
        self.volume_type = ''
        self.volume_size = self.defaults.volume_size
        self.server_name = ''

        self.server_id = ''
        self.volume_id = ''

    def driverName(self):
        return 'selectel'

    # Configuration

    def getConfigSchema(self):
        schema = {}
        for flag in self.flags:
            if flag.default is None:
                default = vs.UNDEFINED
            else:
                default = flag.default
            key = Optional(flag.name, default=default,
                           output=FLAG_ATTRIBUTES.get(flag.name,
                                                      flag.attribute))
            schema[key] = flag.getValidator()
        return vs.Schema(schema)

    def setConfigFromFlags(self, options):
        try:
            config = self.getConfigSchema()(drop_unset(dict(options)))
        except vs.Invalid as e:
            raise exceptions.ConfigurationError(str(e))

        for attr, value in config.items():
            setattr(self, attr, value)

        if self.ssh_key_path:
            self.ssh_key_path = os.path.expanduser(self.ssh_key_path)
            self.ssh_public_key_path = '%s.pub' % (self.ssh_key_path,)
        if not self.server_name:
            self.server_name = self.machine_name
        if not self.volume_name:
            self.volume_name = self.defaults.getVolumeName(self.server_name)
        if not self.volume_type:
            self.volume_type = self.defaults.getVolumeType(
                self.availability_zone)
        if not self.image_name and not self.image_id:
            self.image_name = self.defaults.image_name
        self.checkConfig()

    def checkConfig(self):
        for attr, description, env_var, flag in REQUIRED_OPTIONS:
            if not getattr(self, attr):
                raise exceptions.MissingOptionError(
                    description, flag, env_var)

        if self.flavor_name and self.flavor_id:
            raise exceptions.ExclusiveOptionsError(
                'Flavor name', 'Flavor id')

        if not self.image_name and not self.image_id:
            raise exceptions.MissingOptionError(
                'Image name or Image id', '--os-image-name or --os-image-id')
        if self.image_name and self.image_id:
            raise exceptions.ExclusiveOptionsError(
                'Image name', 'Image id')

        if not self.network_id:
            raise exceptions.MissingOptionError('Network id', '--os-net-id')

        if not self.ssh_key_path or not os.path.exists(self.ssh_key_path):
            raise exceptions.MissingOptionError(
                'KeyPairPath', '--sel-ssh-private-key-path',
                'SEL_SSH_PRIVATE_KEY_PATH')

    # Authentication

    def _getClient(self):
        if self.proxy:
            OpenstackClient.checkProxy(self.proxy)
        return OpenstackClient.connect(
            auth_url=self.auth_url,
            username=self.username,
            password=self.password,
            domain_name=self.domain_name,
            project_id=self.project_id,
            region=self.region,
            proxy=self.proxy,
        )

    def authenticate(self):
        self.log.debug("Authenticating at %s", self.auth_url)
        self.client = self._getClient()

    def authenticateIfNeeded(self):
        if self.client is None:
            self.authenticate()

    # Creation

    def requireFreeFloatingIP(self):
        if not self.client.getAllFloatingIP():
            raise exceptions.NoFreeFloatingIPError()

    def createPublicKeyIfNeeded(self):
        try:
            self.client.getPublicKey(self.ssh_key_name)
            return
        except openstack.exceptions.ResourceNotFound:
            pass

        self.log.info("No ssh-key with name '%s' exists", self.ssh_key_name)
        with open(self.ssh_public_key_path) as f:
            public_key = f.read()
        self.log.info("Adding ssh-key %s from %s",
                      self.ssh_key_name, self.ssh_public_key_path)
        self.client.createKeyPair(self.ssh_key_name, public_key)

    def resolveNamesAndIds(self):
        if self.flavor_id:
            self.log.info("Flavor id was provided, validating %s",
                          self.flavor_id)
            self.client.getFlavorBy(id=self.flavor_id)
            self.flavor_name = ''
        elif self.flavor_name:
            self.log.info("Getting flavor id for name '%s'", self.flavor_name)
            flavor = self.client.getFlavorBy(name=self.flavor_name)
            self.flavor_id = flavor.id
            self.log.info("Got flavor id %s", self.flavor_id)
        else:
            self.flavor_name = uuid.uuid4().hex[:31]
            self.log.info("Creating flavor %s with CPU/RAM values %s/%s",
                          self.flavor_name, self.cpu, self.ram)
            flavor = self.client.createFlavor(
                self.flavor_name, self.cpu, self.ram)
            self.flavor_id = flavor.id
            self.flavor_created = True

        if self.image_name:
            self.log.info("Getting image id for name '%s'", self.image_name)
            image = self.client.getImageBy(name=self.image_name)
            self.image_id = image.id
            self.log.info("Got image id %s", self.image_id)

    def preCreateCheck(self):
        self.authenticate()
        self.requireFreeFloatingIP()
        self.resolveNamesAndIds()
        self.createPublicKeyIfNeeded()

    def create(self):
        self.authenticateIfNeeded()
        volume = self.client.createVolume(
            name=self.volume_name,
            volume_type=self.volume_type,
            size=self.volume_size,
            image_id=self.image_id,
            availability_zone=self.availability_zone,
        )
        self.volume_id = volume.id
        self.log.info("Created volume %s, waiting for it to be available",
                      self.volume_id)
        result = self.client.waitForVolumeStatus(
            self.volume_id, 'available',
            attempts=self.defaults.volume_wait_attempts,
            interval=self.defaults.volume_wait_interval)
        result.check("volume %s" % (self.volume_id,))

        server = self.client.bootInstanceFromVolume(
            name=self.server_name,
            flavor_id=self.flavor_id,
            volume_id=self.volume_id,
            network_id=self.network_id,
            key_name=self.ssh_key_name,
            availability_zone=self.availability_zone,
            metadata={SERVER_PASSWORD_HASH_KEY: SERVER_PASSWORD_HASH},
        )
        self.server_id = server.id
        self.log.info("Booted server %s from volume %s",
                      self.server_id, self.volume_id)
        result = self.client.waitForServerStatus(
            self.server_id, 'ACTIVE',
            attempts=self.defaults.server_wait_attempts,
            interval=self.defaults.server_wait_interval)
        result.check("server %s" % (self.server_id,))

    # Removal

    def remove(self):
        self.authenticateIfNeeded()

        if self.server_id:
            self.log.info("Removing server with id '%s'", self.server_id)
            try:
                self.client.deleteServer(self.server_id)
            except Exception as e:
                self.log.error("Unable to remove server %s: %s",
                               self.server_id, e)
        else:
            self.log.info("No server to remove")

        if self.volume_id:
            result = self.client.waitForVolumeStatus(
                self.volume_id, 'available',
                attempts=self.defaults.volume_wait_attempts,
                interval=self.defaults.volume_wait_interval)
            if not result.succeeded:
                self.log.error("Volume %s did not become available: %s",
                               self.volume_id, result)
            self.log.info("Removing volume with id '%s'", self.volume_id)
            try:
                self.client.deleteVolume(self.volume_id)
            except Exception as e:
                self.log.error("Unable to remove volume %s: %s",
                               self.volume_id, e)
        else:
            self.log.info("No volume to remove")

        if self.flavor_id and not self.flavor_created:
            self.log.info("Keeping flavor %s which was not created for "
                          "this machine", self.flavor_id)
        elif self.flavor_id:
            self.log.info("Removing flavor")
            try:
                self.client.deleteFlavor(self.flavor_id)
            except Exception:
                self.log.error("Can't remove flavor with id '%s'. "
                               "Is it public?", self.flavor_id)
        else:
            self.log.info("No flavor to remove")

        if self.ssh_key_name:
            self.log.info("Removing ssh-key")
            try:
                self.client.deleteKeyPair(self.ssh_key_name)
            except Exception:
                self.log.error("Can't remove ssh-key with name '%s'",
                               self.ssh_key_name)
        else:
            self.log.info("No ssh-key to remove")

    # Power

    def start(self):
        self.authenticateIfNeeded()
        self.client.startServer(self.server_id)

    def stop(self):
        self.authenticateIfNeeded()
        self.client.stopServer(self.server_id)

    def restart(self):
        self.authenticateIfNeeded()
        self.client.restartServer(self.server_id)

    def kill(self):
        self.stop()

    def save(self):
        raise exceptions.NotSupportedError(
            "selectel driver does not support save")

    def getState(self):
        self.authenticateIfNeeded()
        status = self.client.getServerState(self.server_id)
        state = SERVER_STATES.get(status)
        if state is None:
            self.log.warning("Found new server status '%s'", status)
            return MachineState.NONE
        return state

    # Addresses

    def getIP(self):
        if self.ip_address:
            return self.ip_address
        self.authenticateIfNeeded()
        self.log.debug("Trying to attach floating ip")
        self.ip_address = self.client.attachFirstFreeFloatingIP(
            self.server_id)
        self.log.info("Attached floating ip %s", self.ip_address)
        return self.ip_address

    def getURL(self):
        ip = self.getIP()
        return 'tcp://%s' % join_host_port(ip, self.defaults.engine_port)

    # Record

    def toDict(self):
        data = super().toDict()
        for attr, key in RECORD_KEYS.items():
            data[key] = getattr(self, attr)
        return data

    def fromDict(self, data):
        super().fromDict(data)
        for attr, key in RECORD_KEYS.items():
            if key in data:
                setattr(self, attr, data[key])
