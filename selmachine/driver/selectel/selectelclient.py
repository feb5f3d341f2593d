# Copyright (C) 2011-2013 OpenStack Foundation
# Copyright 2017 Red Hat
# Copyright 2022-2024 Acme Gating, LLC
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

import abc
import logging
import urllib.parse

import keystoneauth1.exceptions
import openstack
import requests
from keystoneauth1 import session as ks_session
from keystoneauth1.identity import v3

from selmachine import exceptions
from selmachine.driver.util import Timer, wait_for
from selmachine.version import release_string


VOLUME_WAIT_ATTEMPTS = 10
VOLUME_WAIT_INTERVAL = 1
SERVER_WAIT_ATTEMPTS = 10
SERVER_WAIT_INTERVAL = 4


class SelectelClient(metaclass=abc.ABCMeta):
    """The set of cloud operations used by the selectel driver.

    The primitive operations are abstract; the status waits are built
    on top of them with :func:`selmachine.driver.util.wait_for`.
    """

    # Volumes

    @abc.abstractmethod
    def createVolume(self, name, volume_type, size, image_id,
                     availability_zone):
        """Create a block storage volume and return it"""
        pass

    @abc.abstractmethod
    def deleteVolume(self, volume_id):
        pass

    @abc.abstractmethod
    def getVolumeStatus(self, volume_id):
        pass

    def waitForVolumeStatus(self, volume_id, status,
                            attempts=VOLUME_WAIT_ATTEMPTS,
                            interval=VOLUME_WAIT_INTERVAL):
        """Wait for a volume to reach the given status

        Returns a WaitResult.  A volume in the error state ends the
        wait with a LaunchStatusException.
        """
        def check():
            current = (self.getVolumeStatus(volume_id) or '').lower()
            if current == status.lower():
                return True
            if current == 'error':
                raise exceptions.LaunchStatusException(
                    "Volume %s is in error state" % (volume_id,))
            return False
        return wait_for(check, attempts=attempts, interval=interval)

    # Servers

    @abc.abstractmethod
    def bootInstanceFromVolume(self, name, flavor_id, volume_id, network_id,
                               key_name, availability_zone, metadata=None):
        """Boot a server whose root disk is the given volume"""
        pass

    @abc.abstractmethod
    def deleteServer(self, server_id):
        pass

    @abc.abstractmethod
    def getServer(self, server_id):
        """Return the server; it has at least status and fault"""
        pass

    def getServerState(self, server_id):
        return self.getServer(server_id).status

    @abc.abstractmethod
    def startServer(self, server_id):
        pass

    @abc.abstractmethod
    def stopServer(self, server_id):
        pass

    @abc.abstractmethod
    def restartServer(self, server_id):
        pass

    def waitForServerStatus(self, server_id, status,
                            attempts=SERVER_WAIT_ATTEMPTS,
                            interval=SERVER_WAIT_INTERVAL):
        """Wait for a server to reach the given status

        Returns a WaitResult.  A server in the ERROR state ends the
        wait with a LaunchStatusException carrying the compute fault
        message when one is available.
        """
        def check():
            server = self.getServer(server_id)
            if server.status == status:
                return True
            if server.status == 'ERROR':
                fault = getattr(server, 'fault', None) or {}
                msg = fault.get('message')
                if msg:
                    raise exceptions.LaunchStatusException(
                        "Server %s is in error state: %s" % (server_id, msg))
                raise exceptions.LaunchStatusException(
                    "Server %s is in error state" % (server_id,))
            return False
        return wait_for(check, attempts=attempts, interval=interval)

    # Floating IPs

    @abc.abstractmethod
    def getAllFloatingIP(self):
        """Return the unassigned floating IPs of the project"""
        pass

    @abc.abstractmethod
    def attachFloatingIP(self, server_id, floating_ip):
        pass

    def attachFirstFreeFloatingIP(self, server_id):
        """Attach the first free floating IP and return its address"""
        fips = self.getAllFloatingIP()
        if not fips:
            raise exceptions.NoFreeFloatingIPError()
        address = fips[0].floating_ip_address
        self.attachFloatingIP(server_id, address)
        return address

    # Key pairs

    @abc.abstractmethod
    def getPublicKey(self, name):
        """Return the public key of the named key pair

        Raises openstack.exceptions.ResourceNotFound if there is no
        such key pair.
        """
        pass

    @abc.abstractmethod
    def createKeyPair(self, name, public_key):
        pass

    @abc.abstractmethod
    def deleteKeyPair(self, name):
        pass

    # Flavors and images

    @abc.abstractmethod
    def getFlavorBy(self, name=None, id=None):
        pass

    @abc.abstractmethod
    def createFlavor(self, name, cpu, ram):
        """Create a private flavor with no local disk"""
        pass

    @abc.abstractmethod
    def deleteFlavor(self, flavor_id):
        pass

    @abc.abstractmethod
    def getImageBy(self, name=None, id=None):
        pass


class OpenstackClient(SelectelClient):
    """A SelectelClient backed by an openstacksdk connection"""

    log = logging.getLogger("selmachine.OpenstackClient")

    def __init__(self, connection, project_id=None):
        self._client = connection
        self.project_id = project_id

    @classmethod
    def connect(cls, auth_url, username, password, domain_name, project_id,
                region=None, proxy=None):
        """Authenticate against keystone and return a client

        Raises ConfigurationError for an invalid proxy and
        AuthenticationError if the credentials are rejected.
        """
        http_session = requests.Session()
        if proxy:
            http_session.proxies = {
                'http': proxy,
                'https': proxy,
            }
        auth = v3.Password(
            auth_url=auth_url,
            username=username,
            password=password,
            user_domain_name=domain_name,
            project_id=project_id,
        )
        sess = ks_session.Session(
            auth=auth,
            session=http_session,
            app_name='selmachine',
            app_version=release_string,
        )
        connection = openstack.connection.Connection(
            session=sess,
            region_name=region or None,
        )
        try:
            with Timer(cls.log, 'API call authorize'):
                connection.authorize()
        except (keystoneauth1.exceptions.ClientException,
                openstack.exceptions.SDKException) as e:
            raise exceptions.AuthenticationError(
                "Unable to authenticate at %s: %s" % (auth_url, e))
        return cls(connection, project_id=project_id)

    @staticmethod
    def checkProxy(proxy):
        try:
            parsed = urllib.parse.urlparse(proxy)
            # Accessing the port validates it
            parsed.port
        except ValueError as e:
            raise exceptions.ConfigurationError(
                "Invalid proxy URL %s: %s" % (proxy, e))
        if not parsed.scheme or not parsed.netloc:
            raise exceptions.ConfigurationError(
                "Invalid proxy URL %s" % (proxy,))
        return proxy

    # Volumes

    def createVolume(self, name, volume_type, size, image_id,
                     availability_zone):
        self.log.debug("Creating volume %s", name)
        with Timer(self.log, 'API call create_volume'):
            return self._client.block_storage.create_volume(
                name=name,
                volume_type=volume_type,
                size=size,
                image_id=image_id,
                availability_zone=availability_zone,
            )

    def deleteVolume(self, volume_id):
        self.log.debug("Deleting volume %s", volume_id)
        with Timer(self.log, 'API call delete_volume'):
            self._client.block_storage.delete_volume(
                volume_id, ignore_missing=False)

    def getVolumeStatus(self, volume_id):
        with Timer(self.log, 'API call get_volume'):
            return self._client.block_storage.get_volume(volume_id).status

    # Servers

    def bootInstanceFromVolume(self, name, flavor_id, volume_id, network_id,
                               key_name, availability_zone, metadata=None):
        block_device_mapping = [{
            'boot_index': 0,
            'uuid': volume_id,
            'source_type': 'volume',
            'destination_type': 'volume',
        }]
        self.log.debug("Booting server %s from volume %s", name, volume_id)
        with Timer(self.log, 'API call create_server'):
            return self._client.compute.create_server(
                name=name,
                flavor_id=flavor_id,
                networks=[{'uuid': network_id}],
                block_device_mapping=block_device_mapping,
                key_name=key_name,
                availability_zone=availability_zone,
                metadata=metadata or {},
            )

    def deleteServer(self, server_id):
        self.log.debug("Deleting server %s", server_id)
        with Timer(self.log, 'API call delete_server'):
            self._client.compute.delete_server(
                server_id, ignore_missing=False)

    def getServer(self, server_id):
        with Timer(self.log, 'API call get_server'):
            return self._client.compute.get_server(server_id)

    def startServer(self, server_id):
        with Timer(self.log, 'API call start_server'):
            self._client.compute.start_server(server_id)

    def stopServer(self, server_id):
        with Timer(self.log, 'API call stop_server'):
            self._client.compute.stop_server(server_id)

    def restartServer(self, server_id):
        with Timer(self.log, 'API call reboot_server'):
            self._client.compute.reboot_server(server_id, 'SOFT')

    # Floating IPs

    def getAllFloatingIP(self):
        filters = dict(status='DOWN')
        if self.project_id:
            filters['project_id'] = self.project_id
        with Timer(self.log, 'API call list_floating_ips'):
            return list(self._client.network.ips(**filters))

    def attachFloatingIP(self, server_id, floating_ip):
        self.log.debug("Attaching floating ip %s to server %s",
                       floating_ip, server_id)
        with Timer(self.log, 'API call add_floating_ip_to_server'):
            self._client.compute.add_floating_ip_to_server(
                server_id, floating_ip)

    # Key pairs

    def getPublicKey(self, name):
        with Timer(self.log, 'API call get_keypair'):
            return self._client.compute.get_keypair(name).public_key

    def createKeyPair(self, name, public_key):
        with Timer(self.log, 'API call create_keypair'):
            self._client.compute.create_keypair(
                name=name, public_key=public_key)

    def deleteKeyPair(self, name):
        with Timer(self.log, 'API call delete_keypair'):
            self._client.compute.delete_keypair(name, ignore_missing=False)

    # Flavors and images

    def getFlavorBy(self, name=None, id=None):
        if name is None and id is None:
            raise ValueError("flavor name and flavor id can't be null")
        if name is not None:
            with Timer(self.log, 'API call find_flavor'):
                return self._client.compute.find_flavor(
                    name, ignore_missing=False)
        with Timer(self.log, 'API call get_flavor'):
            return self._client.compute.get_flavor(id)

    def createFlavor(self, name, cpu, ram):
        with Timer(self.log, 'API call create_flavor'):
            return self._client.compute.create_flavor(
                name=name,
                vcpus=cpu,
                ram=ram,
                disk=0,
                is_public=False,
            )

    def deleteFlavor(self, flavor_id):
        with Timer(self.log, 'API call delete_flavor'):
            self._client.compute.delete_flavor(
                flavor_id, ignore_missing=False)

    def getImageBy(self, name=None, id=None):
        if name is None and id is None:
            raise ValueError("image name and image id can't be null")
        if name is not None:
            with Timer(self.log, 'API call find_image'):
                return self._client.image.find_image(
                    name, ignore_missing=False)
        with Timer(self.log, 'API call get_image'):
            return self._client.image.get_image(id)
